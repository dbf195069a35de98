"""
QPainter Drawing Context

On-screen backend: draws shapes with a QPainter onto any paint device
(a widget, a QImage). Also provides the preview widget used by the
``preview`` command.
"""

from typing import List, Optional, Sequence, Union
import logging
import math

from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QPointF, QRectF, QSize, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QPainterPath, QFont, QImage, QTransform
)

from ..core.document import Document
from ..core.errors import RenderElementError
from ..core.geometry import arc_sweep
from .context import DrawingContext
from .renderer import DEFAULT_BACKGROUND, RenderReport, render_document_to

logger = logging.getLogger(__name__)

CAP_STYLES = {
    'butt': Qt.PenCapStyle.FlatCap,
    'round': Qt.PenCapStyle.RoundCap,
    'square': Qt.PenCapStyle.SquareCap,
}


class QPainterContext(DrawingContext):
    """DrawingContext backed by an active QPainter."""

    def __init__(self, painter: QPainter):
        self.painter = painter
        self._path = QPainterPath()
        self._fill_color = QColor('#000000')
        self._stroke_color = QColor('#000000')
        self._line_width = 1.0
        self._line_cap = 'butt'
        self._line_dash: List[float] = []
        self._stack = []

    # Path construction

    def begin_path(self):
        self._path = QPainterPath()

    def move_to(self, x, y):
        self._path.moveTo(x, y)

    def line_to(self, x, y):
        if self._path.elementCount() == 0:
            self._path.moveTo(x, y)
        else:
            self._path.lineTo(x, y)

    def quadratic_curve_to(self, cpx, cpy, x, y):
        if self._path.elementCount() == 0:
            self._path.moveTo(cpx, cpy)
        self._path.quadTo(cpx, cpy, x, y)

    def bezier_curve_to(self, cp1x, cp1y, cp2x, cp2y, x, y):
        if self._path.elementCount() == 0:
            self._path.moveTo(cp1x, cp1y)
        self._path.cubicTo(cp1x, cp1y, cp2x, cp2y, x, y)

    def _add_arc(self, rect: QRectF, start_angle, end_angle, counterclockwise,
                 transform: Optional[QTransform] = None):
        # Qt angles run counter-clockwise on screen, canvas angles clockwise
        start = -math.degrees(start_angle)
        sweep = -math.degrees(arc_sweep(start_angle, end_angle, counterclockwise))
        arc = QPainterPath()
        arc.arcMoveTo(rect, start)
        arc.arcTo(rect, start, sweep)
        if transform is not None:
            arc = transform.map(arc)
        if self._path.elementCount() == 0:
            self._path.addPath(arc)
        else:
            self._path.connectPath(arc)

    def arc(self, x, y, radius, start_angle, end_angle, counterclockwise=False):
        rect = QRectF(x - radius, y - radius, 2 * radius, 2 * radius)
        self._add_arc(rect, start_angle, end_angle, counterclockwise)

    def ellipse(self, x, y, radius_x, radius_y, rotation, start_angle, end_angle,
                counterclockwise=False):
        rect = QRectF(x - radius_x, y - radius_y, 2 * radius_x, 2 * radius_y)
        full = abs(arc_sweep(start_angle, end_angle, counterclockwise)) >= 2 * math.pi
        if full and rotation == 0:
            self._path.addEllipse(rect)
            return
        transform = None
        if rotation:
            transform = QTransform().translate(x, y).rotateRadians(rotation).translate(-x, -y)
        self._add_arc(rect, start_angle, end_angle, counterclockwise, transform)

    def close_path(self):
        self._path.closeSubpath()

    # Painting

    def _pen(self) -> QPen:
        pen = QPen(self._stroke_color)
        pen.setWidthF(self._line_width)
        pen.setCapStyle(CAP_STYLES.get(self._line_cap, Qt.PenCapStyle.FlatCap))
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
        if self._line_dash and pen.widthF() > 0:
            pattern = list(self._line_dash)
            if len(pattern) % 2:
                pattern = pattern * 2
            # Qt dash lengths are in units of the pen width
            pen.setDashPattern([max(d, 0.01) / pen.widthF() for d in pattern])
        return pen

    def fill(self):
        self.painter.fillPath(self._path, QBrush(self._fill_color))

    def stroke(self):
        if self._line_width <= 0:
            return
        self.painter.strokePath(self._path, self._pen())

    def fill_rect(self, x, y, width, height):
        self.painter.fillRect(QRectF(x, y, width, height), self._fill_color)

    def stroke_rect(self, x, y, width, height):
        if self._line_width <= 0:
            return
        self.painter.save()
        self.painter.setPen(self._pen())
        self.painter.setBrush(Qt.BrushStyle.NoBrush)
        self.painter.drawRect(QRectF(x, y, width, height))
        self.painter.restore()

    def fill_text(self, text, x, y, font_family, font_size):
        font = QFont(font_family)
        font.setPixelSize(max(1, round(font_size)))
        self.painter.save()
        self.painter.setFont(font)
        self.painter.setPen(self._fill_color)
        self.painter.drawText(QPointF(x, y), text)
        self.painter.restore()

    def draw_image(self, source, x, y, width, height):
        image = QImage(source)
        if image.isNull():
            raise RenderElementError(f"Cannot decode image: {source}")
        self.painter.drawImage(QRectF(x, y, width, height), image)

    # Style

    def set_fill_color(self, color):
        self._fill_color = QColor(color)

    def set_stroke_color(self, color):
        self._stroke_color = QColor(color)

    def set_line_width(self, width):
        self._line_width = float(width)

    def set_line_cap(self, cap):
        self._line_cap = cap

    def set_line_dash(self, pattern: Sequence[float]):
        # An all-zero pattern draws solid
        self._line_dash = list(pattern) if sum(pattern) > 0 else []

    def set_global_alpha(self, alpha):
        self.painter.setOpacity(alpha)

    # Transform stack

    def save(self):
        self._stack.append((QColor(self._fill_color), QColor(self._stroke_color),
                            self._line_width, self._line_cap, list(self._line_dash)))
        self.painter.save()

    def restore(self):
        if not self._stack:
            logger.debug("restore() without matching save()")
            return
        (self._fill_color, self._stroke_color, self._line_width,
         self._line_cap, self._line_dash) = self._stack.pop()
        self.painter.restore()

    def translate(self, dx, dy):
        self.painter.translate(dx, dy)

    def rotate(self, angle):
        self.painter.rotate(math.degrees(angle))


def render_to_image(document: Union[Document, dict], scale: float = 1.0,
                    background: str = DEFAULT_BACKGROUND) -> QImage:
    """
    Render a document into a new ARGB QImage.

    Args:
        document: Document or snapshot dict
        scale: Pixels per canvas unit
        background: Page color
    """
    if isinstance(document, Document):
        width, height = document.width, document.height
    else:
        width, height = float(document['width']), float(document['height'])

    image = QImage(max(1, round(width * scale)), max(1, round(height * scale)),
                   QImage.Format.Format_ARGB32)
    image.fill(QColor(background))

    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.scale(scale, scale)
        render_document_to(document, QPainterContext(painter), background)
    finally:
        painter.end()
    return image


class CanvasPreview(QWidget):
    """
    Widget showing a document scaled to fit, with click hit-testing.

    Emits ``element_clicked`` with the index of the topmost shape under
    the cursor, or -1 when the click hits empty canvas.
    """

    # Signals
    element_clicked = pyqtSignal(int)

    def __init__(self, document: Document, parent=None):
        super().__init__(parent)
        self.document = document
        self.background = DEFAULT_BACKGROUND
        self.last_report: Optional[RenderReport] = None

        self._backdrop = QColor(40, 40, 40)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(200, 150)

    def set_document(self, document: Document):
        self.document = document
        self.update()

    def sizeHint(self) -> QSize:
        return QSize(int(self.document.width), int(self.document.height))

    def _view_transform(self):
        """Scale and offset that center the page in the widget."""
        scale = min(self.width() / self.document.width,
                    self.height() / self.document.height)
        offset_x = (self.width() - self.document.width * scale) / 2
        offset_y = (self.height() - self.document.height * scale) / 2
        return scale, offset_x, offset_y

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), self._backdrop)

            scale, offset_x, offset_y = self._view_transform()
            painter.translate(offset_x, offset_y)
            painter.scale(scale, scale)
            self.last_report = render_document_to(
                self.document, QPainterContext(painter), self.background)
        finally:
            painter.end()

    def map_to_canvas(self, pos: QPointF) -> QPointF:
        scale, offset_x, offset_y = self._view_transform()
        return QPointF((pos.x() - offset_x) / scale, (pos.y() - offset_y) / scale)

    def mousePressEvent(self, event):
        point = self.map_to_canvas(event.position())
        hit = self.document.topmost_at(point.x(), point.y())
        self.element_clicked.emit(hit[0] if hit else -1)
        super().mousePressEvent(event)
