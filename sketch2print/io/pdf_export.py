"""
PDF Export for Sketch2Print

ReportLab-backed DrawingContext plus the export entry points.

The page is flipped once at the start so shapes keep drawing in the
canvas' y-down coordinates; text and images are locally flipped back so
they are not mirrored.
"""

from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, Tuple, Union
import logging
import math

from PIL import Image as PILImage
from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..core.colors import validate_color
from ..core.document import Document
from ..core.errors import RenderElementError, RenderFatalError, ValidationError
from ..core.fields import to_number
from ..core.geometry import Point, arc_sweep, arc_to_beziers, quadratic_to_cubic
from ..core.optimizer import MAX_PAGE_SIZE, MIN_PAGE_SIZE, optimize_canvas_for_pdf
from ..graphics.context import DrawingContext
from ..graphics.renderer import DEFAULT_BACKGROUND, RenderReport, render_document_to

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

LINE_CAPS = {'butt': 0, 'round': 1, 'square': 2}

# Common desktop font names mapped to the PDF base fonts
FONT_ALIASES = {
    'arial': 'Helvetica',
    'sans-serif': 'Helvetica',
    'helvetica': 'Helvetica',
    'times': 'Times-Roman',
    'times new roman': 'Times-Roman',
    'serif': 'Times-Roman',
    'courier': 'Courier',
    'courier new': 'Courier',
    'monospace': 'Courier',
}
DEFAULT_FONT = 'Helvetica'


def resolve_font(family: str) -> str:
    """Map a font family onto a font ReportLab can embed."""
    name = FONT_ALIASES.get(family.strip().lower(), family)
    try:
        pdfmetrics.getFont(name)
    except KeyError:
        logger.debug(f"Font {family!r} not available, using {DEFAULT_FONT}")
        return DEFAULT_FONT
    return name


class ReportLabContext(DrawingContext):
    """DrawingContext drawing onto one page of a ReportLab canvas."""

    def __init__(self, target: canvas.Canvas, page_height: float):
        self._target = target
        self._target.translate(0, page_height)
        self._target.scale(1, -1)

        self._path = self._target.beginPath()
        self._current: Optional[Point] = None
        self._subpath_start: Optional[Point] = None
        self._line_width = 1.0
        self._alpha = 1.0
        self._stack: List[Tuple[float, float]] = []

    # Path construction

    def begin_path(self):
        self._path = self._target.beginPath()
        self._current = None
        self._subpath_start = None

    def move_to(self, x, y):
        self._path.moveTo(x, y)
        self._current = self._subpath_start = Point(x, y)

    def line_to(self, x, y):
        if self._current is None:
            self.move_to(x, y)
            return
        self._path.lineTo(x, y)
        self._current = Point(x, y)

    def _ensure_current(self, x, y):
        if self._current is None:
            self.move_to(x, y)

    def quadratic_curve_to(self, cpx, cpy, x, y):
        self._ensure_current(cpx, cpy)
        cp1, cp2 = quadratic_to_cubic(self._current, Point(cpx, cpy), Point(x, y))
        self._path.curveTo(cp1.x, cp1.y, cp2.x, cp2.y, x, y)
        self._current = Point(x, y)

    def bezier_curve_to(self, cp1x, cp1y, cp2x, cp2y, x, y):
        self._ensure_current(cp1x, cp1y)
        self._path.curveTo(cp1x, cp1y, cp2x, cp2y, x, y)
        self._current = Point(x, y)

    def _add_curves(self, curves, center: Point, rotation: float = 0.0):
        """Append bezier pieces, joined to the current point like a canvas arc."""
        if not curves:
            return

        def place(p):
            return p.rotate(rotation, center) if rotation else p

        start = place(curves[0][0])
        if self._current is None:
            self.move_to(start.x, start.y)
        else:
            self.line_to(start.x, start.y)

        for _, cp1, cp2, end in curves:
            c1, c2, end = place(cp1), place(cp2), place(end)
            self._path.curveTo(c1.x, c1.y, c2.x, c2.y, end.x, end.y)
            self._current = end

    def arc(self, x, y, radius, start_angle, end_angle, counterclockwise=False):
        self.ellipse(x, y, radius, radius, 0.0, start_angle, end_angle, counterclockwise)

    def ellipse(self, x, y, radius_x, radius_y, rotation, start_angle, end_angle,
                counterclockwise=False):
        sweep = arc_sweep(start_angle, end_angle, counterclockwise)
        center = Point(x, y)
        curves = arc_to_beziers(center, radius_x, radius_y, start_angle, sweep)
        self._add_curves(curves, center, rotation)

    def close_path(self):
        self._path.close()
        self._current = self._subpath_start

    # Painting

    def fill(self):
        self._target.drawPath(self._path, stroke=0, fill=1)

    def stroke(self):
        if self._line_width <= 0:
            return
        self._target.drawPath(self._path, stroke=1, fill=0)

    def fill_rect(self, x, y, width, height):
        self._target.rect(x, y, width, height, stroke=0, fill=1)

    def stroke_rect(self, x, y, width, height):
        if self._line_width <= 0:
            return
        self._target.rect(x, y, width, height, stroke=1, fill=0)

    def fill_text(self, text, x, y, font_family, font_size):
        self._target.saveState()
        self._target.translate(x, y)
        self._target.scale(1, -1)
        self._target.setFont(resolve_font(font_family), font_size)
        self._target.drawString(0, 0, text)
        self._target.restoreState()

    def draw_image(self, source, x, y, width, height):
        try:
            with PILImage.open(source) as img:
                img.load()
                reader = ImageReader(img.copy())
        except OSError as e:
            raise RenderElementError(f"Cannot read image {source}: {e}") from e

        self._target.saveState()
        self._target.translate(x, y + height)
        self._target.scale(1, -1)
        self._target.drawImage(reader, 0, 0, width, height, mask='auto')
        self._target.restoreState()

    # Style

    def set_fill_color(self, color):
        self._target.setFillColor(HexColor(validate_color(color)))

    def set_stroke_color(self, color):
        self._target.setStrokeColor(HexColor(validate_color(color)))

    def set_line_width(self, width):
        self._line_width = float(width)
        self._target.setLineWidth(self._line_width)

    def set_line_cap(self, cap):
        self._target.setLineCap(LINE_CAPS.get(cap, 0))

    def set_line_dash(self, pattern: Sequence[float]):
        # setDash rejects a zero-length cycle; draw those solid
        self._target.setDash(list(pattern) if sum(pattern) > 0 else [], 0)

    def set_global_alpha(self, alpha):
        self._alpha = alpha
        self._target.setFillAlpha(alpha)
        self._target.setStrokeAlpha(alpha)

    # Transform stack

    def save(self):
        self._stack.append((self._line_width, self._alpha))
        self._target.saveState()

    def restore(self):
        if not self._stack:
            logger.debug("restore() without matching save()")
            return
        self._line_width, self._alpha = self._stack.pop()
        self._target.restoreState()

    def translate(self, dx, dy):
        self._target.translate(dx, dy)

    def rotate(self, angle):
        self._target.rotate(math.degrees(angle))


def render_pdf_bytes(document: Union[Document, Dict[str, Any]], optimize: bool = False,
                     background: str = DEFAULT_BACKGROUND,
                     page_limits: Tuple[float, float] = (MIN_PAGE_SIZE, MAX_PAGE_SIZE),
                     title: str = 'Sketch2Print') -> Tuple[bytes, RenderReport]:
    """
    Render a document to a complete PDF in memory.

    With ``optimize`` the page is clamped to ``page_limits``, elements
    are fitted onto it and the content streams are compressed.

    Raises:
        ValidationError: the page size is not positive
        RenderFatalError: the PDF could not be produced
    """
    snapshot = document.to_dict() if isinstance(document, Document) else dict(document)
    if optimize:
        snapshot = optimize_canvas_for_pdf(snapshot, *page_limits)

    width = to_number(snapshot.get('width'))
    height = to_number(snapshot.get('height'))
    if not width or not height or width <= 0 or height <= 0:
        raise ValidationError("Page width and height must be positive numbers")

    buffer = BytesIO()
    try:
        target = canvas.Canvas(buffer, pagesize=(width, height),
                               pageCompression=1 if optimize else 0)
        target.setTitle(title)
        target.setCreator('Sketch2Print')

        report = render_document_to(snapshot, ReportLabContext(target, height), background)

        target.showPage()
        target.save()
    except RenderFatalError:
        raise
    except (OSError, ValueError) as e:
        raise RenderFatalError(f"PDF generation failed: {e}") from e

    return buffer.getvalue(), report


def export_pdf(document: Union[Document, Dict[str, Any]], stream: BinaryIO,
               optimize: bool = False, background: str = DEFAULT_BACKGROUND,
               page_limits: Tuple[float, float] = (MIN_PAGE_SIZE, MAX_PAGE_SIZE)) -> RenderReport:
    """
    Render ``document`` as a one-page PDF and write it to ``stream``.

    ReportLab only produces a finished document, so the whole PDF is
    built in memory before the first byte is written. A render failure
    therefore leaves the stream untouched; the finished bytes are then
    copied to ``stream`` in ``CHUNK_SIZE`` pieces.

    Raises:
        RenderFatalError: rendering or writing to ``stream`` failed
    """
    data, report = render_pdf_bytes(document, optimize, background, page_limits)

    source = BytesIO(data)
    try:
        for chunk in iter(lambda: source.read(CHUNK_SIZE), b''):
            stream.write(chunk)
        if hasattr(stream, 'flush'):
            stream.flush()
    except (OSError, ValueError) as e:
        raise RenderFatalError(f"Failed to write PDF: {e}") from e

    logger.info(f"Exported PDF ({len(data)} bytes)")
    return report


def export_pdf_file(document: Union[Document, Dict[str, Any]], filepath: str,
                    optimize: bool = False, background: str = DEFAULT_BACKGROUND,
                    page_limits: Tuple[float, float] = (MIN_PAGE_SIZE, MAX_PAGE_SIZE)) -> RenderReport:
    """Write the PDF to ``filepath``; no file is created if rendering fails."""
    data, report = render_pdf_bytes(document, optimize, background, page_limits)
    try:
        Path(filepath).write_bytes(data)
    except OSError as e:
        raise RenderFatalError(f"Failed to write {filepath}: {e}") from e
    logger.info(f"Saved PDF to {filepath}")
    return report
