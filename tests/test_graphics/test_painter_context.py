"""
Tests for the QPainter backend and the preview widget.

Renders into offscreen QImages and checks pixels.
"""

import os
import tempfile
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt6.QtCore import QEvent, QPointF, Qt
    from PyQt6.QtGui import QColor, QImage, QMouseEvent
    from PyQt6.QtWidgets import QApplication
    HAS_QT = True
except ImportError:
    HAS_QT = False

from sketch2print.core.document import Document
from sketch2print.core.shapes import (
    Rectangle, Circle, Ellipse, Line, Arrow, Triangle, Polygon, Path,
    Star, Text, Image
)


def pixel(image, x, y):
    return image.pixelColor(x, y).name()


@unittest.skipUnless(HAS_QT, "PyQt6 not available")
class QtTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])


class TestRenderToImage(QtTestCase):

    def render(self, *shapes, size=100, **kwargs):
        from sketch2print.graphics.painter_context import render_to_image
        document = Document(size, size)
        for shape in shapes:
            document.append(shape)
        return render_to_image(document, **kwargs)

    def test_background(self):
        image = self.render(background='#336699')
        self.assertEqual((image.width(), image.height()), (100, 100))
        self.assertEqual(pixel(image, 50, 50), '#336699')

    def test_filled_rectangle(self):
        image = self.render(Rectangle(x=10, y=10, width=50, height=50,
                                      fillColor='#ff0000', strokeWidth=0))
        self.assertEqual(pixel(image, 30, 30), '#ff0000')
        self.assertEqual(pixel(image, 80, 80), '#ffffff')

    def test_circle(self):
        image = self.render(Circle(x=50, y=50, radius=20, fillColor='#0000ff', strokeWidth=0))
        self.assertEqual(pixel(image, 50, 50), '#0000ff')
        self.assertEqual(pixel(image, 5, 5), '#ffffff')

    def test_rotation_about_anchor(self):
        image = self.render(Rectangle(x=50, y=0, width=100, height=10, rotation=90,
                                      fillColor='#ff0000', strokeWidth=0))
        self.assertEqual(pixel(image, 45, 50), '#ff0000')
        self.assertEqual(pixel(image, 60, 5), '#ffffff')

    def test_opacity(self):
        image = self.render(Rectangle(x=0, y=0, width=100, height=100,
                                      fillColor='#000000', strokeWidth=0, opacity=0.5))
        gray = image.pixelColor(50, 50).red()
        self.assertTrue(115 <= gray <= 140, gray)

    def test_scale(self):
        image = self.render(Rectangle(x=10, y=10, width=10, height=10,
                                      fillColor='#00ff00', strokeWidth=0), scale=2)
        self.assertEqual(image.width(), 200)
        self.assertEqual(pixel(image, 30, 30), '#00ff00')
        self.assertEqual(pixel(image, 15, 15), '#ffffff')

    def test_every_shape_draws(self):
        from sketch2print.graphics.painter_context import QPainterContext
        from sketch2print.graphics.renderer import render_shapes
        from PyQt6.QtGui import QPainter

        shapes = [
            Rectangle(cornerRadius=10, rotation=15),
            Circle(x=50, y=50),
            Ellipse(x=80, y=80, opacity=0.3),
            Line(lineDash=[6, 3], lineCap='round', strokeWidth=3),
            Arrow(x=10, y=150, x2=150, y2=190),
            Triangle(x=100, y=20),
            Polygon(points=[[0, 0], [40, 10], [20, 60]]),
            Path(pathData=[{'type': 'moveTo', 'x': 0, 'y': 0},
                           {'type': 'quadraticCurveTo', 'cpx': 20, 'cpy': 40, 'x': 40, 'y': 0},
                           {'type': 'arc', 'x': 60, 'y': 60, 'radius': 15,
                            'startAngle': 0, 'endAngle': 3, 'counterclockwise': True}],
                 closed=True),
            Star(x=120, y=120, points=6),
            Text(x=10, y=180, text='Preview'),
            Image(x=0, y=0, imagePath='https://example.com/x.png'),
        ]
        image = QImage(200, 200, QImage.Format.Format_ARGB32)
        image.fill(QColor('#ffffff'))
        painter = QPainter(image)
        try:
            report = render_shapes(shapes, QPainterContext(painter))
        finally:
            painter.end()
        self.assertEqual(report.drawn, len(shapes))
        self.assertTrue(report.ok)

    def test_missing_image_placeholder(self):
        image = self.render(Image(x=0, y=0, width=100, height=100, imagePath='/no/such.png'))
        self.assertEqual(pixel(image, 5, 5), '#dcdcdc')

    def test_local_image(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = os.path.join(tmp, 'green.png')
            swatch = QImage(10, 10, QImage.Format.Format_ARGB32)
            swatch.fill(QColor('#00ff00'))
            self.assertTrue(swatch.save(source))

            image = self.render(Image(x=0, y=0, width=100, height=100, imagePath=source))
        self.assertEqual(pixel(image, 50, 50), '#00ff00')

    def test_undecodable_image_placeholder(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = os.path.join(tmp, 'broken.png')
            with open(source, 'wb') as f:
                f.write(b'not an image')
            with self.assertLogs('sketch2print.core.shapes', level='WARNING'):
                image = self.render(Image(x=0, y=0, width=100, height=100, imagePath=source))
        self.assertEqual(pixel(image, 5, 5), '#dcdcdc')

    def test_snapshot_dict(self):
        from sketch2print.graphics.painter_context import render_to_image
        image = render_to_image({'width': 40, 'height': 30, 'elements': [
            {'type': 'rectangle', 'x': 0, 'y': 0, 'width': 40, 'height': 30,
             'fillColor': '#123456', 'strokeWidth': 0},
        ]})
        self.assertEqual((image.width(), image.height()), (40, 30))
        self.assertEqual(pixel(image, 20, 15), '#123456')


class TestCanvasPreview(QtTestCase):

    def setUp(self):
        from sketch2print.graphics.painter_context import CanvasPreview
        self.document = Document(100, 100)
        self.document.append(Rectangle(x=0, y=0, width=50, height=50))
        self.document.append(Circle(x=40, y=40, radius=10))
        self.preview = CanvasPreview(self.document)
        self.preview.resize(200, 100)

    def click(self, x, y):
        event = QMouseEvent(QEvent.Type.MouseButtonPress, QPointF(x, y), QPointF(x, y),
                            Qt.MouseButton.LeftButton, Qt.MouseButton.LeftButton,
                            Qt.KeyboardModifier.NoModifier)
        self.preview.mousePressEvent(event)

    def test_map_to_canvas(self):
        point = self.preview.map_to_canvas(QPointF(60, 10))
        self.assertAlmostEqual(point.x(), 10.0)
        self.assertAlmostEqual(point.y(), 10.0)

    def test_click_reports_topmost(self):
        clicked = []
        self.preview.element_clicked.connect(clicked.append)
        self.click(90, 40)
        self.click(55, 5)
        self.click(190, 90)
        self.assertEqual(clicked, [1, 0, -1])

    def test_paint(self):
        self.preview.grab()
        self.assertIsNotNone(self.preview.last_report)
        self.assertEqual(self.preview.last_report.drawn, 2)

    def test_set_document(self):
        other = Document(400, 300)
        self.preview.set_document(other)
        self.assertIs(self.preview.document, other)
        self.assertEqual(self.preview.sizeHint().width(), 400)


if __name__ == '__main__':
    unittest.main()
