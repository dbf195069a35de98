"""
Tests for the canvas service facade and its dispatcher.
"""

import io
import threading
import unittest

from sketch2print.config import CanvasSettings
from sketch2print.core.errors import ElementIndexError, ValidationError
from sketch2print.service import CanvasService, parse_index


class TestCanvasOperations(unittest.TestCase):

    def setUp(self):
        self.service = CanvasService(CanvasSettings())

    def test_default_canvas(self):
        canvas = self.service.get_canvas()
        self.assertEqual(canvas, {'width': 800.0, 'height': 600.0, 'elements': []})

    def test_settings_size_used(self):
        service = CanvasService(CanvasSettings(default_width=300, default_height=200))
        self.assertEqual(service.get_canvas()['width'], 300)

    def test_init_canvas(self):
        self.service.add_rectangle(x=1, y=1)
        result = self.service.init_canvas(1024, 768, preserve_elements=True)
        self.assertTrue(result['elementsPreserved'])
        self.assertEqual(len(result['canvas']['elements']), 1)

        result = self.service.init_canvas(500, 500)
        self.assertFalse(result['elementsPreserved'])
        self.assertEqual(result['canvas']['elements'], [])

        with self.assertRaises(ValidationError):
            self.service.init_canvas(0, 500)

    def test_clear(self):
        self.service.add_circle()
        self.service.clear_canvas()
        self.assertEqual(self.service.get_elements()['count'], 0)


class TestElementOperations(unittest.TestCase):

    def setUp(self):
        self.service = CanvasService(CanvasSettings())

    def test_add_drawing(self):
        result = self.service.add_drawing('star', x=100, y=100, points=6)
        self.assertEqual(result['id'], 0)
        self.assertEqual(result['element']['type'], 'star')
        self.assertEqual(result['element']['points'], 6)

        with self.assertRaises(ValidationError):
            self.service.add_drawing('hexagon')
        with self.assertRaises(ValidationError):
            self.service.add_drawing(None)
        self.assertEqual(self.service.get_elements()['count'], 1)

    def test_add_rectangle_ignores_type(self):
        result = self.service.add_rectangle(type='circle', width=30)
        self.assertEqual(result['element']['type'], 'rectangle')

    def test_add_text(self):
        result = self.service.add_text(text='Hello', x=900, y=5, fontSize=20, fillColor='red')
        self.assertEqual(result['position'], {'x': 790.0, 'y': 20.0})
        self.assertEqual(result['color'], '#ff0000')
        self.assertIn('"Hello"', result['preview'])

    def test_add_text_requires_content(self):
        for bad in ('', '   ', None, 42):
            with self.subTest(text=bad):
                with self.assertRaises(ValidationError):
                    self.service.add_text(text=bad)
        self.assertEqual(self.service.get_elements()['count'], 0)

    def test_add_image(self):
        with self.assertRaises(ValidationError):
            self.service.add_image(width=10)
        result = self.service.add_image(src='https://example.com/a.png')
        self.assertEqual(result['element']['imagePath'], 'https://example.com/a.png')

    def test_get_element_by_string_id(self):
        self.service.add_circle(radius=5)
        element = self.service.get_element('0')
        self.assertEqual(element['id'], 0)
        self.assertEqual(element['radius'], 5.0)
        with self.assertRaises(ElementIndexError):
            self.service.get_element(1)
        with self.assertRaises(ElementIndexError):
            self.service.get_element('first')

    def test_update_element(self):
        self.service.add_rectangle(width=10)
        result = self.service.update_element(0, {'width': 40}, fillColor='#00ff00')
        self.assertEqual(result['element']['width'], 40.0)
        self.assertEqual(result['element']['fillColor'], '#00ff00')

    def test_delete_element(self):
        self.service.add_rectangle()
        self.service.add_circle()
        result = self.service.delete_element(0)
        self.assertEqual(result['deletedElement']['type'], 'rectangle')
        self.assertEqual(self.service.get_element(0)['type'], 'circle')

    def test_duplicate_uses_settings_offset(self):
        service = CanvasService(CanvasSettings(duplicate_offset=5))
        service.add_circle(x=10, y=10)
        result = service.duplicate_element(0)
        self.assertEqual(result['element']['id'], 1)
        self.assertEqual((result['element']['x'], result['element']['y']), (15, 15))

    def test_move_requires_both_coordinates(self):
        self.service.add_circle(x=10, y=10)
        with self.assertRaises(ValidationError):
            self.service.move_element(0, x=50)
        result = self.service.move_element(0, x=-20, y=5000)
        self.assertEqual(result['newPosition'], {'x': 0.0, 'y': 600.0})

    def test_reorder(self):
        self.service.add_rectangle()
        self.service.add_circle()
        result = self.service.reorder_element(0, 'front')
        self.assertEqual(result['newIndex'], 1)
        self.assertEqual(self.service.get_element(1)['type'], 'rectangle')
        with self.assertRaises(ValidationError):
            self.service.reorder_element(0, None)

    def test_elements_at(self):
        self.service.add_rectangle(x=0, y=0, width=100, height=100)
        self.service.add_circle(x=50, y=50, radius=10)
        self.assertEqual(self.service.elements_at(50, 50), {'matches': [0, 1], 'topmost': 1})
        self.assertEqual(self.service.elements_at('500', 500), {'matches': [], 'topmost': None})


class TestIntrospectionAndReports(unittest.TestCase):

    def setUp(self):
        self.service = CanvasService(CanvasSettings())

    def test_drawing_types(self):
        result = self.service.get_drawing_types()
        self.assertEqual(result['count'], 11)
        self.assertIn('arrow', result['schemas'])

    def test_drawing_schema(self):
        self.assertEqual(self.service.get_drawing_schema('circle')['type'], 'circle')
        with self.assertRaises(ValidationError):
            self.service.get_drawing_schema('blob')

    def test_text_helpers(self):
        examples = self.service.get_text_examples()
        self.assertEqual(len(examples['examples']), 4)
        self.assertEqual(examples['canvasSize'], {'width': 800.0, 'height': 600.0})

        checked = self.service.validate_text_position(x=10, y=2, text='Low', fontSize=16)
        self.assertFalse(checked['isValid'])
        self.assertEqual(checked['optimized']['y'], 16)

    def test_stats(self):
        self.assertIsNone(self.service.get_stats()['designBounds'])
        self.service.add_rectangle(x=10, y=10, width=20, height=20)
        stats = self.service.get_stats()
        self.assertEqual(stats['elementCount'], 1)
        self.assertEqual(stats['designBounds']['right'], 30)
        self.assertGreater(stats['estimatedPdfSize'], 1024)

    def test_recommendations(self):
        self.service.init_canvas(1600, 600)
        self.assertIn('Consider reducing canvas dimensions for smaller file size',
                      self.service.get_recommendations())

    def test_export_pdf(self):
        self.service.add_text(text='Exported', x=10, y=40)
        stream = io.BytesIO()
        report = self.service.export_pdf(stream)
        self.assertTrue(stream.getvalue().startswith(b'%PDF'))
        self.assertEqual(report.drawn, 1)


class TestDispatch(unittest.TestCase):

    def setUp(self):
        self.service = CanvasService(CanvasSettings())

    def test_wire_payloads(self):
        self.service.dispatch('add_drawing', {'type': 'circle', 'radius': 12})
        self.service.dispatch('update_element', {'id': 0, 'fillColor': '#0000ff'})
        element = self.service.dispatch('get_element', {'elementId': '0'})
        self.assertEqual(element['fillColor'], '#0000ff')
        self.assertEqual(element['radius'], 12.0)

        self.service.dispatch('init_canvas', {'width': 300, 'height': 300,
                                              'preserveElements': True})
        self.assertEqual(self.service.get_elements()['count'], 1)

    def test_unknown_operation(self):
        with self.assertRaises(ValidationError):
            self.service.dispatch('export_pdf', {})
        with self.assertRaises(ValidationError):
            self.service.dispatch('drop_tables')

    def test_bad_arguments(self):
        with self.assertRaises(ValidationError):
            self.service.dispatch('move_element', {'id': 0, 'z': 4})
        with self.assertRaises(ValidationError):
            self.service.dispatch('get_element', {})

    def test_parse_index(self):
        self.assertEqual(parse_index('3'), 3)
        self.assertEqual(parse_index(2.0), 2)
        with self.assertRaises(ElementIndexError):
            parse_index(1.5)
        with self.assertRaises(ElementIndexError):
            parse_index(None)


class TestConcurrency(unittest.TestCase):

    def test_parallel_adds(self):
        service = CanvasService(CanvasSettings())

        def worker():
            for _ in range(50):
                service.add_circle()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [e['id'] for e in service.get_elements()['elements']]
        self.assertEqual(ids, list(range(200)))


if __name__ == '__main__':
    unittest.main()
