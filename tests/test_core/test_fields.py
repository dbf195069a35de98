"""
Tests for field coercion and color helpers.
"""

import unittest

from sketch2print.core.colors import normalize_color, validate_color, hex_to_rgb
from sketch2print.core.errors import ValidationError
from sketch2print.core.fields import (
    NumberField, ColorField, StringField, BooleanField, NumberListField,
    PassThroughField, to_number, to_bool, build_schema
)


class TestCoercion(unittest.TestCase):

    def test_to_number(self):
        self.assertEqual(to_number(3), 3.0)
        self.assertEqual(to_number(' 2.5 '), 2.5)
        self.assertIsNone(to_number('abc'))
        self.assertIsNone(to_number(True))
        self.assertIsNone(to_number(float('inf')))
        self.assertIsNone(to_number([1]))

    def test_to_bool(self):
        self.assertTrue(to_bool('yes'))
        self.assertFalse(to_bool('0'))
        self.assertTrue(to_bool(1))
        self.assertIsNone(to_bool('maybe'))


class TestFields(unittest.TestCase):

    def test_number_field_clamps(self):
        f = NumberField('size', default=10.0, minimum=1.0, maximum=5.0)
        self.assertEqual(f.normalize({'size': 100}, None), 5.0)
        self.assertEqual(f.normalize({'size': 'bad'}, None), 10.0)
        self.assertEqual(f.normalize({}, None), 10.0)

    def test_snake_case_attr_read(self):
        f = NumberField('fontSize', 'font_size', 16.0)
        self.assertEqual(f.normalize({'font_size': 20}, None), 20.0)

    def test_callable_default(self):
        class Stub:
            x = 7.0
        f = NumberField('x2', default=lambda s: s.x + 100)
        self.assertEqual(f.normalize({}, Stub()), 107.0)

    def test_required_string(self):
        f = StringField('text', required=True)
        with self.assertRaises(ValidationError):
            f.normalize({'text': '   '}, None)
        self.assertEqual(f.normalize({'text': 5}, None), '5')

    def test_string_choices(self):
        f = StringField('cap', default='butt', choices=('butt', 'round'))
        self.assertEqual(f.normalize({'cap': 'round'}, None), 'round')
        self.assertEqual(f.normalize({'cap': 'zigzag'}, None), 'butt')

    def test_aliases(self):
        f = StringField('imagePath', 'image_path', aliases=('src',))
        self.assertEqual(f.normalize({'src': 'a.png'}, None), 'a.png')

    def test_boolean_and_lists(self):
        self.assertTrue(BooleanField('closed', default=False).normalize({'closed': 'true'}, None))
        dash = NumberListField('lineDash', default=())
        self.assertEqual(dash.normalize({}, None), [])
        self.assertIsNone(PassThroughField('points').coerce('not a list'))

    def test_zero_dash_is_solid(self):
        dash = NumberListField('lineDash', default=())
        self.assertEqual(dash.normalize({'lineDash': [0]}, None), [])
        self.assertEqual(dash.normalize({'lineDash': [0, 0]}, None), [])
        self.assertEqual(dash.normalize({'lineDash': [5, 0]}, None), [5.0, 0.0])
        self.assertEqual(dash.normalize({'lineDash': [-3, 4]}, None), [4.0])


    def test_color_field(self):
        f = ColorField('fillColor', default='#000000')
        self.assertEqual(f.normalize({'fillColor': 'Blue'}, None), '#0000ff')
        self.assertEqual(f.normalize({'fillColor': '#12345'}, None), '#000000')


class TestSchema(unittest.TestCase):

    def test_build_schema(self):
        schema = build_schema('demo', [
            NumberField('size', default=3, minimum=1, integer=True),
            StringField('label', required=True),
            ColorField('fillColor', default='#000000'),
        ])
        props = schema['properties']
        self.assertEqual(props['type'], {'type': 'string', 'enum': ['demo']})
        self.assertEqual(props['size'], {'type': 'integer', 'default': 3, 'minimum': 1})
        self.assertEqual(props['fillColor']['format'], 'color')
        self.assertEqual(schema['required'], ['type', 'label'])


class TestColors(unittest.TestCase):

    def test_normalize(self):
        self.assertEqual(normalize_color('#FFF'), '#ffffff')
        self.assertEqual(normalize_color(' #A1B2C3 '), '#a1b2c3')
        self.assertEqual(normalize_color('Grey'), '#808080')
        self.assertIsNone(normalize_color('#ggg'))
        self.assertIsNone(normalize_color(None))

    def test_validate_color(self):
        self.assertEqual(validate_color('nope'), '#000000')
        self.assertEqual(validate_color('nope', '#ffffff'), '#ffffff')

    def test_hex_to_rgb(self):
        self.assertEqual(hex_to_rgb('#ff6600'), (255, 102, 0))
        self.assertEqual(hex_to_rgb('#0f0'), (0, 255, 0))
        self.assertEqual(hex_to_rgb('invalid'), (0, 0, 0))


if __name__ == '__main__':
    unittest.main()
