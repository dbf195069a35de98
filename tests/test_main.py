"""
Tests for the command line entry point.
"""

import contextlib
import io
import os
import tempfile
import unittest

from sketch2print.core.document import Document
from sketch2print.core.shapes import Circle, Text
from sketch2print.io.project_io import save_project
from sketch2print.main import build_parser, main


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.project = os.path.join(self.tmp.name, 'scene.json')
        document = Document(300, 200)
        document.append(Circle(x=150, y=100, radius=40))
        document.append(Text(x=10, y=30, text='CLI'))
        save_project(document, self.project)

    def tearDown(self):
        self.tmp.cleanup()

    def test_types(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.assertEqual(main(['types']), 0)
        self.assertEqual(out.getvalue().split()[0], 'rectangle')
        self.assertIn('star', out.getvalue().split())

    def test_render_pdf(self):
        output = os.path.join(self.tmp.name, 'scene.pdf')
        self.assertEqual(main(['render', self.project, '-o', output, '--optimize']), 0)
        with open(output, 'rb') as f:
            self.assertEqual(f.read(4), b'%PDF')

    def test_render_missing_project(self):
        output = os.path.join(self.tmp.name, 'scene.pdf')
        missing = os.path.join(self.tmp.name, 'missing.json')
        self.assertEqual(main(['render', missing, '-o', output]), 1)
        self.assertFalse(os.path.exists(output))

    def test_parser(self):
        args = build_parser().parse_args(['render', 'a.json', '-o', 'b.png', '--scale', '2'])
        self.assertEqual(args.scale, 2.0)
        self.assertIsNone(args.optimize)
        with self.assertRaises(SystemExit):
            with contextlib.redirect_stderr(io.StringIO()):
                build_parser().parse_args([])


if __name__ == '__main__':
    unittest.main()
