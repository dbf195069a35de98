"""
Tests for the render pipeline, using a recording context.
"""

import unittest

from sketch2print.core.document import Document
from sketch2print.core.errors import RenderFatalError
from sketch2print.core.shapes import Rectangle, Circle, Text
from sketch2print.graphics import RecordingContext, RenderReport, render_shapes, render_document_to


class BrokenShape(Rectangle):
    type_name = 'broken'

    def draw_shape(self, context):
        raise RuntimeError("cannot draw")


class FatalShape(Rectangle):
    type_name = 'fatal'

    def draw_shape(self, context):
        raise RenderFatalError("sink closed")


class TestRenderShapes(unittest.TestCase):

    def test_paint_order(self):
        ctx = RecordingContext()
        report = render_shapes([Rectangle(x=1), Circle(x=2), Text(text='t')], ctx)
        drawing = [name for name in ctx.names()
                   if name in ('fill_rect', 'arc', 'fill_text')]
        self.assertEqual(drawing, ['fill_rect', 'arc', 'fill_text'])
        self.assertEqual(report.drawn, 3)
        self.assertTrue(report.ok)

    def test_failed_shape_is_skipped(self):
        ctx = RecordingContext()
        with self.assertLogs('sketch2print.graphics.renderer', level='ERROR'):
            report = render_shapes([Rectangle(), BrokenShape(), Circle()], ctx)
        self.assertEqual(report.drawn, 2)
        self.assertEqual(report.failed, [(1, 'cannot draw')])
        self.assertFalse(report.ok)
        self.assertEqual(ctx.count('arc'), 1)

    def test_failure_inside_transform_restores(self):
        ctx = RecordingContext()
        with self.assertLogs('sketch2print.graphics.renderer', level='ERROR'):
            render_shapes([BrokenShape(rotation=45)], ctx)
        self.assertEqual(ctx.depth, 0)

    def test_fatal_error_aborts(self):
        ctx = RecordingContext()
        with self.assertRaises(RenderFatalError):
            render_shapes([FatalShape(), Circle()], ctx)
        self.assertEqual(ctx.count('arc'), 0)

    def test_existing_report_is_extended(self):
        report = RenderReport(drawn=2)
        render_shapes([Circle()], RecordingContext(), report)
        self.assertEqual(report.drawn, 3)


class TestRenderDocument(unittest.TestCase):

    def test_background_first(self):
        document = Document(200, 100)
        document.append(Circle())
        ctx = RecordingContext()
        render_document_to(document, ctx)
        self.assertEqual(ctx.calls[0], ('set_fill_color', ('#ffffff',)))
        self.assertEqual(ctx.calls[1], ('fill_rect', (0, 0, 200, 100)))

    def test_custom_background(self):
        ctx = RecordingContext()
        render_document_to(Document(), ctx, background='#ABC')
        self.assertEqual(ctx.args_of('set_fill_color'), [('#aabbcc',)])
        ctx = RecordingContext()
        render_document_to(Document(), ctx, background='nonsense')
        self.assertEqual(ctx.args_of('set_fill_color'), [('#ffffff',)])

    def test_snapshot_dict(self):
        snapshot = {'width': '300', 'height': 200, 'elements': [
            {'type': 'rectangle'},
            {'type': 'unknown'},
            {'type': 'circle'},
        ]}
        ctx = RecordingContext()
        report = render_document_to(snapshot, ctx)
        self.assertEqual(report.drawn, 2)
        self.assertEqual(report.skipped, [(1, 'Unknown shape type: unknown')])
        self.assertEqual(ctx.args_of('fill_rect')[0], (0, 0, 300.0, 200.0))

    def test_malformed_records_skipped(self):
        snapshot = {'width': 100, 'height': 100, 'elements': [
            {'type': ['rectangle']},
            {'type': 'rectangle', 'self': 1},
            {'type': 'circle'},
        ]}
        report = render_document_to(snapshot, RecordingContext())
        self.assertEqual(report.drawn, 2)
        self.assertEqual(report.skipped, [(0, "Unknown shape type: ['rectangle']")])


    def test_empty_document(self):
        ctx = RecordingContext()
        report = render_document_to(Document(), ctx)
        self.assertEqual(report.drawn, 0)
        self.assertEqual(ctx.names(), ['set_fill_color', 'fill_rect'])


if __name__ == '__main__':
    unittest.main()
