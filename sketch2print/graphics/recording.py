"""
Recording Drawing Context

A DrawingContext that draws nothing and keeps the list of calls made on
it. Used to inspect what a shape or a render pass emits.
"""

from typing import Any, List, Tuple

from .context import DrawingContext


class RecordingContext(DrawingContext):
    """Records every call as ``(name, args)``."""

    def __init__(self):
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.depth = 0

    def _record(self, name, *args):
        self.calls.append((name, args))

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def count(self, name: str) -> int:
        return sum(1 for n, _ in self.calls if n == name)

    def args_of(self, name: str) -> List[Tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    def begin_path(self):
        self._record('begin_path')

    def move_to(self, x, y):
        self._record('move_to', x, y)

    def line_to(self, x, y):
        self._record('line_to', x, y)

    def quadratic_curve_to(self, cpx, cpy, x, y):
        self._record('quadratic_curve_to', cpx, cpy, x, y)

    def bezier_curve_to(self, cp1x, cp1y, cp2x, cp2y, x, y):
        self._record('bezier_curve_to', cp1x, cp1y, cp2x, cp2y, x, y)

    def arc(self, x, y, radius, start_angle, end_angle, counterclockwise=False):
        self._record('arc', x, y, radius, start_angle, end_angle, counterclockwise)

    def ellipse(self, x, y, radius_x, radius_y, rotation, start_angle, end_angle,
                counterclockwise=False):
        self._record('ellipse', x, y, radius_x, radius_y, rotation,
                     start_angle, end_angle, counterclockwise)

    def close_path(self):
        self._record('close_path')

    def fill(self):
        self._record('fill')

    def stroke(self):
        self._record('stroke')

    def fill_rect(self, x, y, width, height):
        self._record('fill_rect', x, y, width, height)

    def stroke_rect(self, x, y, width, height):
        self._record('stroke_rect', x, y, width, height)

    def fill_text(self, text, x, y, font_family, font_size):
        self._record('fill_text', text, x, y, font_family, font_size)

    def draw_image(self, source, x, y, width, height):
        self._record('draw_image', source, x, y, width, height)

    def set_fill_color(self, color):
        self._record('set_fill_color', color)

    def set_stroke_color(self, color):
        self._record('set_stroke_color', color)

    def set_line_width(self, width):
        self._record('set_line_width', width)

    def set_line_cap(self, cap):
        self._record('set_line_cap', cap)

    def set_line_dash(self, pattern):
        self._record('set_line_dash', list(pattern))

    def set_global_alpha(self, alpha):
        self._record('set_global_alpha', alpha)

    def save(self):
        self.depth += 1
        self._record('save')

    def restore(self):
        self.depth -= 1
        self._record('restore')

    def translate(self, dx, dy):
        self._record('translate', dx, dy)

    def rotate(self, angle):
        self._record('rotate', angle)
