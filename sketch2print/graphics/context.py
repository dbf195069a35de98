"""
Drawing Context Interface

The immediate-mode 2D drawing API that shapes draw against. One
implementation exists per output backend (on-screen QPainter, PDF).

Coordinates are y-down with the origin at the top-left corner of the
canvas. Angles are in radians; positive rotation turns clockwise on
screen. Colors arrive normalized as ``#rrggbb``.
"""

from abc import ABC, abstractmethod
from typing import Sequence


class DrawingContext(ABC):
    """Abstract 2D drawing context."""

    # Path construction

    @abstractmethod
    def begin_path(self) -> None:
        pass

    @abstractmethod
    def move_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def line_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None:
        pass

    @abstractmethod
    def bezier_curve_to(self, cp1x: float, cp1y: float, cp2x: float, cp2y: float,
                        x: float, y: float) -> None:
        pass

    @abstractmethod
    def arc(self, x: float, y: float, radius: float, start_angle: float,
            end_angle: float, counterclockwise: bool = False) -> None:
        pass

    @abstractmethod
    def ellipse(self, x: float, y: float, radius_x: float, radius_y: float,
                rotation: float, start_angle: float, end_angle: float,
                counterclockwise: bool = False) -> None:
        pass

    @abstractmethod
    def close_path(self) -> None:
        pass

    # Painting

    @abstractmethod
    def fill(self) -> None:
        """Fill the current path with the fill color."""
        pass

    @abstractmethod
    def stroke(self) -> None:
        """Stroke the current path with the stroke style."""
        pass

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    @abstractmethod
    def stroke_rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float,
                  font_family: str, font_size: float) -> None:
        """Draw text with its baseline starting at (x, y)."""
        pass

    @abstractmethod
    def draw_image(self, source: str, x: float, y: float,
                   width: float, height: float) -> None:
        """
        Draw the image file ``source`` scaled into the given box.

        Raises:
            RenderElementError: the file cannot be decoded
        """
        pass

    # Style

    @abstractmethod
    def set_fill_color(self, color: str) -> None:
        pass

    @abstractmethod
    def set_stroke_color(self, color: str) -> None:
        pass

    @abstractmethod
    def set_line_width(self, width: float) -> None:
        pass

    @abstractmethod
    def set_line_cap(self, cap: str) -> None:
        """One of 'butt', 'round', 'square'."""
        pass

    @abstractmethod
    def set_line_dash(self, pattern: Sequence[float]) -> None:
        """An empty pattern means a solid line."""
        pass

    @abstractmethod
    def set_global_alpha(self, alpha: float) -> None:
        pass

    # Transform stack

    @abstractmethod
    def save(self) -> None:
        """Push the current style and transform."""
        pass

    @abstractmethod
    def restore(self) -> None:
        pass

    @abstractmethod
    def translate(self, dx: float, dy: float) -> None:
        pass

    @abstractmethod
    def rotate(self, angle: float) -> None:
        pass
