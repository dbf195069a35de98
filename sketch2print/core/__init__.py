"""
Sketch2Print Core Module

Contains the core data structures:
- Shapes: Rectangle, Circle, Line, Path, Text, etc.
- ShapeFactory: Builds shapes from property bags
- Document: Ordered scene of shapes on a canvas
- Optimizer: Page fitting helpers for PDF output
"""

# Import order matters - shapes first, then factory, then document
from .errors import (
    Sketch2PrintError, ValidationError, ElementIndexError,
    RenderElementError, RenderFatalError
)
from .geometry import Point, BoundingBox
from .shapes import (
    Shape, Rectangle, Circle, Ellipse, Line, Arrow, Triangle,
    Polygon, Path, Star, Text, Image
)
from .factory import ShapeFactory, create_shape, shape_from_dict
from .document import Document, ReorderDirection

__all__ = [
    'Sketch2PrintError', 'ValidationError', 'ElementIndexError',
    'RenderElementError', 'RenderFatalError',
    'Point', 'BoundingBox',
    'Shape', 'Rectangle', 'Circle', 'Ellipse', 'Line', 'Arrow', 'Triangle',
    'Polygon', 'Path', 'Star', 'Text', 'Image',
    'ShapeFactory', 'create_shape', 'shape_from_dict',
    'Document', 'ReorderDirection',
]
