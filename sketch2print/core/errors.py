"""
Sketch2Print Errors

Exception hierarchy shared by the document model, the shape factory
and the render pipeline.
"""


class Sketch2PrintError(Exception):
    """Base class for all Sketch2Print errors."""
    pass


class ValidationError(Sketch2PrintError, ValueError):
    """Malformed required input (unknown shape type, empty text, ...)."""
    pass


class ElementIndexError(Sketch2PrintError, IndexError):
    """An element index does not address a shape in the document."""

    def __init__(self, index, size: int):
        super().__init__("Element index out of bounds")
        self.index = index
        self.size = size


class RenderElementError(Sketch2PrintError):
    """A single element could not be drawn; the render continues."""
    pass


class RenderFatalError(Sketch2PrintError):
    """The output sink failed; the whole render is aborted."""
    pass
