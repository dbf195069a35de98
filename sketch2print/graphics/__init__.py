"""
Sketch2Print Graphics Module

Contains the rendering components:
- DrawingContext: Backend-independent 2D drawing interface
- Renderer: Draws shape sequences onto a context
- RecordingContext: Keeps the calls made on it, for inspection

The QPainter backend lives in ``painter_context`` and is imported on
demand so the PDF path does not need a Qt platform plugin.
"""

from .context import DrawingContext
from .recording import RecordingContext
from .renderer import RenderReport, render_shapes, render_document_to

__all__ = [
    'DrawingContext',
    'RecordingContext',
    'RenderReport',
    'render_shapes',
    'render_document_to',
]
