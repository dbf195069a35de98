"""
Canvas Service

Request facade over one Document. A transport layer (HTTP handlers, the
CLI, a test) calls these operations with plain values and receives
plain dicts back. Domain errors (ValidationError, ElementIndexError,
RenderFatalError) propagate to the caller unchanged.

All operations are serialized with a re-entrant lock. PDF export takes a
copy of the document under the lock and renders it outside, so a render
never observes a half-applied mutation.
"""

from functools import wraps
from typing import Any, BinaryIO, Callable, Dict, List, Optional
import inspect
import logging
import threading

from .config import CanvasSettings
from .core.document import Document
from .core.errors import ElementIndexError, ValidationError
from .core.factory import create_shape, get_all_schemas, get_schema, get_supported_types
from .core.fields import to_number
from .core.optimizer import (
    estimate_pdf_size, generate_text_examples, get_optimization_recommendations,
    get_text_position_recommendations, optimize_text_element
)
from .io.pdf_export import export_pdf

logger = logging.getLogger(__name__)

COLOR_OPTIONS = [
    {'name': 'Black', 'value': '#000000', 'description': 'Default text color'},
    {'name': 'Red', 'value': '#ff0000', 'description': 'Bold red text'},
    {'name': 'Blue', 'value': '#0000ff', 'description': 'Professional blue'},
    {'name': 'Green', 'value': '#008000', 'description': 'Nature green'},
    {'name': 'Orange', 'value': '#ff6600', 'description': 'Vibrant orange'},
    {'name': 'Purple', 'value': '#800080', 'description': 'Royal purple'},
    {'name': 'Dark Gray', 'value': '#333333', 'description': 'Subtle dark gray'},
]

TEXT_TIPS = [
    'Y position represents the baseline of the text',
    'Ensure text color contrasts with background',
    'Consider font size relative to canvas dimensions',
    'Leave margin space around text for better readability',
]

# Payload keys accepted in their wire spelling by dispatch()
PAYLOAD_ALIASES = {
    'id': 'element_id',
    'elementId': 'element_id',
    'preserveElements': 'preserve_elements',
}


def synchronized(method: Callable) -> Callable:
    """Run the method while holding the service lock."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def parse_index(value) -> int:
    """Element ids arrive as ints or numeric strings."""
    number = to_number(value)
    if number is None or number != int(number):
        raise ElementIndexError(value, 0)
    return int(number)


class CanvasService:
    """
    Owns the document being edited and exposes the canvas operations.

    Features:
    - Canvas lifecycle (init, clear, snapshot)
    - Element CRUD, z-order, move and duplicate
    - Schema introspection for client forms
    - Text layout helpers and PDF export
    """

    def __init__(self, settings: Optional[CanvasSettings] = None,
                 document: Optional[Document] = None):
        self.settings = settings or CanvasSettings()
        if document is None:
            document = Document(self.settings.default_width, self.settings.default_height)
        self.document = document
        self._lock = threading.RLock()

    def _element(self, index: int) -> Dict[str, Any]:
        return {'id': index, **self.document.get(index).to_dict()}

    # Canvas

    @synchronized
    def init_canvas(self, width, height, preserve_elements: bool = False) -> Dict[str, Any]:
        canvas = self.document.initialize(width, height, bool(preserve_elements))
        return {
            'message': 'Canvas initialized successfully',
            'canvas': canvas,
            'elementsPreserved': bool(preserve_elements) and bool(canvas['elements']),
        }

    @synchronized
    def get_canvas(self) -> Dict[str, Any]:
        return self.document.to_dict()

    @synchronized
    def clear_canvas(self) -> Dict[str, Any]:
        self.document.clear()
        return {'message': 'Canvas cleared successfully'}

    # Adding elements

    @synchronized
    def add_drawing(self, type: str = None, **properties) -> Dict[str, Any]:
        """Create any supported shape from its property bag and append it."""
        if not type:
            raise ValidationError("Drawing type is required")
        shape = create_shape(type, properties)
        index = self.document.append(shape)
        logger.debug(f"Added {type} at index {index}")
        return {
            'message': f"{type} added successfully",
            'element': shape.to_dict(),
            'id': index,
        }

    def add_rectangle(self, **properties) -> Dict[str, Any]:
        properties.pop('type', None)
        return self.add_drawing('rectangle', **properties)

    def add_circle(self, **properties) -> Dict[str, Any]:
        properties.pop('type', None)
        return self.add_drawing('circle', **properties)

    @synchronized
    def add_text(self, **properties) -> Dict[str, Any]:
        """
        Add text, keeping the baseline on the canvas.

        The anchor is pulled inside the canvas (x to width - 10, y between
        the font size and height - 10) when it falls outside.
        """
        properties.pop('type', None)
        text = properties.get('text')
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Text content is required")

        shape = create_shape('text', properties)
        width, height = self.document.width, self.document.height
        x, y = shape.x, shape.y
        if x < 0 or x > width:
            x = max(0.0, min(x, width - 10))
        if y < shape.font_size or y > height:
            y = max(shape.font_size, min(y, height - 10))
        shape.move_to(x, y)

        index = self.document.append(shape)
        element = shape.to_dict()
        return {
            'message': 'Text added successfully',
            'element': element,
            'id': index,
            'position': {'x': shape.x, 'y': shape.y},
            'color': shape.fill_color,
            'preview': f'"{shape.text}" at ({shape.x:g}, {shape.y:g}) in {shape.fill_color}',
        }

    def add_image(self, **properties) -> Dict[str, Any]:
        properties.pop('type', None)
        if not any(properties.get(k) for k in ('imagePath', 'image_path', 'imageUrl', 'src')):
            raise ValidationError("Image file or URL is required")
        return self.add_drawing('image', **properties)

    # Elements

    @synchronized
    def get_elements(self) -> Dict[str, Any]:
        elements = [self._element(i) for i in range(len(self.document))]
        return {'elements': elements, 'count': len(elements)}

    @synchronized
    def get_element(self, element_id) -> Dict[str, Any]:
        return self._element(parse_index(element_id))

    @synchronized
    def update_element(self, element_id, updates: Optional[Dict[str, Any]] = None,
                       **fields) -> Dict[str, Any]:
        """Merge ``updates`` (or keyword fields) into an element."""
        index = parse_index(element_id)
        changes = dict(updates or {})
        changes.update(fields)
        self.document.replace(index, changes)
        return {'message': 'Element updated successfully', 'element': self._element(index)}

    @synchronized
    def delete_element(self, element_id) -> Dict[str, Any]:
        index = parse_index(element_id)
        shape = self.document.remove(index)
        return {
            'message': 'Element deleted successfully',
            'deletedElement': {'id': index, **shape.to_dict()},
        }

    @synchronized
    def duplicate_element(self, element_id) -> Dict[str, Any]:
        shape, index = self.document.duplicate(parse_index(element_id),
                                               self.settings.duplicate_offset)
        return {
            'message': 'Element duplicated successfully',
            'element': {'id': index, **shape.to_dict()},
        }

    @synchronized
    def move_element(self, element_id, x=None, y=None) -> Dict[str, Any]:
        index = parse_index(element_id)
        if x is None or y is None:
            raise ValidationError("Both x and y coordinates are required")
        shape = self.document.move(index, x, y)
        return {
            'message': 'Element moved successfully',
            'element': {'id': index, **shape.to_dict()},
            'newPosition': {'x': shape.x, 'y': shape.y},
        }

    @synchronized
    def reorder_element(self, element_id, direction=None) -> Dict[str, Any]:
        shape, new_index = self.document.reorder(parse_index(element_id), direction)
        return {
            'message': f"Element moved {direction} successfully",
            'newIndex': new_index,
            'element': shape.to_dict(),
        }

    @synchronized
    def elements_at(self, x, y) -> Dict[str, Any]:
        px, py = to_number(x), to_number(y)
        if px is None or py is None:
            raise ValidationError("Both x and y coordinates are required")
        matches = [index for index, _ in self.document.hit_test(px, py)]
        return {'matches': matches, 'topmost': matches[-1] if matches else None}

    # Introspection

    def get_drawing_types(self) -> Dict[str, Any]:
        types = get_supported_types()
        return {'supportedTypes': types, 'schemas': get_all_schemas(), 'count': len(types)}

    def get_drawing_schema(self, type: str) -> Dict[str, Any]:
        schema = get_schema(type)
        if schema is None:
            raise ValidationError(f"Schema not found for type: {type}")
        return {'type': type, 'schema': schema}

    # Text helpers

    @synchronized
    def get_text_examples(self) -> Dict[str, Any]:
        width, height = self.document.width, self.document.height
        positions = [
            {'name': 'Top Left', 'x': 50, 'y': 50, 'description': 'Header position'},
            {'name': 'Top Center', 'x': width / 2 - 50, 'y': 50, 'description': 'Title position'},
            {'name': 'Center', 'x': width / 2 - 50, 'y': height / 2, 'description': 'Main content'},
            {'name': 'Bottom Left', 'x': 50, 'y': height - 30, 'description': 'Footer left'},
            {'name': 'Bottom Right', 'x': width - 150, 'y': height - 30, 'description': 'Footer right'},
        ]
        return {
            'examples': generate_text_examples(width, height),
            'colorOptions': COLOR_OPTIONS,
            'positionSuggestions': positions,
            'canvasSize': {'width': width, 'height': height},
            'tips': TEXT_TIPS,
        }

    @synchronized
    def validate_text_position(self, x=0, y=0, text=None, fontSize=16,
                               fillColor='#000000', **extra) -> Dict[str, Any]:
        width, height = self.document.width, self.document.height
        element = {
            'type': 'text',
            'x': to_number(x) or 0.0,
            'y': to_number(y) or 0.0,
            'text': text or 'Sample Text',
            'fontSize': to_number(fontSize) or 16.0,
            'fillColor': fillColor or '#000000',
        }
        recommendations = get_text_position_recommendations(element, width, height)
        optimized = optimize_text_element(element, width, height)
        return {
            'original': element,
            'optimized': optimized,
            'recommendations': recommendations,
            'isValid': not recommendations,
            'preview': f'"{optimized["text"]}" at ({optimized["x"]:g}, {optimized["y"]:g}) '
                       f'in {optimized["fillColor"]}',
        }

    # Reporting

    @synchronized
    def get_stats(self) -> Dict[str, Any]:
        stats = self.document.get_stats()
        stats['estimatedPdfSize'] = estimate_pdf_size(self.document.to_dict())
        bounds = self.document.get_design_bounds()
        stats['designBounds'] = bounds.to_dict() if bounds else None
        return stats

    @synchronized
    def get_recommendations(self) -> List[str]:
        return get_optimization_recommendations(self.document.to_dict())

    # Output

    def export_pdf(self, stream: BinaryIO, optimize: Optional[bool] = None):
        """Render the current document as PDF into ``stream``."""
        with self._lock:
            snapshot = self.document.copy()
        if optimize is None:
            optimize = self.settings.optimize_pdf
        return export_pdf(snapshot, stream, optimize=optimize,
                          background=self.settings.background_color,
                          page_limits=(self.settings.min_page_size,
                                       self.settings.max_page_size))

    # Dispatch

    OPERATIONS = (
        'init_canvas', 'get_canvas', 'clear_canvas', 'add_drawing',
        'add_rectangle', 'add_circle', 'add_text', 'add_image',
        'get_elements', 'get_element', 'update_element', 'delete_element',
        'duplicate_element', 'move_element', 'reorder_element', 'elements_at',
        'get_drawing_types', 'get_drawing_schema', 'get_text_examples',
        'validate_text_position', 'get_stats', 'get_recommendations',
    )

    def dispatch(self, operation: str, payload: Optional[Dict[str, Any]] = None):
        """
        Run an operation by name with a property bag.

        ``export_pdf`` needs an output stream and is not dispatchable.
        """
        if operation not in self.OPERATIONS:
            raise ValidationError(f"Unknown operation: {operation}")
        kwargs = {PAYLOAD_ALIASES.get(k, k): v for k, v in (payload or {}).items()}
        if operation == 'update_element':
            element_id = kwargs.pop('element_id', None)
            updates = kwargs.pop('updates', None)
            return self.update_element(element_id, updates, **kwargs)
        method = getattr(self, operation)
        try:
            inspect.signature(method).bind(**kwargs)
        except TypeError as e:
            raise ValidationError(f"Invalid arguments for {operation}: {e}") from e
        return method(**kwargs)
