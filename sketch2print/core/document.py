"""
Sketch2Print Document Model

The Document is the root container for a scene: the canvas size and the
ordered list of shapes. List order is paint order; index 0 is painted
first and sits at the bottom of the z-order.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
import logging

from .errors import ElementIndexError, ValidationError
from .factory import shape_from_dict
from .fields import to_number
from .geometry import BoundingBox, Point
from .shapes import Shape

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 600.0
DUPLICATE_OFFSET = 20.0


class ReorderDirection(Enum):
    """Z-order moves."""
    FRONT = "front"        # to the top (end of the list)
    BACK = "back"          # to the bottom (index 0)
    FORWARD = "forward"    # one step up
    BACKWARD = "backward"  # one step down

    @classmethod
    def parse(cls, value) -> 'ReorderDirection':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid direction: {value!r}. Must be one of: "
                + ", ".join(d.value for d in cls)
            ) from None


def _positive(value, name: str) -> float:
    number = to_number(value)
    if number is None or number <= 0:
        raise ValidationError(f"Canvas {name} must be a positive number")
    return number


@dataclass
class Document:
    """
    The scene being assembled.

    Every operation taking an index rejects indices outside
    ``0 <= index < len(shapes)`` with ElementIndexError and leaves the
    document untouched.
    """
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    shapes: List[Shape] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise ElementIndexError(index, len(self.shapes))
        if index < 0 or index >= len(self.shapes):
            raise ElementIndexError(index, len(self.shapes))
        return index

    # Lifecycle

    def initialize(self, width, height, preserve_shapes: bool = False) -> Dict[str, Any]:
        """
        Reset the canvas size.

        With ``preserve_shapes`` and a non-empty scene only the dimensions
        change; otherwise the shape list is emptied.
        """
        width = _positive(width, 'width')
        height = _positive(height, 'height')
        self.width = width
        self.height = height
        if not (preserve_shapes and self.shapes):
            self.shapes = []
        logger.info(f"Canvas initialized: {width:g}x{height:g} ({len(self.shapes)} shapes)")
        return self.to_dict()

    def clear(self) -> None:
        """Remove all shapes."""
        self.shapes = []

    # CRUD

    def append(self, shape: Shape) -> int:
        """Add a shape on top of the z-order and return its index."""
        if not isinstance(shape, Shape):
            raise ValidationError("Only shapes can be added to a document")
        self.shapes.append(shape)
        return len(self.shapes) - 1

    def get(self, index: int) -> Shape:
        return self.shapes[self._check_index(index)]

    def replace(self, index: int, updated_fields: Dict[str, Any]) -> Shape:
        """
        Merge ``updated_fields`` into the shape at ``index``.

        The merged record is rebuilt through the factory, so values are
        normalized the same way as on creation. A type change is allowed.
        """
        index = self._check_index(index)
        if updated_fields is not None and not isinstance(updated_fields, Mapping):
            raise ValidationError("Updated fields must be a mapping")
        record = self.shapes[index].to_dict()
        record.update(updated_fields or {})
        shape = shape_from_dict(record)
        self.shapes[index] = shape
        return shape

    def remove(self, index: int) -> Shape:
        """Remove and return the shape at ``index``."""
        return self.shapes.pop(self._check_index(index))

    # Transforms

    def reorder(self, index: int, direction) -> Tuple[Shape, int]:
        """Change a shape's z-order. Returns the shape and its new index."""
        index = self._check_index(index)
        direction = ReorderDirection.parse(direction)
        last = len(self.shapes) - 1

        if direction is ReorderDirection.FRONT:
            new_index = last
        elif direction is ReorderDirection.BACK:
            new_index = 0
        elif direction is ReorderDirection.FORWARD:
            new_index = min(index + 1, last)
        else:
            new_index = max(index - 1, 0)

        shape = self.shapes.pop(index)
        self.shapes.insert(new_index, shape)
        return shape, new_index

    def clamp_to_canvas(self, x: float, y: float) -> Point:
        return Point(min(max(x, 0.0), self.width), min(max(y, 0.0), self.height))

    def move(self, index: int, x, y) -> Shape:
        """
        Move a shape's anchor to (x, y), clamped into the canvas.

        Secondary geometry (line ends, vertices, path commands) follows
        the anchor by the same delta.
        """
        index = self._check_index(index)
        nx, ny = to_number(x), to_number(y)
        if nx is None or ny is None:
            raise ValidationError("Position x and y must be numbers")
        target = self.clamp_to_canvas(nx, ny)
        shape = self.shapes[index]
        shape.move_to(target.x, target.y)
        return shape

    def duplicate(self, index: int, offset: float = DUPLICATE_OFFSET) -> Tuple[Shape, int]:
        """Append a copy shifted by (+offset, +offset). Returns copy and index."""
        original = self.get(index)
        copy = original.clone()
        copy.translate(offset, offset)
        self.shapes.append(copy)
        return copy, len(self.shapes) - 1

    # Queries

    def hit_test(self, x: float, y: float) -> List[Tuple[int, Shape]]:
        """All shapes containing (x, y), bottom to top."""
        point = Point(x, y)
        return [(i, shape) for i, shape in enumerate(self.shapes)
                if shape.contains_point(point)]

    def topmost_at(self, x: float, y: float) -> Optional[Tuple[int, Shape]]:
        hits = self.hit_test(x, y)
        return hits[-1] if hits else None

    def get_design_bounds(self) -> Optional[BoundingBox]:
        """
        Calculate the bounding box of all shapes in the document.

        Returns:
            BoundingBox of all shapes, or None if the document is empty
        """
        if not self.shapes:
            return None
        bounds = self.shapes[0].get_bounding_box()
        for shape in self.shapes[1:]:
            bounds = bounds.union(shape.get_bounding_box())
        return bounds

    def get_stats(self) -> Dict[str, Any]:
        counts = Counter(shape.type_name for shape in self.shapes)
        return {
            'canvasSize': {'width': self.width, 'height': self.height},
            'elementCount': len(self.shapes),
            'elementTypes': dict(counts),
        }

    # Snapshots

    def to_dict(self) -> Dict[str, Any]:
        return {
            'width': self.width,
            'height': self.height,
            'elements': [shape.to_dict() for shape in self.shapes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], strict: bool = False) -> 'Document':
        """
        Build a document from a snapshot.

        Records that cannot be turned into shapes are skipped with a
        warning, unless ``strict`` is set.
        """
        document = cls(
            width=_positive(data.get('width', DEFAULT_WIDTH), 'width'),
            height=_positive(data.get('height', DEFAULT_HEIGHT), 'height'),
        )
        for i, record in enumerate(data.get('elements') or []):
            try:
                document.shapes.append(shape_from_dict(record))
            except ValidationError as e:
                if strict:
                    raise
                logger.warning(f"Skipping element {i}: {e}")
        return document

    def copy(self) -> 'Document':
        """Deep copy for read-only work such as rendering."""
        return Document(self.width, self.height,
                        [shape.clone() for shape in self.shapes])
