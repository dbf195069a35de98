"""
Sketch2Print Core Shapes Module

Defines the Shape base class and every drawable shape variant.

Shapes are built from untyped property bags (see ``fields``), know their
own geometry (bounds and hit-testing) and draw themselves onto any
``DrawingContext`` implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path as FilePath
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
from urllib.parse import urlparse
import logging
import math

from .errors import RenderElementError
from .fields import (
    Field, NumberField, ColorField, StringField, BooleanField,
    NumberListField, PassThroughField, build_schema, to_number
)
from .geometry import (
    Point, BoundingBox, bounds_of_points, point_in_polygon,
    distance_to_segment, star_vertices, arc_points,
    flatten_cubic_bezier, flatten_quadratic_bezier
)

if TYPE_CHECKING:
    from ..graphics.context import DrawingContext

logger = logging.getLogger(__name__)

FULL_CIRCLE = 2 * math.pi

# Extra reach around a line's stroke that still counts as a hit
LINE_HIT_TOLERANCE = 2.0

# Heuristic average glyph width as a fraction of the font size
TEXT_WIDTH_FACTOR = 0.6


def estimate_text_width(text: str, font_size: float) -> float:
    """Estimate rendered text width without font metrics."""
    return len(text) * font_size * TEXT_WIDTH_FACTOR


class Shape(ABC):
    """
    Abstract base class for all shapes.

    Every shape must implement:
    - draw_shape(): Emit drawing operations onto a context
    - _bounds(): Axis-aligned bounds in the shape's own space
    - _contains_local(): Point test in the shape's unrotated frame

    Common properties (anchor, colors, stroke, opacity, rotation) are
    handled here; ``draw`` wraps rotation and opacity around the variant's
    drawing so nothing leaks into the next shape.
    """

    type_name: ClassVar[str] = ''

    COMMON_FIELDS: ClassVar[Tuple[Field, ...]] = (
        NumberField('x', default=0.0),
        NumberField('y', default=0.0),
        ColorField('fillColor', 'fill_color', '#000000'),
        ColorField('strokeColor', 'stroke_color', '#000000'),
        NumberField('strokeWidth', 'stroke_width', 1.0, minimum=0.0),
        NumberField('opacity', default=1.0, minimum=0.0, maximum=1.0),
        NumberField('rotation', default=0.0,
                    description='Degrees, clockwise about the anchor'),
    )

    # Variant specific fields
    FIELDS: ClassVar[Tuple[Field, ...]] = ()

    # Common fields a variant does not carry
    EXCLUDED_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, properties: Optional[Dict[str, Any]] = None, /, **kwargs: Any):
        properties = {**(properties or {}), **kwargs}
        for f in self.fields():
            setattr(self, f.attr, f.normalize(properties, self))
        self._post_init(properties)

    @classmethod
    def fields(cls) -> Tuple[Field, ...]:
        common = tuple(f for f in cls.COMMON_FIELDS
                       if f.key not in cls.EXCLUDED_FIELDS)
        return common + cls.FIELDS

    @classmethod
    def get_schema(cls) -> Dict[str, Any]:
        return build_schema(cls.type_name, cls.fields())

    def _post_init(self, properties: Dict[str, Any]) -> None:
        """Hook for cross-field normalization and structured fields."""
        pass

    @property
    def anchor(self) -> Point:
        return Point(self.x, self.y)

    # Drawing

    def draw(self, context: 'DrawingContext') -> None:
        """Draw the shape, bracketing rotation/opacity in save/restore."""
        bracketed = self.rotation != 0 or self.opacity != 1
        if bracketed:
            context.save()
            if self.rotation != 0:
                context.translate(self.x, self.y)
                context.rotate(math.radians(self.rotation))
                context.translate(-self.x, -self.y)
            if self.opacity != 1:
                context.set_global_alpha(self.opacity)
        try:
            self.draw_shape(context)
        finally:
            if bracketed:
                context.restore()

    @abstractmethod
    def draw_shape(self, context: 'DrawingContext') -> None:
        """Emit the variant's drawing operations (no transform handling)."""
        pass

    def _paint(self, context: 'DrawingContext', fill: bool = True) -> None:
        """Fill and/or stroke the current path with the shape's style."""
        if fill:
            context.set_fill_color(self.fill_color)
            context.fill()
        if self.stroke_width > 0:
            self._apply_stroke_style(context)
            context.stroke()

    def _apply_stroke_style(self, context: 'DrawingContext') -> None:
        context.set_stroke_color(self.stroke_color)
        context.set_line_width(self.stroke_width)

    # Geometry

    def get_bounding_box(self) -> BoundingBox:
        """Return the axis-aligned bounding box (never zero-area)."""
        return self._bounds().ensure_min_size()

    @abstractmethod
    def _bounds(self) -> BoundingBox:
        pass

    def contains_point(self, point: Point) -> bool:
        """Check if point is inside/on the shape, honoring rotation."""
        if self.rotation != 0:
            point = point.rotate(-math.radians(self.rotation), self.anchor)
        return self._contains_local(point)

    def _contains_local(self, point: Point) -> bool:
        return self.get_bounding_box().contains(point)

    # Transforms

    def translate(self, dx: float, dy: float) -> None:
        """Shift the anchor and all dependent geometry."""
        self.x += dx
        self.y += dy
        self._translate_geometry(dx, dy)

    def move_to(self, x: float, y: float) -> None:
        """Place the anchor at (x, y), keeping the shape's structure."""
        self.translate(x - self.x, y - self.y)
        # Pin the anchor exactly; float deltas may round
        self.x = x
        self.y = y

    def _translate_geometry(self, dx: float, dy: float) -> None:
        """Shift secondary points; anchor-only shapes have none."""
        pass

    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        """Flatten every field into a single record tagged with its type."""
        record = {'type': self.type_name}
        for f in self.fields():
            record[f.key] = self._field_value(f)
        return record

    def _field_value(self, f: Field) -> Any:
        value = getattr(self, f.attr)
        if isinstance(value, list):
            return list(value)
        return value

    def clone(self) -> 'Shape':
        """Create a deep copy of this shape."""
        return self.__class__(self.to_dict())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(x={self.x!r}, y={self.y!r})"


class Rectangle(Shape):
    """A rectangle anchored at its top-left corner."""

    type_name = 'rectangle'
    FIELDS = (
        NumberField('width', default=100.0, minimum=1.0),
        NumberField('height', default=100.0, minimum=1.0),
        NumberField('cornerRadius', 'corner_radius', 0.0, minimum=0.0),
    )

    def _post_init(self, properties):
        self.corner_radius = min(self.corner_radius,
                                 self.width / 2, self.height / 2)

    def draw_shape(self, context):
        if self.corner_radius > 0:
            self._draw_rounded(context)
            return
        context.set_fill_color(self.fill_color)
        context.fill_rect(self.x, self.y, self.width, self.height)
        if self.stroke_width > 0:
            self._apply_stroke_style(context)
            context.stroke_rect(self.x, self.y, self.width, self.height)

    def _draw_rounded(self, context):
        x, y, w, h = self.x, self.y, self.width, self.height
        r = self.corner_radius

        context.begin_path()
        context.move_to(x + r, y)
        context.line_to(x + w - r, y)
        context.quadratic_curve_to(x + w, y, x + w, y + r)
        context.line_to(x + w, y + h - r)
        context.quadratic_curve_to(x + w, y + h, x + w - r, y + h)
        context.line_to(x + r, y + h)
        context.quadratic_curve_to(x, y + h, x, y + h - r)
        context.line_to(x, y + r)
        context.quadratic_curve_to(x, y, x + r, y)
        context.close_path()
        self._paint(context)

    def _bounds(self):
        return BoundingBox(self.x, self.y,
                           self.x + self.width, self.y + self.height)


class Circle(Shape):
    """A circle; the anchor is its center."""

    type_name = 'circle'
    FIELDS = (
        NumberField('radius', default=50.0, minimum=1.0),
    )

    def draw_shape(self, context):
        context.begin_path()
        context.arc(self.x, self.y, self.radius, 0, FULL_CIRCLE)
        self._paint(context)

    def _bounds(self):
        r = self.radius
        return BoundingBox(self.x - r, self.y - r, self.x + r, self.y + r)

    def _contains_local(self, point):
        return point.distance_to(self.anchor) <= self.radius


class Ellipse(Shape):
    """An axis-aligned ellipse; the anchor is its center."""

    type_name = 'ellipse'
    FIELDS = (
        NumberField('radiusX', 'radius_x', 50.0, minimum=1.0),
        NumberField('radiusY', 'radius_y', 30.0, minimum=1.0),
    )

    def draw_shape(self, context):
        context.begin_path()
        context.ellipse(self.x, self.y, self.radius_x, self.radius_y,
                        0, 0, FULL_CIRCLE)
        self._paint(context)

    def _bounds(self):
        return BoundingBox(self.x - self.radius_x, self.y - self.radius_y,
                           self.x + self.radius_x, self.y + self.radius_y)

    def _contains_local(self, point):
        dx = (point.x - self.x) / self.radius_x
        dy = (point.y - self.y) / self.radius_y
        return dx * dx + dy * dy <= 1


class Line(Shape):
    """A straight line from the anchor to (x2, y2). Stroke only."""

    type_name = 'line'
    FIELDS = (
        NumberField('x2', default=lambda s: s.x + 100),
        NumberField('y2', default=lambda s: s.y),
        StringField('lineCap', 'line_cap', 'butt',
                    choices=('butt', 'round', 'square')),
        NumberListField('lineDash', 'line_dash', ()),
    )

    @property
    def end(self) -> Point:
        return Point(self.x2, self.y2)

    def draw_shape(self, context):
        if self.stroke_width <= 0:
            return
        context.begin_path()
        context.move_to(self.x, self.y)
        context.line_to(self.x2, self.y2)

        self._apply_stroke_style(context)
        context.set_line_cap(self.line_cap)
        if self.line_dash:
            context.set_line_dash(self.line_dash)
        context.stroke()

        # Leave the context as we found it
        if self.line_dash:
            context.set_line_dash([])
        if self.line_cap != 'butt':
            context.set_line_cap('butt')

    def _bounds(self):
        box = bounds_of_points([self.anchor, self.end])
        return box.expanded(self.stroke_width / 2)

    def _contains_local(self, point):
        distance = distance_to_segment(point, self.anchor, self.end)
        return distance <= self.stroke_width / 2 + LINE_HIT_TOLERANCE

    def _translate_geometry(self, dx, dy):
        self.x2 += dx
        self.y2 += dy


class Arrow(Shape):
    """
    A filled arrow from the anchor to the tip at (x2, y2).

    Drawn in a frame rotated onto the segment: a shaft rectangle of
    ``bodyWidth`` followed by a triangular head of ``headLength`` x
    ``headWidth`` ending at the tip. Hit-testing uses the bounding box.
    """

    type_name = 'arrow'
    FIELDS = (
        NumberField('x2', default=lambda s: s.x + 100),
        NumberField('y2', default=lambda s: s.y),
        NumberField('headLength', 'head_length', 20.0, minimum=5.0),
        NumberField('headWidth', 'head_width', 10.0, minimum=2.0),
        NumberField('bodyWidth', 'body_width', 4.0, minimum=1.0),
    )

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x, self.y2 - self.y)

    @property
    def angle(self) -> float:
        return math.atan2(self.y2 - self.y, self.x2 - self.x)

    def draw_shape(self, context):
        length = self.length
        shaft = max(length - self.head_length, 0.0)
        half_body = self.body_width / 2
        half_head = self.head_width / 2

        context.save()
        try:
            context.translate(self.x, self.y)
            context.rotate(self.angle)

            if shaft > 0:
                context.begin_path()
                context.move_to(0, -half_body)
                context.line_to(shaft, -half_body)
                context.line_to(shaft, half_body)
                context.line_to(0, half_body)
                context.close_path()
                self._paint(context)

            context.begin_path()
            context.move_to(shaft, -half_head)
            context.line_to(length, 0)
            context.line_to(shaft, half_head)
            context.close_path()
            self._paint(context)
        finally:
            context.restore()

    def _bounds(self):
        padding = max(self.head_width, self.body_width) / 2
        return bounds_of_points([self.anchor, Point(self.x2, self.y2)]).expanded(padding)

    def _translate_geometry(self, dx, dy):
        self.x2 += dx
        self.y2 += dy


class Triangle(Shape):
    """A triangle with vertices at the anchor, (x2, y2) and (x3, y3)."""

    type_name = 'triangle'
    FIELDS = (
        NumberField('x2', default=lambda s: s.x + 50),
        NumberField('y2', default=lambda s: s.y + 100),
        NumberField('x3', default=lambda s: s.x - 50),
        NumberField('y3', default=lambda s: s.y + 100),
    )

    @property
    def vertices(self) -> List[Point]:
        return [self.anchor, Point(self.x2, self.y2), Point(self.x3, self.y3)]

    def draw_shape(self, context):
        context.begin_path()
        context.move_to(self.x, self.y)
        context.line_to(self.x2, self.y2)
        context.line_to(self.x3, self.y3)
        context.close_path()
        self._paint(context)

    def _bounds(self):
        return bounds_of_points(self.vertices)

    def _contains_local(self, point):
        x1, y1, x2, y2, x3, y3 = self.x, self.y, self.x2, self.y2, self.x3, self.y3
        denom = (y2 - y3) * (x1 - x3) + (x3 - x2) * (y1 - y3)
        if abs(denom) < 1e-9:
            # Collinear vertices: treat as a polyline
            reach = self.stroke_width / 2 + LINE_HIT_TOLERANCE
            a, b, c = self.vertices
            return min(distance_to_segment(point, a, b),
                       distance_to_segment(point, b, c)) <= reach

        a = ((y2 - y3) * (point.x - x3) + (x3 - x2) * (point.y - y3)) / denom
        b = ((y3 - y1) * (point.x - x3) + (x1 - x3) * (point.y - y3)) / denom
        c = 1 - a - b
        eps = -1e-9
        return a >= eps and b >= eps and c >= eps

    def _translate_geometry(self, dx, dy):
        self.x2 += dx
        self.y2 += dy
        self.x3 += dx
        self.y3 += dy


def _parse_point(item) -> Optional[Point]:
    if isinstance(item, Point):
        return Point(item.x, item.y)
    if isinstance(item, dict):
        return Point(to_number(item.get('x')) or 0.0,
                     to_number(item.get('y')) or 0.0)
    if isinstance(item, (list, tuple)) and len(item) >= 2:
        return Point(to_number(item[0]) or 0.0, to_number(item[1]) or 0.0)
    return None


def _parse_points(items) -> List[Point]:
    points = []
    for item in items or ():
        point = _parse_point(item)
        if point is not None:
            points.append(point)
    return points


class Polygon(Shape):
    """
    A closed polygon through an ordered list of vertices.

    The anchor is only a reference for moves; it is not a vertex.
    """

    type_name = 'polygon'
    FIELDS = (
        PassThroughField(
            'points', 'points',
            default=lambda s: [{'x': s.x, 'y': s.y},
                               {'x': s.x + 50, 'y': s.y + 50},
                               {'x': s.x - 50, 'y': s.y + 50}],
            item_schema={
                'type': 'object',
                'properties': {'x': {'type': 'number'}, 'y': {'type': 'number'}},
                'required': ['x', 'y'],
            },
            min_items=3,
        ),
    )

    def _post_init(self, properties):
        points = _parse_points(self.points)
        if len(points) < 3:
            logger.debug(f"Polygon needs 3 vertices, got {len(points)}; using default")
            points = _parse_points(self.FIELDS[0].default_for(self))
        self.points = points

    def draw_shape(self, context):
        if len(self.points) < 3:
            return
        context.begin_path()
        first, *rest = self.points
        context.move_to(first.x, first.y)
        for p in rest:
            context.line_to(p.x, p.y)
        context.close_path()
        self._paint(context)

    def _bounds(self):
        return bounds_of_points(self.points)

    def _contains_local(self, point):
        return point_in_polygon(point, self.points)

    def _translate_geometry(self, dx, dy):
        self.points = [p.translated(dx, dy) for p in self.points]

    def _field_value(self, f):
        if f.attr == 'points':
            return [{'x': p.x, 'y': p.y} for p in self.points]
        return super()._field_value(f)


# Path segment types

@dataclass
class PathSegment(ABC):
    """One drawing command of a Path."""

    command: ClassVar[str] = ''

    @abstractmethod
    def apply(self, context: 'DrawingContext') -> None:
        pass

    @abstractmethod
    def translated(self, dx: float, dy: float) -> 'PathSegment':
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def outline(self, current: Optional[Point]) -> List[Point]:
        """Points traced by this segment, starting after ``current``."""
        pass

    @property
    @abstractmethod
    def end_point(self) -> Point:
        pass


@dataclass
class MoveToSegment(PathSegment):
    point: Point
    command: ClassVar[str] = 'moveTo'

    def apply(self, context):
        context.move_to(self.point.x, self.point.y)

    def translated(self, dx, dy):
        return MoveToSegment(self.point.translated(dx, dy))

    def to_dict(self):
        return {'type': self.command, 'x': self.point.x, 'y': self.point.y}

    def outline(self, current):
        return [self.point]

    @property
    def end_point(self):
        return self.point


@dataclass
class LineToSegment(PathSegment):
    point: Point
    command: ClassVar[str] = 'lineTo'

    def apply(self, context):
        context.line_to(self.point.x, self.point.y)

    def translated(self, dx, dy):
        return LineToSegment(self.point.translated(dx, dy))

    def to_dict(self):
        return {'type': self.command, 'x': self.point.x, 'y': self.point.y}

    def outline(self, current):
        return [self.point]

    @property
    def end_point(self):
        return self.point


@dataclass
class QuadraticBezierSegment(PathSegment):
    control_point: Point
    point: Point
    command: ClassVar[str] = 'quadraticCurveTo'

    def apply(self, context):
        context.quadratic_curve_to(self.control_point.x, self.control_point.y,
                                   self.point.x, self.point.y)

    def translated(self, dx, dy):
        return QuadraticBezierSegment(self.control_point.translated(dx, dy),
                                      self.point.translated(dx, dy))

    def to_dict(self):
        return {'type': self.command,
                'cpx': self.control_point.x, 'cpy': self.control_point.y,
                'x': self.point.x, 'y': self.point.y}

    def outline(self, current):
        start = current or self.control_point
        return flatten_quadratic_bezier(start, self.control_point, self.point,
                                        tolerance=0.1)[1:]

    @property
    def end_point(self):
        return self.point


@dataclass
class CubicBezierSegment(PathSegment):
    cp1: Point
    cp2: Point
    point: Point
    command: ClassVar[str] = 'bezierCurveTo'

    def apply(self, context):
        context.bezier_curve_to(self.cp1.x, self.cp1.y, self.cp2.x, self.cp2.y,
                                self.point.x, self.point.y)

    def translated(self, dx, dy):
        return CubicBezierSegment(self.cp1.translated(dx, dy),
                                  self.cp2.translated(dx, dy),
                                  self.point.translated(dx, dy))

    def to_dict(self):
        return {'type': self.command,
                'cp1x': self.cp1.x, 'cp1y': self.cp1.y,
                'cp2x': self.cp2.x, 'cp2y': self.cp2.y,
                'x': self.point.x, 'y': self.point.y}

    def outline(self, current):
        start = current or self.cp1
        return flatten_cubic_bezier(start, self.cp1, self.cp2, self.point,
                                    tolerance=0.1)[1:]

    @property
    def end_point(self):
        return self.point


@dataclass
class ArcSegment(PathSegment):
    center: Point
    radius: float
    start_angle: float
    end_angle: float
    counterclockwise: bool = False
    command: ClassVar[str] = 'arc'

    def apply(self, context):
        context.arc(self.center.x, self.center.y, self.radius,
                    self.start_angle, self.end_angle, self.counterclockwise)

    def translated(self, dx, dy):
        return ArcSegment(self.center.translated(dx, dy), self.radius,
                          self.start_angle, self.end_angle, self.counterclockwise)

    def to_dict(self):
        return {'type': self.command, 'x': self.center.x, 'y': self.center.y,
                'radius': self.radius, 'startAngle': self.start_angle,
                'endAngle': self.end_angle,
                'counterclockwise': self.counterclockwise}

    def outline(self, current):
        return arc_points(self.center, self.radius, self.start_angle,
                          self.end_angle, self.counterclockwise)

    @property
    def end_point(self):
        return Point(self.center.x + self.radius * math.cos(self.end_angle),
                     self.center.y + self.radius * math.sin(self.end_angle))


def _num(command: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = to_number(command.get(key))
    return default if value is None else value


def parse_path_segment(command) -> Optional[PathSegment]:
    """Build a segment from its wire form; unknown commands give None."""
    if isinstance(command, PathSegment):
        return command
    if not isinstance(command, dict):
        return None
    kind = command.get('type')
    point = Point(_num(command, 'x'), _num(command, 'y'))
    if kind == 'moveTo':
        return MoveToSegment(point)
    if kind == 'lineTo':
        return LineToSegment(point)
    if kind == 'quadraticCurveTo':
        return QuadraticBezierSegment(
            Point(_num(command, 'cpx'), _num(command, 'cpy')), point)
    if kind == 'bezierCurveTo':
        return CubicBezierSegment(
            Point(_num(command, 'cp1x'), _num(command, 'cp1y')),
            Point(_num(command, 'cp2x'), _num(command, 'cp2y')),
            point)
    if kind == 'arc':
        radius = _num(command, 'radius', 1.0)
        ccw = command.get('counterclockwise', command.get('ccw', False))
        return ArcSegment(
            point,
            radius if radius > 0 else 1.0,
            _num(command, 'startAngle'),
            _num(command, 'endAngle', FULL_CIRCLE),
            bool(ccw) if not isinstance(ccw, str) else ccw.lower() == 'true')
    logger.debug(f"Dropping unknown path command {kind!r}")
    return None


def smooth_path_commands(points: Sequence, smoothing: float = 0.3) -> List[Dict[str, Any]]:
    """
    Build path commands through raw points.

    Interior points are reached with bezier curves whose control points
    sit ``smoothing`` of the way along the neighboring segments; the last
    point (and every point when smoothing is 0) uses a straight line.
    """
    pts = _parse_points(points)
    if len(pts) < 2:
        return []

    commands = [{'type': 'moveTo', 'x': pts[0].x, 'y': pts[0].y}]
    for i in range(1, len(pts)):
        curr = pts[i]
        if smoothing > 0 and i < len(pts) - 1:
            prev = pts[i - 1]
            nxt = pts[i + 1]
            commands.append({
                'type': 'bezierCurveTo',
                'cp1x': prev.x + (curr.x - prev.x) * smoothing,
                'cp1y': prev.y + (curr.y - prev.y) * smoothing,
                'cp2x': curr.x - (nxt.x - curr.x) * smoothing,
                'cp2y': curr.y - (nxt.y - curr.y) * smoothing,
                'x': curr.x,
                'y': curr.y,
            })
        else:
            commands.append({'type': 'lineTo', 'x': curr.x, 'y': curr.y})
    return commands


class Path(Shape):
    """
    A free-form path of move/line/curve/arc commands.

    Closed paths are filled; every path is stroked when it has a stroke
    width. The anchor is only a reference for moves. Hit-testing uses
    the bounding box of the flattened outline.
    """

    type_name = 'path'
    FIELDS = (
        PassThroughField(
            'pathData', 'segments', default=(),
            item_schema={
                'type': 'object',
                'properties': {
                    'type': {'type': 'string',
                             'enum': ['moveTo', 'lineTo', 'bezierCurveTo',
                                      'quadraticCurveTo', 'arc']},
                    'x': {'type': 'number'},
                    'y': {'type': 'number'},
                },
                'required': ['type'],
            },
        ),
        BooleanField('closed', default=False),
        NumberField('smoothing', default=0.0, minimum=0.0, maximum=1.0,
                    description='Only used when building from raw points'),
    )

    def _post_init(self, properties):
        raw = self.segments
        if not raw and properties.get('points'):
            raw = smooth_path_commands(properties['points'], self.smoothing)
        self.segments: List[PathSegment] = [
            seg for seg in (parse_path_segment(c) for c in raw or ()) if seg is not None
        ]

    def draw_shape(self, context):
        if not self.segments:
            return
        context.begin_path()
        for seg in self.segments:
            seg.apply(context)
        if self.closed:
            context.close_path()
        self._paint(context, fill=self.closed)

    def outline_points(self) -> List[Point]:
        """Flatten the path into the points it passes through."""
        points: List[Point] = []
        current: Optional[Point] = None
        for seg in self.segments:
            points.extend(seg.outline(current))
            current = seg.end_point
        return points

    def _bounds(self):
        points = self.outline_points()
        if not points:
            return BoundingBox(self.x, self.y, self.x, self.y)
        return bounds_of_points(points).expanded(self.stroke_width / 2)

    def _translate_geometry(self, dx, dy):
        self.segments = [seg.translated(dx, dy) for seg in self.segments]

    def _field_value(self, f):
        if f.attr == 'segments':
            return [seg.to_dict() for seg in self.segments]
        return super()._field_value(f)


class Star(Shape):
    """A star polygon centered on the anchor."""

    type_name = 'star'
    FIELDS = (
        NumberField('outerRadius', 'outer_radius', 50.0, minimum=5.0),
        NumberField('innerRadius', 'inner_radius', 25.0, minimum=1.0),
        NumberField('points', 'point_count', 5, minimum=3, maximum=20, integer=True),
    )

    def vertices(self) -> List[Point]:
        return star_vertices(self.anchor, self.outer_radius,
                             self.inner_radius, self.point_count)

    def draw_shape(self, context):
        first, *rest = self.vertices()
        context.begin_path()
        context.move_to(first.x, first.y)
        for p in rest:
            context.line_to(p.x, p.y)
        context.close_path()
        self._paint(context)

    def _bounds(self):
        r = self.outer_radius
        return BoundingBox(self.x - r, self.y - r, self.x + r, self.y + r)

    def _contains_local(self, point):
        return point.distance_to(self.anchor) <= self.outer_radius


class Text(Shape):
    """
    A single line of text. The anchor is the left end of the baseline.

    Text is filled only. Its extent is estimated from the character
    count, so bounds and hit-testing are approximate.
    """

    type_name = 'text'
    EXCLUDED_FIELDS = ('strokeColor', 'strokeWidth')
    FIELDS = (
        StringField('text', required=True),
        NumberField('fontSize', 'font_size', 16.0, minimum=8.0, maximum=100.0),
        StringField('fontFamily', 'font_family', 'Helvetica'),
    )

    stroke_color = None
    stroke_width = 0.0

    @property
    def estimated_width(self) -> float:
        return estimate_text_width(self.text, self.font_size)

    def draw_shape(self, context):
        context.set_fill_color(self.fill_color)
        context.fill_text(self.text, self.x, self.y,
                          self.font_family, self.font_size)

    def _bounds(self):
        return BoundingBox(self.x, self.y - self.font_size,
                           self.x + self.estimated_width, self.y)


class Image(Shape):
    """
    A raster image placed in a box anchored at its top-left corner.

    ``imagePath`` is a local file path or a URL. Remote and unreadable
    images are drawn as a labelled placeholder box.
    """

    type_name = 'image'
    FIELDS = (
        NumberField('width', default=100.0, minimum=1.0),
        NumberField('height', default=100.0, minimum=1.0),
        StringField('imagePath', 'image_path', required=True,
                    aliases=('imageUrl', 'src'),
                    description='File system path or URL'),
    )

    PLACEHOLDER_FILL = '#dcdcdc'
    PLACEHOLDER_STROKE = '#969696'
    PLACEHOLDER_TEXT = '#646464'
    PLACEHOLDER_LABEL = 'IMAGE'
    PLACEHOLDER_FONT_SIZE = 12.0

    @property
    def is_remote(self) -> bool:
        return urlparse(self.image_path).scheme in ('http', 'https', 'ftp', 'data')

    def resolve_source(self) -> Optional[str]:
        """Return a readable local file path, or None."""
        if self.is_remote:
            return None
        path = FilePath(self.image_path).expanduser()
        if not path.is_file():
            return None
        return str(path)

    def draw_shape(self, context):
        source = self.resolve_source()
        if source is None:
            logger.warning(f"Image not available, drawing placeholder: {self.image_path}")
            self.draw_placeholder(context)
            return
        try:
            context.draw_image(source, self.x, self.y, self.width, self.height)
        except RenderElementError as e:
            logger.warning(f"Image {self.image_path} could not be drawn ({e}), drawing placeholder")
            self.draw_placeholder(context)

    def draw_placeholder(self, context):
        context.set_fill_color(self.PLACEHOLDER_FILL)
        context.fill_rect(self.x, self.y, self.width, self.height)
        context.set_stroke_color(self.PLACEHOLDER_STROKE)
        context.set_line_width(1)
        context.stroke_rect(self.x, self.y, self.width, self.height)

        size = self.PLACEHOLDER_FONT_SIZE
        label_width = estimate_text_width(self.PLACEHOLDER_LABEL, size)
        context.set_fill_color(self.PLACEHOLDER_TEXT)
        context.fill_text(self.PLACEHOLDER_LABEL,
                          self.x + (self.width - label_width) / 2,
                          self.y + self.height / 2 + size * 0.35,
                          'Helvetica', size)

    def _bounds(self):
        return BoundingBox(self.x, self.y,
                           self.x + self.width, self.y + self.height)


SHAPE_CLASSES = (
    Rectangle, Circle, Line, Triangle, Polygon, Path,
    Ellipse, Arrow, Star, Text, Image,
)
