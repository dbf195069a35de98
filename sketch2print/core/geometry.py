"""
Sketch2Print Geometry Module

Point and BoundingBox primitives plus the numeric helpers used by the
shape variants for bounds and hit-testing.
"""

from dataclasses import dataclass
from typing import List, Sequence
import math

import numpy as np

# Smallest side length a bounding box is allowed to have
MIN_EXTENT = 1.0


@dataclass
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def rotate(self, angle: float, center: 'Point' = None) -> 'Point':
        """Rotate point around center by angle (radians)."""
        if center is None:
            center = Point(0, 0)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        dx = self.x - center.x
        dy = self.y - center.y
        return Point(
            center.x + dx * cos_a - dy * sin_a,
            center.y + dx * sin_a + dy * cos_a
        )

    def translated(self, dx: float, dy: float) -> 'Point':
        return Point(self.x + dx, self.y + dy)


@dataclass
class BoundingBox:
    """Axis-aligned bounding box (y grows downwards)."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if two bounding boxes overlap."""
        return not (self.max_x < other.min_x or
                   self.min_x > other.max_x or
                   self.max_y < other.min_y or
                   self.min_y > other.max_y)

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y)
        )

    def expanded(self, amount: float) -> 'BoundingBox':
        return BoundingBox(
            self.min_x - amount, self.min_y - amount,
            self.max_x + amount, self.max_y + amount
        )

    def ensure_min_size(self, extent: float = MIN_EXTENT) -> 'BoundingBox':
        """Grow degenerate sides symmetrically so the box has non-zero area."""
        min_x, max_x = self.min_x, self.max_x
        min_y, max_y = self.min_y, self.max_y
        if max_x - min_x < extent:
            pad = (extent - (max_x - min_x)) / 2
            min_x, max_x = min_x - pad, max_x + pad
        if max_y - min_y < extent:
            pad = (extent - (max_y - min_y)) / 2
            min_y, max_y = min_y - pad, max_y + pad
        return BoundingBox(min_x, min_y, max_x, max_y)

    def to_dict(self) -> dict:
        return {
            'left': self.min_x,
            'top': self.min_y,
            'right': self.max_x,
            'bottom': self.max_y,
            'width': self.width,
            'height': self.height,
        }


def _as_array(points: Sequence[Point]) -> np.ndarray:
    return np.array([(p.x, p.y) for p in points], dtype=float).reshape(-1, 2)


def bounds_of_points(points: Sequence[Point]) -> BoundingBox:
    """Bounding box of a non-empty point sequence."""
    coords = _as_array(points)
    mins = coords.min(axis=0)
    maxs = coords.max(axis=0)
    return BoundingBox(float(mins[0]), float(mins[1]),
                       float(maxs[0]), float(maxs[1]))


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Check if a point is inside a polygon using ray casting.
    """
    if len(polygon) < 3:
        return False
    coords = _as_array(polygon)
    xi, yi = coords[:, 0], coords[:, 1]
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    crosses = (yi > point.y) != (yj > point.y)
    with np.errstate(divide='ignore', invalid='ignore'):
        x_at_y = (xj - xi) * (point.y - yi) / (yj - yi) + xi
    hits = crosses & (point.x < x_at_y)
    return bool(np.count_nonzero(hits) % 2)


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    """Shortest distance from point to the segment start-end."""
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return point.distance_to(start)
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return point.distance_to(Point(start.x + t * dx, start.y + t * dy))


def star_vertices(center: Point, outer_radius: float, inner_radius: float,
                  points: int) -> List[Point]:
    """
    Vertices of a star polygon.

    Alternates outer and inner radius every pi/points radians, starting
    at -90 degrees (straight up), giving 2 * points vertices.
    """
    steps = np.arange(points * 2)
    angles = steps * (math.pi / points) - math.pi / 2
    radii = np.where(steps % 2 == 0, outer_radius, inner_radius)
    xs = center.x + np.cos(angles) * radii
    ys = center.y + np.sin(angles) * radii
    return [Point(float(x), float(y)) for x, y in zip(xs, ys)]


def arc_points(center: Point, radius: float, start_angle: float,
               end_angle: float, counterclockwise: bool = False,
               segments: int = 32) -> List[Point]:
    """Sample an arc the way a 2D canvas sweeps it (angles in radians)."""
    sweep = arc_sweep(start_angle, end_angle, counterclockwise)
    angles = start_angle + np.linspace(0.0, sweep, segments + 1)
    return [Point(float(center.x + radius * math.cos(a)),
                  float(center.y + radius * math.sin(a))) for a in angles]


def arc_sweep(start_angle: float, end_angle: float,
              counterclockwise: bool = False) -> float:
    """
    Signed sweep of a canvas arc.

    Clockwise arcs sweep a positive angle in [0, 2*pi], counterclockwise
    arcs a negative one; a difference of a full turn or more draws a
    complete circle.
    """
    full = 2 * math.pi
    delta = end_angle - start_angle
    if counterclockwise:
        if -delta >= full:
            return -full
        sweep = delta % full
        return sweep - full if sweep > 0 else 0.0
    if delta >= full:
        return full
    return delta % full


def arc_to_beziers(center: Point, radius_x: float, radius_y: float,
                   start_angle: float, sweep: float) -> List[List[Point]]:
    """
    Approximate an elliptical arc with cubic beziers.

    Each item is ``[start, cp1, cp2, end]``. Points follow
    ``(cx + rx*cos(a), cy + ry*sin(a))``; pieces span at most 90 degrees.
    """
    if sweep == 0:
        return []
    count = max(1, int(math.ceil(abs(sweep) / (math.pi / 2) - 1e-9)))
    step = sweep / count
    kappa = 4.0 / 3.0 * math.tan(step / 4)

    def at(angle):
        return Point(center.x + radius_x * math.cos(angle),
                     center.y + radius_y * math.sin(angle))

    curves = []
    for i in range(count):
        a0 = start_angle + i * step
        a1 = a0 + step
        p0, p3 = at(a0), at(a1)
        cp1 = Point(p0.x - kappa * radius_x * math.sin(a0),
                    p0.y + kappa * radius_y * math.cos(a0))
        cp2 = Point(p3.x + kappa * radius_x * math.sin(a1),
                    p3.y - kappa * radius_y * math.cos(a1))
        curves.append([p0, cp1, cp2, p3])
    return curves


def flatten_cubic_bezier(p0: Point, p1: Point, p2: Point, p3: Point,
                         tolerance: float = 0.01) -> List[Point]:
    """
    Flatten a cubic bezier curve to line segments using recursive subdivision.

    Uses the de Casteljau algorithm with flatness test.
    """
    def is_flat(p0: Point, p1: Point, p2: Point, p3: Point, tol: float) -> bool:
        ux = 3*p1.x - 2*p0.x - p3.x
        uy = 3*p1.y - 2*p0.y - p3.y
        vx = 3*p2.x - 2*p3.x - p0.x
        vy = 3*p2.y - 2*p3.y - p0.y
        return max(ux*ux, vx*vx) + max(uy*uy, vy*vy) <= 16 * tol * tol

    def subdivide(p0: Point, p1: Point, p2: Point, p3: Point,
                  tol: float, points: List[Point], depth: int) -> None:
        if depth > 16 or is_flat(p0, p1, p2, p3, tol):
            points.append(p3)
        else:
            q0 = Point((p0.x + p1.x) / 2, (p0.y + p1.y) / 2)
            q1 = Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
            q2 = Point((p2.x + p3.x) / 2, (p2.y + p3.y) / 2)
            r0 = Point((q0.x + q1.x) / 2, (q0.y + q1.y) / 2)
            r1 = Point((q1.x + q2.x) / 2, (q1.y + q2.y) / 2)
            s = Point((r0.x + r1.x) / 2, (r0.y + r1.y) / 2)

            subdivide(p0, q0, r0, s, tol, points, depth + 1)
            subdivide(s, r1, q2, p3, tol, points, depth + 1)

    points = [p0]
    subdivide(p0, p1, p2, p3, tolerance, points, 0)
    return points


def flatten_quadratic_bezier(p0: Point, p1: Point, p2: Point,
                             tolerance: float = 0.01) -> List[Point]:
    """Flatten a quadratic bezier curve to line segments."""
    cp1, cp2 = quadratic_to_cubic(p0, p1, p2)
    return flatten_cubic_bezier(p0, cp1, cp2, p2, tolerance)


def quadratic_to_cubic(p0: Point, p1: Point, p2: Point):
    """Control points of the cubic equivalent to a quadratic bezier."""
    cp1 = Point(p0.x + 2/3 * (p1.x - p0.x), p0.y + 2/3 * (p1.y - p0.y))
    cp2 = Point(p2.x + 2/3 * (p1.x - p2.x), p2.y + 2/3 * (p1.y - p2.y))
    return cp1, cp2
