"""
Layout Optimization for PDF Output

Clamps element geometry, font size and text position to the page and
produces advisory recommendations. Works on flat element records (the
snapshot form) and returns new records; inputs are never modified.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging
import math

from .colors import hex_to_rgb, normalize_color, validate_color
from .errors import ValidationError
from .factory import shape_from_dict
from .fields import to_number
from .geometry import BoundingBox
from .shapes import TEXT_WIDTH_FACTOR, estimate_text_width

logger = logging.getLogger(__name__)

MIN_PAGE_SIZE = 100.0
MAX_PAGE_SIZE = 2000.0
MIN_FONT_SIZE = 8.0

# Thresholds for recommendations
LARGE_CANVAS = 1200
MANY_ELEMENTS = 50

__all__ = [
    'hex_to_rgb', 'validate_color', 'optimize_font_size',
    'optimize_stroke_width', 'optimize_element_dimensions',
    'optimize_canvas_for_pdf', 'optimize_text_element', 'estimate_pdf_size',
    'element_bounds', 'elements_overlap', 'detect_overlapping_elements',
    'get_optimization_recommendations', 'get_text_position_recommendations',
    'generate_text_examples',
]


def _number(value, default: float = 0.0) -> float:
    number = to_number(value)
    return default if number is None else number


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def optimize_font_size(font_size: float, canvas_width: float, canvas_height: float) -> float:
    """Clamp a font size to 8 .. min(width, height) / 10."""
    max_size = min(canvas_width, canvas_height) / 10
    return max(MIN_FONT_SIZE, min(font_size, max_size))


def optimize_stroke_width(stroke_width: float, canvas_width: float, canvas_height: float) -> float:
    """Clamp a stroke width to 0 .. min(width, height) / 100."""
    max_stroke = min(canvas_width, canvas_height) / 100
    return max(0.0, min(stroke_width, max_stroke))


# Secondary geometry carried along when the anchor is clamped
POINT_KEYS = (('x2', 'y2'), ('x3', 'y3'))
STRUCTURED_KEYS = {'polygon': 'points', 'path': 'pathData'}


def _shift_secondary_points(element: Dict[str, Any], optimized: Dict[str, Any],
                            dx: float, dy: float) -> None:
    """Move the non-anchor points of ``element`` by (dx, dy) into ``optimized``."""
    for key_x, key_y in POINT_KEYS:
        px, py = to_number(element.get(key_x)), to_number(element.get(key_y))
        if px is not None:
            optimized[key_x] = px + dx
        if py is not None:
            optimized[key_y] = py + dy

    key = STRUCTURED_KEYS.get(element.get('type'))
    if key and element.get(key):
        try:
            shape = shape_from_dict(element)
        except ValidationError as e:
            logger.debug(f"Cannot shift {key}: {e}")
            return
        shape.translate(dx, dy)
        optimized[key] = shape.to_dict()[key]


def optimize_element_dimensions(element: Dict[str, Any], canvas_width: float,
                                canvas_height: float) -> Dict[str, Any]:
    """
    Fit one element into the page.

    The anchor is clamped onto the page and the other points of lines,
    arrows, triangles, polygons and paths follow it, so the shape keeps
    its form. Boxes and circles are shrunk to stay inside the page;
    font size and stroke width are limited relative to the page size.
    """
    optimized = dict(element)
    kind = element.get('type')

    x = _clamp(_number(element.get('x')), 0, canvas_width)
    y = _clamp(_number(element.get('y')), 0, canvas_height)
    optimized['x'] = x
    optimized['y'] = y
    dx, dy = x - _number(element.get('x')), y - _number(element.get('y'))
    if dx or dy:
        _shift_secondary_points(element, optimized, dx, dy)

    if kind in ('rectangle', 'image'):
        optimized['width'] = max(1.0, min(_number(element.get('width'), 100.0), canvas_width - x))
        optimized['height'] = max(1.0, min(_number(element.get('height'), 100.0), canvas_height - y))

    if kind == 'circle':
        max_radius = min(x, y, canvas_width - x, canvas_height - y)
        optimized['radius'] = max(1.0, min(_number(element.get('radius'), 50.0), max_radius))

    if kind == 'text':
        optimized['fontSize'] = optimize_font_size(
            _number(element.get('fontSize'), 16.0), canvas_width, canvas_height)

    if element.get('strokeWidth') is not None:
        optimized['strokeWidth'] = optimize_stroke_width(
            _number(element.get('strokeWidth'), 1.0), canvas_width, canvas_height)

    return optimized


def optimize_canvas_for_pdf(canvas_data: Dict[str, Any], min_size: float = MIN_PAGE_SIZE,
                            max_size: float = MAX_PAGE_SIZE) -> Dict[str, Any]:
    """Clamp the page to min_size..max_size units and fit every element into it."""
    width = _clamp(_number(canvas_data.get('width'), min_size), min_size, max_size)
    height = _clamp(_number(canvas_data.get('height'), min_size), min_size, max_size)

    elements = []
    for i, element in enumerate(canvas_data.get('elements') or []):
        if not isinstance(element, dict):
            logger.warning(f"Skipping element {i}: not a record")
            continue
        elements.append(optimize_element_dimensions(element, width, height))

    return {'width': width, 'height': height, 'elements': elements}


def optimize_text_element(element: Dict[str, Any], canvas_width: float,
                          canvas_height: float) -> Dict[str, Any]:
    """
    Prepare a text record for output.

    Keeps the baseline on the page, validates the color, limits the
    font size and truncates text that would run off the right edge
    (ending it with "...").
    """
    optimized = dict(element)

    font_size = _number(element.get('fontSize'), 16.0) or 16.0
    optimized['x'] = _clamp(_number(element.get('x')), 0, canvas_width - 10)
    optimized['y'] = max(font_size, min(_number(element.get('y'), 16.0), canvas_height))

    color = validate_color(element.get('fillColor'))
    optimized['fillColor'] = color
    optimized['colorRgb'] = dict(zip('rgb', hex_to_rgb(color)))

    text = str(element.get('text') or '').strip() or 'Hello World'
    size = optimize_font_size(font_size, canvas_width, canvas_height)
    optimized['fontSize'] = size

    if optimized['x'] + estimate_text_width(text, size) > canvas_width:
        max_chars = math.floor((canvas_width - optimized['x']) / (size * TEXT_WIDTH_FACTOR))
        if max_chars < len(text):
            text = text[:max(1, max_chars - 3)] + '...'
    optimized['text'] = text

    return optimized


def estimate_pdf_size(canvas_data: Dict[str, Any]) -> int:
    """Rough output size in bytes."""
    base_size = 1024
    pixel_size = _number(canvas_data.get('width')) * _number(canvas_data.get('height')) * 0.1
    element_size = len(canvas_data.get('elements') or []) * 100
    return round(base_size + pixel_size + element_size)


def element_bounds(element: Dict[str, Any]) -> Optional[BoundingBox]:
    """Bounds of a flat record, or None if it is not a valid shape."""
    try:
        return shape_from_dict(element).get_bounding_box()
    except ValidationError as e:
        logger.debug(f"No bounds for element: {e}")
        return None


def elements_overlap(element1: Dict[str, Any], element2: Dict[str, Any]) -> bool:
    """Bounding box overlap test."""
    bounds1 = element_bounds(element1)
    bounds2 = element_bounds(element2)
    if bounds1 is None or bounds2 is None:
        return False
    return bounds1.intersects(bounds2)


def detect_overlapping_elements(elements: List[Dict[str, Any]]) -> List[Dict[str, int]]:
    """Index pairs of elements whose bounding boxes overlap."""
    bounds = [element_bounds(e) for e in elements]
    overlapping = []
    for i in range(len(bounds)):
        for j in range(i + 1, len(bounds)):
            if bounds[i] is None or bounds[j] is None:
                continue
            if bounds[i].intersects(bounds[j]):
                overlapping.append({'element1': i, 'element2': j})
    return overlapping


def get_optimization_recommendations(canvas_data: Dict[str, Any]) -> List[str]:
    recommendations = []
    elements = canvas_data.get('elements') or []

    if _number(canvas_data.get('width')) > LARGE_CANVAS or _number(canvas_data.get('height')) > LARGE_CANVAS:
        recommendations.append('Consider reducing canvas dimensions for smaller file size')

    if len(elements) > MANY_ELEMENTS:
        recommendations.append('Large number of elements may increase processing time')

    if detect_overlapping_elements(elements):
        recommendations.append('Some elements may be overlapping and hidden')

    return recommendations


def get_text_position_recommendations(element: Dict[str, Any], canvas_width: float,
                                      canvas_height: float) -> List[Dict[str, Any]]:
    """Advice for text that may be clipped or invisible on the page."""
    recommendations = []
    x = _number(element.get('x'))
    y = _number(element.get('y'))
    font_size = _number(element.get('fontSize'), 16.0)
    estimated_width = estimate_text_width(str(element.get('text') or ''), font_size)
    estimated_height = font_size

    if x + estimated_width > canvas_width:
        recommendations.append({
            'type': 'position',
            'message': 'Text may extend beyond canvas width',
            'suggestedX': max(0.0, canvas_width - estimated_width - 10),
        })

    if y < estimated_height:
        recommendations.append({
            'type': 'position',
            'message': 'Text may be cut off at the top',
            'suggestedY': estimated_height + 5,
        })

    if y > canvas_height - 5:
        recommendations.append({
            'type': 'position',
            'message': 'Text may be cut off at the bottom',
            'suggestedY': canvas_height - 10,
        })

    if normalize_color(element.get('fillColor')) == '#ffffff':
        recommendations.append({
            'type': 'color',
            'message': 'White text may not be visible on white background',
            'suggestedColor': '#000000',
        })

    return recommendations


_TEXT_EXAMPLES: Tuple[Tuple[Any, ...], ...] = (
    # (x, y, text, size, color, description); callables take (width, height)
    (50, 50, 'Hello World', 24, '#000000', 'Top-left black text'),
    (lambda w, h: w / 2 - 60, lambda w, h: h / 2, 'Center Text', 32, '#ff0000',
     'Centered red text'),
    (lambda w, h: w - 150, lambda w, h: h - 30, 'Bottom Right', 18, '#0000ff',
     'Bottom-right blue text'),
    (100, 150, 'Colorful Text', 28, '#ff6600', 'Orange text'),
)


def generate_text_examples(canvas_width: float, canvas_height: float) -> List[Dict[str, Any]]:
    """Sample text records placed around the page, already optimized."""
    examples = []
    for x, y, text, size, color, description in _TEXT_EXAMPLES:
        example = {
            'type': 'text',
            'x': x(canvas_width, canvas_height) if callable(x) else x,
            'y': y(canvas_width, canvas_height) if callable(y) else y,
            'text': text,
            'fontSize': size,
            'fontFamily': 'Helvetica',
            'fillColor': color,
            'description': description,
        }
        examples.append(optimize_text_element(example, canvas_width, canvas_height))
    return examples
