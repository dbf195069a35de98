"""
Color helpers.

Colors travel as CSS-style strings. Everything that reaches a drawing
context has been normalized to lowercase ``#rrggbb``.
"""

import re
from typing import Optional, Tuple

HEX_PATTERN = re.compile(r'^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$')

NAMED_COLORS = {
    'black': '#000000',
    'white': '#ffffff',
    'red': '#ff0000',
    'green': '#008000',
    'blue': '#0000ff',
    'yellow': '#ffff00',
    'orange': '#ffa500',
    'purple': '#800080',
    'pink': '#ffc0cb',
    'gray': '#808080',
    'grey': '#808080',
}


def normalize_color(value) -> Optional[str]:
    """
    Return ``value`` as lowercase ``#rrggbb``, or None if it is not a color.

    Accepts ``#rgb``, ``#rrggbb`` and the basic named colors.
    """
    if not isinstance(value, str):
        return None
    color = value.strip()
    if HEX_PATTERN.match(color):
        digits = color[1:].lower()
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        return '#' + digits
    return NAMED_COLORS.get(color.lower())


def validate_color(color, fallback: str = '#000000') -> str:
    """Return a usable color, substituting ``fallback`` for invalid input."""
    return normalize_color(color) or fallback


def hex_to_rgb(color) -> Tuple[int, int, int]:
    """Convert a color string to an (r, g, b) tuple; black if invalid."""
    normalized = normalize_color(color)
    if normalized is None:
        return (0, 0, 0)
    return (
        int(normalized[1:3], 16),
        int(normalized[3:5], 16),
        int(normalized[5:7], 16),
    )
