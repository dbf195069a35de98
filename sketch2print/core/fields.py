"""
Shape field descriptors.

Every shape property is declared once as a field. The field knows its
wire name (camelCase, as stored in snapshots), its Python attribute
name, its default and valid range. It turns untyped client input into
a clean value and describes itself for schema introspection.

Numeric and color input is never rejected: missing or invalid values
fall back to the default and out-of-range numbers are clamped. Only
fields marked ``required`` raise, and only for missing content.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import logging
import math

from .colors import normalize_color
from .errors import ValidationError

logger = logging.getLogger(__name__)

# A default is either a constant or computed from the shape being built
Default = Union[Any, Callable[[Any], Any]]


def to_number(value) -> Optional[float]:
    """Coerce client input to a finite float, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_bool(value) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off', ''):
            return False
    return None


@dataclass
class Field:
    """Base descriptor. Subclasses implement ``coerce`` and ``schema_type``."""
    key: str
    attr: str = ''
    default: Default = None
    required: bool = False
    description: str = ''
    aliases: Sequence[str] = ()

    schema_type = 'string'

    def __post_init__(self):
        if not self.attr:
            self.attr = self.key

    def default_for(self, shape) -> Any:
        if callable(self.default):
            return self.default(shape)
        return self.default

    def raw_value(self, properties: Dict[str, Any]):
        for name in (self.key, self.attr, *self.aliases):
            value = properties.get(name)
            if value is not None:
                return value
        return None

    def normalize(self, properties: Dict[str, Any], shape) -> Any:
        """Read this field from ``properties`` and return a clean value."""
        raw = self.raw_value(properties)
        value = self.coerce(raw)
        if value is None:
            if self.required:
                raise ValidationError(f"'{self.key}' is required")
            if raw is not None:
                logger.debug(f"Invalid {self.key}={raw!r}, using default")
            return self.default_for(shape)
        return value

    def coerce(self, raw) -> Any:
        raise NotImplementedError

    def schema(self) -> Dict[str, Any]:
        entry = {'type': self.schema_type}
        if self.default is not None and not callable(self.default):
            entry['default'] = self.default
        if self.description:
            entry['description'] = self.description
        return entry


@dataclass
class NumberField(Field):
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    integer: bool = False

    schema_type = 'number'

    def coerce(self, raw) -> Optional[float]:
        number = to_number(raw)
        if number is None:
            return None
        if self.integer:
            number = int(number)
        if self.minimum is not None and number < self.minimum:
            number = self.minimum
        if self.maximum is not None and number > self.maximum:
            number = self.maximum
        return int(number) if self.integer else number

    def schema(self) -> Dict[str, Any]:
        entry = super().schema()
        if self.integer:
            entry['type'] = 'integer'
        if self.minimum is not None:
            entry['minimum'] = self.minimum
        if self.maximum is not None:
            entry['maximum'] = self.maximum
        return entry


@dataclass
class ColorField(Field):
    schema_type = 'string'

    def coerce(self, raw) -> Optional[str]:
        return normalize_color(raw)

    def schema(self) -> Dict[str, Any]:
        entry = super().schema()
        entry['format'] = 'color'
        return entry


@dataclass
class StringField(Field):
    choices: Sequence[str] = ()
    strip: bool = True

    def coerce(self, raw) -> Optional[str]:
        if raw is None or isinstance(raw, (dict, list, tuple)):
            return None
        text = str(raw)
        if self.strip:
            text = text.strip()
        if not text:
            return None
        if self.choices and text not in self.choices:
            return None
        return text

    def schema(self) -> Dict[str, Any]:
        entry = super().schema()
        if self.choices:
            entry['enum'] = list(self.choices)
        return entry


@dataclass
class BooleanField(Field):
    schema_type = 'boolean'

    def coerce(self, raw) -> Optional[bool]:
        return to_bool(raw)


@dataclass
class NumberListField(Field):
    """
    A list of non-negative numbers (dash patterns).

    A pattern with nothing but zeros has no visible cycle and becomes
    the empty (solid) pattern.
    """
    schema_type = 'array'

    def coerce(self, raw) -> Optional[List[float]]:
        if not isinstance(raw, (list, tuple)):
            return None
        numbers = [to_number(item) for item in raw]
        numbers = [n for n in numbers if n is not None and n >= 0]
        return numbers if sum(numbers) > 0 else []

    def default_for(self, shape) -> Any:
        return list(super().default_for(shape) or [])

    def schema(self) -> Dict[str, Any]:
        entry = super().schema()
        entry['items'] = {'type': 'number', 'minimum': 0}
        return entry


@dataclass
class PassThroughField(Field):
    """
    A structured field (vertex lists, path commands) that the owning
    shape parses itself. ``coerce`` only filters out the wrong container
    type; ``item_schema`` is reported for introspection.
    """
    item_schema: Optional[Dict[str, Any]] = None
    min_items: int = 0

    schema_type = 'array'

    def coerce(self, raw):
        if isinstance(raw, (list, tuple)):
            return list(raw)
        return None

    def schema(self) -> Dict[str, Any]:
        entry = super().schema()
        if self.item_schema:
            entry['items'] = self.item_schema
        if self.min_items:
            entry['minItems'] = self.min_items
        return entry


def build_schema(type_name: str, fields: Sequence[Field]) -> Dict[str, Any]:
    """JSON-schema style description of a shape type."""
    properties = {'type': {'type': 'string', 'enum': [type_name]}}
    required = ['type']
    for f in fields:
        properties[f.key] = f.schema()
        if f.required:
            required.append(f.key)
    return {
        'type': 'object',
        'properties': properties,
        'required': required,
    }
