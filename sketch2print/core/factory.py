"""
Shape Factory

Maps type tags to shape classes and builds shapes from property bags.
"""

from typing import Any, Dict, List, Mapping, Optional, Type
import logging

from .errors import ValidationError
from .shapes import Shape, SHAPE_CLASSES

logger = logging.getLogger(__name__)


class ShapeFactory:
    """Registry of shape classes keyed by their type tag."""

    def __init__(self):
        self._registry: Dict[str, Type[Shape]] = {}
        for cls in SHAPE_CLASSES:
            self.register_shape(cls.type_name, cls)

    def register_shape(self, type_tag: str, cls: Type[Shape]) -> None:
        """Register (or replace) the class used for ``type_tag``."""
        if not issubclass(cls, Shape):
            raise TypeError(f"{cls!r} is not a Shape subclass")
        self._registry[type_tag] = cls
        logger.debug(f"Registered shape type {type_tag} -> {cls.__name__}")

    def unregister_shape(self, type_tag: str) -> bool:
        return self._registry.pop(type_tag, None) is not None

    def is_supported(self, type_tag: str) -> bool:
        return isinstance(type_tag, str) and type_tag in self._registry

    def create_shape(self, type_tag: str, properties: Optional[Dict[str, Any]] = None) -> Shape:
        """
        Create a shape of the given type.

        Raises:
            ValidationError: unknown type, non-mapping properties, or
                missing required content
        """
        cls = self._registry.get(type_tag) if isinstance(type_tag, str) else None
        if cls is None:
            raise ValidationError(f"Unknown shape type: {type_tag}")
        if properties is not None and not isinstance(properties, Mapping):
            raise ValidationError("Shape properties must be a mapping")
        props = dict(properties or {})
        props.pop('type', None)
        return cls(props)

    def shape_from_dict(self, record: Dict[str, Any]) -> Shape:
        """Create a shape from a flat record carrying its ``type``."""
        if not isinstance(record, dict):
            raise ValidationError("Shape record must be a mapping")
        return self.create_shape(record.get('type'), record)

    def get_supported_types(self) -> List[str]:
        return list(self._registry)

    def get_schema(self, type_tag: str) -> Optional[Dict[str, Any]]:
        cls = self._registry.get(type_tag) if isinstance(type_tag, str) else None
        if cls is None:
            return None
        return cls.get_schema()

    def get_all_schemas(self) -> Dict[str, Dict[str, Any]]:
        return {tag: cls.get_schema() for tag, cls in self._registry.items()}


# Shared registry used by the module level helpers
default_factory = ShapeFactory()


def create_shape(type_tag: str, properties: Optional[Dict[str, Any]] = None) -> Shape:
    return default_factory.create_shape(type_tag, properties)


def shape_from_dict(record: Dict[str, Any]) -> Shape:
    return default_factory.shape_from_dict(record)


def get_supported_types() -> List[str]:
    return default_factory.get_supported_types()


def get_schema(type_tag: str) -> Optional[Dict[str, Any]]:
    return default_factory.get_schema(type_tag)


def get_all_schemas() -> Dict[str, Dict[str, Any]]:
    return default_factory.get_all_schemas()


def register_shape(type_tag: str, cls: Type[Shape]) -> None:
    default_factory.register_shape(type_tag, cls)


def unregister_shape(type_tag: str) -> bool:
    return default_factory.unregister_shape(type_tag)
