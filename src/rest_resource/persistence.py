"""
Persistence-level class metadata.

ClassMetadata describes how a model class is stored: its identifier, plain
fields and associations to other models. Like most ORM metadata it keeps a
reflection handle that is not part of the pickled state; after unpickling the
owner must call wakeup_reflection() to bind it again.
"""

import collections.abc
import dataclasses
import logging
import types
import typing
from typing import Dict, Any, List, Optional, Tuple, Type

from rest_resource.resource.exceptions import ReflectionError
from rest_resource.resource.reflection import ReflectionClass, class_name

logger = logging.getLogger(__name__)

_COLLECTION_ORIGINS = (
    list, set, frozenset, tuple,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
    collections.abc.Collection, collections.abc.Iterable,
)


class ClassMetadata:
    """Mapping information for one persisted class."""

    def __init__(self, name: str,
                 identifier: Optional[List[str]] = None,
                 field_names: Optional[List[str]] = None,
                 association_mappings: Optional[Dict[str, Dict[str, Any]]] = None):
        self.name = name
        self.identifier: List[str] = list(identifier or [])
        self.field_names: List[str] = list(field_names or [])
        # association name -> {'target_class': dotted name, 'collection': bool}
        self.association_mappings: Dict[str, Dict[str, Any]] = dict(association_mappings or {})
        self.reflection: Optional[ReflectionClass] = None

    def wakeup_reflection(self, reflection_service) -> None:
        """Bind the reflection handle again, typically after unpickling."""
        self.reflection = reflection_service.get_reflection_class(self.name)

    def get_reflection_class(self) -> Optional[ReflectionClass]:
        return self.reflection

    def get_name(self) -> str:
        return self.name

    def get_identifier(self) -> List[str]:
        return self.identifier

    def get_field_names(self) -> List[str]:
        return self.field_names

    def has_field(self, name: str) -> bool:
        return name in self.field_names

    def has_association(self, name: str) -> bool:
        return name in self.association_mappings

    def get_association_names(self) -> List[str]:
        return list(self.association_mappings.keys())

    def get_association_target_class(self, name: str) -> str:
        if name not in self.association_mappings:
            raise KeyError(f"Association '{name}' not found on {self.name}")
        return self.association_mappings[name]['target_class']

    def is_collection_valued_association(self, name: str) -> bool:
        return bool(self.association_mappings.get(name, {}).get('collection', False))

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state.pop('reflection', None)
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self.reflection = None

    def __repr__(self) -> str:
        return f"ClassMetadata({self.name})"


def is_model_class(value: Any) -> bool:
    """True for pydantic models and dataclasses, the classes metadata can be loaded for."""
    if not isinstance(value, type):
        return False
    return dataclasses.is_dataclass(value) or isinstance(getattr(value, 'model_fields', None), dict)


def _association_target(annotation: Any) -> Tuple[Optional[Type[Any]], bool]:
    """Return (target class, is collection) for an annotation, or (None, False)."""
    origin = typing.get_origin(annotation)
    if origin is None:
        return (annotation, False) if is_model_class(annotation) else (None, False)

    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if origin is typing.Union or origin is getattr(types, 'UnionType', None):
        if len(args) == 1:
            return _association_target(args[0])
        return None, False

    if origin in _COLLECTION_ORIGINS and args and is_model_class(args[0]):
        return args[0], True

    return None, False


def _field_annotations(cls: Type[Any]) -> Dict[str, Any]:
    model_fields = getattr(cls, 'model_fields', None)
    if isinstance(model_fields, dict):
        return {name: field.annotation for name, field in model_fields.items()}

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise ReflectionError(e, f"Cannot resolve annotations of {class_name(cls)}: {e}") from e
    return {f.name: hints.get(f.name, f.type) for f in dataclasses.fields(cls)}


def load_class_metadata(cls: Type[Any]) -> ClassMetadata:
    """
    Build persistence metadata for a pydantic model or dataclass.

    Fields typed with another model (optionally wrapped in Optional or a
    collection type) become associations; everything else is a plain field.
    The identifier is the 'id' field when the class declares one.
    """
    if not is_model_class(cls):
        raise ReflectionError(message=f"{class_name(cls)} is neither a pydantic model nor a dataclass")

    field_names: List[str] = []
    associations: Dict[str, Dict[str, Any]] = {}
    for name, annotation in _field_annotations(cls).items():
        target, is_collection = _association_target(annotation)
        if target is None:
            field_names.append(name)
        else:
            associations[name] = {'target_class': class_name(target), 'collection': is_collection}

    identifier = ['id'] if 'id' in field_names else []
    metadata = ClassMetadata(class_name(cls), identifier, field_names, associations)
    metadata.reflection = ReflectionClass(cls)
    logger.debug(f"Loaded class metadata for {metadata.name}: {len(field_names)} fields, {len(associations)} associations")
    return metadata
