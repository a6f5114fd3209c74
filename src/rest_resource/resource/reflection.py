"""
Reflection helpers for domain classes exposed as resources.

ReflectionClass wraps a Python class and knows how to instantiate it and list
its declared properties. It pickles by dotted name so a restored handle points
at the live class again.
"""

import dataclasses
import importlib
import inspect
import logging
from typing import Dict, Any, List, Optional, Sequence, Type

from .exceptions import InstantiationError, ReflectionError

logger = logging.getLogger(__name__)


def class_name(cls: Type[Any]) -> str:
    """Dotted name used to identify a class across the package (module + qualname)."""
    return f"{cls.__module__}.{cls.__qualname__}"


class ReflectionClass:
    """Introspection and construction capability for a single class."""

    def __init__(self, cls: Type[Any]):
        if not isinstance(cls, type):
            raise ReflectionError(message=f"Expected a class, got {type(cls).__name__}")
        self._cls = cls

    @property
    def name(self) -> str:
        return class_name(self._cls)

    @property
    def short_name(self) -> str:
        return self._cls.__name__

    def get_class(self) -> Type[Any]:
        return self._cls

    def is_instantiable(self) -> bool:
        return not inspect.isabstract(self._cls)

    def new_instance(self) -> Any:
        return self.new_instance_args(())

    def new_instance_args(self, args: Sequence[Any], kwargs: Optional[Dict[str, Any]] = None) -> Any:
        """
        Create an instance forwarding args (in order) and kwargs to the constructor.

        Raises:
            InstantiationError: abstract class, arguments not matching the
                constructor signature, or the constructor raising
        """
        kwargs = kwargs or {}
        if not self.is_instantiable():
            raise InstantiationError(self.name, message=f"Cannot instantiate abstract class {self.name}")

        try:
            signature = inspect.signature(self._cls)
        except (TypeError, ValueError):
            # Some builtins expose no signature; let the call decide
            signature = None

        if signature is not None:
            try:
                signature.bind(*args, **kwargs)
            except TypeError as e:
                raise InstantiationError(self.name, e) from e

        try:
            return self._cls(*args, **kwargs)
        except Exception as e:
            raise InstantiationError(self.name, e) from e

    def get_properties(self) -> List[str]:
        """Declared properties: pydantic fields, dataclass fields, or class annotations."""
        model_fields = getattr(self._cls, 'model_fields', None)
        if isinstance(model_fields, dict):
            return list(model_fields.keys())

        if dataclasses.is_dataclass(self._cls):
            return [f.name for f in dataclasses.fields(self._cls)]

        properties: List[str] = []
        for klass in reversed(self._cls.__mro__):
            for name in getattr(klass, '__annotations__', {}):
                if name not in properties and not name.startswith('_'):
                    properties.append(name)
        return properties

    def has_property(self, name: str) -> bool:
        return name in self.get_properties()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ReflectionClass) and other._cls is self._cls

    def __hash__(self) -> int:
        return hash(self._cls)

    def __repr__(self) -> str:
        return f"ReflectionClass({self.name})"

    def __getstate__(self) -> Dict[str, Any]:
        return {'name': self.name}

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self._cls = RuntimeReflectionService().get_class(state['name'])


class RuntimeReflectionService:
    """Resolves classes by dotted name from the running interpreter."""

    def get_class(self, name: str) -> Type[Any]:
        """
        Import the class named by a dotted path (module + qualname).

        Raises:
            ReflectionError: If no importable module prefix resolves to a class
        """
        parts = name.split('.')
        for split in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except ImportError:
                continue

            try:
                for attr in parts[split:]:
                    target = getattr(target, attr)
            except AttributeError as e:
                raise ReflectionError(e, f"Class {name} not found in module {module_name}") from e

            if not isinstance(target, type):
                raise ReflectionError(message=f"{name} is not a class")
            return target

        raise ReflectionError(message=f"Cannot import a module for class {name}")

    def get_reflection_class(self, name: str) -> ReflectionClass:
        logger.debug(f"Resolving reflection for {name}")
        return ReflectionClass(self.get_class(name))
