"""
REST metadata for a resource class.

ResourceMetadata decorates the persistence metadata of a class with the REST
specific bits (controller, input filter, hydrator, collection and association
metadata) and knows how to create new resources of that class.
"""

import logging
import os
import time
from typing import Dict, Any, Callable, List, Optional, Protocol, Type, Union

from .exceptions import MetadataRestoreError
from .reflection import ReflectionClass, RuntimeReflectionService
from .resource import Resource

logger = logging.getLogger(__name__)

# Keys of ResourceMetadata.property_metadata
CLASS_METADATA = 'classMetadata'
CONTROLLER = 'controller'
INPUT_FILTER = 'inputFilter'
HYDRATOR = 'hydrator'
COLLECTION_METADATA = 'collectionMetadata'
ASSOCIATIONS = 'associations'


class ResourceMetadataInterface(Protocol):
    """Accessor contract used by routing, hydration and rendering code."""

    def create_resource(self, *args: Any, **kwargs: Any) -> Resource: ...

    def get_reflection_class(self) -> ReflectionClass: ...

    def get_class_metadata(self) -> Any: ...

    def get_controller_name(self) -> Optional[str]: ...

    def get_input_filter_name(self) -> Optional[str]: ...

    def get_hydrator_name(self) -> Optional[str]: ...

    def get_collection_metadata(self) -> Optional['ResourceMetadataInterface']: ...

    def has_association_metadata(self, association: str) -> bool: ...

    def get_association_metadata(self, association: str) -> Optional['ResourceMetadataInterface']: ...


class ResourceMetadata:
    """
    Build-once, read-many metadata for one resource class.

    property_metadata is filled by the metadata factory before the instance is
    handed out and is never modified by the accessors.
    """

    # Builds the reflection service used to re-bind persistence metadata on unpickle
    reflection_service_factory: Callable[[], Any] = RuntimeReflectionService

    def __init__(self, cls: Union[Type[Any], ReflectionClass], property_metadata: Optional[Dict[str, Any]] = None):
        self.reflection = cls if isinstance(cls, ReflectionClass) else ReflectionClass(cls)
        self.name = self.reflection.name
        self.property_metadata: Dict[str, Any] = dict(property_metadata or {})
        self.file_resources: List[str] = []
        self.created_at = time.time()

    def create_resource(self, *args: Any, **kwargs: Any) -> Resource:
        """
        Create a new instance of the resource class, wrapped with this metadata.

        Raises:
            InstantiationError: If the class cannot be constructed with the given arguments
        """
        if not args and not kwargs:
            return Resource(self.reflection.new_instance(), self)

        return Resource(self.reflection.new_instance_args(args, kwargs), self)

    def get_name(self) -> str:
        return self.name

    def get_reflection_class(self) -> ReflectionClass:
        return self.reflection

    def get_class_metadata(self) -> Any:
        return self.property_metadata.get(CLASS_METADATA)

    def get_controller_name(self) -> Optional[str]:
        return self.property_metadata.get(CONTROLLER)

    def get_input_filter_name(self) -> Optional[str]:
        return self.property_metadata.get(INPUT_FILTER)

    def get_hydrator_name(self) -> Optional[str]:
        return self.property_metadata.get(HYDRATOR)

    def get_collection_metadata(self) -> Optional['ResourceMetadata']:
        return self.property_metadata.get(COLLECTION_METADATA)

    def has_association_metadata(self, association: str) -> bool:
        associations = self.property_metadata.get(ASSOCIATIONS) or {}
        return associations.get(association) is not None

    def get_association_metadata(self, association: str) -> Optional['ResourceMetadata']:
        if not self.has_association_metadata(association):
            return None

        return self.property_metadata[ASSOCIATIONS][association]

    def add_file_resource(self, path: str) -> None:
        if path not in self.file_resources:
            self.file_resources.append(path)

    def is_fresh(self, timestamp: Optional[float] = None) -> bool:
        """True if no mapping file backing this metadata changed since it was built."""
        reference = self.created_at if timestamp is None else timestamp
        for path in self.file_resources:
            if not os.path.exists(path) or os.path.getmtime(path) > reference:
                return False
        return True

    def __getstate__(self) -> Dict[str, Any]:
        return self.__dict__.copy()

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._wakeup_class_metadata()

    def _wakeup_class_metadata(self) -> None:
        """
        Re-bind the reflection of the embedded persistence metadata.

        Persistence metadata drops its reflection handle when pickled and
        normally gets it back from its own loader; here it was restored as
        part of this object, so the re-bind has to happen now. Anything that
        exposes a wakeup_reflection(service) method is treated that way.
        """
        class_metadata = self.property_metadata.get(CLASS_METADATA)
        wakeup = getattr(class_metadata, 'wakeup_reflection', None)
        if not callable(wakeup):
            return

        try:
            wakeup(self.reflection_service_factory())
        except Exception as e:
            raise MetadataRestoreError(e, f"Cannot re-bind reflection for {self.name}: {e}") from e

        get_reflection = getattr(class_metadata, 'get_reflection_class', None)
        if callable(get_reflection) and get_reflection() is None:
            raise MetadataRestoreError(message=f"Persistence metadata of {self.name} has no reflection after restore")

        logger.debug(f"Re-bound persistence reflection for {self.name}")

    def __repr__(self) -> str:
        return f"ResourceMetadata({self.name})"
