"""
Factory building ResourceMetadata from drivers, with optional caching.
"""

import logging
import threading
from typing import Dict, Any, List, Optional, Type, Union

from rest_resource.persistence import ClassMetadata, load_class_metadata

from .drivers import Driver, ResourceOptions
from .exceptions import MetadataNotFoundError, ReflectionError, ResourceError
from .metadata import (
    ResourceMetadata, CLASS_METADATA, CONTROLLER, INPUT_FILTER, HYDRATOR,
    COLLECTION_METADATA, ASSOCIATIONS,
)
from .reflection import RuntimeReflectionService, class_name

logger = logging.getLogger(__name__)


class ResourceMetadataFactory:
    """
    Builds and hands out ResourceMetadata, one instance per class.

    Usage:
        factory = ResourceMetadataFactory(DecoratorDriver(), cache=FileCache("/tmp/rest"))
        metadata = factory.get_metadata_for_class(Widget)
        metadata.get_association_metadata("owner").get_controller_name()

    Associations marked routable get the metadata of their target class
    from this same factory, so cyclic associations resolve to the same
    instances. Freshly built metadata is written to the cache only once the
    whole association graph is complete.
    """

    def __init__(self, driver: Driver, cache: Optional[Any] = None, debug: bool = False):
        self.driver = driver
        self.cache = cache
        self.debug = debug
        self._loaded: Dict[str, ResourceMetadata] = {}
        self._pending: List[ResourceMetadata] = []
        self._depth = 0
        self._lock = threading.RLock()
        self._reflection_service = RuntimeReflectionService()

    def has_metadata_for_class(self, cls: Union[Type[Any], str]) -> bool:
        if isinstance(cls, str):
            try:
                cls = self._reflection_service.get_class(cls)
            except ReflectionError:
                return False
        return class_name(cls) in self._loaded or self.driver.load_options_for_class(cls) is not None

    def get_metadata_for_class(self, cls: Union[Type[Any], str]) -> ResourceMetadata:
        """
        Return the metadata of a class (or dotted class name).

        Raises:
            MetadataNotFoundError: If no driver declares the class as a resource
            MetadataRestoreError: If a cached entry cannot be restored
        """
        if isinstance(cls, str):
            cls = self._reflection_service.get_class(cls)
        name = class_name(cls)

        with self._lock:
            if name in self._loaded:
                return self._loaded[name]

            self._depth += 1
            try:
                metadata = self._load_from_cache(name)
                if metadata is None:
                    metadata = self._build(cls)
                    self._pending.append(metadata)
                else:
                    self._register(metadata)
            except BaseException:
                if self._depth == 1:
                    # Nested metadata built so far may point at the failed one
                    for built in self._pending:
                        self._loaded.pop(built.name, None)
                    self._pending.clear()
                raise
            finally:
                self._depth -= 1

            if self._depth == 0:
                self._flush_pending()
            return metadata

    def _load_from_cache(self, name: str) -> Optional[ResourceMetadata]:
        if self.cache is None:
            return None

        metadata = self.cache.load(name)
        if metadata is None:
            logger.debug(f"Resource metadata cache miss for {name}")
            return None

        if self.debug and not all(member.is_fresh() for member in self._graph(metadata)):
            logger.info(f"Cached resource metadata for {name} is stale, rebuilding")
            self.cache.evict(name)
            return None

        return metadata

    def _graph(self, metadata: ResourceMetadata) -> List[ResourceMetadata]:
        """Every descriptor reachable from metadata through its associations."""
        seen: Dict[int, ResourceMetadata] = {}
        stack = [metadata]
        while stack:
            current = stack.pop()
            if id(current) in seen:
                continue
            seen[id(current)] = current
            associations = current.property_metadata.get(ASSOCIATIONS) or {}
            stack.extend(nested for nested in associations.values() if nested is not None)
        return list(seen.values())

    def _register(self, metadata: ResourceMetadata) -> None:
        """
        Make a restored metadata graph use the canonical instances for its classes.

        Classes already loaded (possibly still being built) keep their
        instance and the restored associations are re-pointed at it, so the
        copies unpickled alongside are dropped.
        """
        members = self._graph(metadata)
        for member in members:
            self._loaded.setdefault(member.name, member)
        for member in members:
            if self._loaded[member.name] is not member:
                continue
            associations = member.property_metadata.get(ASSOCIATIONS) or {}
            for association, nested in associations.items():
                if nested is not None:
                    associations[association] = self._loaded[nested.name]

    def _flush_pending(self) -> None:
        pending, self._pending = self._pending, []
        if self.cache is None:
            return
        for metadata in pending:
            self.cache.save(metadata)

    def _build(self, cls: Type[Any]) -> ResourceMetadata:
        name = class_name(cls)
        options = self.driver.load_options_for_class(cls)
        if options is None:
            raise MetadataNotFoundError(name)

        class_metadata = load_class_metadata(cls)
        metadata = ResourceMetadata(cls)
        for path in self.driver.get_file_resources(cls):
            metadata.add_file_resource(path)

        # Registered before associations so cycles find this instance
        self._loaded[name] = metadata
        try:
            metadata.property_metadata.update({
                CLASS_METADATA: class_metadata,
                CONTROLLER: options.controller,
                INPUT_FILTER: options.input_filter,
                HYDRATOR: options.hydrator,
                COLLECTION_METADATA: self._build_collection(metadata, class_metadata, options),
                ASSOCIATIONS: self._build_associations(class_metadata, options),
            })
        except BaseException:
            self._loaded.pop(name, None)
            raise

        logger.debug(f"Built resource metadata for {name}")
        return metadata

    def _build_collection(self, metadata: ResourceMetadata, class_metadata: ClassMetadata,
                          options: ResourceOptions) -> ResourceMetadata:
        collection = options.collection
        return ResourceMetadata(metadata.get_reflection_class().get_class(), {
            CLASS_METADATA: class_metadata,
            CONTROLLER: collection.controller or options.controller,
            INPUT_FILTER: collection.input_filter or options.input_filter,
            HYDRATOR: collection.hydrator or options.hydrator,
            COLLECTION_METADATA: None,
            ASSOCIATIONS: {},
        })

    def _build_associations(self, class_metadata: ClassMetadata,
                            options: ResourceOptions) -> Dict[str, Optional[ResourceMetadata]]:
        for association in options.associations:
            if not class_metadata.has_association(association):
                raise ResourceError(message=f"{class_metadata.name} has no association named '{association}'")

        associations: Dict[str, Optional[ResourceMetadata]] = {}
        for association in class_metadata.get_association_names():
            association_options = options.associations.get(association)
            if association_options is None or not association_options.routable:
                associations[association] = None
                continue
            target = class_metadata.get_association_target_class(association)
            associations[association] = self.get_metadata_for_class(target)
        return associations
