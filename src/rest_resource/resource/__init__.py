"""
Resource metadata package.

Describes how domain classes are exposed through the REST layer: which
controller handles them, how input is filtered and hydrated, and how they
relate to other resources.
"""

from .exceptions import (
    ResourceError, InstantiationError, ReflectionError,
    MetadataRestoreError, MetadataNotFoundError,
)
from .reflection import ReflectionClass, RuntimeReflectionService
from .resource import Resource
from .metadata import ResourceMetadata, ResourceMetadataInterface
from .cache import MemoryCache, FileCache
from .drivers import resource, DecoratorDriver, YamlDriver, DriverChain, ResourceOptions
from .factory import ResourceMetadataFactory

__all__ = [
    "ResourceError", "InstantiationError", "ReflectionError",
    "MetadataRestoreError", "MetadataNotFoundError",
    "ReflectionClass", "RuntimeReflectionService",
    "Resource", "ResourceMetadata", "ResourceMetadataInterface",
    "MemoryCache", "FileCache",
    "resource", "DecoratorDriver", "YamlDriver", "DriverChain", "ResourceOptions",
    "ResourceMetadataFactory",
]
