"""
Resource layer exceptions.
"""


class ResourceError(Exception):
    """Base class for errors raised while building or using resource metadata."""

    def __init__(self, e=None, message=None):
        if message:
            super().__init__(message)
        elif e:
            super().__init__(str(e))
        else:
            super().__init__(self.__class__.__name__)
        self.error = e
        self.message = message


class InstantiationError(ResourceError):
    """Raised when the domain object behind a resource cannot be constructed."""

    def __init__(self, class_name: str, e=None, message=None):
        self.class_name = class_name
        super().__init__(e, message or f"Cannot instantiate {class_name}: {e}")


class ReflectionError(ResourceError):
    """Raised when a class cannot be resolved or introspected."""


class MetadataRestoreError(ResourceError):
    """Raised when restored metadata cannot have its reflection re-bound."""


class MetadataNotFoundError(ResourceError):
    """Raised when no driver provides REST metadata for a class."""

    def __init__(self, class_name: str, message=None):
        self.class_name = class_name
        super().__init__(message=message or f"No resource metadata found for class: {class_name}")
