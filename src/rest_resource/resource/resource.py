from collections.abc import Iterable, Mapping
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .metadata import ResourceMetadataInterface


class Resource:
    """A domain object (or a collection of them) paired with its REST metadata."""

    def __init__(self, data: Any, metadata: 'ResourceMetadataInterface'):
        self._data = data
        self._metadata = metadata

    def get_data(self) -> Any:
        return self._data

    def get_metadata(self) -> 'ResourceMetadataInterface':
        return self._metadata

    def is_collection(self) -> bool:
        data = self._data
        if isinstance(data, (str, bytes, Mapping)):
            return False
        # pydantic models iterate over their fields
        if isinstance(getattr(type(data), 'model_fields', None), dict):
            return False
        return isinstance(data, Iterable)

    def __repr__(self) -> str:
        return f"Resource({type(self._data).__name__}, {self._metadata!r})"
