"""
Caches for built ResourceMetadata.

FileCache pickles each metadata object to its own file, so restoring goes
through ResourceMetadata.__setstate__ and re-binds persistence reflection.
"""

import logging
import os
import pickle
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from .exceptions import MetadataRestoreError, ReflectionError
from .metadata import ResourceMetadata

logger = logging.getLogger(__name__)


class MemoryCache:
    """Per-process cache keyed by dotted class name."""

    def __init__(self):
        self._entries: Dict[str, ResourceMetadata] = {}

    def load(self, name: str) -> Optional[ResourceMetadata]:
        return self._entries.get(name)

    def save(self, metadata: ResourceMetadata) -> None:
        self._entries[metadata.name] = metadata

    def evict(self, name: str) -> None:
        self._entries.pop(name, None)


class FileCache:
    """Pickle file per class under a cache directory."""

    SUFFIX = '.cache.pkl'

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise ValueError(f"Cache directory does not exist: {self.directory}")

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}{self.SUFFIX}"

    def load(self, name: str) -> Optional[ResourceMetadata]:
        """
        Load metadata from the cache.

        Corrupt or outdated entries are evicted and reported as a miss.

        Raises:
            MetadataRestoreError: If the entry unpickles but its persistence
                reflection cannot be re-bound
        """
        path = self._path(name)
        if not path.exists():
            return None

        try:
            with open(path, 'rb') as cache_handle:
                metadata = pickle.load(cache_handle)
        except MetadataRestoreError:
            raise
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, ReflectionError) as e:
            logger.warning(f"Discarding unreadable cache entry {path}: {e}")
            self.evict(name)
            return None

        if not isinstance(metadata, ResourceMetadata):
            logger.warning(f"Discarding cache entry {path}: unexpected {type(metadata).__name__}")
            self.evict(name)
            return None

        return metadata

    def save(self, metadata: ResourceMetadata) -> None:
        path = self._path(metadata.name)
        # Write then rename so readers never see a partial file
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as cache_handle:
                pickle.dump(metadata, cache_handle, protocol=pickle.HIGHEST_PROTOCOL)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Cached resource metadata for {metadata.name} in {path}")

    def evict(self, name: str) -> None:
        path = self._path(name)
        if path.exists():
            path.unlink()
            logger.info(f"Evicted cached resource metadata for {name}")
