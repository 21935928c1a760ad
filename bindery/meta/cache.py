"""Metadata Caches

Two implementations behind one contract:
- MemoryMetaCache: process-lifetime dict
- FileMetaCache: pickled ClassMeta per type under ``<dir>/<sha1(type_id)>.meta.cache``,
  with an in-memory layer on top so a warm entry is returned by identity

A missing, unreadable or corrupt cache file is a miss, never an error. Writes
go to a temporary file in the same directory and are moved into place with
``os.replace`` so readers only ever see a complete file.
"""
from __future__ import annotations

import hashlib
import os
import pickle
import tempfile
from abc import ABC, abstractmethod
from contextlib import suppress
from pathlib import Path

from bindery.core.logging import meta_logger

from .fields import ClassMeta

log = meta_logger()

_READ_ERRORS = (OSError, EOFError, pickle.UnpicklingError, AttributeError, ImportError, IndexError, TypeError, ValueError)
_WRITE_ERRORS = (OSError, pickle.PicklingError, AttributeError, TypeError)


class MetaCache(ABC):
    """Key to ClassMeta store."""
    
    @abstractmethod
    def get(self, type_id: str) -> ClassMeta | None:
        """Return the cached ClassMeta or None on a miss."""
    
    @abstractmethod
    def set(self, type_id: str, meta: ClassMeta) -> None:
        """Store metadata for a type."""
    
    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""
    
    @abstractmethod
    def count(self) -> int:
        """Number of cached entries."""
    
    def has(self, type_id: str) -> bool: return self.get(type_id) is not None


class MemoryMetaCache(MetaCache):
    def __init__(self) -> None:
        self._entries: dict[str, ClassMeta] = {}
    
    def get(self, type_id: str) -> ClassMeta | None: return self._entries.get(type_id)
    
    def set(self, type_id: str, meta: ClassMeta) -> None: self._entries[type_id] = meta
    
    def has(self, type_id: str) -> bool: return type_id in self._entries
    
    def clear(self) -> None: self._entries.clear()
    
    def count(self) -> int: return len(self._entries)
    
    @property
    def cached_types(self) -> list[str]: return list(self._entries)


class FileMetaCache(MetaCache):
    """Persistent metadata cache, last writer wins."""
    
    SUFFIX = ".meta.cache"
    
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._memory = MemoryMetaCache()
    
    def path_for(self, type_id: str) -> Path:
        return self.directory / f"{hashlib.sha1(type_id.encode()).hexdigest()}{self.SUFFIX}"
    
    def get(self, type_id: str) -> ClassMeta | None:
        if (meta := self._memory.get(type_id)) is not None:
            return meta
        path = self.path_for(type_id)
        if not path.is_file():
            return None
        try:
            meta = pickle.loads(path.read_bytes())
        except _READ_ERRORS as e:
            log.warning("meta_cache_unreadable", type_id=type_id, path=str(path), error=str(e))
            return None
        if not isinstance(meta, ClassMeta) or meta.type_id != type_id:
            log.warning("meta_cache_mismatch", type_id=type_id, path=str(path))
            return None
        self._memory.set(type_id, meta)
        return meta
    
    def set(self, type_id: str, meta: ClassMeta) -> None:
        self._memory.set(type_id, meta)
        tmp_name: str | None = None
        try:
            payload = pickle.dumps(meta, protocol=pickle.HIGHEST_PROTOCOL)
            with tempfile.NamedTemporaryFile(dir=self.directory, suffix=".tmp", delete=False) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self.path_for(type_id))
            tmp_name = None
        except _WRITE_ERRORS as e:
            log.warning("meta_cache_write_failed", type_id=type_id, error=str(e))
        finally:
            if tmp_name is not None:
                with suppress(OSError):
                    os.unlink(tmp_name)
    
    def clear(self) -> None:
        self._memory.clear()
        for path in self.directory.glob(f"*{self.SUFFIX}"):
            with suppress(OSError):
                path.unlink()
    
    def count(self) -> int: return sum(1 for _ in self.directory.glob(f"*{self.SUFFIX}"))
