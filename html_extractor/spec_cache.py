"""
In-memory cache of compiled specifications.

Compiling builds pydantic classes and validates every selector and regex,
so callers that compile the same specification text repeatedly (per request,
per file) get the module built the first time instead.

Entries are keyed by a hash of the specification text, its source name and
the identity of the namespace objects it may reference, so the same text
compiled against different parser functions yields different modules. The
least recently used entry is dropped once `max_entries` is exceeded.
"""

import hashlib
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .logger import get_module_logger

if TYPE_CHECKING:
    from .main import ExtractorModule

logger = get_module_logger("spec_cache")

DEFAULT_MAX_ENTRIES = 128


class SpecCache:
    """Thread-safe, size-bounded map from specification key to compiled ExtractorModule."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, ExtractorModule]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def make_key(text: str, namespace: Optional[Mapping[str, Any]] = None,
                 source_name: Optional[str] = None) -> str:
        """
        Generate a cache key for specification text, namespace and source name.

        The namespace contributes its names and the ids of the bound objects;
        two namespaces binding the same names to different callables differ.
        """
        digest = hashlib.md5(text.encode('utf-8'))
        digest.update(f"\0source={source_name or ''}".encode('utf-8'))
        for name in sorted(namespace or {}):
            digest.update(f"\0{name}={id(namespace[name])}".encode('utf-8'))
        # 16 hex chars (64 bits) is plenty for an in-process map
        return digest.hexdigest()[:16]

    def get(self, text: str, namespace: Optional[Mapping[str, Any]] = None,
            source_name: Optional[str] = None) -> Optional["ExtractorModule"]:
        key = self.make_key(text, namespace, source_name)
        with self._lock:
            module = self._entries.get(key)
            if module is not None:
                self._entries.move_to_end(key)
        if module is None:
            logger.debug(f"Cache miss for key: {key}")
        else:
            logger.debug(f"Cache hit for key: {key}")
        return module

    def put(self, text: str, module: "ExtractorModule",
            namespace: Optional[Mapping[str, Any]] = None,
            source_name: Optional[str] = None) -> "ExtractorModule":
        """
        Store a compiled module and return the cached one.

        When two threads compile the same text at once, the first stored
        module wins and both callers get it.
        """
        key = self.make_key(text, namespace, source_name)
        with self._lock:
            cached = self._entries.setdefault(key, module)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted compiled specification: {evicted}")
        return cached

    def exists(self, text: str, namespace: Optional[Mapping[str, Any]] = None,
               source_name: Optional[str] = None) -> bool:
        return self.make_key(text, namespace, source_name) in self._entries

    def clear(self) -> int:
        """Clear all cached modules. Returns count of dropped entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} compiled specifications")
        return count

    def __len__(self) -> int:
        return len(self._entries)


# Singleton default cache shared by every compile_spec() call
_default_cache: Optional[SpecCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> SpecCache:
    """Get or create the default cache instance."""
    global _default_cache
    if _default_cache is None:
        with _default_cache_lock:
            if _default_cache is None:
                _default_cache = SpecCache()
    return _default_cache
