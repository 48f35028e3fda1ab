"""Bounded insertion-ordered cache for what-if results."""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Hashable, Iterator, Optional, TypeVar

from decision_engine.log import get_logger

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class FIFOCache(Generic[K, V]):
    """
    Fixed-capacity cache with first-in, first-out eviction.
    
    Reads do not refresh an entry's position and re-inserting an existing
    key keeps its original slot, so the oldest inserted key is always the
    next one evicted.
    """
    
    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: "OrderedDict[K, V]" = OrderedDict()
    
    def get(self, key: K) -> Optional[V]:
        return self._entries.get(key)
    
    def put(self, key: K, value: V) -> None:
        if key in self._entries:
            self._entries[key] = value
            return
        if len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("whatif_cache_evicted", key=evicted)
        self._entries[key] = value
    
    def discard(self, key: K) -> bool:
        return self._entries.pop(key, None) is not None
    
    def clear(self) -> None:
        self._entries.clear()
    
    def keys(self) -> Iterator[K]:
        return iter(self._entries)
    
    def __contains__(self, key: object) -> bool:
        return key in self._entries
    
    def __len__(self) -> int:
        return len(self._entries)
