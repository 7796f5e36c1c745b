"""Keyed cache of API responses with prefix invalidation."""

import logging
from typing import Any, Hashable

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]


class QueryCache:
    def __init__(self):
        self._entries: dict[QueryKey, Any] = {}

    def get(self, key: QueryKey) -> Any | None:
        return self._entries.get(key)

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = value

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with ``prefix``; returns how many were dropped."""
        stale = [key for key in self._entries if key[:len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        logger.debug('Invalidated %d cached queries under %r', len(stale), prefix)
        return len(stale)
