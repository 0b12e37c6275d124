import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from common.logger import logger


class LookupCache:
    """Process-wide memo for store-level lookups (location, collections, publication).

    Entries are fetched lazily on first use and kept until the process exits.
    A lock per key makes concurrent callers share a single fetch; failed
    fetches are not cached.
    """

    def __init__(self):
        self._values: dict[Any, Any] = {}
        self._locks: dict[Any, asyncio.Lock] = {}

    def __contains__(self, key: Any) -> bool:
        return key in self._values

    async def get_or_fetch(self, key: Any, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        if key in self._values:
            return self._values[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key not in self._values:
                logger.debug(f"Cache miss for {getattr(key, 'value', key)}, fetching")
                self._values[key] = await fetcher()
        return self._values[key]

    def clear(self):
        self._values.clear()
        self._locks.clear()
