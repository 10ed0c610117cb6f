"""Session-scoped cache that collapses concurrent loads of the same key."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class _Entry[V]:
    task: asyncio.Task[V]
    waiters: int = 0


@dataclass(kw_only=True)
class KeyedOnceCache[K: Hashable, V]:
    """Runs a loader at most once per key and shares its result.

    Concurrent requests for a key that is still loading wait on the same
    in-flight task. A requester being cancelled does not cancel the load while
    others wait on it; once the last waiter is gone an unfinished load is
    cancelled and evicted so that nothing partial is ever cached. Loads that
    end in an exception are evicted as well.
    """

    name: str = "cache"
    _entries: dict[K, _Entry[V]] = field(default_factory=dict, init=False)

    def __len__(self) -> int:
        """Number of keys cached or still loading."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Whether ``key`` is cached or still loading."""
        return key in self._entries

    async def get_or_load(self, key: K, loader: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value for ``key``, loading it on first request."""
        entry = self._entries.get(key)
        if entry is None:
            log.debug("%s miss: %s", self.name, key)
            entry = _Entry(task=asyncio.ensure_future(loader()))
            self._entries[key] = entry
            entry.task.add_done_callback(lambda task: self._evict_failed(key, task))
        else:
            log.debug("%s hit: %s", self.name, key)

        entry.waiters += 1
        try:
            return await asyncio.shield(entry.task)
        finally:
            entry.waiters -= 1
            if entry.waiters == 0 and not entry.task.done():
                log.debug("%s load abandoned: %s", self.name, key)
                entry.task.cancel()
                self._discard(key, entry)

    def _evict_failed(self, key: K, task: asyncio.Task[V]) -> None:
        if task.cancelled() or task.exception() is not None:
            entry = self._entries.get(key)
            if entry is not None and entry.task is task:
                self._discard(key, entry)

    def _discard(self, key: K, entry: _Entry[V]) -> None:
        if self._entries.get(key) is entry:
            del self._entries[key]
