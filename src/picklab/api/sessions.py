"""Per-user slip stores shared by API requests.

At most ``max_sessions`` stores stay open; the least recently used one is
flushed and closed to make room for a new user.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Callable

from picklab.config import get_settings
from picklab.slip.cache import SlipCache
from picklab.slip.remote import SlipRemote
from picklab.slip.store import SlipStore

logger = logging.getLogger(__name__)


class SlipSessions:
    def __init__(
        self,
        cache_factory: Callable[[str], SlipCache],
        remote: SlipRemote | None,
        flush_delay: float | None = None,
        max_sessions: int | None = None,
    ) -> None:
        self.cache_factory = cache_factory
        self.remote = remote
        self.flush_delay = flush_delay
        self.max_sessions = max_sessions or get_settings().slip_max_sessions
        self._stores: OrderedDict[str, SlipStore] = OrderedDict()
        self._starting: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._stores

    async def get(self, user_id: str) -> SlipStore:
        store = self._cached(user_id)
        if store is not None:
            return store

        # Only requests for the same user wait on each other's initial load.
        lock = self._starting.setdefault(user_id, asyncio.Lock())
        async with lock:
            store = self._cached(user_id)
            if store is None:
                store = SlipStore(
                    self.cache_factory(user_id),
                    self.remote,
                    flush_delay=self.flush_delay,
                )
                await store.start(user_id)
                self._stores[user_id] = store
        if self._starting.get(user_id) is lock and not lock.locked():
            del self._starting[user_id]
        await self._evict()
        return store

    def _cached(self, user_id: str) -> SlipStore | None:
        store = self._stores.get(user_id)
        if store is not None:
            self._stores.move_to_end(user_id)
        return store

    async def _evict(self) -> None:
        while len(self._stores) > self.max_sessions:
            user_id, store = self._stores.popitem(last=False)
            logger.debug("Closing idle slip session for %s", user_id)
            await self._shutdown(store)

    @staticmethod
    async def _shutdown(store: SlipStore) -> None:
        if store.has_pending_flush:
            await store.flush()
        await store.close()
        await store.drain()

    async def close_all(self) -> None:
        """Flush what is pending, then stop every store."""

        while self._stores:
            _, store = self._stores.popitem(last=False)
            await self._shutdown(store)
