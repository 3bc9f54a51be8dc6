"""Betting slip state with a local cache and debounced remote persistence.

Mutations are synchronous: they change the in-memory slip, rewrite the local
cache and (re)arm a debounce timer. When the timer fires, the slip as it is at
that moment replaces the owning user's remote rows. Two sessions of the same
user are not merged; whichever flushes last wins.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from picklab.config import get_settings
from picklab.picks.types import Pick
from picklab.scheduling.debounce import DebouncedTask
from picklab.slip.cache import SlipCache
from picklab.slip.remote import SlipRemote
from picklab.slip.types import Slip, SlipItem

logger = logging.getLogger(__name__)


class SlipState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SYNCING = "syncing"
    CLOSED = "closed"


class SlipStore:
    def __init__(
        self,
        cache: SlipCache,
        remote: SlipRemote | None = None,
        *,
        flush_delay: float | None = None,
        time_fn: Callable[[], float] | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        settings = get_settings()
        if flush_delay is None:
            flush_delay = settings.slip_flush_delay_ms / 1000
        self.cache = cache
        self.remote = remote
        self.default_stake = settings.default_stake
        self.user_id: str | None = None
        self.state = SlipState.UNINITIALIZED
        self._slip = Slip()
        self._time = time_fn or time.time
        self._flusher = DebouncedTask(flush_delay, self._flush_remote, sleep_fn=sleep_fn)
        self._generation = 0
        self._dirty = False
        self._removed_while_loading: set[str] = set()
        self._syncing = 0

    async def start(self, user_id: str | None) -> None:
        """Load the slip for ``user_id``; anonymous sessions use the cache only.

        Picks added while the load is in flight are appended after the loaded
        ones, and picks removed in that window stay removed.
        """

        self._generation += 1
        generation = self._generation
        self.user_id = user_id
        self.state = SlipState.LOADING
        self._dirty = False
        self._removed_while_loading = set()
        self._syncing = 0

        loaded = await self._load_initial(user_id)
        if generation != self._generation:
            return

        merged = Slip(
            item.model_copy(update={"user_id": user_id})
            for item in loaded
            if item.pick_id not in self._removed_while_loading
        )
        if self._dirty:
            logger.debug("Slip changed while loading; merging with loaded items")
            for item in self._slip:
                merged.add(item)
            self.cache.write(list(merged))
        self._slip = merged
        self.state = SlipState.READY
        if self._dirty and self._can_sync():
            self._flusher.schedule()

    async def _load_initial(self, user_id: str | None) -> list[SlipItem]:
        if user_id is not None and self.remote is not None:
            try:
                remote_items = await self.remote.load(user_id)
            except Exception as exc:
                logger.error("Error loading betting slip for %s: %s", user_id, exc)
                remote_items = []
            if remote_items:
                # Remote rows arrive newest first; the slip keeps insertion order.
                items = list(reversed(remote_items))
                self.cache.write(items)
                return items
        return self.cache.read()

    async def close(self) -> None:
        """Tear down the session; a pending flush is dropped, in-flight writes are not."""

        self._generation += 1
        self._flusher.cancel()
        self.state = SlipState.CLOSED

    async def switch_user(self, user_id: str | None) -> None:
        previous = self.user_id
        await self.close()
        self._slip = Slip()
        if previous is not None and previous != user_id:
            # One cache key per device; a signed-in user's picks must not reach the next one.
            self.cache.clear()
        await self.start(user_id)

    async def flush(self) -> None:
        """Write to the remote store now instead of waiting out the debounce."""

        if not self._can_sync():
            return
        await self._flusher.fire_now()

    async def drain(self) -> None:
        await self._flusher.drain()

    def add(self, pick: Pick) -> bool:
        item = SlipItem(pick=pick, added_at=int(self._time() * 1000), user_id=self.user_id)
        if not self._slip.add(item):
            return False
        self._removed_while_loading.discard(item.pick_id)
        self._changed()
        return True

    def remove(self, pick_id: str) -> bool:
        if not self._slip.remove(pick_id):
            return False
        if self.state is SlipState.LOADING:
            self._removed_while_loading.add(pick_id)
        self._changed()
        return True

    def clear(self) -> bool:
        removed = [item.pick_id for item in self._slip]
        if not self._slip.clear():
            return False
        if self.state is SlipState.LOADING:
            self._removed_while_loading.update(removed)
        self._changed()
        return True

    def _changed(self) -> None:
        if self.state is SlipState.LOADING:
            self._dirty = True
        self.cache.write(list(self._slip))
        if self._can_sync():
            self._flusher.schedule()

    def _can_sync(self) -> bool:
        # While loading, the flush waits for the merge in start().
        return (
            self.user_id is not None
            and self.remote is not None
            and self.state not in (SlipState.LOADING, SlipState.CLOSED)
        )

    def _flush_remote(self) -> Awaitable[None]:
        return self._write_remote(self.user_id, self._generation, list(self._slip))

    async def _write_remote(
        self, user_id: str | None, generation: int, snapshot: list[SlipItem]
    ) -> None:
        if user_id is None or self.remote is None:
            return
        current = generation == self._generation
        if current:
            self._syncing += 1
            if self.state is SlipState.READY:
                self.state = SlipState.SYNCING
        try:
            await self.remote.replace(user_id, snapshot)
        except Exception as exc:
            logger.error("Error syncing betting slip for %s: %s", user_id, exc)
        finally:
            if current and generation == self._generation:
                self._syncing -= 1
                if not self._syncing and self.state is SlipState.SYNCING:
                    self.state = SlipState.READY

    @property
    def items(self) -> tuple[SlipItem, ...]:
        return self._slip.items

    @property
    def count(self) -> int:
        return len(self._slip)

    @property
    def has_pending_flush(self) -> bool:
        return self._flusher.pending

    def is_in_slip(self, pick_id: str) -> bool:
        return self._slip.contains(pick_id)

    def pending_items(self) -> list[SlipItem]:
        return self._slip.pending()

    def combined_odds(self) -> float:
        return self._slip.combined_odds()

    def potential_payout(self, stake: float | None = None) -> float:
        return self._slip.potential_payout(self.default_stake if stake is None else stake)

    def potential_profit(self, stake: float | None = None) -> float:
        return self._slip.potential_profit(self.default_stake if stake is None else stake)
