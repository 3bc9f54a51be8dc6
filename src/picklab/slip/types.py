"""Slip items and the ordered, duplicate-free slip built from them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from picklab.odds.engine import combined_odds
from picklab.picks.types import Pick


class SlipItem(BaseModel):
    """A pick as it sits in someone's slip.

    Serializes to the cache layout ``{"prediction": ..., "addedAt": epoch_ms}``;
    the owning user is kept in memory only.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pick: Pick = Field(alias="prediction")
    added_at: int = Field(alias="addedAt")
    user_id: str | None = Field(default=None, exclude=True)

    @property
    def pick_id(self) -> str:
        return self.pick.id

    @property
    def added_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.added_at / 1000, tz=timezone.utc)


SlipItemList = TypeAdapter(list[SlipItem])


def dump_items(items: Iterable[SlipItem]) -> str:
    return SlipItemList.dump_json(list(items), by_alias=True).decode("utf-8")


def load_items(payload: str | bytes) -> list[SlipItem]:
    return SlipItemList.validate_json(payload)


class Slip:
    """Ordered slip items keyed by pick id."""

    def __init__(self, items: Iterable[SlipItem] = ()) -> None:
        self._items: list[SlipItem] = []
        for item in items:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SlipItem]:
        return iter(self._items)

    @property
    def items(self) -> tuple[SlipItem, ...]:
        return tuple(self._items)

    def contains(self, pick_id: str) -> bool:
        return any(item.pick_id == pick_id for item in self._items)

    def add(self, item: SlipItem) -> bool:
        if self.contains(item.pick_id):
            return False
        self._items.append(item)
        return True

    def remove(self, pick_id: str) -> bool:
        kept = [item for item in self._items if item.pick_id != pick_id]
        changed = len(kept) != len(self._items)
        self._items = kept
        return changed

    def clear(self) -> bool:
        changed = bool(self._items)
        self._items = []
        return changed

    def pending(self) -> list[SlipItem]:
        return [item for item in self._items if item.pick.is_pending]

    def combined_odds(self) -> float:
        return combined_odds(item.pick.odds for item in self._items)

    def potential_payout(self, stake: float) -> float:
        return stake * self.combined_odds()

    def potential_profit(self, stake: float) -> float:
        if not self._items:
            return 0.0
        return self.potential_payout(stake) - stake
