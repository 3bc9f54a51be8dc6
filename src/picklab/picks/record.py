"""Win/loss bookkeeping over a collection of picks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from picklab.picks.types import Pick, PickResult


@dataclass(frozen=True)
class PickRecord:
    total: int
    wins: int
    losses: int
    pushes: int
    pending: int

    @property
    def settled(self) -> int:
        return self.total - self.pending

    @property
    def accuracy(self) -> float:
        """Win percentage over settled picks, 0 when nothing has settled."""

        return (self.wins / self.settled) * 100 if self.settled else 0.0


def summarize_picks(picks: Iterable[Pick]) -> PickRecord:
    counts = {result: 0 for result in PickResult}
    total = 0
    for pick in picks:
        counts[pick.result] += 1
        total += 1
    return PickRecord(
        total=total,
        wins=counts[PickResult.WIN],
        losses=counts[PickResult.LOSS],
        pushes=counts[PickResult.PUSH],
        pending=counts[PickResult.PENDING],
    )
