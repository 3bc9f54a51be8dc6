"""Tagged odds variants produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class OddsKind(str, Enum):
    AMERICAN = "american"
    DECIMAL = "decimal"
    UNPARSED = "unparsed"


@dataclass(frozen=True)
class AmericanOdds:
    """Signed American price, magnitude >= 100."""

    value: int
    kind: OddsKind = OddsKind.AMERICAN

    def __str__(self) -> str:
        return f"{self.value:+d}"


@dataclass(frozen=True)
class DecimalOdds:
    """Total payout multiple per unit staked, >= 1.01."""

    value: float
    kind: OddsKind = OddsKind.DECIMAL

    def __str__(self) -> str:
        return f"{self.value:.2f}"


@dataclass(frozen=True)
class UnparsedOdds:
    """A literal the classifier could not interpret."""

    raw: str
    kind: OddsKind = OddsKind.UNPARSED

    def __str__(self) -> str:
        return self.raw


Odds = Union[AmericanOdds, DecimalOdds, UnparsedOdds]
