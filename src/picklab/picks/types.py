"""Pick schema shared by the slip, the cache and the remote store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from picklab.odds.engine import classify, to_decimal
from picklab.odds.types import Odds
from picklab.picks.confidence import normalize_confidence


class PickResult(str, Enum):
    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"


class Pick(BaseModel):
    """Immutable reference to a predicted outcome.

    Unknown fields are kept so the blob stored remotely round-trips untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str
    sport: str = ""
    league: str | None = None
    home_team: str = Field(default="", alias="homeTeam")
    away_team: str = Field(default="", alias="awayTeam")
    game_time: datetime | None = Field(default=None, alias="gameTime")
    pick: str = ""
    bet_type: str | None = Field(default=None, alias="betType")
    line: str | None = None
    odds: str | float | None = None
    confidence: float | None = None
    tier: str = "free"
    result: PickResult = PickResult.PENDING

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("result", mode="before")
    @classmethod
    def _coerce_result(cls, value: Any) -> Any:
        if value is None:
            return PickResult.PENDING
        return value.lower() if isinstance(value, str) else value

    @property
    def odds_value(self) -> Odds:
        return classify(self.odds)

    @property
    def decimal_odds(self) -> float:
        return to_decimal(self.odds)

    @property
    def normalized_confidence(self) -> int:
        return normalize_confidence(self.confidence)

    @property
    def is_pending(self) -> bool:
        return self.result is PickResult.PENDING

    def to_blob(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
