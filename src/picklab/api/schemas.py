"""Pydantic schemas for the PickLab API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class OddsQuoteResponse(BaseModel):
    raw: str
    kind: str
    decimal_odds: float
    american_odds: int
    implied_probability: float
    stake: float
    payout: float
    profit: float
    formatted_odds: str
    formatted_american: str
    formatted_payout: str


class SlipItemResponse(BaseModel):
    prediction: dict[str, Any]
    added_at: datetime
    decimal_odds: float
    confidence: int


class SlipResponse(BaseModel):
    user_id: str
    state: str
    count: int
    items: list[SlipItemResponse]
    combined_odds: float
    stake: float
    potential_payout: float
    potential_profit: float


class AccessResponse(BaseModel):
    user_id: str
    tier: str
    display_tier: str
    is_admin: bool
    has_subscription: bool
    subscription_end: datetime | None = None
    required_tier: str | None = None
    allowed: bool | None = None
    max_daily_picks: int | None = None
    can_export_data: bool
    can_view_detailed_analysis: bool
    can_view_privileged_content: bool
