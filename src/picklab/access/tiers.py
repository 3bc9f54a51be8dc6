"""Tier hierarchy and capability table."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

logger = logging.getLogger(__name__)


class Tier(IntEnum):
    """Subscription tiers; integer value is the position in the hierarchy."""

    NONE = 0
    STARTER = 1
    PRO = 2
    ELITE = 3

    @property
    def label(self) -> str:
        return self.name.lower()


TIER_ALIASES: dict[str, Tier] = {
    "none": Tier.NONE,
    "free": Tier.NONE,
    "starter": Tier.STARTER,
    "basic": Tier.STARTER,
    "pro": Tier.PRO,
    "elite": Tier.ELITE,
}

STARTER_DAILY_PICKS = 10


def normalize_tier(raw: Any, unknown: Tier = Tier.NONE) -> Tier:
    """Map a tier string (case-insensitive, legacy aliases allowed) to a Tier.

    Unrecognized values resolve to ``unknown``. A subscriber's tier keeps the
    default of ``Tier.NONE``; a content requirement passes ``Tier.ELITE`` so
    that a misspelled gate hides content instead of exposing it.
    """

    if isinstance(raw, Tier):
        return raw
    if raw is None:
        return Tier.NONE
    key = str(raw).strip().lower()
    tier = TIER_ALIASES.get(key)
    if tier is None:
        if key:
            logger.warning("Unknown tier %r, treating as %s", raw, unknown.label)
        return unknown
    return tier


def max_daily_picks(tier: Tier) -> int | None:
    """Daily pick allowance; ``None`` means unlimited."""

    return STARTER_DAILY_PICKS if tier is Tier.STARTER else None


def can_export_data(tier: Tier) -> bool:
    return tier >= Tier.PRO


def can_view_detailed_analysis(tier: Tier) -> bool:
    return tier > Tier.NONE


def can_view_privileged_content(tier: Tier) -> bool:
    return tier is Tier.ELITE
