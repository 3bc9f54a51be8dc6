"""Tier-gated visibility decisions for the UI.

Nothing here is a security boundary: the remote store must authorize every
read and write on its own. ``AccessControl`` only decides what to render, and
it fails closed, so a loading or failed tier lookup always reads as ``none``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from picklab.access import tiers
from picklab.access.sources import ACTIVE_STATUS, TierSource
from picklab.access.tiers import Tier, normalize_tier
from picklab.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str | None = None


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    required_tier: Tier

    def __bool__(self) -> bool:
        return self.allowed


class AccessControl:
    """Holds the current tier for one session and answers gating queries."""

    def __init__(self, tier_source: TierSource, admin_email: str | None = None) -> None:
        self.tier_source = tier_source
        if admin_email is None:
            admin_email = get_settings().admin_email
        self.admin_email = admin_email.strip().lower()
        self.identity: Identity | None = None
        self.tier = Tier.NONE
        self.is_admin = False
        self.is_loading = False
        self.subscription_end: datetime | None = None
        self._generation = 0

    def _matches_admin(self, identity: Identity | None) -> bool:
        if identity is None or not identity.email or not self.admin_email:
            return False
        return identity.email.strip().lower() == self.admin_email

    async def refresh(self, identity: Identity | None) -> Tier:
        """Re-resolve the tier after an identity change.

        The previous tier is dropped before the lookup starts, and a lookup
        overtaken by a newer refresh is discarded.
        """

        self._generation += 1
        generation = self._generation
        self.identity = identity
        self.tier = Tier.NONE
        self.subscription_end = None
        self.is_admin = self._matches_admin(identity)
        if identity is None:
            self.is_loading = False
            return self.tier

        self.is_loading = True
        record = None
        try:
            record = await self.tier_source.fetch_subscription(identity.user_id)
        except Exception as exc:
            logger.error("Failed to fetch subscription for %s: %s", identity.user_id, exc)

        if generation != self._generation:
            logger.debug("Discarding tier lookup for %s; identity changed", identity.user_id)
            return self.tier

        tier = Tier.NONE
        if record is not None and record.status.strip().lower() == ACTIVE_STATUS:
            tier = normalize_tier(record.tier)
        self.tier = tier
        self.subscription_end = record.current_period_end if record and tier else None
        self.is_loading = False
        return tier

    def decide(self, required: Any) -> AccessDecision:
        required_tier = normalize_tier(required, unknown=Tier.ELITE)
        if self.is_admin:
            return AccessDecision(True, required_tier)
        return AccessDecision(self.tier >= required_tier, required_tier)

    def can_view(self, required: Any) -> bool:
        return self.decide(required).allowed

    @property
    def has_subscription(self) -> bool:
        return self.tier is not Tier.NONE

    @property
    def max_daily_picks(self) -> int | None:
        return None if self.is_admin else tiers.max_daily_picks(self.tier)

    @property
    def can_export_data(self) -> bool:
        return self.is_admin or tiers.can_export_data(self.tier)

    @property
    def can_view_detailed_analysis(self) -> bool:
        return self.is_admin or tiers.can_view_detailed_analysis(self.tier)

    @property
    def can_view_privileged_content(self) -> bool:
        return self.is_admin or tiers.can_view_privileged_content(self.tier)

    @property
    def display_tier(self) -> str:
        return "admin" if self.is_admin else self.tier.label
