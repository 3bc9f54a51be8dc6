"""Where subscription tiers come from."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from picklab.db.database import get_session
from picklab.db.models import Subscription

ACTIVE_STATUS = "active"


@dataclass(frozen=True)
class SubscriptionRecord:
    tier: str
    status: str
    current_period_end: datetime | None = None


class TierSource(Protocol):
    async def fetch_subscription(self, user_id: str) -> SubscriptionRecord | None:
        """Return the newest active subscription for ``user_id``, if any."""
        ...


class SqlTierSource:
    """Reads the ``subscriptions`` table."""

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self.session_factory = session_factory

    def _fetch(self, user_id: str) -> SubscriptionRecord | None:
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id, Subscription.status == ACTIVE_STATUS)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .limit(1)
        )
        with get_session(self.session_factory) as session:
            row = session.execute(stmt).scalars().first()
            if row is None:
                return None
            return SubscriptionRecord(
                tier=row.tier,
                status=row.status,
                current_period_end=row.current_period_end,
            )

    async def fetch_subscription(self, user_id: str) -> SubscriptionRecord | None:
        return await asyncio.to_thread(self._fetch, user_id)
