"""Durable per-user slip storage."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from picklab.db.database import get_session
from picklab.db.models import SlipRow
from picklab.picks.types import Pick
from picklab.slip.types import SlipItem


class SlipRemote(Protocol):
    async def load(self, user_id: str) -> list[SlipItem]:
        """Return the user's rows, newest first."""
        ...

    async def replace(self, user_id: str, items: Sequence[SlipItem]) -> None:
        """Delete every row owned by ``user_id`` and insert ``items``."""
        ...


def _to_epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


class SqlSlipRemote:
    """``betting_slips`` table adapter; last write wins, no version check."""

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self.session_factory = session_factory

    def _load(self, user_id: str) -> list[SlipItem]:
        stmt = (
            select(SlipRow)
            .where(SlipRow.user_id == user_id)
            .order_by(SlipRow.added_at.desc(), SlipRow.id.desc())
        )
        with get_session(self.session_factory) as session:
            return [
                SlipItem(
                    pick=Pick.model_validate(row.prediction_data),
                    added_at=_to_epoch_ms(row.added_at),
                    user_id=row.user_id,
                )
                for row in session.execute(stmt).scalars()
            ]

    def _replace(self, user_id: str, items: Sequence[SlipItem]) -> None:
        with get_session(self.session_factory) as session:
            session.execute(delete(SlipRow).where(SlipRow.user_id == user_id))
            for item in items:
                session.add(
                    SlipRow(
                        user_id=user_id,
                        prediction_id=item.pick_id,
                        prediction_data=item.pick.to_blob(),
                        added_at=item.added_at_datetime,
                    )
                )

    async def load(self, user_id: str) -> list[SlipItem]:
        return await asyncio.to_thread(self._load, user_id)

    async def replace(self, user_id: str, items: Sequence[SlipItem]) -> None:
        await asyncio.to_thread(self._replace, user_id, list(items))
