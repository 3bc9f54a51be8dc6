"""SQL adapter tests against in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from picklab.access.sources import SqlTierSource
from picklab.db.models import Base, SlipRow, Subscription
from picklab.picks.types import Pick
from picklab.slip.remote import SqlSlipRemote
from picklab.slip.types import SlipItem


@pytest.fixture()
def session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


def _item(pick_id: str, added_at: int) -> SlipItem:
    pick = Pick(id=pick_id, sport="NHL", pick="Over 5.5", odds="+105", confidence=71, source="model-v3")
    return SlipItem(pick=pick, added_at=added_at)


@pytest.mark.asyncio
async def test_replace_then_load_newest_first(session_factory: sessionmaker) -> None:
    remote = SqlSlipRemote(session_factory)
    await remote.replace("u1", [_item("a", 1_700_000_000_000), _item("b", 1_700_000_060_000)])
    await remote.replace("u2", [_item("x", 1_700_000_000_000)])

    loaded = await remote.load("u1")
    assert [item.pick_id for item in loaded] == ["b", "a"]
    assert loaded[0].added_at == 1_700_000_060_000
    assert loaded[0].user_id == "u1"
    # Unknown blob fields survive the round trip.
    assert loaded[0].pick.model_extra == {"source": "model-v3"}


@pytest.mark.asyncio
async def test_replace_deletes_previous_rows(session_factory: sessionmaker) -> None:
    remote = SqlSlipRemote(session_factory)
    await remote.replace("u1", [_item("a", 1), _item("b", 2)])
    await remote.replace("u1", [_item("c", 3)])
    await remote.replace("u2", [_item("keep", 4)])

    with session_factory() as session:
        rows = session.execute(select(SlipRow).order_by(SlipRow.id)).scalars().all()
    assert [(row.user_id, row.prediction_id) for row in rows] == [("u1", "c"), ("u2", "keep")]

    await remote.replace("u1", [])
    assert await remote.load("u1") == []


@pytest.mark.asyncio
async def test_tier_source_picks_newest_active_subscription(session_factory: sessionmaker) -> None:
    now = datetime(2026, 1, 1)
    with session_factory() as session:
        session.add_all(
            [
                Subscription(user_id="u1", tier="starter", status="active", created_at=now - timedelta(days=30)),
                Subscription(user_id="u1", tier="Elite", status="active", created_at=now),
                Subscription(user_id="u1", tier="pro", status="canceled", created_at=now + timedelta(days=1)),
                Subscription(user_id="u2", tier="pro", status="past_due", created_at=now),
            ]
        )
        session.commit()

    source = SqlTierSource(session_factory)
    record = await source.fetch_subscription("u1")
    assert record is not None
    assert record.tier == "Elite"
    assert await source.fetch_subscription("u2") is None
    assert await source.fetch_subscription("missing") is None
