"""Pick schema, cache backends and track-record tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from picklab.picks.record import summarize_picks
from picklab.picks.types import Pick, PickResult
from picklab.slip.cache import FileCache, SlipCache
from picklab.slip.types import SlipItem, load_items


def test_pick_accepts_camel_case_blob() -> None:
    pick = Pick.model_validate(
        {
            "id": 42,
            "homeTeam": "Boston",
            "awayTeam": "Miami",
            "gameTime": "2026-02-01T19:30:00Z",
            "odds": "+150",
            "confidence": 0.72,
            "result": "WIN",
            "reasoning": "rest advantage",
        }
    )
    assert pick.id == "42"
    assert pick.home_team == "Boston"
    assert pick.decimal_odds == pytest.approx(2.5)
    assert pick.normalized_confidence == 72
    assert pick.result is PickResult.WIN
    assert pick.to_blob()["reasoning"] == "rest advantage"


def test_slip_item_cache_layout() -> None:
    item = SlipItem(pick=Pick(id="p1", odds="-110"), added_at=1_700_000_000_000, user_id="u1")
    dumped = item.model_dump(by_alias=True)
    assert set(dumped) == {"prediction", "addedAt"}
    [restored] = load_items('[{"prediction": {"id": "p1", "odds": "-110"}, "addedAt": 5}]')
    assert restored.pick_id == "p1"
    assert restored.user_id is None


def test_file_cache_round_trip(tmp_path: Path) -> None:
    backend = FileCache(tmp_path / "cache")
    cache = SlipCache(backend, "picklab_betting_slip_u/1")
    assert cache.read() == []

    cache.write([SlipItem(pick=Pick(id="p1"), added_at=1)])
    assert [item.pick_id for item in cache.read()] == ["p1"]
    assert len(list((tmp_path / "cache").iterdir())) == 1

    backend.delete("picklab_betting_slip_u/1")
    assert cache.read() == []


def test_summarize_picks() -> None:
    picks = [
        Pick(id="1", result="win"),
        Pick(id="2", result="win"),
        Pick(id="3", result="loss"),
        Pick(id="4", result="push"),
        Pick(id="5"),
    ]
    record = summarize_picks(picks)
    assert (record.total, record.wins, record.losses, record.pushes, record.pending) == (5, 2, 1, 1, 1)
    assert record.accuracy == pytest.approx(50.0)
    assert summarize_picks([]).accuracy == 0.0
