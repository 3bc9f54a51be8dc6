"""Access control tests."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from picklab.access.control import AccessControl, Identity
from picklab.access.sources import SubscriptionRecord
from picklab.access.tiers import Tier, normalize_tier

ADMIN = "owner@example.com"


class StubTierSource:
    def __init__(self, records: dict[str, SubscriptionRecord | None] | None = None) -> None:
        self.records = records or {}
        self.calls: list[str] = []

    async def fetch_subscription(self, user_id: str) -> SubscriptionRecord | None:
        self.calls.append(user_id)
        return self.records.get(user_id)


class FailingTierSource:
    async def fetch_subscription(self, user_id: str) -> SubscriptionRecord | None:
        raise ConnectionError("subscriptions table unreachable")


class GatedTierSource:
    """Blocks each lookup until the test releases it."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.records: dict[str, SubscriptionRecord] = {}

    async def fetch_subscription(self, user_id: str) -> SubscriptionRecord | None:
        gate = self.gates.setdefault(user_id, asyncio.Event())
        await gate.wait()
        return self.records.get(user_id)


def _sub(tier: str, status: str = "active") -> SubscriptionRecord:
    return SubscriptionRecord(tier=tier, status=status, current_period_end=datetime(2030, 1, 1))


async def _control_for(tier: str, *, email: str = "fan@example.com") -> AccessControl:
    control = AccessControl(StubTierSource({"u1": _sub(tier)}), admin_email=ADMIN)
    await control.refresh(Identity("u1", email))
    return control


def test_normalize_tier_aliases() -> None:
    assert normalize_tier("ELITE") is Tier.ELITE
    assert normalize_tier(" Pro ") is Tier.PRO
    assert normalize_tier("basic") is Tier.STARTER
    assert normalize_tier("free") is Tier.NONE
    assert normalize_tier("platinum") is Tier.NONE
    assert normalize_tier(None) is Tier.NONE
    assert Tier.NONE < Tier.STARTER < Tier.PRO < Tier.ELITE


@pytest.mark.asyncio
async def test_starter_cannot_view_pro_but_admin_can() -> None:
    control = await _control_for("starter")
    assert control.can_view("starter")
    assert control.can_view("basic")
    assert not control.can_view("pro")
    decision = control.decide(Tier.PRO)
    assert not decision
    assert decision.required_tier is Tier.PRO

    admin = await _control_for("starter", email="Owner@Example.com")
    assert admin.is_admin
    assert admin.can_view("pro")
    assert admin.display_tier == "admin"


@pytest.mark.asyncio
@pytest.mark.parametrize("user_tier", ["none", "starter", "pro", "elite"])
async def test_can_view_is_monotonic(user_tier: str) -> None:
    control = await _control_for(user_tier)
    ordered = [Tier.NONE, Tier.STARTER, Tier.PRO, Tier.ELITE]
    for low, high in zip(ordered, ordered[1:]):
        if control.can_view(high):
            assert control.can_view(low)


@pytest.mark.asyncio
async def test_admin_override_ignores_stored_tier() -> None:
    control = AccessControl(StubTierSource(), admin_email=ADMIN)
    await control.refresh(Identity("boss", ADMIN))
    assert control.tier is Tier.NONE
    for tier in Tier:
        assert control.can_view(tier)
    assert control.can_export_data
    assert control.can_view_privileged_content
    assert control.max_daily_picks is None


@pytest.mark.asyncio
async def test_capabilities_per_tier() -> None:
    starter = await _control_for("starter")
    assert starter.max_daily_picks == 10
    assert not starter.can_export_data
    assert starter.can_view_detailed_analysis
    assert not starter.can_view_privileged_content

    pro = await _control_for("pro")
    assert pro.max_daily_picks is None
    assert pro.can_export_data
    assert not pro.can_view_privileged_content

    elite = await _control_for("elite")
    assert elite.can_view_privileged_content
    assert elite.subscription_end == datetime(2030, 1, 1)

    nobody = await _control_for("none")
    assert not nobody.has_subscription
    assert not nobody.can_view_detailed_analysis
    assert nobody.max_daily_picks is None


@pytest.mark.asyncio
async def test_fetch_failure_fails_closed() -> None:
    control = AccessControl(FailingTierSource(), admin_email=ADMIN)
    await control.refresh(Identity("u1", "fan@example.com"))
    assert control.tier is Tier.NONE
    assert not control.can_view("starter")
    assert not control.is_loading


@pytest.mark.asyncio
async def test_inactive_subscription_and_unknown_tier_map_to_none() -> None:
    source = StubTierSource({"lapsed": _sub("elite", status="canceled"), "odd": _sub("diamond")})
    control = AccessControl(source, admin_email=ADMIN)
    await control.refresh(Identity("lapsed"))
    assert control.tier is Tier.NONE
    await control.refresh(Identity("odd"))
    assert control.tier is Tier.NONE


@pytest.mark.asyncio
async def test_signed_out_session_has_no_access() -> None:
    control = await _control_for("elite")
    await control.refresh(None)
    assert control.tier is Tier.NONE
    assert not control.is_admin
    assert not control.can_view("starter")


@pytest.mark.asyncio
async def test_refresh_drops_previous_tier_while_loading() -> None:
    source = GatedTierSource()
    source.records = {"a": _sub("elite"), "b": _sub("starter")}
    control = AccessControl(source, admin_email=ADMIN)

    first = asyncio.create_task(control.refresh(Identity("a")))
    await asyncio.sleep(0)
    source.gates["a"].set()
    await first
    assert control.tier is Tier.ELITE

    second = asyncio.create_task(control.refresh(Identity("b")))
    await asyncio.sleep(0)
    assert control.is_loading
    assert control.tier is Tier.NONE
    assert not control.can_view("starter")
    source.gates["b"].set()
    await second
    assert control.tier is Tier.STARTER


@pytest.mark.asyncio
async def test_stale_lookup_is_discarded() -> None:
    source = GatedTierSource()
    source.records = {"old": _sub("elite"), "new": _sub("starter")}
    control = AccessControl(source, admin_email=ADMIN)

    stale = asyncio.create_task(control.refresh(Identity("old")))
    await asyncio.sleep(0)
    fresh = asyncio.create_task(control.refresh(Identity("new")))
    await asyncio.sleep(0)

    source.gates["new"].set()
    await fresh
    source.gates["old"].set()
    await stale

    assert control.identity == Identity("new")
    assert control.tier is Tier.STARTER
    assert not control.can_view("elite")


@pytest.mark.asyncio
async def test_unknown_required_tier_is_reserved_for_top_tier() -> None:
    nobody = await _control_for("none")
    pro = await _control_for("pro")
    elite = await _control_for("elite")
    admin = await _control_for("none", email=ADMIN)

    assert not nobody.can_view("diamond")
    assert not pro.can_view("Pr0")
    assert pro.decide("diamond").required_tier is Tier.ELITE
    assert elite.can_view("diamond")
    assert admin.can_view("diamond")
    assert nobody.can_view("free")
    assert nobody.can_view(None)
