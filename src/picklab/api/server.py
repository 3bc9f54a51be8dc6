"""FastAPI backend for PickLab."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any, Literal

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from picklab import __version__
from picklab.access.control import AccessControl, Identity
from picklab.access.sources import SqlTierSource, TierSource
from picklab.api.schemas import AccessResponse, OddsQuoteResponse, SlipItemResponse, SlipResponse
from picklab.api.sessions import SlipSessions
from picklab.config import get_api_access_key, get_settings
from picklab.odds import engine
from picklab.picks.types import Pick
from picklab.slip.cache import FileCache, SlipCache
from picklab.slip.remote import SqlSlipRemote
from picklab.slip.store import SlipStore

settings = get_settings()
_sessions: SlipSessions | None = None


def _user_cache(user_id: str) -> SlipCache:
    return SlipCache(FileCache(settings.slip_cache_dir), f"{settings.slip_cache_key}_{user_id}")


def get_slip_sessions() -> SlipSessions:
    global _sessions
    if _sessions is None:
        _sessions = SlipSessions(_user_cache, SqlSlipRemote())
    return _sessions


def get_tier_source() -> TierSource:
    return SqlTierSource()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    if _sessions is not None:
        await _sessions.close_all()


app = FastAPI(
    title="PickLab API",
    version=__version__,
    description="Betting slip sync, parlay math and tier gating for the picks app.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    expected = get_api_access_key()
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


APIKeyDep = Annotated[None, Depends(require_api_key)]
SessionsDep = Annotated[SlipSessions, Depends(get_slip_sessions)]
TierSourceDep = Annotated[TierSource, Depends(get_tier_source)]
StakeQuery = Annotated[float | None, Query(ge=0)]
LocaleQuery = Annotated[Literal["en", "cz"], Query()]


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, Any]:
    return {"name": "picklab-core", "version": __version__}


@app.get("/odds/quote", response_model=OddsQuoteResponse)
def odds_quote(
    odds: Annotated[str, Query(max_length=32)],
    stake: StakeQuery = None,
    locale: LocaleQuery = "en",
) -> OddsQuoteResponse:
    stake = settings.default_stake if stake is None else stake
    classified = engine.classify(odds)
    decimal = engine.to_decimal(classified)
    payout = engine.payout(classified, stake)
    american = engine.decimal_to_american(decimal)
    return OddsQuoteResponse(
        raw=odds,
        kind=classified.kind.value,
        decimal_odds=decimal,
        american_odds=american,
        implied_probability=engine.implied_probability(classified),
        stake=stake,
        payout=payout,
        profit=engine.profit(classified, stake),
        formatted_odds=engine.format_odds(decimal, locale),
        formatted_american=f"{american:+d}",
        formatted_payout=engine.format_currency(payout, locale),
    )


def _slip_response(user_id: str, store: SlipStore, stake: float | None) -> SlipResponse:
    stake = store.default_stake if stake is None else stake
    return SlipResponse(
        user_id=user_id,
        state=store.state.value,
        count=store.count,
        items=[
            SlipItemResponse(
                prediction=item.pick.to_blob(),
                added_at=item.added_at_datetime,
                decimal_odds=item.pick.decimal_odds,
                confidence=item.pick.normalized_confidence,
            )
            for item in store.items
        ],
        combined_odds=store.combined_odds(),
        stake=stake,
        potential_payout=store.potential_payout(stake),
        potential_profit=store.potential_profit(stake),
    )


@app.get("/users/{user_id}/slip", response_model=SlipResponse)
async def get_slip(
    user_id: str,
    _: APIKeyDep,
    sessions: SessionsDep,
    stake: StakeQuery = None,
) -> SlipResponse:
    store = await sessions.get(user_id)
    return _slip_response(user_id, store, stake)


@app.post("/users/{user_id}/slip", response_model=SlipResponse)
async def add_to_slip(
    user_id: str,
    pick: Pick,
    _: APIKeyDep,
    sessions: SessionsDep,
    stake: StakeQuery = None,
) -> SlipResponse:
    store = await sessions.get(user_id)
    store.add(pick)
    return _slip_response(user_id, store, stake)


@app.delete("/users/{user_id}/slip/{pick_id}", response_model=SlipResponse)
async def remove_from_slip(
    user_id: str,
    pick_id: str,
    _: APIKeyDep,
    sessions: SessionsDep,
    stake: StakeQuery = None,
) -> SlipResponse:
    store = await sessions.get(user_id)
    store.remove(pick_id)
    return _slip_response(user_id, store, stake)


@app.delete("/users/{user_id}/slip", response_model=SlipResponse)
async def clear_slip(
    user_id: str,
    _: APIKeyDep,
    sessions: SessionsDep,
    stake: StakeQuery = None,
) -> SlipResponse:
    store = await sessions.get(user_id)
    store.clear()
    return _slip_response(user_id, store, stake)


@app.get("/users/{user_id}/access", response_model=AccessResponse)
async def access(
    user_id: str,
    _: APIKeyDep,
    tier_source: TierSourceDep,
    email: str | None = None,
    required_tier: str | None = None,
) -> AccessResponse:
    control = AccessControl(tier_source)
    await control.refresh(Identity(user_id=user_id, email=email))
    decision = control.decide(required_tier) if required_tier is not None else None
    return AccessResponse(
        user_id=user_id,
        tier=control.tier.label,
        display_tier=control.display_tier,
        is_admin=control.is_admin,
        has_subscription=control.has_subscription,
        subscription_end=control.subscription_end,
        required_tier=decision.required_tier.label if decision is not None else None,
        allowed=decision.allowed if decision is not None else None,
        max_daily_picks=control.max_daily_picks,
        can_export_data=control.can_export_data,
        can_view_detailed_analysis=control.can_view_detailed_analysis,
        can_view_privileged_content=control.can_view_privileged_content,
    )
