"""Odds classification, conversion and parlay math."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Literal, Union

from picklab.config import get_settings
from picklab.odds.types import AmericanOdds, DecimalOdds, Odds, UnparsedOdds

settings = get_settings()

DECIMAL_MIN = 1.01
DECIMAL_MAX = 100.0
AMERICAN_MIN_MAGNITUDE = 100

Locale = Literal["en", "cz"]
RawOdds = Union[str, int, float, None, AmericanOdds, DecimalOdds, UnparsedOdds]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""

    return int(math.floor(value + 0.5))


def classify(raw: RawOdds) -> Odds:
    """Classify an odds literal of unknown format.

    A literal is decimal when it carries a fractional separator and its value
    lies in [1.01, 100]. Anything else numeric is truncated to an integer and
    read as American; ambiguous literals therefore default to American.
    Input that is not numeric, or an American price under 100 in magnitude,
    comes back as ``UnparsedOdds``.
    """

    if isinstance(raw, (AmericanOdds, DecimalOdds, UnparsedOdds)):
        return raw
    if raw is None or isinstance(raw, bool):
        return UnparsedOdds("" if raw is None else str(raw))

    if isinstance(raw, (int, float)):
        text = str(raw)
        value = float(raw)
        has_separator = isinstance(raw, float) and not raw.is_integer()
    else:
        text = str(raw).strip()
        has_separator = "." in text or "," in text
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            return UnparsedOdds(text)

    if not math.isfinite(value):
        return UnparsedOdds(text)
    if has_separator and DECIMAL_MIN <= value <= DECIMAL_MAX:
        return DecimalOdds(value)

    american = int(value)
    if abs(american) < AMERICAN_MIN_MAGNITUDE:
        return UnparsedOdds(text)
    return AmericanOdds(american)


def american_to_decimal(odds: int) -> float:
    return 1 + (odds / 100) if odds > 0 else 1 + (100 / abs(odds))


def to_decimal(raw: RawOdds, fallback: float | None = None) -> float:
    """Normalize any odds literal to decimal odds, never raising."""

    odds = classify(raw)
    if isinstance(odds, AmericanOdds):
        return american_to_decimal(odds.value)
    if isinstance(odds, DecimalOdds):
        return odds.value
    return fallback if fallback is not None else settings.default_decimal_odds


def decimal_to_american(decimal_odds: float) -> int:
    if decimal_odds <= 1.0:
        raise ValueError(f"Decimal odds must exceed 1.0, got {decimal_odds}")
    if decimal_odds >= 2.0:
        return round_half_up((decimal_odds - 1) * 100)
    return round_half_up(-100 / (decimal_odds - 1))


def implied_probability(raw: RawOdds) -> float:
    return 1 / to_decimal(raw)


def combined_odds(legs: Iterable[RawOdds]) -> float:
    """Product of each leg's decimal odds; 0.0 when nothing is selected."""

    decimal = 1.0
    seen = False
    for leg in legs:
        decimal *= to_decimal(leg)
        seen = True
    return decimal if seen else 0.0


def payout(odds: RawOdds, stake: float) -> float:
    return stake * to_decimal(odds)


def profit(odds: RawOdds, stake: float) -> float:
    return payout(odds, stake) - stake


def format_odds(decimal_odds: float, locale: Locale = "en") -> str:
    formatted = f"{decimal_odds:.2f}"
    return formatted.replace(".", ",") if locale == "cz" else formatted


def format_american(raw: RawOdds) -> str:
    odds = classify(raw)
    if isinstance(odds, AmericanOdds):
        return str(odds)
    if isinstance(odds, DecimalOdds):
        return f"{decimal_to_american(odds.value):+d}"
    return odds.raw


def format_currency(value: float, locale: Locale = "en") -> str:
    formatted = f"{value:,.0f}"
    return formatted.replace(",", " ") if locale == "cz" else formatted


def format_percentage(value: float, locale: Locale = "en") -> str:
    formatted = f"{value:.1f}"
    if locale == "cz":
        formatted = formatted.replace(".", ",")
    return f"{formatted}%"
