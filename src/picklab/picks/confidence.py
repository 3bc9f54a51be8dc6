"""Confidence normalization to a 0-100 integer scale."""

from __future__ import annotations

import math
from typing import Any

from picklab.odds.engine import round_half_up

FALLBACK_CONFIDENCE = 65


def normalize_confidence(raw: Any, fallback: int = FALLBACK_CONFIDENCE) -> int:
    """Map a raw confidence of unknown scale onto an integer in [0, 100].

    Fractions in (0, 1] are scaled by 100, values in (1, 100] are rounded,
    anything above 100 is clamped. Missing, NaN, negative and non-numeric
    input yields ``fallback``.
    """

    if raw is None or isinstance(raw, bool):
        return fallback
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(value) or value < 0:
        return fallback

    if value == 0:
        return 0
    if value <= 1:
        return round_half_up(value * 100)
    if value <= 100:
        return round_half_up(value)
    return 100


def format_confidence(raw: Any) -> str:
    return f"{normalize_confidence(raw)}%"


def confidence_label(raw: Any) -> str:
    normalized = normalize_confidence(raw)
    if normalized >= 75:
        return "LOCK"
    if normalized >= 70:
        return "HOT"
    if normalized >= 60:
        return "STRONG"
    return "VALUE"


def confidence_band(raw: Any) -> str:
    normalized = normalize_confidence(raw)
    if normalized >= 70:
        return "high"
    if normalized >= 55:
        return "medium"
    return "low"
