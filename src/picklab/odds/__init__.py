"""Odds classification and parlay arithmetic."""

from picklab.odds.engine import (
    classify,
    combined_odds,
    decimal_to_american,
    payout,
    profit,
    to_decimal,
)
from picklab.odds.types import AmericanOdds, DecimalOdds, Odds, OddsKind, UnparsedOdds

__all__ = [
    "AmericanOdds",
    "DecimalOdds",
    "Odds",
    "OddsKind",
    "UnparsedOdds",
    "classify",
    "combined_odds",
    "decimal_to_american",
    "payout",
    "profit",
    "to_decimal",
]
