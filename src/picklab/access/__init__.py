"""Subscription-tier access policy."""

from picklab.access.control import AccessControl, AccessDecision, Identity
from picklab.access.tiers import Tier, normalize_tier

__all__ = ["AccessControl", "AccessDecision", "Identity", "Tier", "normalize_tier"]
