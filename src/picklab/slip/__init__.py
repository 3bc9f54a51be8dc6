"""Betting slip: selection set, local cache and remote sync."""

from picklab.slip.cache import FileCache, MemoryCache, SlipCache
from picklab.slip.remote import SqlSlipRemote
from picklab.slip.store import SlipState, SlipStore
from picklab.slip.types import Slip, SlipItem

__all__ = [
    "FileCache",
    "MemoryCache",
    "Slip",
    "SlipCache",
    "SlipItem",
    "SlipState",
    "SlipStore",
    "SqlSlipRemote",
]
