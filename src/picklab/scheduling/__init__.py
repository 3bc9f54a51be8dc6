"""Timed background work."""
