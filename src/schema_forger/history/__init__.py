"""Saved-design history.

Usage:
    from schema_forger.history import HistoryStore, HistoryItem
"""

from schema_forger.history.models import HistoryItem
from schema_forger.history.store import HistoryStore

__all__ = ["HistoryItem", "HistoryStore"]
