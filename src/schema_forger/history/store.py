"""JSON-file design history.

Saved designs are kept newest first in a single JSON array.  Saving an item
whose id already exists replaces it in place; a new id goes to the front.

A missing history file is an empty history.  A file that cannot be read or
parsed is logged and treated as empty, so a corrupt history never blocks the
editor; the next ``save()`` rewrites it.

Usage:
    from schema_forger.history import HistoryStore, HistoryItem

    store = HistoryStore("designs.json")
    store.save(HistoryItem.create(name="Blog", schema=schema))
    for item in store.load():
        print(item.name, item.timestamp)
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from schema_forger.history.models import HistoryItem

logger = logging.getLogger(__name__)

_items_adapter = TypeAdapter(list[HistoryItem])


class HistoryStore:
    """Design history persisted to a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[HistoryItem]:
        """All saved designs, newest first."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return _items_adapter.validate_python(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.error("Failed to load history from %s: %s", self.path, e)
            return []

    def get(self, item_id: str) -> HistoryItem | None:
        for item in self.load():
            if item.id == item_id:
                return item
        return None

    def save(self, item: HistoryItem) -> list[HistoryItem]:
        """Insert or replace *item*.

        Returns:
            The updated history, newest first.
        """
        items = self.load()
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                break
        else:
            items.insert(0, item)

        self._write(items)
        return items

    def delete(self, item_id: str) -> list[HistoryItem]:
        """Remove the item with *item_id* (no-op if absent) and return the rest."""
        items = [item for item in self.load() if item.id != item_id]
        self._write(items)
        return items

    def _write(self, items: list[HistoryItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = _items_adapter.dump_python(items, mode="json", by_alias=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
