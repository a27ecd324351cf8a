"""Saved-design history models.

Usage:
    from schema_forger.history.models import HistoryItem

    item = HistoryItem.create(name="Blog", prompt="users and posts",
                              db_type="postgresql", schema=schema)
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schema_forger.schema.models import Schema
from schema_forger.sql import DbType


class HistoryItem(BaseModel):
    """One saved design.  ``id`` is the design id; saving again overwrites it."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    timestamp: str
    prompt: str = ""
    db_type: DbType = "postgresql"
    design: Schema = Field(alias="schema")

    @classmethod
    def create(
        cls,
        name: str,
        schema: Schema,
        prompt: str = "",
        db_type: DbType = "postgresql",
        item_id: str | None = None,
    ) -> "HistoryItem":
        """Build an item stamped with the current UTC time."""
        return cls(
            id=item_id or str(uuid.uuid4()),
            name=name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            prompt=prompt,
            db_type=db_type,
            design=schema,
        )
