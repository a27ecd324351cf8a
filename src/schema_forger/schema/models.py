"""Pydantic models for the schema document.

This module contains schema-domain models:
- Document models: Column, Table, View, Schema
- Assistant proposal models: EnhancementTask, ProposedEnhancement

All models are frozen: a ``Schema`` value is an immutable snapshot, and every
mutation (see ``schema_forger.schema.mutations``) builds a new one.  On the
wire, field names are camelCase (``isPrimaryKey``, ``foreignKeyTable``);
in Python they are snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _DocumentModel(BaseModel):
    """Base for models serialized as camelCase schema documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============================================================================
# Schema Document Models
# ============================================================================


class Column(_DocumentModel):
    """A table column.

    ``foreign_key_table`` / ``foreign_key_column`` are only meaningful when
    ``is_foreign_key`` is set.  An absent ``is_nullable`` means nullable.

    Example:
        >>> col = Column(name="id", type="INTEGER", is_primary_key=True)
        >>> col.is_nullable
        True
    """

    name: str
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False
    foreign_key_table: str | None = None
    foreign_key_column: str | None = None
    is_nullable: bool = True
    is_unique: bool = False

    @field_validator("is_primary_key", "is_foreign_key", "is_unique", mode="before")
    @classmethod
    def _null_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_nullable", mode="before")
    @classmethod
    def _null_nullable_is_true(cls, value: Any) -> Any:
        return True if value is None else value


class Table(_DocumentModel):
    """A table: a name plus an ordered sequence of columns."""

    name: str
    columns: tuple[Column, ...] = ()

    def get_column(self, name: str) -> Column | None:
        """Return the column called *name*, or ``None``."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    def handle_for(self, column_name: str) -> str:
        """Composite ``table__column`` anchor id used by the canvas."""
        return f"{self.name}__{column_name}"


class View(_DocumentModel):
    """A named query view.  Carried through unchanged."""

    name: str
    query: str


class Schema(_DocumentModel):
    """A complete schema snapshot.

    Example:
        >>> schema = Schema(tables=[Table(name="users", columns=[])])
        >>> schema.table_names
        ['users']
    """

    tables: tuple[Table, ...]
    views: tuple[View, ...] | None = None

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]

    def get_table(self, name: str) -> Table | None:
        """Return the table called *name*, or ``None``."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def has_table(self, name: str) -> bool:
        return self.get_table(name) is not None


# ============================================================================
# Assistant Proposal Models
# ============================================================================


class EnhancementTask(_DocumentModel):
    """One human-readable item of an assistant's change list."""

    title: str
    description: str


class ProposedEnhancement(_DocumentModel):
    """A proposed schema plus the task list explaining it.

    Reviewed against the current snapshot with ``diff_schemas()`` before
    being accepted or rejected.
    """

    proposed_schema: Schema
    enhancement_tasks: tuple[EnhancementTask, ...] = Field(default=())
