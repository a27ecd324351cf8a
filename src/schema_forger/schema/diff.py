"""Structural diff between two schema snapshots.

Compares an "old" and a "new" snapshot by table name, then by column name,
and reports every difference as added / deleted / modified.  A modified
column carries only the fields that changed, each as an (old, new) pair.
Pure logic -- no I/O.

Usage:
    from schema_forger.schema.diff import diff_schemas

    result = diff_schemas(current, proposed)
    if not result.is_empty:
        print(result.format_report())
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from schema_forger.schema.models import Column, Schema, Table

TableStatus = Literal["added", "deleted", "modified"]

# Fields compared for a column present in both snapshots.  Absent values take
# the model defaults before comparison: is_nullable=True, other flags False.
TRACKED_FIELDS: tuple[str, ...] = (
    "type",
    "is_primary_key",
    "is_foreign_key",
    "foreign_key_table",
    "foreign_key_column",
    "is_nullable",
    "is_unique",
)


# ============================================================================
# Diff Result Models
# ============================================================================


class ValueChange(BaseModel):
    """A field value before and after."""

    old_value: Any
    new_value: Any


class AddedColumn(BaseModel):
    name: str
    new_type: str
    column: Column


class DeletedColumn(BaseModel):
    name: str
    old_type: str


class ModifiedColumn(BaseModel):
    """A column present in both snapshots with at least one changed field."""

    name: str
    changes: dict[str, ValueChange]


class ColumnChanges(BaseModel):
    added: list[AddedColumn] = Field(default_factory=list)
    deleted: list[DeletedColumn] = Field(default_factory=list)
    modified: list[ModifiedColumn] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.deleted or self.modified)

    @property
    def count(self) -> int:
        return len(self.added) + len(self.deleted) + len(self.modified)


class TableDiff(BaseModel):
    name: str
    status: TableStatus
    columns: ColumnChanges = Field(default_factory=ColumnChanges)


class TableChanges(BaseModel):
    added: list[TableDiff] = Field(default_factory=list)
    deleted: list[TableDiff] = Field(default_factory=list)
    modified: list[TableDiff] = Field(default_factory=list)


class DiffResult(BaseModel):
    """Every difference between two snapshots, partitioned by table.

    Example:
        >>> DiffResult().is_empty
        True
    """

    tables: TableChanges = Field(default_factory=TableChanges)

    @property
    def is_empty(self) -> bool:
        return not (self.tables.added or self.tables.deleted or self.tables.modified)

    @property
    def change_count(self) -> int:
        """Number of column-level changes across all tables."""
        return sum(
            diff.columns.count
            for diff in self.tables.added + self.tables.deleted + self.tables.modified
        )

    def get_table(self, name: str) -> TableDiff | None:
        for diff in self.tables.added + self.tables.deleted + self.tables.modified:
            if diff.name == name:
                return diff
        return None

    def format_report(self) -> str:
        """Format the diff as a human-readable report."""
        if self.is_empty:
            return "No changes"

        lines = [f"Schema changes ({self.change_count}):"]

        for diff in self.tables.added:
            lines.append(f"\n  + {diff.name} (new table)")
            for col in diff.columns.added:
                lines.append(f"      + {col.name} {col.new_type}")

        for diff in self.tables.deleted:
            lines.append(f"\n  - {diff.name} (deleted table)")

        for diff in self.tables.modified:
            lines.append(f"\n  ~ {diff.name}")
            for col in diff.columns.added:
                lines.append(f"      + {col.name} {col.new_type}")
            for col in diff.columns.deleted:
                lines.append(f"      - {col.name} {col.old_type}")
            for col in diff.columns.modified:
                changes = ", ".join(
                    f"{field}: {change.old_value!r} -> {change.new_value!r}"
                    for field, change in col.changes.items()
                )
                lines.append(f"      ~ {col.name} ({changes})")

        return "\n".join(lines)


# ============================================================================
# Comparison
# ============================================================================


def diff_columns(old: Column, new: Column) -> dict[str, ValueChange]:
    """Return the tracked fields that differ between two versions of a column.

    Example:
        >>> old = Column(name="email", type="TEXT")
        >>> new = Column(name="email", type="TEXT", is_unique=True)
        >>> diff_columns(old, new)["is_unique"].new_value
        True
    """
    changes: dict[str, ValueChange] = {}
    for field in TRACKED_FIELDS:
        old_value = getattr(old, field)
        new_value = getattr(new, field)
        if old_value != new_value:
            changes[field] = ValueChange(old_value=old_value, new_value=new_value)
    return changes


def diff_tables(old: Table, new: Table) -> ColumnChanges:
    """Partition the columns of two versions of a table."""
    old_columns = {c.name: c for c in old.columns}
    new_columns = {c.name: c for c in new.columns}
    result = ColumnChanges()

    for name, new_col in new_columns.items():
        old_col = old_columns.get(name)
        if old_col is None:
            result.added.append(AddedColumn(name=name, new_type=new_col.type, column=new_col))
            continue
        changes = diff_columns(old_col, new_col)
        if changes:
            result.modified.append(ModifiedColumn(name=name, changes=changes))

    for name, old_col in old_columns.items():
        if name not in new_columns:
            result.deleted.append(DeletedColumn(name=name, old_type=old_col.type))

    return result


def diff_schemas(old: Schema, new: Schema) -> DiffResult:
    """Compare two snapshots.

    Args:
        old: Current snapshot.
        new: Proposed snapshot.

    Returns:
        ``DiffResult``.  Added tables list all their columns as added;
        deleted tables list all their columns as deleted; a table in both
        snapshots appears under ``modified`` only if a column changed.
        Added and modified entries follow *new*'s order, deleted entries
        follow *old*'s order.

    Examples:
        >>> diff_schemas(Schema(tables=[]), Schema(tables=[])).is_empty
        True
    """
    old_tables = {t.name: t for t in old.tables}
    new_tables = {t.name: t for t in new.tables}
    result = DiffResult()

    for name, new_table in new_tables.items():
        old_table = old_tables.get(name)
        if old_table is None:
            result.tables.added.append(
                TableDiff(
                    name=name,
                    status="added",
                    columns=ColumnChanges(
                        added=[
                            AddedColumn(name=c.name, new_type=c.type, column=c)
                            for c in new_table.columns
                        ]
                    ),
                )
            )
            continue

        columns = diff_tables(old_table, new_table)
        if not columns.is_empty:
            result.tables.modified.append(TableDiff(name=name, status="modified", columns=columns))

    for name, old_table in old_tables.items():
        if name not in new_tables:
            result.tables.deleted.append(
                TableDiff(
                    name=name,
                    status="deleted",
                    columns=ColumnChanges(
                        deleted=[
                            DeletedColumn(name=c.name, old_type=c.type)
                            for c in old_table.columns
                        ]
                    ),
                )
            )

    return result
