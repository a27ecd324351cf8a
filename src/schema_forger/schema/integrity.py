"""Referential-integrity checks over a schema snapshot.

Pure logic -- no I/O.  Reports the structural invariants a snapshot is
expected to satisfy:

- Errors: duplicate table names, duplicate column names within a table,
  foreign-key columns without a target table/column.
- Warnings: foreign keys whose target table or column does not exist.
  Deleting a table leaves these behind by default, so they do not affect
  ``valid``.  Table names containing the ``__`` handle separator are warned
  about too, since canvas handles for them cannot be parsed back.

Usage:
    from schema_forger.schema.integrity import check_integrity

    report = check_integrity(schema)
    if not report.valid:
        print(report.format_report())
"""

from collections import Counter

from pydantic import BaseModel, Field

from schema_forger.schema.models import Schema
from schema_forger.schema.mutations import HANDLE_SEPARATOR


class ColumnIssue(BaseModel):
    """A problem attached to one column."""

    table: str
    column: str
    message: str = ""


class IntegrityReport(BaseModel):
    """Result of ``check_integrity()``.

    Example:
        >>> report = IntegrityReport(valid=True)
        >>> report.format_report()
        'Schema valid'
    """

    valid: bool
    duplicate_tables: list[str] = Field(default_factory=list)
    duplicate_columns: list[ColumnIssue] = Field(default_factory=list)
    incomplete_foreign_keys: list[ColumnIssue] = Field(default_factory=list)
    dangling_foreign_keys: list[ColumnIssue] = Field(default_factory=list)  # Warning only
    unaddressable_tables: list[str] = Field(default_factory=list)  # Warning only

    @property
    def error_count(self) -> int:
        """Count of errors (everything except dangling references)."""
        return (
            len(self.duplicate_tables)
            + len(self.duplicate_columns)
            + len(self.incomplete_foreign_keys)
        )

    @property
    def has_warnings(self) -> bool:
        return bool(self.dangling_foreign_keys or self.unaddressable_tables)

    def format_report(self) -> str:
        """Format the report as human-readable text."""
        if self.valid and not self.has_warnings:
            return "Schema valid"

        lines = ["Schema valid" if self.valid else "Schema integrity check failed:"]

        if self.duplicate_tables:
            lines.append(f"\n  Duplicate tables ({len(self.duplicate_tables)}):")
            for table in self.duplicate_tables:
                lines.append(f"    - {table}")

        if self.duplicate_columns:
            lines.append(f"\n  Duplicate columns ({len(self.duplicate_columns)}):")
            for issue in self.duplicate_columns:
                lines.append(f"    - {issue.table}.{issue.column}")

        if self.incomplete_foreign_keys:
            lines.append(f"\n  Incomplete foreign keys ({len(self.incomplete_foreign_keys)}):")
            for issue in self.incomplete_foreign_keys:
                lines.append(f"    - {issue.table}.{issue.column}: {issue.message}")

        if self.dangling_foreign_keys:
            lines.append(f"\n  Dangling foreign keys (warning) ({len(self.dangling_foreign_keys)}):")
            for issue in self.dangling_foreign_keys:
                lines.append(f"    - {issue.table}.{issue.column}: {issue.message}")

        if self.unaddressable_tables:
            lines.append(
                f"\n  Table names containing '{HANDLE_SEPARATOR}' (warning) "
                f"({len(self.unaddressable_tables)}):"
            )
            for table in self.unaddressable_tables:
                lines.append(f"    - {table}")

        return "\n".join(lines)


def check_integrity(schema: Schema) -> IntegrityReport:
    """Check *schema* against the table/column/foreign-key invariants.

    Args:
        schema: Snapshot to check.

    Returns:
        ``IntegrityReport``; ``valid`` is ``True`` when there are no errors.

    Examples:
        >>> from schema_forger.schema.models import Column, Table
        >>> users = Table(name="users", columns=[Column(name="id", type="INTEGER")])
        >>> check_integrity(Schema(tables=[users, users])).duplicate_tables
        ['users']
    """
    table_counts = Counter(schema.table_names)
    duplicate_tables = [name for name, count in table_counts.items() if count > 1]

    duplicate_columns: list[ColumnIssue] = []
    incomplete: list[ColumnIssue] = []
    dangling: list[ColumnIssue] = []

    for table in schema.tables:
        column_counts = Counter(column.name for column in table.columns)
        for name, count in column_counts.items():
            if count > 1:
                duplicate_columns.append(
                    ColumnIssue(
                        table=table.name,
                        column=name,
                        message=f"Column '{name}' appears {count} times",
                    )
                )

        for column in table.columns:
            if not column.is_foreign_key:
                continue

            if not column.foreign_key_table or not column.foreign_key_column:
                incomplete.append(
                    ColumnIssue(
                        table=table.name,
                        column=column.name,
                        message="Foreign key has no target table/column",
                    )
                )
                continue

            target = schema.get_table(column.foreign_key_table)
            if target is None:
                dangling.append(
                    ColumnIssue(
                        table=table.name,
                        column=column.name,
                        message=f"References missing table '{column.foreign_key_table}'",
                    )
                )
            elif not target.has_column(column.foreign_key_column):
                dangling.append(
                    ColumnIssue(
                        table=table.name,
                        column=column.name,
                        message=(
                            f"References missing column "
                            f"'{column.foreign_key_table}.{column.foreign_key_column}'"
                        ),
                    )
                )

    unaddressable = [
        name for name in dict.fromkeys(schema.table_names) if HANDLE_SEPARATOR in name
    ]

    is_valid = not duplicate_tables and not duplicate_columns and not incomplete

    return IntegrityReport(
        valid=is_valid,
        duplicate_tables=duplicate_tables,
        duplicate_columns=duplicate_columns,
        incomplete_foreign_keys=incomplete,
        dangling_foreign_keys=dangling,
        unaddressable_tables=unaddressable,
    )
