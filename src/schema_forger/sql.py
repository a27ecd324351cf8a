"""DDL generation from a schema snapshot.

Pure formatting -- no validation of SQL semantics and no connection to a
database.  Supported dialects: ``mysql``, ``postgresql``, ``sqlite``.

Usage:
    from schema_forger.sql import generate_sql

    print(generate_sql(schema, "postgresql"))
"""

from typing import Literal, get_args

from schema_forger.schema.models import Column, Schema, Table

DbType = Literal["mysql", "postgresql", "sqlite"]

DB_TYPES: tuple[str, ...] = get_args(DbType)


def _quote(name: str, db_type: str) -> str:
    return f"`{name}`" if db_type == "mysql" else f'"{name}"'


def _column_sql(column: Column, db_type: str) -> str:
    """Column definition line, e.g. ``  "email" TEXT UNIQUE NOT NULL``."""
    definition = f"  {_quote(column.name, db_type)} {column.type.upper()}"
    col_type = column.type.lower()

    if column.is_primary_key:
        if db_type == "mysql" and col_type == "int":
            definition += " AUTO_INCREMENT PRIMARY KEY"
        elif db_type == "sqlite" and col_type == "integer":
            definition += " PRIMARY KEY AUTOINCREMENT"
        elif db_type != "postgresql" or "serial" not in col_type:
            definition += " PRIMARY KEY"
        # PostgreSQL SERIAL types get no PRIMARY KEY clause

    if column.is_unique and not column.is_primary_key:
        definition += " UNIQUE"
    if not column.is_nullable:
        definition += " NOT NULL"

    return definition


def _table_sql(table: Table, db_type: str) -> str:
    lines = [_column_sql(column, db_type) for column in table.columns]

    for column in table.columns:
        if column.is_foreign_key and column.foreign_key_table and column.foreign_key_column:
            constraint = _quote(f"fk_{table.name}_{column.name}", db_type)
            lines.append(
                f"  CONSTRAINT {constraint} FOREIGN KEY ({_quote(column.name, db_type)}) "
                f"REFERENCES {_quote(column.foreign_key_table, db_type)}"
                f"({_quote(column.foreign_key_column, db_type)})"
            )

    body = ",\n".join(lines)
    return f"CREATE TABLE IF NOT EXISTS {_quote(table.name, db_type)} (\n{body}\n);"


def generate_sql(schema: Schema, db_type: str) -> str:
    """Generate CREATE TABLE / CREATE VIEW statements for *schema*.

    Args:
        schema: Snapshot to render.
        db_type: One of ``DB_TYPES``.

    Returns:
        DDL text; tables first (in schema order), then views.

    Raises:
        ValueError: If *db_type* is not a supported dialect.

    Example:
        >>> from schema_forger.schema.models import Column, Table
        >>> schema = Schema(tables=[Table(name="t", columns=[Column(name="id", type="int")])])
        >>> print(generate_sql(schema, "mysql"))
        CREATE TABLE IF NOT EXISTS `t` (
          `id` INT
        );
    """
    if db_type not in DB_TYPES:
        raise ValueError(
            f"Unsupported dialect '{db_type}'. Expected one of: {', '.join(DB_TYPES)}"
        )

    tables_sql = "\n\n".join(_table_sql(table, db_type) for table in schema.tables)
    views_sql = "\n\n".join(
        f"CREATE OR REPLACE VIEW {_quote(view.name, db_type)} AS\n{view.query};"
        for view in schema.views or ()
    )
    return "\n\n".join(part for part in (tables_sql, views_sql) if part)
