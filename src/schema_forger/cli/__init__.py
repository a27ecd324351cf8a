"""CLI for schema documents: validation, diff, layout, SQL, and edits.

Usage:
    schema-forger validate schema.json
    schema-forger diff current.json proposed.json
    schema-forger layout schema.json
    schema-forger sql schema.json --dialect sqlite
    schema-forger apply schema.json actions.json --output edited.json
    schema-forger history --file designs.json

Commands:
    validate  - Check a schema document for structural and FK problems
    diff      - Show the differences between two schema documents
    layout    - Show the layered graph layout of a schema
    sql       - Print CREATE TABLE statements for a schema
    apply     - Apply a JSON list of edit actions to a schema
    history   - List saved designs
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from schema_forger.config.loader import load_editor_config
from schema_forger.config.models import EditorConfig
from schema_forger.errors import MalformedDocumentError
from schema_forger.history.store import HistoryStore
from schema_forger.schema.diff import diff_schemas
from schema_forger.schema.document import dump_schema_json, load_schema_json
from schema_forger.schema.integrity import check_integrity
from schema_forger.schema.layout import layout_schema
from schema_forger.schema.models import Schema
from schema_forger.schema.mutations import apply_action
from schema_forger.sql import DB_TYPES, generate_sql

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _load_schema_file(path: str | Path) -> Schema:
    """Read and validate a schema document from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedDocumentError: If the file is not a valid schema document.
    """
    schema_path = Path(path)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    return load_schema_json(schema_path.read_text())


def _load_config(args: argparse.Namespace) -> EditorConfig:
    config_path = getattr(args, "config", None)
    return load_editor_config(Path(config_path) if config_path else None)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ============================================================================
# Commands
# ============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Check a schema document.

    Returns:
        0 if the schema is valid (dangling references are warnings only),
        1 on errors or an unreadable document.
    """
    try:
        schema = _load_schema_file(args.file)
    except (FileNotFoundError, MalformedDocumentError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    report = check_integrity(schema)

    if report.valid:
        console.print(
            f"[bold green]v[/bold green] Schema valid "
            f"({len(schema.tables)} tables)"
        )
        if report.has_warnings:
            console.print(report.format_report(), markup=False)
        return 0

    console.print("[bold red]x[/bold red] Schema has integrity errors")
    console.print(report.format_report(), markup=False)
    return 1


def cmd_diff(args: argparse.Namespace) -> int:
    """Show differences between two schema documents.

    Returns:
        0 on success (with or without differences), 1 on unreadable input.
    """
    try:
        old = _load_schema_file(args.old)
        new = _load_schema_file(args.new)
    except (FileNotFoundError, MalformedDocumentError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    result = diff_schemas(old, new)

    if result.is_empty:
        console.print("[bold green]v[/bold green] No differences")
        return 0

    diff_table = Table(title="Schema Differences", show_header=True, header_style="bold")
    diff_table.add_column("Table", style="dim")
    diff_table.add_column("Column")
    diff_table.add_column("Change")

    for table_diff in result.tables.added:
        diff_table.add_row(table_diff.name, "", "[bold green]NEW TABLE[/bold green]")
        for col in table_diff.columns.added:
            diff_table.add_row(table_diff.name, col.name, f"[green]+ {col.new_type}[/green]")

    for table_diff in result.tables.deleted:
        diff_table.add_row(table_diff.name, "", "[bold red]DELETED TABLE[/bold red]")

    for table_diff in result.tables.modified:
        for col in table_diff.columns.added:
            diff_table.add_row(table_diff.name, col.name, f"[green]+ {col.new_type}[/green]")
        for col in table_diff.columns.deleted:
            diff_table.add_row(table_diff.name, col.name, f"[red]- {col.old_type}[/red]")
        for col in table_diff.columns.modified:
            changes = ", ".join(
                f"{field}: {change.old_value} -> {change.new_value}"
                for field, change in col.changes.items()
            )
            diff_table.add_row(table_diff.name, col.name, f"[yellow]~ {changes}[/yellow]")

    console.print(diff_table)
    console.print(f"\n{result.change_count} column changes")
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    """Print the layered layout of a schema.

    Returns:
        0 on success, 1 on unreadable input or config.
    """
    try:
        config = _load_config(args)
        schema = _load_schema_file(args.file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    graph = layout_schema(schema, config.layout)

    node_table = Table(title="Layout", show_header=True, header_style="bold")
    node_table.add_column("Layer", justify="right")
    node_table.add_column("Table")
    node_table.add_column("X", justify="right")
    node_table.add_column("Y", justify="right")

    for node in graph.nodes:
        node_table.add_row(
            str(node.layer),
            node.id,
            f"{node.position.x:g}",
            f"{node.position.y:g}",
        )

    console.print(node_table)
    console.print(f"{len(graph.layers)} layers, {len(graph.edges)} edges")
    return 0


def cmd_sql(args: argparse.Namespace) -> int:
    """Print DDL for a schema.

    Returns:
        0 on success, 1 on unreadable input or config.
    """
    try:
        config = _load_config(args)
        schema = _load_schema_file(args.file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    dialect = args.dialect or config.editor.db_type
    console.print(generate_sql(schema, dialect), markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    """Apply a JSON list of actions to a schema document.

    Rejected actions are reported and skipped; ignored actions are counted.
    Writes the result to ``--output`` or prints it.

    Returns:
        0 on success, 1 on unreadable input or config.
    """
    try:
        config = _load_config(args)
        schema = _load_schema_file(args.file)
        actions = json.loads(Path(args.actions).read_text())
    except (FileNotFoundError, ValueError) as e:
        # json.JSONDecodeError and MalformedDocumentError are ValueErrors
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not isinstance(actions, list):
        console.print("[red]Error: actions file must contain a JSON array[/red]")
        return 1

    applied = rejected = ignored = 0
    current: Schema | None = schema
    for action in actions:
        result = apply_action(current, action, delete_policy=config.editor.delete_policy)
        current = result.schema
        if result.status == "applied":
            applied += 1
        elif result.status == "rejected":
            rejected += 1
            console.print(f"[yellow]Rejected:[/yellow] {result.message}")
        else:
            ignored += 1

    output = dump_schema_json(current) if current is not None else "null"
    if args.output:
        Path(args.output).write_text(output)
        console.print(f"Wrote [cyan]{args.output}[/cyan]")
    else:
        console.print(output, markup=False, highlight=False, soft_wrap=True)

    console.print(
        f"[bold green]v[/bold green] {applied} applied, "
        f"{rejected} rejected, {ignored} ignored"
    )
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """List saved designs.

    Returns:
        0 on success, 1 on unreadable config.
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    store = HistoryStore(args.file or config.history.file)
    items = store.load()

    if not items:
        console.print("[yellow]No saved designs.[/yellow]")
        return 0

    table = Table(title="Saved Designs", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Dialect")
    table.add_column("Tables", justify="right")
    table.add_column("Saved")

    for item in items:
        table.add_row(item.name, item.db_type, str(len(item.design.tables)), item.timestamp)

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="schema-forger",
        description="Schema design toolkit: validate, diff, lay out, and edit schema documents",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to schemaforger.toml (default: ./schemaforger.toml if present)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log engine decisions to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate command
    p_validate = subparsers.add_parser("validate", help="Check a schema document")
    p_validate.add_argument("file", help="Schema JSON file")
    p_validate.set_defaults(func=cmd_validate)

    # diff command
    p_diff = subparsers.add_parser("diff", help="Show differences between two schemas")
    p_diff.add_argument("old", help="Current schema JSON file")
    p_diff.add_argument("new", help="Proposed schema JSON file")
    p_diff.set_defaults(func=cmd_diff)

    # layout command
    p_layout = subparsers.add_parser("layout", help="Show the graph layout of a schema")
    p_layout.add_argument("file", help="Schema JSON file")
    p_layout.set_defaults(func=cmd_layout)

    # sql command
    p_sql = subparsers.add_parser("sql", help="Print CREATE TABLE statements")
    p_sql.add_argument("file", help="Schema JSON file")
    p_sql.add_argument(
        "--dialect",
        choices=DB_TYPES,
        default=None,
        help="SQL dialect (default: editor.db_type from config)",
    )
    p_sql.set_defaults(func=cmd_sql)

    # apply command
    p_apply = subparsers.add_parser("apply", help="Apply edit actions to a schema")
    p_apply.add_argument("file", help="Schema JSON file")
    p_apply.add_argument("actions", help="JSON file with a list of actions")
    p_apply.add_argument("--output", "-o", default=None, help="Write the result here")
    p_apply.set_defaults(func=cmd_apply)

    # history command
    p_history = subparsers.add_parser("history", help="List saved designs")
    p_history.add_argument(
        "--file",
        default=None,
        help="History file (default: history.file from config)",
    )
    p_history.set_defaults(func=cmd_history)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
