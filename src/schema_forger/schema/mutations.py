"""Schema mutation engine.

``apply_action(schema, action)`` is a pure state transition: it never
modifies *schema* and always returns a ``MutationResult`` holding the
resulting snapshot.  Three outcomes are possible:

- ``applied``: the action took effect.
- ``rejected``: a precondition failed (e.g. a duplicate rename target).  The
  snapshot is returned unchanged and ``message`` holds user-facing text.
- ``noop``: the action kind is unknown or references a table, column, or
  endpoint that does not exist.  The snapshot is returned unchanged.

No input makes ``apply_action`` raise.

Usage:
    from schema_forger.schema.mutations import apply_action, UpdateTableNameAction

    result = apply_action(schema, UpdateTableNameAction(old_name="users", new_name="accounts"))
    if result.status == "rejected":
        print(result.message)
    schema = result.schema

    # Raw mappings (e.g. from a UI event) are accepted too
    result = apply_action(schema, {"type": "add-column", "tableName": "accounts"})
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from schema_forger.schema.models import Column, Schema, Table

logger = logging.getLogger(__name__)

HANDLE_SEPARATOR = "__"
DEFAULT_COLUMN_TYPE = "TEXT"

TableDeletePolicy = Literal["leave-dangling", "detach"]
MutationStatus = Literal["applied", "rejected", "noop"]


# ============================================================================
# Actions
# ============================================================================


class _Action(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AddTableAction(_Action):
    """Append a table with a generated name and an ``id`` primary key."""

    type: Literal["add-table"] = "add-table"


class DeleteTableAction(_Action):
    type: Literal["delete-table"] = "delete-table"
    table_name: str


class UpdateTableNameAction(_Action):
    """Rename a table and repoint every foreign key that referenced it."""

    type: Literal["update-table-name"] = "update-table-name"
    old_name: str
    new_name: str


class AddColumnAction(_Action):
    type: Literal["add-column"] = "add-column"
    table_name: str


class DeleteColumnAction(_Action):
    type: Literal["delete-column"] = "delete-column"
    table_name: str
    column_name: str


class UpdateColumnAction(_Action):
    """Replace a column's full field set (including, possibly, its name)."""

    type: Literal["update-column"] = "update-column"
    table_name: str
    column_name: str
    new_column: Column


class ConnectAction(_Action):
    """Mark the source column as a foreign key to the target column.

    Both handles have the form ``table__column``.  Build this from raw canvas
    endpoints with ``connect_from_canvas()``, which corrects the direction.
    """

    type: Literal["connect"] = "connect"
    source_handle: str
    target_handle: str


class ReplaceSchemaAction(_Action):
    """Replace the whole snapshot (generation, import, accepted proposal).

    Raw mappings carry the snapshot under ``schema`` (``newSchema`` and
    ``new_schema`` are accepted too).
    """

    type: Literal["replace-schema"] = "replace-schema"
    new_schema: Schema | None = Field(
        validation_alias=AliasChoices("schema", "newSchema", "new_schema"),
        serialization_alias="schema",
    )


Action = Annotated[
    Union[
        AddTableAction,
        DeleteTableAction,
        UpdateTableNameAction,
        AddColumnAction,
        DeleteColumnAction,
        UpdateColumnAction,
        ConnectAction,
        ReplaceSchemaAction,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(data: Mapping[str, Any]) -> Action | None:
    """Build an action model from a raw mapping.

    Returns ``None`` for an unknown ``type`` or an invalid payload.

    Example:
        >>> parse_action({"type": "delete-table", "tableName": "users"})
        DeleteTableAction(type='delete-table', table_name='users')
        >>> parse_action({"type": "explode"}) is None
        True
    """
    try:
        return _action_adapter.validate_python(dict(data))
    except ValidationError:
        return None


def parse_handle(handle: str | None) -> tuple[str, str] | None:
    """Split a ``table__column`` anchor id; ``None`` if it has no two parts."""
    if not handle:
        return None
    table_name, separator, column_name = handle.partition(HANDLE_SEPARATOR)
    if not separator or not table_name or not column_name:
        return None
    return table_name, column_name


def connect_from_canvas(source_handle: str, target_handle: str) -> ConnectAction:
    """Turn a user-drawn edge into a ``ConnectAction``.

    A drawn connection always means "target references source", whichever
    anchor the drag started from, so the endpoints are swapped: the foreign
    key lands on the drawn target's column.

    Example:
        >>> connect_from_canvas("users__id", "posts__user_id").source_handle
        'posts__user_id'
    """
    return ConnectAction(source_handle=target_handle, target_handle=source_handle)


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class MutationResult:
    """Outcome of ``apply_action()``.

    Attributes:
        schema: Resulting snapshot (the input itself unless ``applied``).
        status: ``applied``, ``rejected``, or ``noop``.
        message: User-facing explanation for a rejection.
        relayout: True if the result needs a full graph re-layout rather
            than keeping existing node positions.
    """

    schema: Schema | None
    status: MutationStatus
    message: str = ""
    relayout: bool = False

    @property
    def changed(self) -> bool:
        return self.status == "applied"


def _applied(schema: Schema | None, relayout: bool = False) -> MutationResult:
    return MutationResult(schema=schema, status="applied", relayout=relayout)


def _rejected(schema: Schema | None, message: str) -> MutationResult:
    logger.warning("Mutation rejected: %s", message)
    return MutationResult(schema=schema, status="rejected", message=message)


def _noop(schema: Schema | None, reason: str) -> MutationResult:
    logger.debug("Mutation ignored: %s", reason)
    return MutationResult(schema=schema, status="noop")


# ============================================================================
# Snapshot helpers
# ============================================================================


def _with_tables(schema: Schema, tables: tuple[Table, ...]) -> Schema:
    return schema.model_copy(update={"tables": tables})


def _with_columns(table: Table, columns: tuple[Column, ...]) -> Table:
    return table.model_copy(update={"columns": columns})


def _replace_table(schema: Schema, name: str, build: Callable[[Table], Table]) -> Schema:
    return _with_tables(
        schema,
        tuple(build(t) if t.name == name else t for t in schema.tables),
    )


def _retarget(column: Column, table_name: str) -> Column:
    return column.model_copy(update={"foreign_key_table": table_name})


def _detach(column: Column) -> Column:
    return column.model_copy(
        update={
            "is_foreign_key": False,
            "foreign_key_table": None,
            "foreign_key_column": None,
        }
    )


# ============================================================================
# Action handlers
# ============================================================================


def _add_table(schema: Schema | None) -> MutationResult:
    base = schema if schema is not None else Schema(tables=())
    table = Table(
        name=f"new_table_{len(base.tables) + 1}",
        columns=(
            Column(name="id", type="INTEGER", is_primary_key=True, is_nullable=False),
        ),
    )
    return _applied(_with_tables(base, base.tables + (table,)), relayout=True)


def _delete_table(
    schema: Schema, action: DeleteTableAction, policy: TableDeletePolicy
) -> MutationResult:
    name = action.table_name
    if not schema.has_table(name):
        return _noop(schema, f"table '{name}' does not exist")

    remaining = tuple(t for t in schema.tables if t.name != name)

    if policy == "detach":
        remaining = tuple(
            _with_columns(
                t,
                tuple(
                    _detach(c) if c.is_foreign_key and c.foreign_key_table == name else c
                    for c in t.columns
                ),
            )
            for t in remaining
        )

    return _applied(_with_tables(schema, remaining))


def _rename_table(schema: Schema, action: UpdateTableNameAction) -> MutationResult:
    old_name, new_name = action.old_name, action.new_name

    if not new_name.strip():
        return _rejected(schema, "Table name cannot be empty.")
    if new_name == old_name:
        return _rejected(schema, f'Table is already named "{new_name}".')
    if schema.has_table(new_name):
        return _rejected(schema, f'A table named "{new_name}" already exists.')
    if not schema.has_table(old_name):
        return _noop(schema, f"table '{old_name}' does not exist")

    tables: list[Table] = []
    for table in schema.tables:
        columns = tuple(
            _retarget(c, new_name) if c.foreign_key_table == old_name else c
            for c in table.columns
        )
        update: dict[str, Any] = {}
        if table.name == old_name:
            update["name"] = new_name
        if columns != table.columns:
            update["columns"] = columns
        tables.append(table.model_copy(update=update) if update else table)

    return _applied(_with_tables(schema, tuple(tables)))


def _add_column(schema: Schema, action: AddColumnAction) -> MutationResult:
    if not schema.has_table(action.table_name):
        return _noop(schema, f"table '{action.table_name}' does not exist")

    def build(table: Table) -> Table:
        column = Column(
            name=f"new_column_{len(table.columns) + 1}",
            type=DEFAULT_COLUMN_TYPE,
            is_nullable=True,
        )
        return _with_columns(table, table.columns + (column,))

    return _applied(_replace_table(schema, action.table_name, build))


def _delete_column(schema: Schema, action: DeleteColumnAction) -> MutationResult:
    table = schema.get_table(action.table_name)
    if table is None or not table.has_column(action.column_name):
        return _noop(
            schema, f"column '{action.table_name}.{action.column_name}' does not exist"
        )

    def build(t: Table) -> Table:
        return _with_columns(t, tuple(c for c in t.columns if c.name != action.column_name))

    return _applied(_replace_table(schema, action.table_name, build))


def _update_column(schema: Schema, action: UpdateColumnAction) -> MutationResult:
    table = schema.get_table(action.table_name)
    if table is None or not table.has_column(action.column_name):
        return _noop(
            schema, f"column '{action.table_name}.{action.column_name}' does not exist"
        )

    new_column = action.new_column
    if new_column.name != action.column_name and table.has_column(new_column.name):
        return _rejected(
            schema,
            f'A column named "{new_column.name}" already exists in "{table.name}".',
        )

    def build(t: Table) -> Table:
        return _with_columns(
            t,
            tuple(new_column if c.name == action.column_name else c for c in t.columns),
        )

    return _applied(_replace_table(schema, action.table_name, build))


def _connect(schema: Schema, action: ConnectAction) -> MutationResult:
    source = parse_handle(action.source_handle)
    target = parse_handle(action.target_handle)
    if source is None or target is None:
        return _noop(schema, "connection endpoint is not a table__column handle")

    source_table, source_column = source
    target_table, target_column = target

    source_def = schema.get_table(source_table)
    target_def = schema.get_table(target_table)
    if source_def is None or not source_def.has_column(source_column):
        return _noop(schema, f"source column '{source_table}.{source_column}' does not exist")
    if target_def is None or not target_def.has_column(target_column):
        return _noop(schema, f"target column '{target_table}.{target_column}' does not exist")

    def build(t: Table) -> Table:
        return _with_columns(
            t,
            tuple(
                c.model_copy(
                    update={
                        "is_foreign_key": True,
                        "foreign_key_table": target_table,
                        "foreign_key_column": target_column,
                    }
                )
                if c.name == source_column
                else c
                for c in t.columns
            ),
        )

    return _applied(_replace_table(schema, source_table, build))


# ============================================================================
# Dispatch
# ============================================================================


def apply_action(
    schema: Schema | None,
    action: Action | Mapping[str, Any] | Any,
    *,
    delete_policy: TableDeletePolicy = "leave-dangling",
) -> MutationResult:
    """Apply one action to a snapshot and return the result.

    Args:
        schema: Current snapshot, or ``None`` when no design is loaded.  Only
            ``add-table`` and ``replace-schema`` act on ``None``.
        action: An action model, or a raw mapping with a ``type`` key
            (camelCase or snake_case payload keys).
        delete_policy: What ``delete-table`` does to columns that referenced
            the deleted table.  ``leave-dangling`` keeps them unchanged;
            ``detach`` clears their foreign-key flag and target.

    Returns:
        ``MutationResult``; ``result.schema`` is *schema* itself unless the
        action was applied.

    Examples:
        >>> result = apply_action(None, AddTableAction())
        >>> result.schema.table_names
        ['new_table_1']
        >>> apply_action(result.schema, {"type": "unknown"}).status
        'noop'
    """
    if isinstance(action, Mapping):
        parsed = parse_action(action)
        if parsed is None:
            return _noop(schema, f"unrecognized action {action.get('type')!r}")
        action = parsed

    if isinstance(action, AddTableAction):
        return _add_table(schema)
    if isinstance(action, ReplaceSchemaAction):
        return _applied(action.new_schema, relayout=True)

    if schema is None:
        return _noop(schema, "no schema loaded")

    if isinstance(action, DeleteTableAction):
        return _delete_table(schema, action, delete_policy)
    if isinstance(action, UpdateTableNameAction):
        return _rename_table(schema, action)
    if isinstance(action, AddColumnAction):
        return _add_column(schema, action)
    if isinstance(action, DeleteColumnAction):
        return _delete_column(schema, action)
    if isinstance(action, UpdateColumnAction):
        return _update_column(schema, action)
    if isinstance(action, ConnectAction):
        return _connect(schema, action)

    return _noop(schema, f"unsupported action {type(action).__name__}")
