"""Schema model, mutation engine, graph layout, and diff.

Provides the document models (``Schema``, ``Table``, ``Column``), document
import/export (``load_schema_document``, ``dump_schema_document``), the
mutation engine (``apply_action``), layout (``layout_schema``), diffing
(``diff_schemas``), and integrity checks (``check_integrity``).

Usage:
    from schema_forger.schema import Schema, apply_action, layout_schema, diff_schemas
"""

from schema_forger.schema.diff import (
    AddedColumn,
    ColumnChanges,
    DeletedColumn,
    DiffResult,
    ModifiedColumn,
    TableDiff,
    ValueChange,
    diff_schemas,
)
from schema_forger.schema.document import (
    dump_schema_document,
    dump_schema_json,
    load_proposal_document,
    load_schema_document,
    load_schema_json,
    parse_assistant_response,
)
from schema_forger.schema.integrity import IntegrityReport, check_integrity
from schema_forger.schema.layout import (
    GraphEdge,
    GraphLayout,
    LayoutOptions,
    NodePlacement,
    compute_layers,
    layout_schema,
    refresh_layout,
)
from schema_forger.schema.models import (
    Column,
    EnhancementTask,
    ProposedEnhancement,
    Schema,
    Table,
    View,
)
from schema_forger.schema.mutations import (
    AddColumnAction,
    AddTableAction,
    ConnectAction,
    DeleteColumnAction,
    DeleteTableAction,
    MutationResult,
    ReplaceSchemaAction,
    UpdateColumnAction,
    UpdateTableNameAction,
    apply_action,
    connect_from_canvas,
    parse_action,
)

__all__ = [
    # Models
    "Column",
    "Table",
    "View",
    "Schema",
    "EnhancementTask",
    "ProposedEnhancement",
    # Documents
    "load_schema_document",
    "dump_schema_document",
    "load_schema_json",
    "dump_schema_json",
    "load_proposal_document",
    "parse_assistant_response",
    # Mutations
    "apply_action",
    "parse_action",
    "connect_from_canvas",
    "MutationResult",
    "AddTableAction",
    "DeleteTableAction",
    "UpdateTableNameAction",
    "AddColumnAction",
    "DeleteColumnAction",
    "UpdateColumnAction",
    "ConnectAction",
    "ReplaceSchemaAction",
    # Layout
    "layout_schema",
    "refresh_layout",
    "compute_layers",
    "LayoutOptions",
    "GraphLayout",
    "GraphEdge",
    "NodePlacement",
    # Diff
    "diff_schemas",
    "DiffResult",
    "TableDiff",
    "ColumnChanges",
    "AddedColumn",
    "DeletedColumn",
    "ModifiedColumn",
    "ValueChange",
    # Integrity
    "check_integrity",
    "IntegrityReport",
]
