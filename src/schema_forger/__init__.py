"""schema-forger: interactive database schema design core.

Keeps an in-memory relational schema, applies consistency-preserving edits,
lays it out as a layered graph, and diffs proposed versions against the
current one for review.

Usage:
    from schema_forger import DesignSession, Schema, apply_action, diff_schemas
    from schema_forger import load_schema_json, layout_schema, generate_sql
"""

__version__ = "0.1.0"

# Errors
from schema_forger.errors import (
    MalformedDocumentError,
    NoPendingProposalError,
    SchemaForgerError,
)

# Schema core
from schema_forger.schema.diff import DiffResult, diff_schemas
from schema_forger.schema.document import (
    dump_schema_document,
    dump_schema_json,
    load_schema_document,
    load_schema_json,
)
from schema_forger.schema.layout import GraphLayout, layout_schema
from schema_forger.schema.models import Column, Schema, Table
from schema_forger.schema.mutations import MutationResult, apply_action

# Session
from schema_forger.session import DesignSession

# SQL
from schema_forger.sql import generate_sql

__all__ = [
    # Errors
    "SchemaForgerError",
    "MalformedDocumentError",
    "NoPendingProposalError",
    # Models
    "Column",
    "Table",
    "Schema",
    # Documents
    "load_schema_document",
    "dump_schema_document",
    "load_schema_json",
    "dump_schema_json",
    # Engines
    "apply_action",
    "MutationResult",
    "layout_schema",
    "GraphLayout",
    "diff_schemas",
    "DiffResult",
    # Session
    "DesignSession",
    # SQL
    "generate_sql",
]
