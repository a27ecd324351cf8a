"""Design session: the current snapshot plus everything derived from it.

A ``DesignSession`` owns one schema snapshot at a time and routes every
change through the mutation engine.  It also keeps the graph layout in step
with the snapshot and holds at most one pending assistant proposal for
review.

Layout policy:
- Full re-layout when the schema is replaced wholesale, a table is added, or
  ``auto_layout()`` is called.
- Any other edit keeps existing node positions and only rebuilds edges (and
  places nodes for tables that had none).

Actions are not coordinated across threads; callers serialize them.

Usage:
    from schema_forger.session import DesignSession

    session = DesignSession()
    session.dispatch(AddTableAction())
    session.connect("users__id", "posts__user_id")

    diff = session.propose(proposal)
    print(diff.format_report())
    session.accept_proposal()
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from schema_forger.config.models import EditorConfig
from schema_forger.errors import NoPendingProposalError
from schema_forger.history.models import HistoryItem
from schema_forger.history.store import HistoryStore
from schema_forger.schema.diff import DiffResult, diff_schemas
from schema_forger.schema.document import (
    dump_schema_document,
    load_proposal_document,
    load_schema_document,
)
from schema_forger.schema.layout import GraphLayout, layout_schema, refresh_layout
from schema_forger.schema.layout import move_node as _move_layout_node
from schema_forger.schema.models import ProposedEnhancement, Schema
from schema_forger.schema.mutations import (
    Action,
    DeleteColumnAction,
    MutationResult,
    ReplaceSchemaAction,
    apply_action,
    connect_from_canvas,
    parse_action,
)
from schema_forger.sql import DbType, generate_sql

logger = logging.getLogger(__name__)


class DesignSession:
    """One editing session over a single schema design.

    Attributes:
        schema: Current snapshot, or ``None`` when no design is loaded.
        layout: Graph layout for ``schema``.
        db_type: Target dialect for SQL generation.
        prompt: Free-text design description (used when saving history).
        design_id: Identity of the design; reused when saving to history.
        proposal: Pending assistant proposal, if any.
        proposal_diff: Diff of ``proposal`` against ``schema`` at proposal time.
    """

    def __init__(self, config: EditorConfig | None = None, schema: Schema | None = None) -> None:
        self.config = config or EditorConfig()
        self.db_type: DbType = self.config.editor.db_type
        self.prompt = ""
        self.design_id = str(uuid.uuid4())
        self.schema: Schema | None = None
        self.layout = GraphLayout()
        self.proposal: ProposedEnhancement | None = None
        self.proposal_diff: DiffResult | None = None

        if schema is not None:
            self.replace_schema(schema)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def dispatch(self, action: Action | Mapping[str, Any]) -> MutationResult:
        """Apply one action to the current snapshot.

        Primary-key columns cannot be deleted from a session; the engine
        itself allows it.

        Returns:
            The engine's ``MutationResult``.  On ``rejected`` the caller
            shows ``result.message`` to the user; the snapshot is unchanged.
        """
        protected = self._protected_column(action)
        if protected is not None:
            message = f'Primary key column "{protected}" cannot be deleted.'
            logger.warning("Mutation rejected: %s", message)
            return MutationResult(schema=self.schema, status="rejected", message=message)

        result = apply_action(
            self.schema, action, delete_policy=self.config.editor.delete_policy
        )
        if not result.changed:
            return result

        self.schema = result.schema
        if result.relayout:
            self.layout = layout_schema(self.schema, self.config.layout)
        else:
            self.layout = refresh_layout(self.schema, self.layout, self.config.layout)
        return result

    def _protected_column(self, action: Action | Mapping[str, Any]) -> str | None:
        """Name of the primary-key column *action* would delete, if any."""
        if isinstance(action, Mapping):
            action = parse_action(action)
        if not isinstance(action, DeleteColumnAction) or self.schema is None:
            return None

        table = self.schema.get_table(action.table_name)
        column = table.get_column(action.column_name) if table is not None else None
        if column is not None and column.is_primary_key:
            return column.name
        return None

    def connect(self, source_handle: str, target_handle: str) -> MutationResult:
        """Handle a user-drawn edge between two ``table__column`` anchors."""
        return self.dispatch(connect_from_canvas(source_handle, target_handle))

    def replace_schema(self, schema: Schema | None) -> MutationResult:
        """Replace the whole snapshot and lay it out from scratch."""
        logger.info(
            "Replacing schema (%d tables)", len(schema.tables) if schema is not None else 0
        )
        return self.dispatch(ReplaceSchemaAction(new_schema=schema))

    def auto_layout(self) -> GraphLayout:
        """Recompute every node position."""
        self.layout = layout_schema(self.schema, self.config.layout)
        return self.layout

    def move_node(self, table_name: str, x: float, y: float) -> None:
        """Record a manual node move; kept across later non-layout edits."""
        self.layout = _move_layout_node(self.layout, table_name, x, y)

    def new_design(self) -> None:
        """Discard the current design and start an empty one."""
        self.schema = None
        self.layout = GraphLayout()
        self.prompt = ""
        self.proposal = None
        self.proposal_diff = None
        self.design_id = str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_document(self, data: Any) -> Schema:
        """Replace the snapshot with an imported document.

        Raises:
            MalformedDocumentError: If the document is invalid.  The current
                snapshot is left untouched.
        """
        schema = load_schema_document(data)
        self.replace_schema(schema)
        return schema

    def export_document(self) -> dict[str, Any] | None:
        """The current snapshot as a plain document, or ``None``."""
        if self.schema is None:
            return None
        return dump_schema_document(self.schema)

    def generate_sql(self, db_type: DbType | None = None) -> str:
        """DDL for the current snapshot (empty string when there is none)."""
        if self.schema is None:
            return ""
        return generate_sql(self.schema, db_type or self.db_type)

    # ------------------------------------------------------------------
    # Proposal review
    # ------------------------------------------------------------------

    def propose(self, proposal: ProposedEnhancement | Mapping[str, Any]) -> DiffResult:
        """Hold *proposal* for review and return its diff against the current snapshot.

        A raw mapping is validated like an import first.  A new proposal
        replaces any pending one.

        Raises:
            MalformedDocumentError: If a raw proposal is invalid.
        """
        if isinstance(proposal, Mapping):
            proposal = load_proposal_document(proposal)

        current = self.schema if self.schema is not None else Schema(tables=())
        self.proposal = proposal
        self.proposal_diff = diff_schemas(current, proposal.proposed_schema)
        logger.info(
            "Proposal pending: %d column changes, %d tasks",
            self.proposal_diff.change_count,
            len(proposal.enhancement_tasks),
        )
        return self.proposal_diff

    def accept_proposal(self) -> MutationResult:
        """Commit the pending proposal as the new snapshot.

        Raises:
            NoPendingProposalError: If nothing is pending.
        """
        if self.proposal is None:
            raise NoPendingProposalError("No proposal to accept")

        proposed = self.proposal.proposed_schema
        self.proposal = None
        self.proposal_diff = None
        logger.info("Proposal accepted")
        return self.replace_schema(proposed)

    def reject_proposal(self) -> None:
        """Discard the pending proposal; the snapshot is untouched.

        Raises:
            NoPendingProposalError: If nothing is pending.
        """
        if self.proposal is None:
            raise NoPendingProposalError("No proposal to reject")

        self.proposal = None
        self.proposal_diff = None
        logger.info("Proposal rejected")

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def save_to_history(self, store: HistoryStore, name: str) -> HistoryItem | None:
        """Save the current design under ``design_id``; ``None`` if there is no schema."""
        if self.schema is None:
            return None

        item = HistoryItem.create(
            name=name,
            schema=self.schema,
            prompt=self.prompt,
            db_type=self.db_type,
            item_id=self.design_id,
        )
        store.save(item)
        return item

    def load_from_history(self, item: HistoryItem) -> None:
        """Make *item* the current design."""
        self.prompt = item.prompt
        self.db_type = item.db_type
        self.design_id = item.id
        self.proposal = None
        self.proposal_diff = None
        self.replace_schema(item.design)
