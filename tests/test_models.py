"""Tests for the schema document models."""

import pytest
from pydantic import ValidationError

from schema_forger.schema.models import (
    Column,
    EnhancementTask,
    ProposedEnhancement,
    Schema,
    Table,
    View,
)


class TestColumnDefaults:
    """Column flags default the way the document format defines them."""

    def test_minimal_column(self) -> None:
        col = Column(name="id", type="INTEGER")

        assert col.is_primary_key is False
        assert col.is_foreign_key is False
        assert col.foreign_key_table is None
        assert col.foreign_key_column is None
        assert col.is_nullable is True
        assert col.is_unique is False

    def test_null_flags_take_defaults(self) -> None:
        """Explicit nulls in a document are treated as absent."""
        col = Column.model_validate(
            {
                "name": "email",
                "type": "TEXT",
                "isNullable": None,
                "isUnique": None,
                "isPrimaryKey": None,
            }
        )

        assert col.is_nullable is True
        assert col.is_unique is False
        assert col.is_primary_key is False

    def test_camel_case_aliases(self) -> None:
        col = Column.model_validate(
            {
                "name": "user_id",
                "type": "INTEGER",
                "isForeignKey": True,
                "foreignKeyTable": "users",
                "foreignKeyColumn": "id",
            }
        )

        assert col.is_foreign_key is True
        assert col.foreign_key_table == "users"
        assert col.foreign_key_column == "id"

    def test_snake_case_names_accepted(self) -> None:
        col = Column(name="id", type="INTEGER", is_primary_key=True)
        assert col.is_primary_key is True

    def test_type_required(self) -> None:
        with pytest.raises(ValidationError):
            Column.model_validate({"name": "id"})


class TestImmutability:
    """Snapshots cannot be modified in place."""

    def test_column_is_frozen(self) -> None:
        col = Column(name="id", type="INTEGER")
        with pytest.raises(ValidationError):
            col.name = "other"

    def test_schema_tables_are_a_tuple(self) -> None:
        schema = Schema(tables=[Table(name="users")])
        assert isinstance(schema.tables, tuple)


class TestLookups:
    def test_get_table(self, blog_schema: Schema) -> None:
        assert blog_schema.get_table("posts").name == "posts"
        assert blog_schema.get_table("missing") is None

    def test_has_table(self, blog_schema: Schema) -> None:
        assert blog_schema.has_table("users")
        assert not blog_schema.has_table("tags")

    def test_table_names_in_order(self, blog_schema: Schema) -> None:
        assert blog_schema.table_names == ["users", "posts", "comments"]

    def test_get_column(self, blog_schema: Schema) -> None:
        posts = blog_schema.get_table("posts")
        assert posts.get_column("user_id").foreign_key_table == "users"
        assert posts.get_column("nope") is None

    def test_handle_for(self) -> None:
        assert Table(name="posts").handle_for("user_id") == "posts__user_id"


class TestProposalModels:
    def test_proposal_from_document(self) -> None:
        proposal = ProposedEnhancement.model_validate(
            {
                "proposedSchema": {"tables": []},
                "enhancementTasks": [{"title": "Add tags", "description": "New table"}],
            }
        )

        assert proposal.proposed_schema.tables == ()
        assert proposal.enhancement_tasks == (
            EnhancementTask(title="Add tags", description="New table"),
        )

    def test_views_pass_through(self) -> None:
        schema = Schema(tables=[], views=[View(name="v", query="SELECT 1")])
        assert schema.views[0].query == "SELECT 1"
