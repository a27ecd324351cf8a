"""Tests for the schema diff engine."""

from conftest import fk_column, pk_column

from schema_forger.schema.diff import ValueChange, diff_columns, diff_schemas, diff_tables
from schema_forger.schema.models import Column, Schema, Table


class TestDiffSchemas:
    def test_identical_schemas(self, blog_schema: Schema) -> None:
        result = diff_schemas(blog_schema, blog_schema)

        assert result.is_empty
        assert result.change_count == 0
        assert result.format_report() == "No changes"

    def test_equal_copies(self, blog_schema: Schema) -> None:
        copy = Schema.model_validate(blog_schema.model_dump())
        assert diff_schemas(blog_schema, copy).is_empty

    def test_added_deleted_modified(self) -> None:
        """Every table lands in exactly one bucket, with complete column lists."""
        old = Schema(
            tables=[
                Table(name="users", columns=[pk_column(), Column(name="email", type="TEXT")]),
                Table(name="legacy", columns=[pk_column(), Column(name="blob", type="BYTEA")]),
            ]
        )
        new = Schema(
            tables=[
                Table(
                    name="users",
                    columns=[
                        pk_column(),
                        Column(name="email", type="VARCHAR(255)", is_unique=True),
                        Column(name="created_at", type="TIMESTAMP"),
                    ],
                ),
                Table(name="posts", columns=[pk_column(), fk_column("user_id", "users")]),
            ]
        )

        result = diff_schemas(old, new)

        assert [t.name for t in result.tables.added] == ["posts"]
        assert [t.name for t in result.tables.deleted] == ["legacy"]
        assert [t.name for t in result.tables.modified] == ["users"]

        posts = result.get_table("posts")
        assert posts.status == "added"
        assert [c.name for c in posts.columns.added] == ["id", "user_id"]

        legacy = result.get_table("legacy")
        assert [(c.name, c.old_type) for c in legacy.columns.deleted] == [
            ("id", "INTEGER"),
            ("blob", "BYTEA"),
        ]

        users = result.get_table("users")
        assert [c.name for c in users.columns.added] == ["created_at"]
        assert users.columns.added[0].new_type == "TIMESTAMP"
        assert users.columns.added[0].column.is_nullable is True
        email = users.columns.modified[0]
        assert email.name == "email"
        assert email.changes == {
            "type": ValueChange(old_value="TEXT", new_value="VARCHAR(255)"),
            "is_unique": ValueChange(old_value=False, new_value=True),
        }

    def test_users_posts_completeness(self) -> None:
        """users gains a unique email and posts is new; nothing else is reported."""
        users = Table(name="users", columns=[pk_column()])
        old = Schema(tables=[users])
        new = Schema(
            tables=[
                users.model_copy(
                    update={
                        "columns": users.columns
                        + (Column(name="email", type="TEXT", is_unique=True),)
                    }
                ),
                Table(name="posts", columns=[pk_column(), fk_column("user_id", "users")]),
            ]
        )

        result = diff_schemas(old, new)

        assert [t.name for t in result.tables.added] == ["posts"]
        assert [t.name for t in result.tables.modified] == ["users"]
        assert result.tables.deleted == []

        users_diff = result.get_table("users")
        assert users_diff.columns.deleted == []
        assert users_diff.columns.modified == []
        assert [c.name for c in users_diff.columns.added] == ["email"]
        email = users_diff.columns.added[0]
        assert email.new_type == "TEXT"
        assert email.column.is_unique is True

        posts_diff = result.get_table("posts")
        assert [c.name for c in posts_diff.columns.added] == ["id", "user_id"]
        assert posts_diff.columns.added[1].column.foreign_key_table == "users"

    def test_unchanged_table_not_reported(self, blog_schema: Schema) -> None:
        tables = list(blog_schema.tables)
        tables[0] = tables[0].model_copy(
            update={"columns": tables[0].columns + (Column(name="bio", type="TEXT"),)}
        )

        result = diff_schemas(blog_schema, Schema(tables=tables))

        assert [t.name for t in result.tables.modified] == ["users"]
        assert result.get_table("posts") is None

    def test_change_count(self, blog_schema: Schema) -> None:
        result = diff_schemas(Schema(tables=[]), blog_schema)
        assert result.change_count == 8

    def test_last_duplicate_wins(self) -> None:
        old = Schema(tables=[Table(name="a", columns=[Column(name="x", type="TEXT")])])
        new = Schema(
            tables=[
                Table(name="a", columns=[Column(name="x", type="INTEGER")]),
                Table(name="a", columns=[Column(name="x", type="TEXT")]),
            ]
        )
        assert diff_schemas(old, new).is_empty

    def test_format_report(self) -> None:
        old = Schema(tables=[Table(name="users", columns=[pk_column()])])
        new = Schema(
            tables=[
                Table(name="users", columns=[pk_column(), Column(name="email", type="TEXT")]),
                Table(name="tags", columns=[pk_column()]),
            ]
        )

        report = diff_schemas(old, new).format_report()

        assert report.startswith("Schema changes (2):")
        assert "+ tags (new table)" in report
        assert "~ users" in report
        assert "+ email TEXT" in report


class TestColumnDefaults:
    """Absent flags compare equal to their defaults."""

    def test_explicit_nullable_true_equals_absent(self) -> None:
        old = Column.model_validate({"name": "bio", "type": "TEXT"})
        new = Column.model_validate({"name": "bio", "type": "TEXT", "isNullable": True})
        assert diff_columns(old, new) == {}

    def test_nullable_change(self) -> None:
        old = Column.model_validate({"name": "bio", "type": "TEXT"})
        new = Column.model_validate({"name": "bio", "type": "TEXT", "isNullable": False})

        assert diff_columns(old, new) == {
            "is_nullable": ValueChange(old_value=True, new_value=False)
        }

    def test_null_flag_equals_false(self) -> None:
        old = Column.model_validate({"name": "id", "type": "INTEGER", "isPrimaryKey": None})
        new = Column.model_validate({"name": "id", "type": "INTEGER", "isPrimaryKey": False})
        assert diff_columns(old, new) == {}

    def test_foreign_key_target_change(self) -> None:
        old = fk_column("owner_id", "users")
        new = fk_column("owner_id", "accounts")

        assert diff_columns(old, new) == {
            "foreign_key_table": ValueChange(old_value="users", new_value="accounts")
        }


class TestDiffTables:
    def test_order_follows_snapshots(self) -> None:
        old = Table(
            name="t",
            columns=[Column(name="a", type="TEXT"), Column(name="b", type="TEXT")],
        )
        new = Table(
            name="t",
            columns=[Column(name="d", type="TEXT"), Column(name="c", type="TEXT")],
        )

        changes = diff_tables(old, new)

        assert [c.name for c in changes.added] == ["d", "c"]
        assert [c.name for c in changes.deleted] == ["a", "b"]
        assert changes.count == 4

    def test_rename_is_add_plus_delete(self) -> None:
        old = Table(name="t", columns=[Column(name="title", type="TEXT")])
        new = Table(name="t", columns=[Column(name="headline", type="TEXT")])

        changes = diff_tables(old, new)

        assert [c.name for c in changes.added] == ["headline"]
        assert [c.name for c in changes.deleted] == ["title"]
        assert changes.modified == []
