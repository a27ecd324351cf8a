"""Shared fixtures: a small blog schema used across the test modules."""

import pytest

from schema_forger.schema.models import Column, Schema, Table


def pk_column(name: str = "id", col_type: str = "INTEGER") -> Column:
    return Column(name=name, type=col_type, is_primary_key=True, is_nullable=False)


def fk_column(name: str, table: str, column: str = "id", **kwargs) -> Column:
    return Column(
        name=name,
        type="INTEGER",
        is_foreign_key=True,
        foreign_key_table=table,
        foreign_key_column=column,
        **kwargs,
    )


@pytest.fixture
def blog_schema() -> Schema:
    """users <- posts <- comments, with comments also referencing users."""
    users = Table(
        name="users",
        columns=[pk_column(), Column(name="name", type="TEXT")],
    )
    posts = Table(
        name="posts",
        columns=[
            pk_column(),
            fk_column("user_id", "users", is_nullable=False),
            Column(name="title", type="TEXT"),
        ],
    )
    comments = Table(
        name="comments",
        columns=[
            pk_column(),
            fk_column("post_id", "posts"),
            fk_column("user_id", "users"),
        ],
    )
    return Schema(tables=[users, posts, comments])
