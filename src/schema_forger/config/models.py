"""Pydantic models for editor configuration."""

from pydantic import BaseModel, Field

from schema_forger.schema.layout import LayoutOptions
from schema_forger.schema.mutations import TableDeletePolicy
from schema_forger.sql import DbType


class EditorSettings(BaseModel):
    """``[editor]`` section of schemaforger.toml."""

    db_type: DbType = "postgresql"
    delete_policy: TableDeletePolicy = "leave-dangling"


class HistorySettings(BaseModel):
    """``[history]`` section of schemaforger.toml."""

    file: str = ".schemaforger-history.json"


class EditorConfig(BaseModel):
    """Complete configuration from schemaforger.toml."""

    editor: EditorSettings = Field(default_factory=EditorSettings)
    layout: LayoutOptions = Field(default_factory=LayoutOptions)
    history: HistorySettings = Field(default_factory=HistorySettings)
