"""Configuration management: TOML loading and config models.

Usage:
    >>> from schema_forger.config import load_editor_config, EditorConfig
"""

from schema_forger.config.loader import load_editor_config
from schema_forger.config.models import EditorConfig, EditorSettings, HistorySettings

__all__ = ["load_editor_config", "EditorConfig", "EditorSettings", "HistorySettings"]
