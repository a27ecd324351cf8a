"""Editor configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from schema_forger.config.models import EditorConfig

CONFIG_FILENAME = "schemaforger.toml"


def load_editor_config(config_path: Path | None = None) -> EditorConfig:
    """Load editor configuration from a TOML file.

    Args:
        config_path: Path to the config file.  When ``None``, looks for
            ``schemaforger.toml`` in the current working directory and
            falls back to defaults if it is not there.

    Returns:
        EditorConfig with editor, layout, and history settings.

    Raises:
        FileNotFoundError: If an explicit *config_path* doesn't exist.
        ValueError: If the file is not valid TOML or has invalid values.

    Example config:
        [editor]
        db_type = "sqlite"
        delete_policy = "detach"

        [layout]
        node_width = 280
        horizontal_gap = 80

        [history]
        file = "designs.json"
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME
        if not config_path.exists():
            return EditorConfig()
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path.name}: {e}") from e

    try:
        return EditorConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path.name}: {e}") from e
