"""Tests for package exports and public API.

Verifies that each __init__.py defines an accurate __all__ and that the
top-level convenience imports work.
"""

import importlib

import pytest

SUBPACKAGES = [
    "schema_forger",
    "schema_forger.schema",
    "schema_forger.config",
    "schema_forger.history",
]


class TestTopLevelExports:
    """Tests for src/schema_forger/__init__.py exports."""

    def test_version_defined(self) -> None:
        import schema_forger

        assert schema_forger.__version__ == "0.1.0"

    def test_engine_exports(self) -> None:
        """The engines are importable from the top level."""
        from schema_forger import apply_action, diff_schemas, generate_sql, layout_schema

        assert callable(apply_action)
        assert callable(layout_schema)
        assert callable(diff_schemas)
        assert callable(generate_sql)

    def test_error_hierarchy(self) -> None:
        from schema_forger import (
            MalformedDocumentError,
            NoPendingProposalError,
            SchemaForgerError,
        )

        assert issubclass(MalformedDocumentError, SchemaForgerError)
        assert issubclass(MalformedDocumentError, ValueError)
        assert issubclass(NoPendingProposalError, SchemaForgerError)


class TestAllLists:
    @pytest.mark.parametrize("module_name", SUBPACKAGES)
    def test_all_names_are_importable(self, module_name: str) -> None:
        """Every name in __all__ is accessible on the module."""
        module = importlib.import_module(module_name)

        assert isinstance(module.__all__, list)
        for name in module.__all__:
            assert hasattr(module, name), f"'{name}' is in __all__ but not on {module_name}"

    @pytest.mark.parametrize("module_name", SUBPACKAGES)
    def test_no_duplicates(self, module_name: str) -> None:
        module = importlib.import_module(module_name)
        assert len(module.__all__) == len(set(module.__all__))
