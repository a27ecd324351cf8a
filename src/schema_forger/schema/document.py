"""Serialized schema documents: import, export, and assistant responses.

A schema document is the plain camelCase tree described by
``schema_forger.schema.models``.  Imports are all-or-nothing: a document is
accepted only when its top-level ``tables`` collection is present and
list-shaped and every record validates; otherwise
``MalformedDocumentError`` is raised and nothing is applied.

Usage:
    from schema_forger.schema.document import load_schema_json, dump_schema_json

    schema = load_schema_json(Path("schema.json").read_text())
    Path("copy.json").write_text(dump_schema_json(schema))
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from schema_forger.errors import MalformedDocumentError
from schema_forger.schema.models import ProposedEnhancement, Schema

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


# ============================================================================
# Schema documents
# ============================================================================


def _require_tables(data: Any, label: str) -> None:
    if not isinstance(data, Mapping):
        raise MalformedDocumentError(f"{label} must be an object, got {type(data).__name__}")
    if "tables" not in data:
        raise MalformedDocumentError(f"{label} has no 'tables' collection")
    if not isinstance(data["tables"], list):
        raise MalformedDocumentError(f"{label} 'tables' must be an array")


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def load_schema_document(data: Any) -> Schema:
    """Validate a plain document and return it as a ``Schema``.

    Args:
        data: Parsed document (usually the result of ``json.loads``).

    Returns:
        The validated ``Schema`` snapshot.

    Raises:
        MalformedDocumentError: If ``tables`` is missing or not an array, or
            any table/column record fails validation.

    Example:
        >>> schema = load_schema_document({"tables": []})
        >>> schema.tables
        ()
    """
    _require_tables(data, "Schema document")
    try:
        return Schema.model_validate(data)
    except ValidationError as e:
        raise MalformedDocumentError(f"Invalid schema document: {_first_error(e)}") from e


def dump_schema_document(schema: Schema) -> dict[str, Any]:
    """Return *schema* as a plain camelCase document.

    Only fields present in the source document (or set by a mutation) are
    emitted, so ``load_schema_document(dump_schema_document(s)) == s`` and
    a loaded document dumps back to itself.
    """
    return schema.model_dump(mode="json", by_alias=True, exclude_unset=True)


def load_schema_json(text: str) -> Schema:
    """Parse JSON text into a ``Schema``.

    Raises:
        MalformedDocumentError: If the text is not JSON or the document is
            structurally invalid.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Schema file is not valid JSON: {e}") from e
    return load_schema_document(data)


def dump_schema_json(schema: Schema, indent: int = 2) -> str:
    return json.dumps(dump_schema_document(schema), indent=indent)


# ============================================================================
# Assistant responses
# ============================================================================


def parse_assistant_response(text: str) -> Any:
    """Parse the JSON payload of an assistant response.

    The payload may be wrapped in a Markdown code fence (with or without a
    ``json`` tag); the fence is stripped before parsing.

    Raises:
        MalformedDocumentError: If the response is empty or not valid JSON.

    Example:
        >>> parse_assistant_response('```json\\n{"tables": []}\\n```')
        {'tables': []}
    """
    stripped = text.strip()
    fence = _FENCE_PATTERN.search(stripped)
    payload = fence.group(1).strip() if fence else stripped

    if not payload:
        raise MalformedDocumentError("Assistant returned an empty response")

    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        logger.debug("Unparsable assistant response: %r", text)
        raise MalformedDocumentError(
            "Assistant returned invalid or malformed JSON"
        ) from e


def load_proposal_document(data: Any) -> ProposedEnhancement:
    """Validate an assistant proposal (``proposedSchema`` + ``enhancementTasks``).

    The proposed schema is held to the same rules as an import.

    Raises:
        MalformedDocumentError: If either part is missing or invalid.
    """
    if not isinstance(data, Mapping):
        raise MalformedDocumentError("Proposal must be an object")
    if "proposedSchema" not in data:
        raise MalformedDocumentError("Proposal has no 'proposedSchema'")
    _require_tables(data["proposedSchema"], "Proposed schema")
    if not isinstance(data.get("enhancementTasks"), list):
        raise MalformedDocumentError("Proposal 'enhancementTasks' must be an array")

    try:
        return ProposedEnhancement.model_validate(data)
    except ValidationError as e:
        raise MalformedDocumentError(f"Invalid proposal: {_first_error(e)}") from e
