"""Exception types raised by schema-forger.

Rejected and ignored mutations are not exceptions; they are reported through
``MutationResult.status`` (see ``schema_forger.schema.mutations``).
"""


class SchemaForgerError(Exception):
    """Base class for schema-forger errors."""

    pass


class MalformedDocumentError(SchemaForgerError, ValueError):
    """Raised when a schema document fails structural validation.

    The caller's current schema is never partially updated when this is raised.
    """

    pass


class NoPendingProposalError(SchemaForgerError):
    """Raised when accepting or rejecting a proposal that does not exist."""

    pass
