"""
Exceptions for storage source operations.

Provides a hierarchy of exceptions for the error scenarios shared by all
source implementations and the source registry.
"""


class SourceError(Exception):
    """Base exception for all storage source operations."""

    pass


class SourceNotFoundError(SourceError):
    """No source is registered under the requested identifier."""

    def __init__(self, source_id: str):
        super().__init__(f"Source not found: {source_id}")
        self.source_id = source_id


class InvalidFileIdError(SourceError):
    """File identifier does not match any known format."""

    pass


class ScriptNotFoundError(SourceError):
    """File does not exist in its source."""

    pass


class ReadOnlySourceError(SourceError):
    """Mutating operation attempted on a read-only source."""

    pass


class PermissionDeniedError(SourceError):
    """Source cannot be accessed with the current permissions."""

    pass
