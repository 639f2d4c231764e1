"""
Abstract base class for script storage sources.

This module defines the contract that all storage sources must implement.
Sources are responsible for listing and reading scripts from various
storage backends. Only listing is required; the remaining operations
default to read-only behaviour.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .exceptions import ReadOnlySourceError
from .types import ScriptFile, SourceInfo, SourceType


class StorageSource(ABC):
    """
    Abstract interface for script storage sources.

    All source implementations (the built-in script library, local folders,
    in-memory doubles, remote APIs) must inherit from this class and
    implement list_files().

    Example:
        class MySource(StorageSource):
            @property
            def source_id(self) -> str:
                return "mine"

            @property
            def name(self) -> str:
                return "My Source"

            async def list_files(self) -> list[ScriptFile]:
                return [ScriptFile(id="mine:1", name="One", source_id="mine")]

    list_files() may be awaited repeatedly and concurrently by independent
    callers. Implementations must not rely on caller state.
    """

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Return the registry identifier of this source."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the human-readable source name."""
        pass

    @property
    def source_type(self) -> SourceType | str:
        """Return the source kind. Subclasses typically override this."""
        return self.__class__.__name__.replace("Source", "").lower()

    @property
    def readonly(self) -> bool:
        """Whether mutating operations are rejected."""
        return True

    @property
    def needs_permission(self) -> bool:
        """Whether the source must be granted access before listing."""
        return False

    def info(self) -> SourceInfo:
        """Return a descriptive snapshot of this source."""
        return SourceInfo(
            id=self.source_id,
            name=self.name,
            type=self.source_type,
            readonly=self.readonly,
            needs_permission=self.needs_permission,
        )

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_files(self) -> Sequence[ScriptFile]:
        """
        Return the files available in this source.

        Returns:
            Ordered sequence of ScriptFile records.

        Raises:
            Exception: Backend-defined errors if the source cannot be read.
        """
        pass

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    async def read_file(self, file_id: str) -> str:
        """
        Read a file's content.

        Args:
            file_id: File identifier (from ScriptFile.id)

        Returns:
            The file content as text.
        """
        raise NotImplementedError(f"{self.name} does not support reading files")

    async def write_file(self, file_id: str, content: str) -> None:
        """Replace a file's content."""
        raise ReadOnlySourceError(f"{self.name} is read-only")

    async def delete_file(self, file_id: str) -> None:
        """Delete a file."""
        raise ReadOnlySourceError(f"{self.name} is read-only")

    async def rename_file(self, file_id: str, new_name: str) -> None:
        """Rename a file."""
        raise ReadOnlySourceError(f"{self.name} is read-only")

    async def create_file(self, name: str, content: str) -> ScriptFile:
        """Create a new file and return its record."""
        raise ReadOnlySourceError(f"{self.name} is read-only")

    async def request_permission(self) -> bool:
        """
        Ask for access to the source.

        Returns:
            True if the source can now be listed, False otherwise.
        """
        return True
