"""
Registry for storage source instances.

This module provides an explicit, constructible registry that maps source
identifiers to source instances. Coordinators receive the registry they
should use instead of reaching for shared module state, so tests can build
isolated registries with fake sources.
"""

import logging
import uuid
from pathlib import Path

from .base import StorageSource
from .db import StorageDatabase
from .exceptions import InvalidFileIdError, SourceNotFoundError
from .local import FILE_ID_PREFIX, FileSystemSource, validate_folder_path
from .my_scripts import MY_SCRIPTS_ID, MyScriptsSource
from .types import StoredFolder

logger = logging.getLogger(__name__)


def parse_file_id_source(file_id: str) -> str:
    """
    Return the identifier of the source that owns a file id.

    ``fs:<source id>:<path>`` belongs to the folder source ``<source id>``;
    any other ``<source id>:<rest>`` id belongs to ``<source id>``.

    Raises:
        InvalidFileIdError: If the id has no recognizable source prefix.
    """
    parts = file_id.split(":")
    if parts[0] == FILE_ID_PREFIX:
        if len(parts) >= 3 and parts[1]:
            return parts[1]
    elif len(parts) >= 2 and parts[0]:
        return parts[0]
    raise InvalidFileIdError(f"Unknown file ID format: {file_id}")


class SourceRegistry:
    """
    Registry of storage source instances.

    Registrations are expected to happen during start-up, before
    coordinators begin looking sources up. Re-registering an identifier
    replaces the previous source.

    Example:
        registry = SourceRegistry()
        registry.register("scratch", InMemorySource("scratch"))

        source = registry.get_source("scratch")
        files = await source.list_files()
    """

    def __init__(self, database: StorageDatabase | None = None):
        """
        Initialize an empty registry.

        Args:
            database: Storage used to remember folder sources. Defaults to
                an in-memory database.
        """
        self.database = database or StorageDatabase()
        self._sources: dict[str, StorageSource] = {}

    def register(self, source_id: str, source: StorageSource) -> None:
        """
        Register a source instance.

        Args:
            source_id: Identifier used to look the source up.
            source: Source instance.

        Raises:
            ValueError: If source does not inherit from StorageSource.
        """
        if not isinstance(source, StorageSource):
            raise ValueError(
                f"Source {type(source).__name__} must inherit from StorageSource"
            )

        self._sources[source_id] = source
        logger.debug(f"Registered source: {source_id}")

    def unregister(self, source_id: str) -> None:
        """Remove a source. Unknown identifiers are ignored."""
        self._sources.pop(source_id, None)

    def get_source(self, source_id: str) -> StorageSource | None:
        """
        Look a source up by identifier.

        Returns:
            The registered source, or None if nothing is registered.
        """
        return self._sources.get(source_id)

    def get_sources(self) -> list[StorageSource]:
        """Return all sources in registration order."""
        return list(self._sources.values())

    def is_registered(self, source_id: str) -> bool:
        """Check if a source identifier is registered."""
        return source_id in self._sources

    # -------------------------------------------------------------------------
    # Folder sources
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Restore remembered folder sources.

        Folders that can still be read are registered. Folders that are gone
        or unreadable are forgotten.
        """
        for stored in await self.database.get_all_folders():
            if stored.id in self._sources:
                continue

            source = FileSystemSource(Path(stored.path), stored.id, permission_granted=False)
            try:
                granted = await source.request_permission()
            except OSError as e:
                logger.warning(f"Could not check folder {stored.path}: {e}")
                granted = False

            if granted:
                self.register(stored.id, source)
            else:
                logger.info(f"Forgetting inaccessible folder: {stored.path}")
                await self.database.delete_folder(stored.id)

    async def add_folder(self, path: Path) -> FileSystemSource:
        """
        Add a local directory as a new folder source.

        Args:
            path: Absolute path to the directory.

        Returns:
            The registered folder source.

        Raises:
            ValueError: If the path is not an absolute, existing directory.
        """
        validate_folder_path(path)

        source_id = str(uuid.uuid4())
        source = FileSystemSource(path, source_id)
        await self.database.save_folder(StoredFolder(id=source_id, name=path.name, path=str(path)))

        self.register(source_id, source)
        logger.info(f"Added folder source {source_id}: {path}")
        return source

    async def remove_folder(self, source_id: str) -> None:
        """Forget a folder source. The built-in script library is never removed."""
        if source_id == MY_SCRIPTS_ID:
            return
        self.unregister(source_id)
        await self.database.delete_folder(source_id)

    async def get_file(self, file_id: str) -> tuple[StorageSource, str]:
        """
        Read a file from whichever source owns it.

        Returns:
            Tuple of (source, content).

        Raises:
            InvalidFileIdError: If the file id format is unknown.
            SourceNotFoundError: If the owning source is not registered.
        """
        source_id = parse_file_id_source(file_id)
        source = self._sources.get(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        content = await source.read_file(file_id)
        return source, content


def create_source_registry(database: StorageDatabase | None = None) -> SourceRegistry:
    """Create a registry with the built-in script library registered."""
    database = database or StorageDatabase()
    registry = SourceRegistry(database)
    registry.register(MY_SCRIPTS_ID, MyScriptsSource(database))
    return registry
