"""
Source catalog.

Publishes the list of registered sources for a presentation layer and
republishes it whenever folders are added or removed.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from sources.registry import SourceRegistry
from sources.types import SourceInfo

logger = logging.getLogger(__name__)

CatalogListener = Callable[["SourceCatalog"], None]


class SourceCatalog:
    """
    Observable view over a registry's sources.

    Example:
        catalog = SourceCatalog(registry)
        await catalog.initialize()

        for info in catalog.sources:
            print(info.id, info.name)
    """

    def __init__(self, registry: SourceRegistry):
        self._registry = registry
        self._sources: list[SourceInfo] = []
        self._is_loading = True
        self._listeners: list[CatalogListener] = []

    @property
    def sources(self) -> list[SourceInfo]:
        return list(self._sources)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        """Call listener after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh_sources(self) -> None:
        """Re-read the registry and notify listeners."""
        self._sources = [source.info() for source in self._registry.get_sources()]
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Catalog listener failed")

    async def initialize(self) -> None:
        """Restore remembered folders and publish the first source list."""
        await self._registry.initialize()
        self._is_loading = False
        self.refresh_sources()

    async def add_folder(self, path: Path) -> SourceInfo:
        """
        Add a local directory as a source.

        Raises:
            ValueError: If the path is not an absolute, existing directory.
        """
        source = await self._registry.add_folder(path)
        self.refresh_sources()
        return source.info()

    async def remove_folder(self, source_id: str) -> None:
        await self._registry.remove_folder(source_id)
        self.refresh_sources()
