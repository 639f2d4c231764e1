"""Registry setup and event loop handling for CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sources import SourceRegistry, StorageDatabase, create_source_registry

from cli.utils.config import SourcesConfig

T = TypeVar("T")


def build_registry(config: SourcesConfig) -> SourceRegistry:
    """Create a registry persisting to the configured library file."""
    return create_source_registry(StorageDatabase(config.data_path))


def run_with_registry(func: Callable[[SourceRegistry], Awaitable[T]]) -> T:
    """Run an async command body against an initialized registry.

    Args:
        func: Coroutine function receiving the registry

    Returns:
        Whatever func returns
    """
    config = SourcesConfig.load()

    async def main() -> T:
        registry = build_registry(config)
        await registry.initialize()
        return await func(registry)

    return asyncio.run(main())
