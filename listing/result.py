"""
Listing results with an empty fallback.

A listing fetch resolves to either ``Ok(files)`` or ``Err(error)``. The
publish step of a coordinator maps every ``Err`` to an empty listing, so
absent sources and failing backends both read as "no files".
"""

import logging
from dataclasses import dataclass
from typing import Union

from sources.exceptions import SourceNotFoundError
from sources.registry import SourceRegistry
from sources.types import ScriptFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    """A successful listing."""

    files: tuple[ScriptFile, ...]


@dataclass(frozen=True)
class Err:
    """A listing that could not be produced."""

    error: Exception


ListingResult = Union[Ok, Err]


async def fetch_listing(registry: SourceRegistry, source_id: str) -> ListingResult:
    """
    Look a source up and list its files.

    Only ``Exception`` subclasses raised by the source are captured;
    cancellation propagates.

    Args:
        registry: Registry to resolve the source from.
        source_id: Identifier of the source to list.

    Returns:
        Ok with the source's files verbatim, or Err with
        SourceNotFoundError for unregistered identifiers or the error the
        source raised.
    """
    source = registry.get_source(source_id)
    if source is None:
        logger.debug(f"No source registered for {source_id!r}")
        return Err(SourceNotFoundError(source_id))

    try:
        # Materialize inside the try so lazy iterables fail here too
        files = tuple(await source.list_files())
    except Exception as e:
        logger.debug(f"Listing {source_id!r} failed: {e!r}")
        return Err(e)

    return Ok(files)


def files_or_empty(result: ListingResult) -> tuple[ScriptFile, ...]:
    """Map a listing result to the files to publish, treating any Err as empty."""
    if isinstance(result, Ok):
        return tuple(result.files)
    return ()
