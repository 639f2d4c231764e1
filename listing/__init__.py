"""
Async coordinators for presenting sources.

Example usage:
    from listing import ListingCoordinator
    from sources import create_source_registry

    registry = create_source_registry()
    coordinator = ListingCoordinator(registry, "my-scripts")
    state = await coordinator.settle()
    for script in state.files:
        print(script.name)
"""

from .catalog import SourceCatalog
from .content import ContentCoordinator, ContentState
from .coordinator import ListingCoordinator, ListingPhase, ListingState
from .result import Err, ListingResult, Ok, fetch_listing, files_or_empty

__all__ = [
    # Coordinators
    "ListingCoordinator",
    "ContentCoordinator",
    "SourceCatalog",
    # State
    "ListingState",
    "ListingPhase",
    "ContentState",
    # Results
    "Ok",
    "Err",
    "ListingResult",
    "fetch_listing",
    "files_or_empty",
]
