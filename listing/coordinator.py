"""
Listing coordinator.

Loads the file listing of the currently selected source, keeps the last
published listing visible while a new one loads, and discards results of
loads that were superseded by a later bind or refresh.

Every bind or refresh starts a new load and bumps the generation counter.
Only a load whose generation is still current when it resolves may publish;
older loads run to completion and their result is dropped. State snapshots
are immutable and replaced in a single assignment, so subscribers never
observe a mix of two loads.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from sources.registry import SourceRegistry
from sources.types import ScriptFile

from .result import fetch_listing, files_or_empty

logger = logging.getLogger(__name__)


class ListingPhase(str, Enum):
    """Lifecycle phase of a coordinator."""

    IDLE = "idle"  # no source bound yet
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class ListingState:
    """Published state of a listing coordinator."""

    source_id: str | None = None
    files: tuple[ScriptFile, ...] = ()
    is_loading: bool = False
    generation: int = 0
    phase: ListingPhase = ListingPhase.IDLE


StateListener = Callable[[ListingState], None]


class ListingCoordinator:
    """
    Fetches and republishes the file listing of one source at a time.

    Loads are scheduled as tasks on the running event loop, so bind() and
    refresh() must be called from within a coroutine. Neither raises for
    missing or failing sources: both outcomes publish an empty listing.

    Example:
        coordinator = ListingCoordinator(registry, "my-scripts")
        coordinator.subscribe(lambda state: render(state.files, state.is_loading))

        coordinator.refresh()
        await coordinator.settle()
    """

    def __init__(self, registry: SourceRegistry, source_id: str | None = None):
        """
        Initialize the coordinator.

        Args:
            registry: Registry used to resolve source identifiers.
            source_id: Optional identifier to bind immediately.
        """
        self._registry = registry
        self._state = ListingState()
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        if source_id is not None:
            self.bind(source_id)

    # -------------------------------------------------------------------------
    # Published state
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ListingState:
        return self._state

    @property
    def files(self) -> tuple[ScriptFile, ...]:
        return self._state.files

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def source_id(self) -> str | None:
        return self._state.source_id

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call listener with every new state.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: ListingState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Listing state listener failed")

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def bind(self, source_id: str) -> None:
        """
        Point the coordinator at a source and start loading its listing.

        Binding the identifier that is already bound does nothing; use
        refresh() to reload it.
        """
        if self._closed:
            return
        if self._state.phase != ListingPhase.IDLE and source_id == self._state.source_id:
            return
        self._start_load(source_id)

    def refresh(self) -> None:
        """Reload the listing of the bound source. Does nothing while unbound."""
        if self._closed or self._state.source_id is None:
            return
        self._start_load(self._state.source_id)

    def _start_load(self, source_id: str) -> None:
        loop = asyncio.get_running_loop()
        generation = self._state.generation + 1
        self._publish(
            replace(
                self._state,
                source_id=source_id,
                is_loading=True,
                generation=generation,
                phase=ListingPhase.LOADING,
            )
        )

        task = loop.create_task(self._load(source_id, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load(self, source_id: str, generation: int) -> None:
        result = await fetch_listing(self._registry, source_id)

        if self._closed or generation != self._state.generation:
            return

        self._publish(
            replace(
                self._state,
                files=files_or_empty(result),
                is_loading=False,
                phase=ListingPhase.READY,
            )
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def settle(self) -> ListingState:
        """
        Wait until every scheduled load, stale or current, has finished.

        Returns:
            The state published after the last load resolved.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self._state

    def close(self) -> None:
        """
        Stop publishing.

        Outstanding loads still run to completion but their results are
        dropped, and later bind() or refresh() calls are ignored.
        """
        self._closed = True
        self._listeners.clear()
