"""
Content coordinator.

Loads the content of one file at a time and writes edits back to the owning
source. Like the listing coordinator, a load only publishes if no newer
bind happened while it was outstanding. Unlike listings, load and write
failures are surfaced through ``error``.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from sources.base import StorageSource
from sources.registry import SourceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentState:
    """Published state of a content coordinator."""

    file_id: str | None = None
    loaded_file_id: str | None = None
    loaded_content: str | None = None
    source: StorageSource | None = None
    error: str | None = None
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        # Loading whenever a file is bound but has not resolved yet
        return self.file_id is not None and self.loaded_file_id != self.file_id

    @property
    def content(self) -> str | None:
        if self.file_id is None or self.loaded_file_id != self.file_id:
            return None
        return self.loaded_content

    @property
    def can_edit(self) -> bool:
        return self.content is not None and self.source is not None and not self.source.readonly


ContentListener = Callable[[ContentState], None]


class ContentCoordinator:
    """
    Loads and edits the content of the selected file.

    Example:
        editor = ContentCoordinator(registry, "my-scripts:2f1e...")
        await editor.settle()

        if editor.state.can_edit:
            editor.set_content("# New text")
            await editor.settle()
    """

    def __init__(self, registry: SourceRegistry, file_id: str | None = None):
        self._registry = registry
        self._state = ContentState()
        self._listeners: list[ContentListener] = []
        self._tasks: set[asyncio.Task] = set()

        if file_id is not None:
            self.bind(file_id)

    @property
    def state(self) -> ContentState:
        return self._state

    def subscribe(self, listener: ContentListener) -> Callable[[], None]:
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

    def _publish(self, state: ContentState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Content state listener failed")

    def _schedule(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def bind(self, file_id: str | None) -> None:
        """Select a file and start loading it. None clears the selection."""
        if file_id == self._state.file_id:
            return

        generation = self._state.generation + 1
        self._publish(replace(self._state, file_id=file_id, error=None, generation=generation))
        if file_id is not None:
            self._schedule(self._load(file_id, generation))

    async def _load(self, file_id: str, generation: int) -> None:
        try:
            source, content = await self._registry.get_file(file_id)
        except Exception as e:
            if generation != self._state.generation:
                return
            self._publish(
                replace(
                    self._state,
                    loaded_file_id=file_id,
                    loaded_content=None,
                    source=None,
                    error=str(e),
                )
            )
            return

        if generation != self._state.generation:
            return

        self._publish(
            replace(
                self._state,
                loaded_file_id=file_id,
                loaded_content=content,
                source=source,
                error=None,
            )
        )

    def set_content(self, text: str) -> None:
        """
        Replace the loaded content.

        The new text is published immediately. Writable sources receive it
        in the background; a failed write is reported through ``error``.
        """
        state = self._state
        if state.content is None:
            return

        self._publish(replace(state, loaded_content=text))
        if state.source is not None and not state.source.readonly:
            self._schedule(self._write(state.source, state.file_id, text))

    async def _write(self, source: StorageSource, file_id: str, text: str) -> None:
        try:
            await source.write_file(file_id, text)
        except Exception as e:
            logger.warning(f"Saving {file_id} failed: {e}")
            if self._state.file_id == file_id:
                self._publish(replace(self._state, error=str(e)))

    async def settle(self) -> ContentState:
        """Wait for outstanding loads and writes, then return the state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self._state
