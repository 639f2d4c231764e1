"""
In-memory source implementation.

Useful as a scratch backend and as a stand-in for remote sources in tests.
"""

import uuid
from collections.abc import Iterable

from .base import StorageSource
from .exceptions import ScriptNotFoundError
from .types import ScriptFile


class InMemorySource(StorageSource):
    """
    Writable source that keeps files and their content in a dict.

    Example:
        source = InMemorySource("scratch", name="Scratch")
        await source.create_file("Draft", "# Draft")
    """

    def __init__(
        self,
        source_id: str,
        *,
        name: str | None = None,
        files: Iterable[tuple[str, str]] | None = None,
    ):
        """
        Initialize the source.

        Args:
            source_id: Registry identifier.
            name: Display name. Defaults to the identifier.
            files: Optional (name, content) pairs to seed the source with.
        """
        self._source_id = source_id
        self._name = name or source_id
        self._files: dict[str, ScriptFile] = {}
        self._contents: dict[str, str] = {}
        for file_name, content in files or ():
            self._add(file_name, content)

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_type(self) -> str:
        return "memory"

    @property
    def readonly(self) -> bool:
        return False

    def _add(self, name: str, content: str) -> ScriptFile:
        record = ScriptFile(id=f"{self._source_id}:{uuid.uuid4()}", name=name, source_id=self._source_id)
        self._files[record.id] = record
        self._contents[record.id] = content
        return record

    def _require(self, file_id: str) -> ScriptFile:
        if file_id not in self._files:
            raise ScriptNotFoundError(f"Script not found: {file_id}")
        return self._files[file_id]

    async def list_files(self) -> list[ScriptFile]:
        return list(self._files.values())

    async def read_file(self, file_id: str) -> str:
        self._require(file_id)
        return self._contents[file_id]

    async def write_file(self, file_id: str, content: str) -> None:
        self._require(file_id)
        self._contents[file_id] = content

    async def delete_file(self, file_id: str) -> None:
        self._files.pop(file_id, None)
        self._contents.pop(file_id, None)

    async def rename_file(self, file_id: str, new_name: str) -> None:
        record = self._require(file_id)
        self._files[file_id] = ScriptFile(id=record.id, name=new_name, source_id=record.source_id)

    async def create_file(self, name: str, content: str) -> ScriptFile:
        return self._add(name, content)
