"""
Built-in script library source.

Scripts live in the storage database and are addressed by file ids of the
form ``my-scripts:<script id>``.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from .base import StorageSource
from .db import StorageDatabase
from .exceptions import ScriptNotFoundError
from .types import ScriptFile, SourceType, StoredScript

MY_SCRIPTS_ID = "my-scripts"


def to_file_id(script_id: str) -> str:
    return f"{MY_SCRIPTS_ID}:{script_id}"


def to_script_id(file_id: str) -> str:
    prefix = f"{MY_SCRIPTS_ID}:"
    return file_id[len(prefix):] if file_id.startswith(prefix) else file_id


def to_script_file(script: StoredScript) -> ScriptFile:
    return ScriptFile(id=to_file_id(script.id), name=script.name, source_id=MY_SCRIPTS_ID)


class MyScriptsSource(StorageSource):
    """
    Writable source backed by the storage database.

    Example:
        source = MyScriptsSource(StorageDatabase())
        created = await source.create_file("Opening", "# Opening")
        await source.write_file(created.id, "# Opening\\nHello.")
    """

    def __init__(self, database: StorageDatabase | None = None):
        self.database = database or StorageDatabase()

    @property
    def source_id(self) -> str:
        return MY_SCRIPTS_ID

    @property
    def name(self) -> str:
        return "My Scripts"

    @property
    def source_type(self) -> SourceType:
        return SourceType.MY_SCRIPTS

    @property
    def readonly(self) -> bool:
        return False

    async def list_files(self) -> list[ScriptFile]:
        scripts = await self.database.get_all_scripts()
        return [to_script_file(script) for script in scripts]

    async def _require(self, file_id: str) -> StoredScript:
        script = await self.database.get_script(to_script_id(file_id))
        if script is None:
            raise ScriptNotFoundError(f"Script not found: {file_id}")
        return script

    async def read_file(self, file_id: str) -> str:
        script = await self._require(file_id)
        return script.content

    async def write_file(self, file_id: str, content: str) -> None:
        script = await self._require(file_id)
        await self.database.save_script(
            replace(script, content=content, updated_at=datetime.now(timezone.utc))
        )

    async def delete_file(self, file_id: str) -> None:
        await self.database.delete_script(to_script_id(file_id))

    async def rename_file(self, file_id: str, new_name: str) -> None:
        script = await self._require(file_id)
        await self.database.save_script(
            replace(script, name=new_name, updated_at=datetime.now(timezone.utc))
        )

    async def create_file(self, name: str, content: str) -> ScriptFile:
        now = datetime.now(timezone.utc)
        script = StoredScript(
            id=str(uuid.uuid4()),
            name=name,
            content=content,
            created_at=now,
            updated_at=now,
        )
        await self.database.save_script(script)
        return to_script_file(script)
