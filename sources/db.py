"""
Storage database for scripts and remembered folders.

The database keeps two tables (scripts and folders) keyed by id. It lives
in memory unless a path is given, in which case both tables are loaded
from a YAML document on first access and written back after every change.
"""

import asyncio
import logging
from dataclasses import asdict
from pathlib import Path

import yaml
from asgiref.sync import sync_to_async

from .types import StoredFolder, StoredScript

logger = logging.getLogger(__name__)


class StorageDatabase:
    """
    Persistence for the script library and folder sources.

    Example:
        db = StorageDatabase(Path("~/.script-sources/library.yaml").expanduser())
        await db.save_script(script)
        scripts = await db.get_all_scripts()
    """

    def __init__(self, path: Path | None = None):
        self.path = path
        self._scripts: dict[str, StoredScript] = {}
        self._folders: dict[str, StoredFolder] = {}
        self._loaded = path is None
        self._load_lock = asyncio.Lock()

    # ---------- IO helpers ----------------------------------------------

    def _read(self) -> None:
        if self.path is None or not self.path.exists():
            return

        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or {}

        for row in data.get("scripts", []):
            script = StoredScript(**row)
            self._scripts[script.id] = script
        for row in data.get("folders", []):
            folder = StoredFolder(**row)
            self._folders[folder.id] = folder

        logger.debug(
            f"Loaded {len(self._scripts)} scripts and {len(self._folders)} folders from {self.path}"
        )

    def _write(self) -> None:
        if self.path is None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "scripts": [asdict(s) for s in self._scripts.values()],
            "folders": [asdict(f) for f in self._folders.values()],
        }
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            # Another caller may have finished loading while we waited
            if not self._loaded:
                await sync_to_async(self._read)()
                self._loaded = True

    async def _flush(self) -> None:
        await sync_to_async(self._write)()

    # ---------- scripts --------------------------------------------------

    async def get_all_scripts(self) -> list[StoredScript]:
        await self._ensure_loaded()
        return list(self._scripts.values())

    async def get_script(self, script_id: str) -> StoredScript | None:
        await self._ensure_loaded()
        return self._scripts.get(script_id)

    async def save_script(self, script: StoredScript) -> None:
        await self._ensure_loaded()
        self._scripts[script.id] = script
        await self._flush()

    async def delete_script(self, script_id: str) -> None:
        await self._ensure_loaded()
        if self._scripts.pop(script_id, None) is not None:
            await self._flush()

    # ---------- folders --------------------------------------------------

    async def get_all_folders(self) -> list[StoredFolder]:
        await self._ensure_loaded()
        return list(self._folders.values())

    async def save_folder(self, folder: StoredFolder) -> None:
        await self._ensure_loaded()
        self._folders[folder.id] = folder
        await self._flush()

    async def delete_folder(self, folder_id: str) -> None:
        await self._ensure_loaded()
        if self._folders.pop(folder_id, None) is not None:
            await self._flush()
