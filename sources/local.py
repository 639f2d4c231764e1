"""
Local folder source implementation.

This module implements a read-only source that lists Markdown scripts from
a directory on the local filesystem. Directory scans run in a worker thread
so they never block the event loop.
"""

import logging
import os
from pathlib import Path, PurePosixPath

from asgiref.sync import sync_to_async

from .base import StorageSource
from .exceptions import (
    InvalidFileIdError,
    PermissionDeniedError,
    ReadOnlySourceError,
    ScriptNotFoundError,
)
from .types import FileSystemContents, FolderEntry, ScriptFile, SourceType

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
FILE_ID_PREFIX = "fs"


def build_file_id(source_id: str, relative_path: str) -> str:
    return f"{FILE_ID_PREFIX}:{source_id}:{relative_path}"


def parse_relative_path(file_id: str) -> str:
    """
    Extract the relative path from a folder file id.

    The path itself may contain colons, so everything after the second
    separator belongs to it.

    Raises:
        InvalidFileIdError: If the id is not a folder file id.
    """
    parts = file_id.split(":")
    if len(parts) < 3 or parts[0] != FILE_ID_PREFIX:
        raise InvalidFileIdError(f"Invalid file ID format: {file_id}")
    return ":".join(parts[2:])


def remove_extension(filename: str) -> str:
    if filename.endswith(MARKDOWN_SUFFIX):
        return filename[: -len(MARKDOWN_SUFFIX)]
    return filename


def is_hidden_directory(name: str) -> bool:
    return name.startswith(".")


def _sort_key(path: Path) -> tuple[str, str]:
    return (path.name.casefold(), path.name)


def _is_markdown_file(path: Path) -> bool:
    return path.is_file() and not path.is_symlink() and path.name.endswith(MARKDOWN_SUFFIX)


def validate_folder_path(path: Path) -> None:
    """
    Validate a directory before it is added as a source.

    Raises:
        ValueError: If the path is relative, missing or not a directory.
    """
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute, got: {path}")

    if not path.exists():
        raise ValueError(f"Path does not exist: {path}")

    if not path.is_dir():
        raise ValueError(f"Path is not a directory: {path}")


def count_all_files(contents: FileSystemContents) -> int:
    """Count files in a listing tree, including every nested folder."""
    count = len(contents.files)
    for folder in contents.folders:
        count += count_all_files(FileSystemContents(files=folder.files, folders=folder.subfolders))
    return count


class FileSystemSource(StorageSource):
    """
    Read-only source over a local directory.

    Only Markdown files are listed. File ids have the form
    ``fs:<source id>:<relative path>`` and display names drop the
    ``.md`` extension.

    Example:
        source = FileSystemSource(Path("/Users/brian/scripts"), "5a1c...")

        for script in await source.list_files():
            text = await source.read_file(script.id)
            print(f"Read {len(text)} characters from {script.name}")
    """

    def __init__(self, root: Path, source_id: str, permission_granted: bool = True):
        self.root = Path(root)
        self._source_id = source_id
        self._permission_granted = permission_granted

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def source_type(self) -> SourceType:
        return SourceType.FILE_SYSTEM

    @property
    def needs_permission(self) -> bool:
        return not self._permission_granted

    def _check_access(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.R_OK | os.X_OK)

    async def request_permission(self) -> bool:
        """
        Re-check that the directory can be read.

        Returns:
            True if access is available, False otherwise.
        """
        granted = await sync_to_async(self._check_access)()
        self._permission_granted = granted
        if not granted:
            logger.info(f"Folder source {self._source_id} is not accessible: {self.root}")
        return granted

    # ---------- listing --------------------------------------------------

    def _scan_files(self) -> list[ScriptFile]:
        paths = sorted((p for p in self.root.iterdir() if _is_markdown_file(p)), key=_sort_key)
        return [
            ScriptFile(
                id=build_file_id(self._source_id, path.name),
                name=remove_extension(path.name),
                source_id=self._source_id,
            )
            for path in paths
        ]

    def _scan_contents(self, directory: Path, current_path: str) -> FileSystemContents:
        file_paths: list[Path] = []
        dir_paths: list[Path] = []

        for entry in directory.iterdir():
            if _is_markdown_file(entry):
                file_paths.append(entry)
            elif entry.is_dir() and not entry.is_symlink() and not is_hidden_directory(entry.name):
                dir_paths.append(entry)

        file_paths.sort(key=_sort_key)
        dir_paths.sort(key=_sort_key)

        contents = FileSystemContents()
        for path in file_paths:
            relative_path = f"{current_path}/{path.name}" if current_path else path.name
            contents.files.append(
                ScriptFile(
                    id=build_file_id(self._source_id, relative_path),
                    name=remove_extension(path.name),
                    source_id=self._source_id,
                )
            )

        for path in dir_paths:
            folder_path = f"{current_path}/{path.name}" if current_path else path.name
            sub_contents = self._scan_contents(path, folder_path)
            contents.folders.append(
                FolderEntry(
                    name=path.name,
                    path=folder_path,
                    files=sub_contents.files,
                    subfolders=sub_contents.folders,
                )
            )

        return contents

    async def list_files(self) -> list[ScriptFile]:
        """List Markdown files directly under the root directory."""
        if not self._permission_granted:
            return []
        return await sync_to_async(self._scan_files)()

    async def list_contents(self) -> FileSystemContents:
        """List Markdown files and non-hidden folders recursively."""
        if not self._permission_granted:
            return FileSystemContents()
        return await sync_to_async(self._scan_contents)(self.root, "")

    # ---------- content --------------------------------------------------

    def _resolve(self, file_id: str) -> Path:
        relative_path = parse_relative_path(file_id)
        root = self.root.resolve()
        target = root.joinpath(*PurePosixPath(relative_path).parts).resolve()
        if not target.is_relative_to(root):
            raise InvalidFileIdError(f"File ID points outside the folder: {file_id}")
        return target

    def _read(self, file_id: str) -> str:
        path = self._resolve(file_id)
        if not path.is_file():
            raise ScriptNotFoundError(f"File not found: {file_id}")
        return path.read_text(encoding="utf-8")

    async def read_file(self, file_id: str) -> str:
        if not self._permission_granted:
            raise PermissionDeniedError(f"Access to {self.root} has not been granted")
        return await sync_to_async(self._read)(file_id)

    async def write_file(self, file_id: str, content: str) -> None:
        raise ReadOnlySourceError("File system sources are read-only")

    async def delete_file(self, file_id: str) -> None:
        raise ReadOnlySourceError("File system sources are read-only")

    async def rename_file(self, file_id: str, new_name: str) -> None:
        raise ReadOnlySourceError("File system sources are read-only")

    async def create_file(self, name: str, content: str) -> ScriptFile:
        raise ReadOnlySourceError("File system sources are read-only")
