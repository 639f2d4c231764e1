"""
Type definitions for storage sources.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SourceType(str, Enum):
    """Kinds of storage backends."""

    MY_SCRIPTS = "my-scripts"
    FILE_SYSTEM = "file-system"


@dataclass(frozen=True)
class ScriptFile:
    """A listable file within a source.

    The id is globally unique and encodes the owning source, e.g.
    ``my-scripts:<uuid>`` or ``fs:<source id>:<relative path>``.
    """

    id: str
    name: str
    source_id: str


@dataclass
class SourceInfo:
    """Descriptive snapshot of a registered source."""

    id: str
    name: str
    type: SourceType | str
    readonly: bool
    needs_permission: bool = False


@dataclass
class FolderEntry:
    """A subdirectory of a folder source, with its listing."""

    name: str
    path: str  # relative path from source root, e.g. "docs" or "docs/drafts"
    files: list[ScriptFile] = field(default_factory=list)
    subfolders: list["FolderEntry"] = field(default_factory=list)


@dataclass
class FileSystemContents:
    """Recursive listing of a folder source."""

    files: list[ScriptFile] = field(default_factory=list)  # files at root level
    folders: list[FolderEntry] = field(default_factory=list)


@dataclass
class StoredScript:
    """A script row in the storage database."""

    id: str
    name: str
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass
class StoredFolder:
    """A remembered folder source in the storage database."""

    id: str
    name: str
    path: str
