"""
Storage sources for scripts.

This module provides a uniform "list files" capability over heterogeneous
backends (the built-in script library, local folders, in-memory stores)
and a registry that maps source identifiers to source instances.
"""

from .base import StorageSource
from .db import StorageDatabase
from .exceptions import (
    InvalidFileIdError,
    PermissionDeniedError,
    ReadOnlySourceError,
    ScriptNotFoundError,
    SourceError,
    SourceNotFoundError,
)
from .local import FileSystemSource, count_all_files
from .memory import InMemorySource
from .my_scripts import MY_SCRIPTS_ID, MyScriptsSource
from .registry import SourceRegistry, create_source_registry, parse_file_id_source
from .types import (
    FileSystemContents,
    FolderEntry,
    ScriptFile,
    SourceInfo,
    SourceType,
    StoredFolder,
    StoredScript,
)

__all__ = [
    # Core classes
    'StorageSource',
    'SourceRegistry',
    'StorageDatabase',
    'create_source_registry',
    'parse_file_id_source',

    # Implementations
    'MyScriptsSource',
    'FileSystemSource',
    'InMemorySource',
    'MY_SCRIPTS_ID',
    'count_all_files',

    # Types
    'ScriptFile',
    'SourceInfo',
    'SourceType',
    'FolderEntry',
    'FileSystemContents',
    'StoredScript',
    'StoredFolder',

    # Exceptions
    'SourceError',
    'SourceNotFoundError',
    'InvalidFileIdError',
    'ScriptNotFoundError',
    'ReadOnlySourceError',
    'PermissionDeniedError',
]
