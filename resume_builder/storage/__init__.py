"""File storage: the primary resume workflow, versioned files and plain file operations."""

from .changelog import Changelog, ChangelogEntry
from .file_system_manager import FileStats, FileSystemManager, FileSystemState
from .unified_file_manager import (
    Diff,
    DuplicateOptions,
    DuplicateResult,
    FileContent,
    FileFilters,
    FileMetadata,
    SaveOptions,
    SaveResult,
    UnifiedFileManager,
    Version,
)
from .yaml_io import dump_yaml, validate_yaml

__all__ = [
    "Changelog",
    "ChangelogEntry",
    "Diff",
    "DuplicateOptions",
    "DuplicateResult",
    "FileContent",
    "FileFilters",
    "FileMetadata",
    "FileStats",
    "FileSystemManager",
    "FileSystemState",
    "SaveOptions",
    "SaveResult",
    "UnifiedFileManager",
    "Version",
    "dump_yaml",
    "validate_yaml",
]
