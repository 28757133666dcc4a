"""Temp-file editing workflow for the primary ``data.yml`` resume."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import DEFAULT_BACKUP_KEEP, DEFAULT_CHANGELOG_LIMIT, PRIMARY_DATA_FILE, get_pii_directory
from ..errors import FileNotFoundInRootError, NoPendingChangesError
from ..timeutil import backup_stamp, find_backup_stamp, from_epoch, to_iso
from .changelog import CHANGELOG_FILENAME, Changelog, ChangelogEntry
from .yaml_io import validate_yaml

logger = logging.getLogger(__name__)

TEMP_DATA_FILE = "data.temp.yml"
_BACKUP_GLOB = "data.backup.*.yml"


@dataclass
class FileSystemState:
    yaml_content: str
    has_changes: bool
    last_modified: datetime
    changelog_entries: List[ChangelogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "yamlContent": self.yaml_content,
            "hasChanges": self.has_changes,
            "lastModified": to_iso(self.last_modified),
            "changelogEntries": [e.to_dict() for e in self.changelog_entries],
        }


@dataclass
class FileStats:
    original_exists: bool
    temp_exists: bool
    original_size: Optional[int] = None
    temp_size: Optional[int] = None
    original_modified: Optional[datetime] = None
    temp_modified: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalExists": self.original_exists,
            "tempExists": self.temp_exists,
            "originalSize": self.original_size,
            "tempSize": self.temp_size,
            "originalModified": to_iso(self.original_modified) if self.original_modified else None,
            "tempModified": to_iso(self.temp_modified) if self.temp_modified else None,
        }


class FileSystemManager:
    """Read, stage, commit and discard edits to ``data.yml``.

    Every call goes back to disk; nothing is cached between calls.
    """

    def __init__(
        self,
        pii_path: Optional[Union[str, Path]] = None,
        changelog_limit: int = DEFAULT_CHANGELOG_LIMIT,
    ):
        self.pii_path = get_pii_directory(pii_path)
        self.original_data_path = self.pii_path / PRIMARY_DATA_FILE
        self.temp_data_path = self.pii_path / TEMP_DATA_FILE
        self.changelog = Changelog(self.pii_path / CHANGELOG_FILENAME, limit=changelog_limit)

    def get_current_state(self) -> FileSystemState:
        """Return the temp file if present, otherwise the main file."""
        if self.temp_data_path.exists():
            source = self.temp_data_path
        elif self.original_data_path.exists():
            source = self.original_data_path
        else:
            raise FileNotFoundInRootError(f"No {PRIMARY_DATA_FILE} file found in PII directory")

        return FileSystemState(
            yaml_content=source.read_text(encoding="utf-8"),
            has_changes=source == self.temp_data_path,
            last_modified=from_epoch(source.stat().st_mtime),
            changelog_entries=self.changelog.read(),
        )

    def refresh(self) -> FileSystemState:
        return self.get_current_state()

    def save_yaml_content(self, yaml_content: str, create_backup: bool = True) -> ChangelogEntry:
        """Validate and stage content in the temp file.

        Raises:
            InvalidYamlError: if the content does not parse; nothing is written.
        """
        validate_yaml(yaml_content)

        backup_file: Optional[str] = None
        if create_backup and self.original_data_path.exists():
            backup_path = self.pii_path / f"data.backup.{backup_stamp()}.yml"
            shutil.copy2(self.original_data_path, backup_path)
            backup_file = str(backup_path)
            logger.info("Backed up %s to %s", self.original_data_path, backup_path)

        self.temp_data_path.write_text(yaml_content, encoding="utf-8")

        return self.changelog.append(ChangelogEntry(
            action="update",
            description="Updated YAML content via editor",
            original_file=PRIMARY_DATA_FILE,
            backup_file=backup_file,
        ))

    def commit_changes(self) -> ChangelogEntry:
        if not self.temp_data_path.exists():
            raise NoPendingChangesError("No temporary changes to commit")

        shutil.copyfile(self.temp_data_path, self.original_data_path)
        self.temp_data_path.unlink()

        return self.changelog.append(ChangelogEntry(
            action="commit",
            description="Committed temporary changes to main file",
            original_file=PRIMARY_DATA_FILE,
        ))

    def discard_changes(self) -> ChangelogEntry:
        if not self.temp_data_path.exists():
            raise NoPendingChangesError("No temporary changes to discard")

        self.temp_data_path.unlink()

        return self.changelog.append(ChangelogEntry(
            action="discard",
            description="Discarded temporary changes",
            original_file=PRIMARY_DATA_FILE,
        ))

    def get_file_stats(self) -> FileStats:
        stats = FileStats(
            original_exists=self.original_data_path.exists(),
            temp_exists=self.temp_data_path.exists(),
        )
        if stats.original_exists:
            st = self.original_data_path.stat()
            stats.original_size = st.st_size
            stats.original_modified = from_epoch(st.st_mtime)
        if stats.temp_exists:
            st = self.temp_data_path.stat()
            stats.temp_size = st.st_size
            stats.temp_modified = from_epoch(st.st_mtime)
        return stats

    def list_backups(self) -> List[Path]:
        """Backup files of ``data.yml``, newest first."""
        backups = [p for p in self.pii_path.glob(_BACKUP_GLOB) if _is_backup_name(p.name)]
        # Backups keep the original's mtime, so order by the stamp in the name.
        backups.sort(key=lambda p: find_backup_stamp(p.name), reverse=True)
        return backups

    def cleanup_backups(self, keep: int = DEFAULT_BACKUP_KEEP) -> int:
        """Delete all but the ``keep`` newest backups; returns how many went."""
        removed = 0
        for backup in self.list_backups()[max(keep, 0):]:
            try:
                backup.unlink()
            except OSError as exc:
                logger.warning("Could not delete backup file %s: %s", backup.name, exc)
                continue
            removed += 1
        return removed

    def get_recent_changelog(self, limit: int = 10) -> List[ChangelogEntry]:
        return self.changelog.recent(limit)


def _is_backup_name(name: str) -> bool:
    stamp = find_backup_stamp(name)
    return stamp is not None and name == f"data.backup.{stamp}.yml"
