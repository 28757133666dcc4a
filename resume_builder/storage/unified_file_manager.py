"""Versioned access to every YAML file under the data root.

Generalises the ``data.yml`` temp/commit workflow to arbitrary root-relative
paths and adds backups, diffs, duplication, deletion, restore and a JSON
sidecar (``<file>.meta.json``) for tags and descriptions.
"""

from __future__ import annotations

import difflib
import json
import logging
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import DEFAULT_CHANGELOG_LIMIT, get_pii_directory
from ..errors import (
    FileAlreadyExistsError,
    FileNotFoundInRootError,
    InvalidYamlError,
    NoPendingChangesError,
)
from ..timeutil import (
    BACKUP_STAMP_PATTERN,
    backup_stamp,
    from_epoch,
    parse_backup_stamp,
    parse_iso,
    to_iso,
    utc_now_iso,
)
from .changelog import CHANGELOG_FILENAME, Changelog, ChangelogEntry
from .paths import resolve_within, temp_path_for
from .yaml_io import dump_yaml, validate_yaml

logger = logging.getLogger(__name__)

BACKUPS_DIR = "backups"
DIFFS_DIR = "diffs"
CURRENT = "current"

_YAML_SUFFIXES = (".yml", ".yaml")
_SKIPPED_DIRS = {BACKUPS_DIR, DIFFS_DIR}
_SKIPPED_MARKERS = (".temp", ".backup", ".meta")
FILE_TYPES = ("resume", "linkedin", "other")


@dataclass
class FileMetadata:
    path: str
    name: str
    type: str
    size: int
    modified: datetime
    created: datetime
    has_unsaved_changes: bool
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    versions: int = 0
    last_edited_by: str = "user"
    role: Optional[str] = None
    resume_metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "modified": to_iso(self.modified),
            "created": to_iso(self.created),
            "hasUnsavedChanges": self.has_unsaved_changes,
            "tags": list(self.tags),
            "description": self.description,
            "versions": self.versions,
            "lastEditedBy": self.last_edited_by,
            "role": self.role,
            "resumeMetadata": self.resume_metadata,
        }


@dataclass
class FileFilters:
    type: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    search: Optional[str] = None


@dataclass
class Version:
    timestamp: datetime
    backup_path: str
    changelog_entry: ChangelogEntry
    diff_available: bool
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": to_iso(self.timestamp),
            "backupPath": self.backup_path,
            "changelogEntry": self.changelog_entry.to_dict(),
            "diffAvailable": self.diff_available,
            "size": self.size,
        }


@dataclass
class FileContent:
    content: str
    metadata: FileMetadata
    versions: List[Version]
    has_unsaved_changes: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "metadata": self.metadata.to_dict(),
            "versions": [v.to_dict() for v in self.versions],
            "hasUnsavedChanges": self.has_unsaved_changes,
        }


@dataclass
class SaveOptions:
    commit: bool = False
    message: Optional[str] = None
    tags: Optional[List[str]] = None
    create_backup: bool = True


@dataclass
class SaveResult:
    saved: bool
    changelog_entry: ChangelogEntry
    backup_created: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "saved": self.saved,
            "backupCreated": self.backup_created,
            "changelogEntry": self.changelog_entry.to_dict(),
        }


@dataclass
class DuplicateOptions:
    name: Optional[str] = None
    suffix: str = "_copy"
    auto_increment: bool = True


@dataclass
class DuplicateResult:
    new_path: str
    suggested_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"newPath": self.new_path, "suggestedName": self.suggested_name}


@dataclass
class Diff:
    diff: str
    additions: int
    deletions: int

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diff": self.diff,
            "stats": {
                "additions": self.additions,
                "deletions": self.deletions,
                "changes": self.changes,
            },
        }


def detect_file_type(name: str) -> str:
    lowered = name.lower()
    if "linkedin" in lowered:
        return "linkedin"
    if "resume" in lowered or "data" in lowered or "cv" in lowered:
        return "resume"
    return "other"


class UnifiedFileManager:
    """Temp/commit/backup workflow for any YAML file under the data root."""

    def __init__(
        self,
        pii_path: Optional[Union[str, Path]] = None,
        changelog_limit: int = DEFAULT_CHANGELOG_LIMIT,
    ):
        self.root = get_pii_directory(pii_path).resolve()
        self.backups_dir = self.root / BACKUPS_DIR
        self.diffs_dir = self.root / DIFFS_DIR
        self.changelog = Changelog(self.root / CHANGELOG_FILENAME, limit=changelog_limit)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(self, filters: Optional[FileFilters] = None) -> List[FileMetadata]:
        files = [self._file_metadata(rel) for rel in self._find_yaml_files()]

        if filters is None:
            return files
        if filters.type:
            files = [f for f in files if f.type == filters.type]
        if filters.tags:
            wanted = set(filters.tags)
            files = [f for f in files if wanted.intersection(f.tags)]
        if filters.search:
            needle = filters.search.lower()
            files = [
                f for f in files
                if needle in f.name.lower()
                or (f.description and needle in f.description.lower())
                or any(needle in tag.lower() for tag in f.tags)
            ]
        return files

    def search(self, query: str) -> List[FileMetadata]:
        return self.list(FileFilters(search=query))

    def _find_yaml_files(self, directory: Optional[Path] = None) -> List[str]:
        directory = directory or self.root
        found: List[str] = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.is_dir():
                if entry.name.startswith(".") or entry.name in _SKIPPED_DIRS:
                    continue
                found.extend(self._find_yaml_files(entry))
            elif (
                entry.is_file()
                and entry.name.endswith(_YAML_SUFFIXES)
                and not any(marker in entry.name for marker in _SKIPPED_MARKERS)
            ):
                found.append(self._relative(entry))
        return found

    # ------------------------------------------------------------------
    # Read / save / commit / discard
    # ------------------------------------------------------------------

    def read(self, file_path: str) -> FileContent:
        """Content of the temp file if present, else the main file."""
        main = self._resolve(file_path)
        temp = temp_path_for(main)
        source = temp if temp.exists() else main
        if not source.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")

        metadata = self._file_metadata(file_path)
        return FileContent(
            content=source.read_text(encoding="utf-8"),
            metadata=metadata,
            versions=self.get_versions(file_path),
            has_unsaved_changes=metadata.has_unsaved_changes,
        )

    def save(self, file_path: str, content: str, options: Optional[SaveOptions] = None) -> SaveResult:
        """Stage content in the temp file, or write the main file when committing.

        Raises:
            InvalidYamlError: if ``content`` does not parse; nothing is written.
        """
        options = options or SaveOptions()
        validate_yaml(content)

        main = self._resolve(file_path)
        rel = self._relative(main)

        backup_created: Optional[str] = None
        if (options.commit or options.create_backup) and main.is_file():
            backup_created = self._backup(main)

        main.parent.mkdir(parents=True, exist_ok=True)
        temp = temp_path_for(main)
        if options.commit:
            main.write_text(content, encoding="utf-8")
            if temp.exists():
                temp.unlink()
        else:
            temp.write_text(content, encoding="utf-8")

        if options.tags is not None:
            sidecar = self._read_sidecar(main) or _new_sidecar()
            sidecar["tags"] = list(options.tags)
            self._write_sidecar(main, sidecar)

        entry = self.changelog.append(ChangelogEntry(
            action="commit" if options.commit else "save",
            file=rel,
            message=options.message,
            backup_file=backup_created,
        ))
        return SaveResult(saved=True, backup_created=backup_created, changelog_entry=entry)

    def commit(self, file_path: str, message: Optional[str] = None) -> SaveResult:
        temp = temp_path_for(self._resolve(file_path))
        if not temp.exists():
            raise NoPendingChangesError("No temporary changes to commit")
        content = temp.read_text(encoding="utf-8")
        return self.save(file_path, content, SaveOptions(commit=True, message=message))

    def discard(self, file_path: str) -> ChangelogEntry:
        main = self._resolve(file_path)
        temp = temp_path_for(main)
        if not temp.exists():
            raise NoPendingChangesError("No temporary changes to discard")
        temp.unlink()
        return self.changelog.append(ChangelogEntry(action="discard", file=self._relative(main)))

    # ------------------------------------------------------------------
    # Duplicate / delete / restore
    # ------------------------------------------------------------------

    def duplicate(self, file_path: str, options: Optional[DuplicateOptions] = None) -> DuplicateResult:
        options = options or DuplicateOptions()
        source = self._resolve(file_path)
        if not source.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")

        if options.name:
            new_name = options.name
            target = self._resolve(self._relative_sibling(source, new_name))
            if target.exists():
                raise FileAlreadyExistsError(f"File already exists: {self._relative(target)}")
        else:
            suffix = options.suffix or "_copy"
            new_name = f"{source.stem}{suffix}{source.suffix}"
            counter = 2
            while options.auto_increment and (source.parent / new_name).exists():
                new_name = f"{source.stem}{suffix}_{counter}{source.suffix}"
                counter += 1
            target = self._resolve(self._relative_sibling(source, new_name))

        shutil.copyfile(source, target)

        sidecar = self._read_sidecar(source)
        if sidecar is not None:
            sidecar["created"] = utc_now_iso()
            self._write_sidecar(target, sidecar)

        new_path = self._relative(target)
        self.changelog.append(ChangelogEntry(
            action="duplicate",
            file=new_path,
            message=f"Duplicated from {self._relative(source)}",
        ))
        return DuplicateResult(new_path=new_path, suggested_name=new_name)

    def delete(self, file_path: str, create_backup: bool = True) -> ChangelogEntry:
        main = self._resolve(file_path)
        if not main.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")

        backup = self._backup(main) if create_backup else None
        main.unlink()

        for leftover in (self._sidecar_path(main), temp_path_for(main)):
            if leftover.exists():
                leftover.unlink()

        return self.changelog.append(ChangelogEntry(
            action="delete",
            file=self._relative(main),
            backup_file=backup,
        ))

    def restore(self, file_path: str, version: str) -> ChangelogEntry:
        """Copy a backup (root-relative path) over the main file."""
        main = self._resolve(file_path)
        source = self._resolve(version)
        if not source.is_file():
            raise FileNotFoundInRootError(f"Version not found: {version}")

        backup = self._backup(main) if main.is_file() else None
        main.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, main)

        return self.changelog.append(ChangelogEntry(
            action="restore",
            file=self._relative(main),
            message=f"Restored from {version}",
            backup_file=backup,
        ))

    # ------------------------------------------------------------------
    # Versions and diffs
    # ------------------------------------------------------------------

    def get_versions(self, file_path: str) -> List[Version]:
        main = self._resolve(file_path)
        rel = self._relative(main)

        versions: List[Version] = []
        for backup in self._backups_of(main):
            stat = backup.stat()
            timestamp = parse_backup_stamp(backup.name) or from_epoch(stat.st_mtime)
            versions.append(Version(
                timestamp=timestamp,
                backup_path=self._relative(backup),
                changelog_entry=ChangelogEntry(action="save", timestamp=to_iso(timestamp), file=rel),
                diff_available=False,
                size=stat.st_size,
            ))
        versions.sort(key=lambda v: v.timestamp, reverse=True)
        return versions

    def get_diff(self, file_path: str, from_: str = CURRENT, to: str = CURRENT) -> Diff:
        """Unified diff between two states of a file.

        ``current`` names the main file; anything else is a root-relative path,
        usually one of the ``backupPath`` values from :meth:`get_versions`.
        """
        from_label = file_path if from_ == CURRENT else from_
        to_label = file_path if to == CURRENT else to
        from_text = self._read_text(from_label)
        to_text = self._read_text(to_label)

        lines = list(difflib.unified_diff(
            from_text.splitlines(),
            to_text.splitlines(),
            fromfile=from_label,
            tofile=to_label,
            lineterm="",
        ))

        additions = deletions = 0
        in_hunk = False
        for line in lines:
            if line.startswith("@@"):
                in_hunk = True
            elif not in_hunk:
                continue
            elif line.startswith("+"):
                additions += 1
            elif line.startswith("-"):
                deletions += 1

        diff_text = "\n".join(lines) + "\n" if lines else ""
        return Diff(diff=diff_text, additions=additions, deletions=deletions)

    # ------------------------------------------------------------------
    # Sidecar metadata
    # ------------------------------------------------------------------

    def set_tags(self, file_path: str, tags: List[str]) -> Dict[str, Any]:
        main = self._resolve(file_path)
        sidecar = self._read_sidecar(main) or _new_sidecar()
        sidecar["tags"] = list(tags)
        self._write_sidecar(main, sidecar)
        return sidecar

    def set_description(self, file_path: str, description: str) -> Dict[str, Any]:
        main = self._resolve(file_path)
        sidecar = self._read_sidecar(main) or _new_sidecar()
        sidecar["description"] = description
        self._write_sidecar(main, sidecar)
        return sidecar

    def update_embedded_metadata(self, file_path: str, metadata: Dict[str, Any]) -> str:
        """Replace the top-level ``metadata`` mapping inside the YAML document."""
        main = self._resolve(file_path)
        if not main.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")

        data = validate_yaml(main.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise InvalidYamlError("document root must be a mapping")
        data["metadata"] = metadata

        updated = dump_yaml(data)
        main.write_text(updated, encoding="utf-8")
        return updated

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def cleanup_backups(self, keep_last: int = 10) -> int:
        return _prune_newest(self.backups_dir, keep_last, by_stamp=True, recursive=True)

    def cleanup_diffs(self, keep_last: int = 10) -> int:
        return _prune_newest(self.diffs_dir, keep_last, by_stamp=False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, file_path: str) -> Path:
        return resolve_within(self.root, file_path)

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _relative_sibling(self, source: Path, name: str) -> str:
        parent = source.parent.relative_to(self.root)
        return (parent / name).as_posix()

    def _read_text(self, file_path: str) -> str:
        path = self._resolve(file_path)
        if not path.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")
        return path.read_text(encoding="utf-8")

    def _backup_dir_for(self, main: Path) -> Path:
        # backups/<dir>/<stem>.<ts><ext>, mirroring the file's directory.
        return self.backups_dir / main.parent.relative_to(self.root)

    def _backup(self, main: Path) -> str:
        directory = self._backup_dir_for(main)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / f"{main.stem}.{backup_stamp()}{main.suffix}"
        shutil.copyfile(main, target)
        logger.info("Backed up %s to %s", main, target)
        return self._relative(target)

    def _backups_of(self, main: Path) -> List[Path]:
        directory = self._backup_dir_for(main)
        if not directory.is_dir():
            return []
        pattern = re.compile(rf"^{re.escape(main.stem)}\.{BACKUP_STAMP_PATTERN}")
        return [p for p in directory.iterdir() if p.is_file() and pattern.match(p.name)]

    def _file_metadata(self, file_path: str) -> FileMetadata:
        main = self._resolve(file_path)
        temp = temp_path_for(main)
        if not main.is_file() and not temp.is_file():
            raise FileNotFoundInRootError(f"File not found: {file_path}")

        stat = (main if main.is_file() else temp).stat()
        sidecar = self._read_sidecar(main) or {}
        role, resume_metadata = self._embedded_fields(main if main.is_file() else temp)

        created = parse_iso(sidecar["created"]) if sidecar.get("created") else from_epoch(stat.st_ctime)
        return FileMetadata(
            path=self._relative(main),
            name=main.name,
            type=detect_file_type(main.name),
            size=stat.st_size,
            modified=from_epoch(stat.st_mtime),
            created=created,
            has_unsaved_changes=temp.exists(),
            tags=list(sidecar.get("tags") or []),
            description=sidecar.get("description"),
            versions=len(self._backups_of(main)),
            role=role,
            resume_metadata=resume_metadata,
        )

    @staticmethod
    def _embedded_fields(path: Path):
        """``(role, metadata)`` pulled from the YAML body; unreadable files yield neither."""
        try:
            data = validate_yaml(path.read_text(encoding="utf-8"))
        except (OSError, InvalidYamlError):
            return None, None
        if not isinstance(data, dict):
            return None, None

        role = None
        info = data.get("info")
        if isinstance(info, dict) and info.get("role"):
            role = str(info["role"])
        elif data.get("role"):
            role = str(data["role"])

        metadata = data.get("metadata")
        return role, metadata if isinstance(metadata, dict) else None

    @staticmethod
    def _sidecar_path(main: Path) -> Path:
        return main.with_name(f"{main.name}.meta.json")

    def _read_sidecar(self, main: Path) -> Optional[Dict[str, Any]]:
        path = self._sidecar_path(main)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable sidecar %s: %s", path, exc)
            return None
        return data if isinstance(data, dict) else None

    def _write_sidecar(self, main: Path, data: Dict[str, Any]) -> None:
        path = self._sidecar_path(main)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


def _new_sidecar() -> Dict[str, Any]:
    return {"tags": [], "created": utc_now_iso()}


def _prune_newest(directory: Path, keep_last: int, by_stamp: bool, recursive: bool = False) -> int:
    if not directory.is_dir():
        return 0

    def _sort_key(path: Path) -> datetime:
        stamp = parse_backup_stamp(path.name) if by_stamp else None
        return stamp or from_epoch(path.stat().st_mtime)

    candidates = directory.rglob("*") if recursive else directory.iterdir()
    files = sorted((p for p in candidates if p.is_file()), key=_sort_key, reverse=True)
    to_delete = files[max(keep_last, 0):]
    for path in to_delete:
        path.unlink()
    return len(to_delete)
