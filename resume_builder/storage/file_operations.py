"""Plain file operations inside a base directory.

Write, copy, move, delete, list and bulk-read helpers behind ``/api/fs``.
Expected failures (missing source, existing destination, unreadable file)
come back as ``success=False`` results; a path that escapes the base
directory raises :class:`~resume_builder.errors.InvalidPathError`.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import InvalidPathError
from ..timeutil import diff_stamp, to_iso, utc_now
from .paths import resolve_within
from .yaml_io import dump_yaml

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_YAML_SUFFIXES = (".yml", ".yaml")


@dataclass
class WriteResult:
    success: bool
    file_path: str
    yaml_content: Optional[str] = None
    file_existed: bool = False
    diff_created: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "filePath": self.file_path,
            "fileExisted": self.file_existed,
            "diffCreated": self.diff_created,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class CopyResult:
    success: bool
    source_path: str
    destination_path: str
    overwritten: bool = False
    error: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "sourcePath": self.source_path,
            "destinationPath": self.destination_path,
            "overwritten": self.overwritten,
        }
        if self.error:
            data["error"] = self.error
        if self.note:
            data["note"] = self.note
        return data


@dataclass
class DeleteResult:
    success: bool
    file_path: str
    backup_created: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "filePath": self.file_path,
            "backupCreated": self.backup_created,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class FileListing:
    all_files: List[str]
    main_dir_files: int
    resume_files: int

    @property
    def total_files(self) -> int:
        return len(self.all_files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allFiles": list(self.all_files),
            "mainDirFiles": self.main_dir_files,
            "resumeFiles": self.resume_files,
            "totalFiles": self.total_files,
        }


def default_base_directory() -> Path:
    return Path(os.environ.get("PII_PATH") or ".")


def write_data_file(
    data: Any,
    file_path: str,
    base_directory: Optional[PathLike] = None,
    create_diff: bool = True,
) -> WriteResult:
    """Dump ``data`` to YAML and write it to ``file_path``."""
    return write_yaml_file(dump_yaml(data), file_path, base_directory, create_diff)


def write_yaml_file(
    yaml_content: str,
    file_path: str,
    base_directory: Optional[PathLike] = None,
    create_diff: bool = True,
) -> WriteResult:
    """Write YAML text as-is, recording a Markdown change record when it changed."""
    base = Path(base_directory) if base_directory else default_base_directory()
    target = resolve_within(base, file_path)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)

        previous = ""
        file_existed = False
        if target.exists():
            try:
                previous = target.read_text(encoding="utf-8")
                file_existed = True
            except OSError as exc:
                logger.warning("Could not read existing file %s: %s", target, exc)

        target.write_text(yaml_content, encoding="utf-8")
    except OSError as exc:
        return WriteResult(success=False, file_path=file_path, error=str(exc))

    changed = previous != yaml_content
    diff_created = False
    if create_diff and changed:
        diff_created = _write_change_record(target, previous, yaml_content, file_existed) is not None

    return WriteResult(
        success=True,
        file_path=str(target),
        yaml_content=yaml_content,
        file_existed=file_existed,
        diff_created=diff_created,
    )


def copy_file(
    source_path: str,
    destination_path: str,
    base_directory: Optional[PathLike] = None,
    overwrite: bool = False,
) -> CopyResult:
    base = Path(base_directory) if base_directory else default_base_directory()
    source = resolve_within(base, source_path)
    destination = resolve_within(base, destination_path)

    if not source.is_file():
        return CopyResult(False, str(source), str(destination), error="Source file does not exist")

    existed = destination.exists()
    if existed and not overwrite:
        return CopyResult(
            False, str(source), str(destination),
            error="Destination file already exists and overwrite is false",
        )

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as exc:
        return CopyResult(False, source_path, destination_path, error=str(exc))

    return CopyResult(True, str(source), str(destination), overwritten=existed)


def move_file(
    source_path: str,
    destination_path: str,
    base_directory: Optional[PathLike] = None,
    overwrite: bool = False,
) -> CopyResult:
    """Copy, then delete the source without a backup."""
    copied = copy_file(source_path, destination_path, base_directory, overwrite)
    if not copied.success:
        copied.error = f"Copy failed: {copied.error}"
        return copied

    deleted = delete_file(source_path, base_directory, create_backup=False)
    if not deleted.success:
        return CopyResult(
            False,
            copied.source_path,
            copied.destination_path,
            error=f"Delete failed: {deleted.error}",
            note="File was copied successfully but original could not be deleted",
        )
    return copied


def delete_file(
    file_path: str,
    base_directory: Optional[PathLike] = None,
    create_backup: bool = True,
) -> DeleteResult:
    base = Path(base_directory) if base_directory else default_base_directory()
    target = resolve_within(base, file_path)

    if not target.is_file():
        return DeleteResult(False, str(target), error="File does not exist")

    backup_created = False
    if create_backup:
        try:
            backup_created = _write_deletion_backup(
                target, target.read_text(encoding="utf-8", errors="replace")
            )
        except OSError as exc:
            logger.warning("Could not create backup for %s: %s", target, exc)

    try:
        target.unlink()
    except OSError as exc:
        return DeleteResult(False, file_path, error=str(exc))
    return DeleteResult(True, str(target), backup_created=backup_created)


def get_all_files(directory: Optional[PathLike] = None) -> FileListing:
    """Top-level YAML files plus every YAML file below ``resumes/``.

    Unreadable or missing directories contribute nothing.
    """
    root = Path(directory) if directory else default_base_directory()

    main_files: List[str] = []
    if root.is_dir():
        main_files = sorted(
            p.name for p in root.iterdir() if p.is_file() and p.name.endswith(_YAML_SUFFIXES)
        )

    resumes_root = root / "resumes"
    resume_files: List[str] = []
    if resumes_root.is_dir():
        resume_files = sorted(
            p.relative_to(resumes_root).as_posix()
            for p in resumes_root.rglob("*")
            if p.is_file() and p.name.endswith(_YAML_SUFFIXES)
        )

    return FileListing(
        all_files=main_files + [f"resumes/{name}" for name in resume_files],
        main_dir_files=len(main_files),
        resume_files=len(resume_files),
    )


def read_files(paths: List[str], base_directory: Optional[PathLike] = None) -> Dict[str, Any]:
    """Read and parse many files; failures are recorded per path, never raised."""
    base = Path(base_directory) if base_directory else default_base_directory()
    results: Dict[str, Any] = {}

    for file_path in paths:
        try:
            content = resolve_within(base, file_path).read_text(encoding="utf-8")
        except (OSError, ValueError, InvalidPathError) as exc:
            results[file_path] = {"error": "Failed to read file", "message": str(exc)}
            continue

        if file_path.endswith(_YAML_SUFFIXES):
            try:
                results[file_path] = yaml.safe_load(content)
            except yaml.YAMLError as exc:
                results[file_path] = {
                    "error": "Failed to parse YAML",
                    "message": str(exc),
                    "rawContent": content,
                }
        else:
            try:
                results[file_path] = json.loads(content)
            except ValueError:
                results[file_path] = content

    return results


def _write_change_record(target: Path, previous: str, new: str, file_existed: bool) -> Optional[Path]:
    now = utc_now()
    operation = "MODIFIED" if file_existed else "CREATED"
    previous_block = f"```yaml\n{previous}\n```" if file_existed else "_File did not exist_"
    lines_before = len(previous.split("\n")) if file_existed else 0
    lines_after = len(new.split("\n"))

    record = (
        f"# File Diff: {operation}\n\n"
        f"**File:** `{target}`  \n"
        f"**Timestamp:** {to_iso(now)}  \n"
        f"**Operation:** {operation}\n\n"
        f"## Previous State\n{previous_block}\n\n"
        f"## New State\n```yaml\n{new}\n```\n\n"
        f"## Summary\n"
        f"- **Lines before:** {lines_before}\n"
        f"- **Lines after:** {lines_after}\n"
        f"- **Size before:** {len(previous) if file_existed else 0} characters\n"
        f"- **Size after:** {len(new)} characters\n"
    )

    diff_dir = target.parent / "diffs"
    diff_path = diff_dir / f"diff_{diff_stamp(now)}.md"
    try:
        diff_dir.mkdir(parents=True, exist_ok=True)
        diff_path.write_text(record, encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to create diff file for %s: %s", target, exc)
        return None
    return diff_path


def _write_deletion_backup(target: Path, content: str) -> bool:
    now = utc_now()
    record = (
        "# Deleted File Backup\n\n"
        f"**Original File:** `{target}`  \n"
        f"**Deleted At:** {to_iso(now)}\n\n"
        f"## File Content\n```\n{content}\n```\n"
    )
    backup_dir = target.parent / "diffs"
    backup_dir.mkdir(parents=True, exist_ok=True)
    (backup_dir / f"deleted_{diff_stamp(now)}.backup").write_text(record, encoding="utf-8")
    return True
