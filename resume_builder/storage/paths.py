"""Root-relative path resolution confined to a base directory."""

from __future__ import annotations

from pathlib import Path

from ..errors import InvalidPathError


def resolve_within(root: Path, relative_path: str) -> Path:
    """Resolve ``relative_path`` under ``root``; reject anything that escapes it.

    Raises:
        InvalidPathError: for empty or absolute paths, or paths leaving ``root``.
    """
    candidate = (relative_path or "").strip()
    if not candidate:
        raise InvalidPathError("File path cannot be empty")

    requested = Path(candidate)
    if requested.is_absolute():
        raise InvalidPathError("Absolute file paths are not allowed")

    base = root.resolve()
    resolved = (base / requested).resolve()
    try:
        resolved.relative_to(base)
    except ValueError as exc:
        raise InvalidPathError(f"Path escapes the data directory: {relative_path}") from exc
    return resolved


def temp_path_for(path: Path) -> Path:
    """``dir/name.ext`` -> ``dir/name.temp.ext``."""
    return path.with_name(f"{path.stem}.temp{path.suffix}")
