"""Append-only JSON changelog capped at a fixed number of entries."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_CHANGELOG_LIMIT
from ..timeutil import utc_now_iso

logger = logging.getLogger(__name__)

CHANGELOG_FILENAME = "changelog.json"

_KEY_MAP = {
    "timestamp": "timestamp",
    "action": "action",
    "description": "description",
    "original_file": "originalFile",
    "backup_file": "backupFile",
    "file": "file",
    "message": "message",
}


@dataclass
class ChangelogEntry:
    action: str
    timestamp: str = ""
    description: Optional[str] = None
    original_file: Optional[str] = None
    backup_file: Optional[str] = None
    file: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for attr, key in _KEY_MAP.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChangelogEntry":
        kwargs = {attr: data.get(key) for attr, key in _KEY_MAP.items()}
        kwargs["action"] = kwargs.get("action") or "unknown"
        kwargs["timestamp"] = kwargs.get("timestamp") or ""
        return cls(**kwargs)


class Changelog:
    """JSON array of change entries; only the newest ``limit`` are kept."""

    def __init__(self, path: Path, limit: int = DEFAULT_CHANGELOG_LIMIT):
        self.path = Path(path)
        self.limit = limit

    def read(self) -> List[ChangelogEntry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read changelog file %s: %s", self.path, exc)
            return []
        if not isinstance(raw, list):
            logger.warning("Changelog file %s is not a JSON array", self.path)
            return []
        return [ChangelogEntry.from_dict(item) for item in raw if isinstance(item, dict)]

    def append(self, entry: ChangelogEntry) -> ChangelogEntry:
        entries = self.read()
        entries.append(entry)
        entries = entries[-self.limit:]
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([e.to_dict() for e in entries], f, indent=2)
        return entry

    def recent(self, limit: int = 10) -> List[ChangelogEntry]:
        """Most recent entries first."""
        if limit <= 0:
            return []
        return list(reversed(self.read()[-limit:]))
