"""Timestamp helpers shared by changelog, backups and metadata."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

BACKUP_STAMP_PATTERN = r"(\d{4}-\d{2}-\d{2})T(\d{2})-(\d{2})-(\d{2})-(\d{3})Z"
_BACKUP_STAMP_RE = re.compile(BACKUP_STAMP_PATTERN)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with milliseconds and a Z suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(utc_now())


def today_str() -> str:
    return utc_now().date().isoformat()


def from_epoch(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def parse_iso(value: Optional[str]) -> datetime:
    """Parse an ISO timestamp; unparseable or empty values sort as the epoch."""
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def backup_stamp(dt: Optional[datetime] = None) -> str:
    """Filesystem-safe timestamp, e.g. ``2026-01-02T03-04-05-678Z``."""
    return re.sub(r"[:.]", "-", to_iso(dt or utc_now()))


def parse_backup_stamp(name: str) -> Optional[datetime]:
    """Recover the timestamp embedded in a backup file name."""
    match = _BACKUP_STAMP_RE.search(name)
    if not match:
        return None
    day, hour, minute, second, millis = match.groups()
    return datetime.fromisoformat(f"{day}T{hour}:{minute}:{second}.{millis}+00:00")


def find_backup_stamp(name: str) -> Optional[str]:
    match = _BACKUP_STAMP_RE.search(name)
    return match.group(0) if match else None


def diff_stamp(dt: Optional[datetime] = None) -> str:
    """Second-resolution stamp used for Markdown change records."""
    return (dt or utc_now()).astimezone(timezone.utc).strftime("%Y_%m_%d_%H_%M_%S")
