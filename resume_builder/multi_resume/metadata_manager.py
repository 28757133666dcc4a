"""Read and write the ``metadata.json`` sidecar of each resume version."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import InvalidMetadataError
from ..timeutil import today_str, utc_now_iso
from .models import PRIMARY_RESUME, RESUME_STATUSES, ResumeMetadata

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"

_REQUIRED_STRINGS = ("id", "position", "dateCreated", "lastModified")
_OPTIONAL_STRINGS = (
    "company", "basedOn", "description", "applicationDeadline", "jobUrl", "notes",
)

# Statuses written by older releases, folded onto the current four.
_LEGACY_STATUS = {
    "draft": "draft",
    "active": "active",
    "submitted": "submitted",
    "archived": "archived",
    "applied": "submitted",
    "interview": "submitted",
    "offer": "submitted",
    "rejected": "archived",
    "withdrawn": "archived",
}

PathLike = Union[str, Path]


class ResumeMetadataManager:
    """Stateless helpers around :class:`ResumeMetadata` files."""

    @staticmethod
    def generate_id(position: str, company: Optional[str] = None, date: Optional[str] = None) -> str:
        """``position[-company-slug]-YYYY-MM-DD``; company is lowercased, spaces become dashes."""
        parts = [position]
        if company:
            parts.append(re.sub(r"\s+", "-", company.lower()))
        parts.append(date or today_str())
        return "-".join(parts)

    @classmethod
    def create_metadata(
        cls,
        position: str,
        company: Optional[str] = None,
        *,
        based_on: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        application_deadline: Optional[str] = None,
        job_url: Optional[str] = None,
        notes: Optional[str] = None,
        date: Optional[str] = None,
    ) -> ResumeMetadata:
        now = utc_now_iso()
        return ResumeMetadata(
            id=cls.generate_id(position, company, date),
            position=position,
            company=company,
            date_created=now,
            last_modified=now,
            based_on=based_on,
            status="draft",
            description=description,
            tags=list(tags or []),
            application_deadline=application_deadline,
            job_url=job_url,
            notes=notes,
        )

    @staticmethod
    def save_metadata(metadata_path: PathLike, metadata: ResumeMetadata, touch: bool = True) -> None:
        """Write the sidecar; ``touch`` restamps ``lastModified`` first."""
        if touch:
            metadata.last_modified = utc_now_iso()
        path = Path(metadata_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(metadata.to_dict(), f, indent=2)

    @classmethod
    def load_metadata(cls, metadata_path: PathLike) -> Optional[ResumeMetadata]:
        path = Path(metadata_path)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load metadata from %s: %s", path, exc)
            return None
        if not isinstance(raw, dict):
            logger.warning("Metadata in %s is not a JSON object", path)
            return None
        return cls.migrate_metadata(raw)

    @classmethod
    def update_metadata(cls, metadata_path: PathLike, updates: Dict[str, Any]) -> Optional[ResumeMetadata]:
        """Merge camelCase ``updates`` into the stored record.

        A ``None`` value removes that key. Returns ``None`` if there is no
        record to update.

        Raises:
            InvalidMetadataError: if the merged record would be invalid.
        """
        existing = cls.load_metadata(metadata_path)
        if existing is None:
            return None

        merged = {**existing.to_dict(), **updates, "lastModified": utc_now_iso()}
        merged = {key: value for key, value in merged.items() if value is not None}
        if not cls.validate_metadata(merged):
            raise InvalidMetadataError(f"Invalid metadata update: {sorted(updates)}")

        updated = ResumeMetadata.from_dict(merged)
        cls.save_metadata(metadata_path, updated, touch=False)
        return updated

    @staticmethod
    def get_metadata_path(resume_dir: PathLike) -> Path:
        return Path(resume_dir) / METADATA_FILENAME

    @staticmethod
    def validate_metadata(obj: Any) -> bool:
        """True if ``obj`` is a well-formed current-format metadata mapping."""
        if not isinstance(obj, dict):
            return False
        for key in _REQUIRED_STRINGS:
            if not isinstance(obj.get(key), str):
                return False
        for key in _OPTIONAL_STRINGS:
            if key in obj and obj[key] is not None and not isinstance(obj[key], str):
                return False
        if obj.get("status", "draft") not in RESUME_STATUSES:
            return False
        tags = obj.get("tags", [])
        return isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)

    @classmethod
    def migrate_metadata(cls, obj: Dict[str, Any]) -> ResumeMetadata:
        """Accept either the current shape or the legacy ``target*``/``application*`` one."""
        if cls.validate_metadata(obj):
            return ResumeMetadata.from_dict(obj)

        now = utc_now_iso()
        position = str(obj.get("position") or obj.get("targetPosition") or "unknown")
        company = obj.get("company") or obj.get("targetCompany")
        date_created = str(obj.get("dateCreated") or obj.get("applicationDate") or now)
        raw_status = str(obj.get("status") or obj.get("applicationStatus") or "draft")
        tags = obj.get("tags") if isinstance(obj.get("tags"), list) else obj.get("tailoredFor")

        return ResumeMetadata(
            id=str(obj.get("id") or cls.generate_id(position, company, date_created[:10])),
            position=position,
            company=company,
            date_created=date_created,
            last_modified=str(obj.get("lastModified") or now),
            based_on=obj.get("basedOn"),
            status=_LEGACY_STATUS.get(raw_status, "draft"),
            description=obj.get("description"),
            tags=[str(tag) for tag in (tags or [])],
            application_deadline=obj.get("applicationDeadline"),
            job_url=obj.get("jobUrl") or obj.get("targetJobUrl"),
            notes=obj.get("notes"),
        )

    @classmethod
    def create_default_metadata(cls, position: str = "default") -> ResumeMetadata:
        return cls.create_metadata(
            position,
            description="Default resume version",
            based_on=PRIMARY_RESUME,
        )

    @staticmethod
    def get_status_display(status: Optional[str]) -> str:
        if not status:
            return "Unknown"
        return status.capitalize() if status in RESUME_STATUSES else status
