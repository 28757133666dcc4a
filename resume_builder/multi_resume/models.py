"""Records for the multi-resume tree: metadata sidecars, the index, query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

RESUME_STATUSES = ("draft", "active", "submitted", "archived")
SORT_FIELDS = ("dateCreated", "lastModified", "company", "position")
SORT_ORDERS = ("asc", "desc")

PRIMARY_RESUME = "data.yml"


@dataclass
class ResumeMetadata:
    """Contents of ``metadata.json`` in one version directory."""

    id: str
    position: str
    date_created: str
    last_modified: str
    company: Optional[str] = None
    based_on: Optional[str] = None
    status: str = "draft"
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    application_deadline: Optional[str] = None
    job_url: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "position": self.position,
            "company": self.company,
            "dateCreated": self.date_created,
            "lastModified": self.last_modified,
            "basedOn": self.based_on,
            "status": self.status,
            "description": self.description,
            "tags": list(self.tags),
            "applicationDeadline": self.application_deadline,
            "jobUrl": self.job_url,
            "notes": self.notes,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeMetadata":
        return cls(
            id=data["id"],
            position=data["position"],
            company=data.get("company"),
            date_created=data["dateCreated"],
            last_modified=data["lastModified"],
            based_on=data.get("basedOn"),
            status=data.get("status", "draft"),
            description=data.get("description"),
            tags=list(data.get("tags") or []),
            application_deadline=data.get("applicationDeadline"),
            job_url=data.get("jobUrl"),
            notes=data.get("notes"),
        )


@dataclass
class CompanyVersion:
    date: str
    path: str
    last_modified: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "path": self.path,
            "lastModified": self.last_modified,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompanyVersion":
        return cls(
            date=data["date"],
            path=data["path"],
            last_modified=data.get("lastModified", ""),
            status=data.get("status", "draft"),
        )


@dataclass
class PositionGroup:
    default: str
    companies: Dict[str, List[CompanyVersion]] = field(default_factory=dict)

    @classmethod
    def for_position(cls, position: str) -> "PositionGroup":
        return cls(default=f"resumes/{position}/default/{PRIMARY_RESUME}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default": self.default,
            "companies": {
                company: [v.to_dict() for v in versions]
                for company, versions in self.companies.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionGroup":
        return cls(
            default=data["default"],
            companies={
                company: [CompanyVersion.from_dict(v) for v in versions]
                for company, versions in (data.get("companies") or {}).items()
            },
        )


@dataclass
class ResumeIndex:
    last_updated: str
    default: str = PRIMARY_RESUME
    positions: Dict[str, PositionGroup] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "default": self.default,
            "positions": {name: group.to_dict() for name, group in self.positions.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeIndex":
        return cls(
            last_updated=data.get("lastUpdated", ""),
            default=data.get("default", PRIMARY_RESUME),
            positions={
                name: PositionGroup.from_dict(group)
                for name, group in (data.get("positions") or {}).items()
            },
        )


@dataclass
class ResumeContext:
    position: Optional[str] = None
    company: Optional[str] = None
    date: Optional[str] = None


@dataclass
class CreateResumeVersionOptions:
    position: str
    company: Optional[str] = None
    based_on: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    application_deadline: Optional[str] = None
    job_url: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class ResumeVersion:
    id: str
    position: str
    date: str
    path: str
    metadata: ResumeMetadata
    company: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "position": self.position,
            "company": self.company,
            "date": self.date,
            "path": self.path,
            "metadata": self.metadata.to_dict(),
        }
        if self.company is None:
            del data["company"]
        return data


@dataclass
class ResumeListOptions:
    position: Optional[str] = None
    company: Optional[str] = None
    status: Optional[str] = None
    limit: Optional[int] = None
    sort_by: str = "lastModified"
    sort_order: str = "desc"


@dataclass
class ResumeNavigationResult:
    versions: List[ResumeVersion]
    total: int
    positions: List[str]
    companies: Dict[str, List[str]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "versions": [v.to_dict() for v in self.versions],
            "total": self.total,
            "positions": list(self.positions),
            "companies": {k: list(v) for k, v in self.companies.items()},
        }


@dataclass
class RecentVersion:
    position: str
    company: str
    date: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "company": self.company,
            "date": self.date,
            "status": self.status,
        }


@dataclass
class IndexStatistics:
    total_positions: int
    total_companies: int
    total_versions: int
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPositions": self.total_positions,
            "totalCompanies": self.total_companies,
            "totalVersions": self.total_versions,
            "lastUpdated": self.last_updated,
        }


@dataclass
class NavigationData:
    positions: List[str]
    companies_by_position: Dict[str, List[str]]
    recent: List[RecentVersion]
    statistics: IndexStatistics

    def to_dict(self) -> Dict[str, Any]:
        stats = self.statistics.to_dict()
        stats.pop("lastUpdated")
        return {
            "positions": list(self.positions),
            "companiesByPosition": {k: list(v) for k, v in self.companies_by_position.items()},
            "recent": [r.to_dict() for r in self.recent],
            "statistics": stats,
        }


@dataclass
class ScanResult:
    scanned: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "added": self.added,
            "updated": self.updated,
            "removed": self.removed,
            "errors": list(self.errors),
        }
