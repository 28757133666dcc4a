"""``resume-index.json``: position -> company -> dated versions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..timeutil import parse_iso, utc_now_iso
from .models import (
    CompanyVersion,
    IndexStatistics,
    PositionGroup,
    RecentVersion,
    ResumeIndex,
    ResumeMetadata,
)

logger = logging.getLogger(__name__)

INDEX_FILENAME = "resume-index.json"


class ResumeIndexManager:
    """Fast lookup of resume versions without walking the tree.

    Every method re-reads the index from disk and writes it back on change.
    """

    def __init__(self, pii_path: Union[str, Path]):
        self.pii_path = Path(pii_path)
        self.index_path = self.pii_path / INDEX_FILENAME

    def initialize_index(self) -> ResumeIndex:
        """Create an empty index on disk unless one already exists."""
        index = ResumeIndex(last_updated=utc_now_iso())
        if not self.index_path.exists():
            self.save_index(index)
        return index

    def read_index(self) -> ResumeIndex:
        if not self.index_path.exists():
            return self.initialize_index()
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                return ResumeIndex.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            # Corrupt index: start fresh, the next save replaces it.
            logger.warning("Could not read resume index %s, starting a new one: %s", self.index_path, exc)
            return ResumeIndex(last_updated=utc_now_iso())

    def save_index(self, index: ResumeIndex) -> None:
        index.last_updated = utc_now_iso()
        with open(self.index_path, "w", encoding="utf-8") as f:
            json.dump(index.to_dict(), f, indent=2)

    def ensure_position(self, position: str) -> bool:
        """Register a position with no company versions; True if it was new."""
        index = self.read_index()
        if position in index.positions:
            return False
        index.positions[position] = PositionGroup.for_position(position)
        self.save_index(index)
        return True

    def add_resume_version(
        self,
        metadata: ResumeMetadata,
        resume_path: str,
        date: Optional[str] = None,
    ) -> None:
        """Record a version; a company version replaces any entry with the same date."""
        index = self.read_index()
        group = index.positions.setdefault(metadata.position, PositionGroup.for_position(metadata.position))

        if metadata.company:
            entry = CompanyVersion(
                date=date or metadata.date_created[:10],
                path=resume_path,
                last_modified=metadata.last_modified,
                status=metadata.status,
            )
            versions = [v for v in group.companies.get(metadata.company, []) if v.date != entry.date]
            versions.append(entry)
            versions.sort(key=lambda v: v.date, reverse=True)
            group.companies[metadata.company] = versions

        self.save_index(index)

    def update_resume_version(
        self,
        metadata: ResumeMetadata,
        resume_path: str,
        date: Optional[str] = None,
    ) -> bool:
        """Refresh an existing dated entry; returns False when there is none."""
        if not metadata.company:
            return False

        index = self.read_index()
        group = index.positions.get(metadata.position)
        if group is None or metadata.company not in group.companies:
            return False

        date_key = date or metadata.date_created[:10]
        versions = group.companies[metadata.company]
        for i, version in enumerate(versions):
            if version.date == date_key:
                versions[i] = CompanyVersion(
                    date=date_key,
                    path=resume_path,
                    last_modified=metadata.last_modified,
                    status=metadata.status,
                )
                self.save_index(index)
                return True
        return False

    def remove_resume_version(
        self,
        position: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> None:
        """Drop a whole position, a whole company, or one dated version."""
        index = self.read_index()
        group = index.positions.get(position)
        if group is None:
            return

        if not company:
            del index.positions[position]
        elif not date:
            group.companies.pop(company, None)
        elif company in group.companies:
            remaining = [v for v in group.companies[company] if v.date != date]
            if remaining:
                group.companies[company] = remaining
            else:
                del group.companies[company]

        group = index.positions.get(position)
        if group is not None and not group.companies and not (self.pii_path / group.default).exists():
            del index.positions[position]

        self.save_index(index)

    def list_positions(self) -> List[str]:
        return sorted(self.read_index().positions)

    def list_companies(self, position: str) -> List[str]:
        group = self.read_index().positions.get(position)
        return sorted(group.companies) if group else []

    def list_versions(self, position: str, company: str) -> List[CompanyVersion]:
        group = self.read_index().positions.get(position)
        if group is None:
            return []
        return list(group.companies.get(company, []))

    def iter_versions(self) -> List[Tuple[str, str, CompanyVersion]]:
        index = self.read_index()
        return [
            (position, company, version)
            for position, group in index.positions.items()
            for company, versions in group.companies.items()
            for version in versions
        ]

    def get_recently_modified(self, limit: int = 10) -> List[RecentVersion]:
        items = sorted(self.iter_versions(), key=lambda item: parse_iso(item[2].last_modified), reverse=True)
        return [
            RecentVersion(position=position, company=company, date=version.date, status=version.status)
            for position, company, version in items[:limit]
        ]

    def get_resume_path(
        self,
        position: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> Optional[Path]:
        """Absolute path of a version.

        No company means the position default; no date means the newest.
        """
        group = self.read_index().positions.get(position)
        if group is None:
            return None
        if not company:
            return self.pii_path / group.default

        versions = group.companies.get(company)
        if not versions:
            return None
        if not date:
            return self.pii_path / versions[0].path
        for version in versions:
            if version.date == date:
                return self.pii_path / version.path
        return None

    def version_exists(
        self,
        position: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> bool:
        path = self.get_resume_path(position, company, date)
        return path is not None and path.exists()

    def get_statistics(self) -> IndexStatistics:
        index = self.read_index()
        return IndexStatistics(
            total_positions=len(index.positions),
            total_companies=sum(len(g.companies) for g in index.positions.values()),
            total_versions=sum(
                len(versions) for g in index.positions.values() for versions in g.companies.values()
            ),
            last_updated=index.last_updated,
        )
