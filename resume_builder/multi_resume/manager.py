"""CRUD over the ``resumes/<position>/<company>/<date>/`` tree."""

from __future__ import annotations

import dataclasses
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from ..config import get_pii_directory
from ..errors import InvalidPathError, ResumeBuilderError, ResumeExistsError, ResumeNotFoundError
from ..storage.file_system_manager import TEMP_DATA_FILE
from ..storage.yaml_io import validate_yaml
from ..timeutil import from_epoch, parse_iso, to_iso, today_str
from .index_manager import ResumeIndexManager
from .metadata_manager import ResumeMetadataManager
from .models import (
    PRIMARY_RESUME,
    CreateResumeVersionOptions,
    NavigationData,
    ResumeContext,
    ResumeListOptions,
    ResumeMetadata,
    ResumeNavigationResult,
    ResumeVersion,
    ScanResult,
)

logger = logging.getLogger(__name__)

RESUMES_DIR = "resumes"
DEFAULT_DIR = "default"


def _check_segment(value: str, label: str) -> str:
    """A position or company name must be a single directory name."""
    cleaned = (value or "").strip()
    if not cleaned or cleaned in (".", "..") or "/" in cleaned or "\\" in cleaned:
        raise InvalidPathError(f"Invalid {label}: {value!r}")
    return cleaned


class MultiResumeManager:
    """Create, list, read, update, copy and delete resume versions.

    Versions live at ``resumes/<position>/default/data.yml`` or
    ``resumes/<position>/<company>/<YYYY-MM-DD>/data.yml``, each beside a
    ``metadata.json``; ``resume-index.json`` maps them for lookup.
    """

    def __init__(self, pii_path: Optional[Union[str, Path]] = None):
        self.pii_path = get_pii_directory(pii_path)
        self.index_manager = ResumeIndexManager(self.pii_path)
        self.resumes_dir = self.pii_path / RESUMES_DIR
        self.resumes_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_yaml_data(self, context: Optional[ResumeContext] = None) -> str:
        """YAML text for a context; no context means the primary resume (temp first).

        Raises:
            ResumeNotFoundError: if nothing exists for the context.
        """
        if context is None or not context.position:
            for name in (TEMP_DATA_FILE, PRIMARY_RESUME):
                path = self.pii_path / name
                if path.exists():
                    return path.read_text(encoding="utf-8")
            raise ResumeNotFoundError(f"No default {PRIMARY_RESUME} file found")

        path = self.index_manager.get_resume_path(context.position, context.company, context.date)
        if path is None or not path.exists():
            raise ResumeNotFoundError(f"Resume not found for context: {dataclasses.asdict(context)}")
        return path.read_text(encoding="utf-8")

    def get_resume_version(
        self,
        position: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> Optional[ResumeVersion]:
        path = self.index_manager.get_resume_path(position, company, date)
        if path is None or not path.exists():
            return None

        metadata = ResumeMetadataManager.load_metadata(ResumeMetadataManager.get_metadata_path(path.parent))
        if metadata is None:
            return None

        return ResumeVersion(
            id=self._version_id(position, company, metadata),
            position=position,
            company=company,
            date=path.parent.name if company else metadata.date_created[:10],
            path=str(path),
            metadata=metadata,
        )

    def list_resume_versions(self, options: Optional[ResumeListOptions] = None) -> ResumeNavigationResult:
        options = options or ResumeListOptions()
        index = self.index_manager.read_index()

        versions: List[ResumeVersion] = []
        companies: Dict[str, List[str]] = {}

        for position, group in index.positions.items():
            if group.companies:
                companies[position] = sorted(group.companies)
            if options.position and position != options.position:
                continue

            default_path = self.pii_path / group.default
            if not options.company and default_path.exists():
                metadata_path = ResumeMetadataManager.get_metadata_path(default_path.parent)
                metadata = ResumeMetadataManager.load_metadata(metadata_path)
                if metadata is None:
                    metadata = ResumeMetadataManager.create_default_metadata(position)
                    ResumeMetadataManager.save_metadata(metadata_path, metadata)
                if not options.status or metadata.status == options.status:
                    versions.append(ResumeVersion(
                        id=self._version_id(position, None, metadata),
                        position=position,
                        date=metadata.date_created[:10],
                        path=str(default_path),
                        metadata=metadata,
                    ))

            for company, company_versions in group.companies.items():
                if options.company and company != options.company:
                    continue
                for entry in company_versions:
                    full_path = self.pii_path / entry.path
                    metadata = ResumeMetadataManager.load_metadata(
                        ResumeMetadataManager.get_metadata_path(full_path.parent)
                    )
                    if metadata is None:
                        continue
                    if options.status and metadata.status != options.status:
                        continue
                    versions.append(ResumeVersion(
                        id=self._version_id(position, company, metadata),
                        position=position,
                        company=company,
                        date=entry.date,
                        path=str(full_path),
                        metadata=metadata,
                    ))

        versions.sort(key=_sort_key(options.sort_by), reverse=options.sort_order != "asc")
        total = len(versions)
        if options.limit:
            versions = versions[:options.limit]

        return ResumeNavigationResult(
            versions=versions,
            total=total,
            positions=sorted(index.positions),
            companies=companies,
        )

    def get_navigation_data(self) -> NavigationData:
        listing = self.list_resume_versions()
        return NavigationData(
            positions=listing.positions,
            companies_by_position=listing.companies,
            recent=self.index_manager.get_recently_modified(5),
            statistics=self.index_manager.get_statistics(),
        )

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def create_resume_version(self, options: CreateResumeVersionOptions) -> ResumeVersion:
        """Create a version from ``based_on`` (a version id) or the primary resume.

        Raises:
            ResumeExistsError: if the target ``data.yml`` already exists.
            ResumeNotFoundError: if the base resume cannot be found.
        """
        if options.based_on:
            base = self._find_version_by_id(options.based_on)
            if base is None:
                raise ResumeNotFoundError(f"Base resume not found: {options.based_on}")
            base_content = Path(base.path).read_text(encoding="utf-8")
        else:
            base_content = self.get_yaml_data()
        return self._create_version(options, base_content)

    def copy_resume_version(
        self,
        source_position: str,
        target_options: CreateResumeVersionOptions,
        source_company: Optional[str] = None,
        source_date: Optional[str] = None,
    ) -> ResumeVersion:
        source = self.get_resume_version(source_position, source_company, source_date)
        if source is None:
            label = f"{source_position}/{source_company}" if source_company else source_position
            raise ResumeNotFoundError(f"Source resume not found: {label}")

        content = Path(source.path).read_text(encoding="utf-8")
        return self._create_version(dataclasses.replace(target_options, based_on=source.id), content)

    def update_resume_content(
        self,
        position: str,
        content: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> Optional[ResumeMetadata]:
        """Overwrite a version's YAML and restamp its metadata and index entry.

        Raises:
            ResumeNotFoundError: if the version does not exist.
            InvalidYamlError: if ``content`` does not parse; nothing is written.
        """
        path = self.index_manager.get_resume_path(position, company, date)
        if path is None or not path.exists():
            label = f"{position}/{company}" if company else position
            raise ResumeNotFoundError(f"Resume not found: {label}")

        validate_yaml(content)
        path.write_text(content, encoding="utf-8")

        metadata_path = ResumeMetadataManager.get_metadata_path(path.parent)
        metadata = ResumeMetadataManager.load_metadata(metadata_path)
        if metadata is not None:
            ResumeMetadataManager.save_metadata(metadata_path, metadata)
            self._reindex(metadata, path, company)
        return metadata

    def update_resume_metadata(
        self,
        position: str,
        updates: Dict[str, Any],
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> Optional[ResumeMetadata]:
        """Merge camelCase ``updates`` into a version's metadata; None if not found."""
        path = self.index_manager.get_resume_path(position, company, date)
        if path is None:
            return None

        updated = ResumeMetadataManager.update_metadata(
            ResumeMetadataManager.get_metadata_path(path.parent), updates
        )
        if updated is not None:
            self._reindex(updated, path, company)
        return updated

    def delete_resume_version(
        self,
        position: str,
        company: Optional[str] = None,
        date: Optional[str] = None,
    ) -> bool:
        """Remove a version directory and its index entry.

        With a company but no date only the newest version goes.
        """
        path = self.index_manager.get_resume_path(position, company, date)
        if path is None or not path.exists():
            return False

        try:
            shutil.rmtree(path.parent)
        except OSError as exc:
            logger.error("Error deleting resume version %s: %s", path.parent, exc)
            return False

        if company:
            self.index_manager.remove_resume_version(position, company, date or path.parent.name)
        elif not self.index_manager.list_companies(position):
            self.index_manager.remove_resume_version(position)
        return True

    # ------------------------------------------------------------------
    # Index maintenance
    # ------------------------------------------------------------------

    def scan_and_update_index(self) -> ScanResult:
        """Reconcile the index with the directory tree.

        Missing metadata is created from file timestamps; entries whose
        ``data.yml`` disappeared are pruned.
        """
        result = ScanResult()
        if not self.resumes_dir.is_dir():
            return result

        index = self.index_manager.read_index()
        indexed: Set[Tuple[str, str, str]] = {
            (position, company, version.date)
            for position, group in index.positions.items()
            for company, versions in group.companies.items()
            for version in versions
        }
        found: Set[Tuple[str, str, str]] = set()

        try:
            for position_dir in _subdirs(self.resumes_dir):
                position = position_dir.name
                for company_dir in _subdirs(position_dir):
                    company = company_dir.name
                    if company == DEFAULT_DIR:
                        if (company_dir / PRIMARY_RESUME).exists():
                            result.scanned += 1
                            if self.index_manager.ensure_position(position):
                                result.added += 1
                        continue

                    for date_dir in _subdirs(company_dir):
                        data_path = date_dir / PRIMARY_RESUME
                        if not data_path.exists():
                            continue
                        result.scanned += 1
                        key = (position, company, date_dir.name)
                        found.add(key)
                        try:
                            self._scan_version(data_path, key, key in indexed, result)
                        except (OSError, ValueError, ResumeBuilderError) as exc:
                            message = f"Failed to process {position}/{company}/{date_dir.name}: {exc}"
                            result.errors.append(message)
                            logger.error(message)
        except OSError as exc:
            message = f"Scan failed: {exc}"
            result.errors.append(message)
            logger.error(message)
            return result

        for position, company, date in sorted(indexed - found):
            self.index_manager.remove_resume_version(position, company, date)
            result.removed += 1

        for position, group in self.index_manager.read_index().positions.items():
            if not group.companies and not (self.pii_path / group.default).exists():
                self.index_manager.remove_resume_version(position)
                result.removed += 1

        return result

    def initialize(self) -> ScanResult:
        self.resumes_dir.mkdir(parents=True, exist_ok=True)
        self.index_manager.initialize_index()
        return self.scan_and_update_index()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _create_version(self, options: CreateResumeVersionOptions, base_content: str) -> ResumeVersion:
        position = _check_segment(options.position, "position")
        company = _check_segment(options.company, "company") if options.company else None
        if company == DEFAULT_DIR:
            raise InvalidPathError(f"'{DEFAULT_DIR}' is reserved and cannot be used as a company name")

        date = today_str()
        version_dir = self.resumes_dir / position / (company if company else DEFAULT_DIR)
        if company:
            version_dir = version_dir / date
        data_path = version_dir / PRIMARY_RESUME

        if data_path.exists():
            label = f"{position}/{company}" if company else position
            raise ResumeExistsError(f"Resume version already exists: {label}")

        version_dir.mkdir(parents=True, exist_ok=True)
        data_path.write_text(base_content, encoding="utf-8")

        metadata = ResumeMetadataManager.create_metadata(
            position,
            company,
            based_on=options.based_on,
            description=options.description,
            tags=options.tags,
            application_deadline=options.application_deadline,
            job_url=options.job_url,
            notes=options.notes,
            date=date,
        )
        ResumeMetadataManager.save_metadata(ResumeMetadataManager.get_metadata_path(version_dir), metadata)
        self.index_manager.add_resume_version(metadata, self._relative(data_path), date=date)
        logger.info("Created resume version %s", metadata.id)

        return ResumeVersion(
            id=self._version_id(position, company, metadata),
            position=position,
            company=company,
            date=date,
            path=str(data_path),
            metadata=metadata,
        )

    def _scan_version(
        self,
        data_path: Path,
        key: Tuple[str, str, str],
        already_indexed: bool,
        result: ScanResult,
    ) -> None:
        position, company, date = key
        metadata_path = ResumeMetadataManager.get_metadata_path(data_path.parent)
        metadata = ResumeMetadataManager.load_metadata(metadata_path)

        if metadata is None:
            metadata = ResumeMetadataManager.create_metadata(
                position,
                company,
                description=f"Resume for {position} at {company}",
                tags=[position, company],
                date=date,
            )
            metadata.date_created = f"{date}T00:00:00.000Z"
            metadata.last_modified = to_iso(from_epoch(data_path.stat().st_mtime))
            ResumeMetadataManager.save_metadata(metadata_path, metadata, touch=False)

        # The directory layout is authoritative for where a version is indexed.
        if metadata.position != position or metadata.company != company:
            metadata = dataclasses.replace(metadata, position=position, company=company)

        relative = self._relative(data_path)
        if already_indexed:
            self.index_manager.update_resume_version(metadata, relative, date=date)
            result.updated += 1
        else:
            self.index_manager.add_resume_version(metadata, relative, date=date)
            result.added += 1

    def _find_version_by_id(self, version_id: str) -> Optional[ResumeVersion]:
        for version in self.list_resume_versions().versions:
            if version_id in (version.id, version.metadata.id):
                return version
        return None

    def _reindex(self, metadata: ResumeMetadata, path: Path, company: Optional[str]) -> None:
        if company:
            self.index_manager.update_resume_version(
                dataclasses.replace(metadata, company=company),
                self._relative(path),
                date=path.parent.name,
            )

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.pii_path).as_posix()

    @staticmethod
    def _version_id(position: str, company: Optional[str], metadata: ResumeMetadata) -> str:
        return metadata.id if company else f"{position}-default"


def _subdirs(directory: Path) -> List[Path]:
    return sorted((p for p in directory.iterdir() if p.is_dir()), key=lambda p: p.name)


def _sort_key(sort_by: str):
    if sort_by == "dateCreated":
        return lambda v: parse_iso(v.metadata.date_created)
    if sort_by == "company":
        return lambda v: v.company or ""
    if sort_by == "position":
        return lambda v: v.position
    return lambda v: parse_iso(v.metadata.last_modified)
