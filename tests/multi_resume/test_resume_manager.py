"""Tests for the multi-resume directory tree manager."""

import json
import shutil

import pytest

from resume_builder.errors import (
    ConfigurationError,
    InvalidPathError,
    InvalidYamlError,
    ResumeExistsError,
    ResumeNotFoundError,
)
from resume_builder.multi_resume import MultiResumeManager
from resume_builder.multi_resume.models import (
    CreateResumeVersionOptions,
    ResumeContext,
    ResumeListOptions,
)
from resume_builder.timeutil import today_str


@pytest.fixture
def manager(pii_dir):
    return MultiResumeManager(pii_dir)


def _manual_version(root, position, company, date, content="a: 1\n"):
    version_dir = root / "resumes" / position / company / date
    version_dir.mkdir(parents=True)
    (version_dir / "data.yml").write_text(content, encoding="utf-8")
    return version_dir


def test_requires_configured_root():
    with pytest.raises(ConfigurationError):
        MultiResumeManager()


class TestGetYamlData:
    def test_primary_resume(self, manager, sample_resume):
        assert manager.get_yaml_data() == sample_resume

    def test_primary_prefers_temp(self, manager, pii_dir):
        (pii_dir / "data.temp.yml").write_text("draft: true\n", encoding="utf-8")
        assert manager.get_yaml_data(ResumeContext()) == "draft: true\n"

    def test_missing_primary(self, tmp_path):
        with pytest.raises(ResumeNotFoundError):
            MultiResumeManager(tmp_path).get_yaml_data()

    def test_unknown_context(self, manager):
        with pytest.raises(ResumeNotFoundError):
            manager.get_yaml_data(ResumeContext(position="ghost"))


class TestCreate:
    def test_default_version_from_primary(self, manager, pii_dir, sample_resume):
        version = manager.create_resume_version(CreateResumeVersionOptions(position="backend"))

        assert version.id == "backend-default"
        assert version.company is None
        data_path = pii_dir / "resumes" / "backend" / "default" / "data.yml"
        assert data_path.read_text(encoding="utf-8") == sample_resume
        assert (data_path.parent / "metadata.json").exists()
        assert manager.get_yaml_data(ResumeContext(position="backend")) == sample_resume

    def test_company_version_is_dated(self, manager, pii_dir):
        version = manager.create_resume_version(
            CreateResumeVersionOptions(position="backend", company="Acme", tags=["python"], job_url="acme.com/1")
        )

        today = today_str()
        assert version.date == today
        assert version.metadata.id == f"backend-acme-{today}"
        assert version.metadata.tags == ["python"]
        assert (pii_dir / "resumes" / "backend" / "Acme" / today / "data.yml").exists()

        index = json.loads((pii_dir / "resume-index.json").read_text(encoding="utf-8"))
        entry = index["positions"]["backend"]["companies"]["Acme"][0]
        assert entry["date"] == today
        assert entry["path"] == f"resumes/backend/Acme/{today}/data.yml"

    def test_based_on_existing_version(self, manager, pii_dir):
        base = manager.create_resume_version(CreateResumeVersionOptions(position="backend"))
        manager.update_resume_content("backend", "tailored: true\n")

        version = manager.create_resume_version(
            CreateResumeVersionOptions(position="backend", company="Acme", based_on=base.id)
        )
        assert version.metadata.based_on == "backend-default"
        assert (pii_dir / version.path).read_text(encoding="utf-8") == "tailored: true\n"

    def test_unknown_base(self, manager):
        with pytest.raises(ResumeNotFoundError):
            manager.create_resume_version(CreateResumeVersionOptions(position="backend", based_on="nope"))

    def test_duplicate_rejected(self, manager):
        options = CreateResumeVersionOptions(position="backend", company="Acme")
        manager.create_resume_version(options)
        with pytest.raises(ResumeExistsError):
            manager.create_resume_version(options)

    @pytest.mark.parametrize(
        "position, company",
        [("../escape", None), ("backend", "a/b"), ("", None), ("backend", "default")],
    )
    def test_invalid_segments(self, manager, position, company):
        with pytest.raises(InvalidPathError):
            manager.create_resume_version(CreateResumeVersionOptions(position=position, company=company))


class TestListAndNavigate:
    def test_list_filters_and_sorting(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend"))
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        manager.create_resume_version(CreateResumeVersionOptions(position="frontend", company="Beta"))
        manager.update_resume_metadata("frontend", {"status": "submitted"}, company="Beta")

        everything = manager.list_resume_versions()
        assert everything.total == 3
        assert everything.positions == ["backend", "frontend"]
        assert everything.companies == {"backend": ["Acme"], "frontend": ["Beta"]}

        by_company = manager.list_resume_versions(ResumeListOptions(company="Acme"))
        assert [v.company for v in by_company.versions] == ["Acme"]

        submitted = manager.list_resume_versions(ResumeListOptions(status="submitted"))
        assert [v.position for v in submitted.versions] == ["frontend"]

        by_position = manager.list_resume_versions(
            ResumeListOptions(position="backend", sort_by="company", sort_order="asc")
        )
        assert [v.company for v in by_position.versions] == [None, "Acme"]

        limited = manager.list_resume_versions(ResumeListOptions(limit=1))
        assert limited.total == 3
        assert len(limited.versions) == 1

    def test_navigation(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        data = manager.get_navigation_data().to_dict()

        assert data["positions"] == ["backend"]
        assert data["companiesByPosition"] == {"backend": ["Acme"]}
        assert data["recent"][0]["company"] == "Acme"
        assert data["statistics"] == {"totalPositions": 1, "totalCompanies": 1, "totalVersions": 1}

    def test_get_resume_version(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        version = manager.get_resume_version("backend", "Acme")
        assert version is not None
        assert version.date == today_str()
        assert manager.get_resume_version("backend", "Nope") is None


class TestUpdateAndCopy:
    def test_update_content(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        metadata = manager.update_resume_content("backend", "updated: true\n", company="Acme")

        assert metadata is not None
        assert manager.get_yaml_data(ResumeContext("backend", "Acme")) == "updated: true\n"

        with pytest.raises(InvalidYamlError):
            manager.update_resume_content("backend", "a: [b", company="Acme")
        with pytest.raises(ResumeNotFoundError):
            manager.update_resume_content("ghost", "a: 1\n")

    def test_update_metadata(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        updated = manager.update_resume_metadata("backend", {"status": "active", "notes": "Call Friday"}, "Acme")

        assert updated.status == "active"
        assert manager.index_manager.list_versions("backend", "Acme")[0].status == "active"
        assert manager.update_resume_metadata("ghost", {"status": "active"}) is None

    def test_copy_version(self, manager, pii_dir):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))
        manager.update_resume_content("backend", "source: true\n", company="Acme")

        copy = manager.copy_resume_version(
            "backend", CreateResumeVersionOptions(position="platform", company="Gamma"), source_company="Acme"
        )
        assert copy.metadata.based_on == f"backend-acme-{today_str()}"
        assert (pii_dir / copy.path).read_text(encoding="utf-8") == "source: true\n"

        with pytest.raises(ResumeNotFoundError):
            manager.copy_resume_version("ghost", CreateResumeVersionOptions(position="x"))


class TestDelete:
    def test_delete_company_version(self, manager, pii_dir):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend"))
        version = manager.create_resume_version(CreateResumeVersionOptions(position="backend", company="Acme"))

        assert manager.delete_resume_version("backend", "Acme") is True
        assert not (pii_dir / version.path).exists()
        assert manager.index_manager.list_companies("backend") == []
        assert manager.index_manager.list_positions() == ["backend"]

    def test_delete_default_drops_empty_position(self, manager):
        manager.create_resume_version(CreateResumeVersionOptions(position="backend"))
        assert manager.delete_resume_version("backend") is True
        assert manager.index_manager.list_positions() == []

    def test_delete_missing(self, manager):
        assert manager.delete_resume_version("ghost") is False


class TestScan:
    def test_scan_picks_up_manual_versions(self, manager, pii_dir):
        _manual_version(pii_dir, "backend", "Acme", "2025-11-02")
        default_dir = pii_dir / "resumes" / "data" / "default"
        default_dir.mkdir(parents=True)
        (default_dir / "data.yml").write_text("a: 1\n", encoding="utf-8")

        result = manager.scan_and_update_index()
        assert (result.scanned, result.added, result.updated, result.removed) == (2, 2, 0, 0)
        assert result.errors == []

        metadata = json.loads(
            (pii_dir / "resumes" / "backend" / "Acme" / "2025-11-02" / "metadata.json").read_text(encoding="utf-8")
        )
        assert metadata["dateCreated"] == "2025-11-02T00:00:00.000Z"
        assert metadata["tags"] == ["backend", "Acme"]
        assert manager.index_manager.list_positions() == ["backend", "data"]

        again = manager.scan_and_update_index()
        assert (again.added, again.updated) == (0, 1)

    def test_scan_prunes_vanished_versions(self, manager, pii_dir):
        version_dir = _manual_version(pii_dir, "backend", "Acme", "2025-11-02")
        manager.scan_and_update_index()

        shutil.rmtree(version_dir)
        result = manager.scan_and_update_index()
        assert result.removed >= 1
        assert manager.index_manager.list_versions("backend", "Acme") == []

    def test_initialize(self, tmp_path):
        result = MultiResumeManager(tmp_path).initialize()
        assert result.scanned == 0
        assert (tmp_path / "resumes").is_dir()
        assert (tmp_path / "resume-index.json").exists()
