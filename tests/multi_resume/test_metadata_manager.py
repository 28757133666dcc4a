"""Tests for per-version metadata sidecars."""

import json

import pytest

from resume_builder.errors import InvalidMetadataError
from resume_builder.multi_resume.metadata_manager import METADATA_FILENAME, ResumeMetadataManager


class TestGenerateId:
    def test_with_company(self):
        assert ResumeMetadataManager.generate_id("backend", "Big  Corp", "2026-03-01") == "backend-big-corp-2026-03-01"

    def test_without_company(self):
        assert ResumeMetadataManager.generate_id("backend", date="2026-03-01") == "backend-2026-03-01"


class TestCreateSaveLoad:
    def test_round_trip(self, tmp_path):
        metadata = ResumeMetadataManager.create_metadata(
            "backend",
            "Acme",
            description="Tailored",
            tags=["python"],
            job_url="acme.com/jobs/1",
            date="2026-03-01",
        )
        assert metadata.status == "draft"
        assert metadata.id == "backend-acme-2026-03-01"

        path = ResumeMetadataManager.get_metadata_path(tmp_path)
        assert path.name == METADATA_FILENAME
        ResumeMetadataManager.save_metadata(path, metadata)

        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored["jobUrl"] == "acme.com/jobs/1"
        assert "notes" not in stored

        loaded = ResumeMetadataManager.load_metadata(path)
        assert loaded == metadata

    def test_save_without_touch_keeps_last_modified(self, tmp_path):
        metadata = ResumeMetadataManager.create_metadata("backend")
        metadata.last_modified = "2020-01-01T00:00:00.000Z"
        path = tmp_path / METADATA_FILENAME

        ResumeMetadataManager.save_metadata(path, metadata, touch=False)
        assert ResumeMetadataManager.load_metadata(path).last_modified == "2020-01-01T00:00:00.000Z"

    def test_missing_or_corrupt(self, tmp_path):
        path = tmp_path / METADATA_FILENAME
        assert ResumeMetadataManager.load_metadata(path) is None
        path.write_text("{broken", encoding="utf-8")
        assert ResumeMetadataManager.load_metadata(path) is None

    def test_default_metadata(self):
        metadata = ResumeMetadataManager.create_default_metadata("backend")
        assert metadata.position == "backend"
        assert metadata.company is None
        assert metadata.based_on == "data.yml"
        assert metadata.description == "Default resume version"


class TestUpdate:
    def _saved(self, tmp_path):
        path = tmp_path / METADATA_FILENAME
        ResumeMetadataManager.save_metadata(path, ResumeMetadataManager.create_metadata("backend", "Acme"))
        return path

    def test_merges_updates(self, tmp_path):
        path = self._saved(tmp_path)
        updated = ResumeMetadataManager.update_metadata(path, {"status": "submitted", "notes": "Sent"})

        assert updated.status == "submitted"
        assert updated.notes == "Sent"
        assert updated.company == "Acme"
        assert ResumeMetadataManager.load_metadata(path) == updated

    def test_null_clears_optional_fields(self, tmp_path):
        path = self._saved(tmp_path)
        ResumeMetadataManager.update_metadata(path, {"notes": "Sent", "jobUrl": "acme.com/1"})

        cleared = ResumeMetadataManager.update_metadata(path, {"notes": None, "jobUrl": None})
        assert cleared.notes is None
        assert cleared.job_url is None
        stored = json.loads(path.read_text(encoding="utf-8"))
        assert "notes" not in stored
        assert "jobUrl" not in stored

    def test_invalid_status_rejected(self, tmp_path):
        path = self._saved(tmp_path)
        with pytest.raises(InvalidMetadataError):
            ResumeMetadataManager.update_metadata(path, {"status": "hired"})
        assert ResumeMetadataManager.load_metadata(path).status == "draft"

    def test_invalid_tags_rejected(self, tmp_path):
        path = self._saved(tmp_path)
        with pytest.raises(InvalidMetadataError):
            ResumeMetadataManager.update_metadata(path, {"tags": "python"})

    def test_missing_record(self, tmp_path):
        assert ResumeMetadataManager.update_metadata(tmp_path / METADATA_FILENAME, {"notes": "x"}) is None


class TestValidateAndMigrate:
    def test_validate(self):
        good = {
            "id": "x",
            "position": "backend",
            "dateCreated": "2026-01-01T00:00:00.000Z",
            "lastModified": "2026-01-01T00:00:00.000Z",
            "status": "active",
            "tags": ["a"],
        }
        assert ResumeMetadataManager.validate_metadata(good) is True
        assert ResumeMetadataManager.validate_metadata({**good, "status": "applied"}) is False
        assert ResumeMetadataManager.validate_metadata({**good, "company": 3}) is False
        assert ResumeMetadataManager.validate_metadata("nope") is False

    def test_migrates_legacy_shape(self):
        legacy = {
            "targetPosition": "backend",
            "targetCompany": "Acme",
            "applicationDate": "2025-06-01T10:00:00.000Z",
            "applicationStatus": "interview",
            "targetJobUrl": "acme.com/job",
            "tailoredFor": ["python"],
        }
        metadata = ResumeMetadataManager.migrate_metadata(legacy)

        assert metadata.position == "backend"
        assert metadata.company == "Acme"
        assert metadata.status == "submitted"
        assert metadata.job_url == "acme.com/job"
        assert metadata.tags == ["python"]
        assert metadata.id == "backend-acme-2025-06-01"

    @pytest.mark.parametrize(
        "legacy, current",
        [("applied", "submitted"), ("rejected", "archived"), ("withdrawn", "archived"), ("bogus", "draft")],
    )
    def test_status_mapping(self, legacy, current):
        metadata = ResumeMetadataManager.migrate_metadata({"position": "p", "status": legacy})
        assert metadata.status == current

    def test_status_display(self):
        assert ResumeMetadataManager.get_status_display("active") == "Active"
        assert ResumeMetadataManager.get_status_display(None) == "Unknown"
        assert ResumeMetadataManager.get_status_display("custom") == "custom"
