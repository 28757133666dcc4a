"""Tests for the data.yml temp/commit/discard workflow."""

from pathlib import Path

import pytest

from resume_builder.errors import (
    ConfigurationError,
    FileNotFoundInRootError,
    InvalidYamlError,
    NoPendingChangesError,
)
from resume_builder.storage.file_system_manager import FileSystemManager


@pytest.fixture
def manager(pii_dir):
    return FileSystemManager(pii_dir)


class TestCurrentState:
    def test_reads_main_file(self, manager, sample_resume):
        state = manager.get_current_state()
        assert state.yaml_content == sample_resume
        assert state.has_changes is False
        assert state.changelog_entries == []

    def test_temp_file_wins(self, manager, pii_dir):
        (pii_dir / "data.temp.yml").write_text("header: {name: Temp}\n", encoding="utf-8")
        state = manager.get_current_state()
        assert state.yaml_content == "header: {name: Temp}\n"
        assert state.has_changes is True
        assert manager.refresh().has_changes is True

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundInRootError, match="No data.yml file found"):
            FileSystemManager(tmp_path).get_current_state()

    def test_env_root(self, pii_dir, monkeypatch):
        monkeypatch.setenv("PII_PATH", str(pii_dir))
        assert FileSystemManager().pii_path == pii_dir

    def test_unconfigured_root_raises(self):
        with pytest.raises(ConfigurationError):
            FileSystemManager()

    def test_state_to_dict(self, manager):
        data = manager.get_current_state().to_dict()
        assert set(data) == {"yamlContent", "hasChanges", "lastModified", "changelogEntries"}
        assert data["lastModified"].endswith("Z")


class TestSaveCommitDiscard:
    def test_save_stages_temp_and_backs_up(self, manager, pii_dir, sample_resume):
        entry = manager.save_yaml_content("header:\n  name: New\n")

        assert (pii_dir / "data.temp.yml").read_text(encoding="utf-8") == "header:\n  name: New\n"
        assert (pii_dir / "data.yml").read_text(encoding="utf-8") == sample_resume
        assert entry.action == "update"
        assert entry.description == "Updated YAML content via editor"
        assert entry.original_file == "data.yml"

        backups = manager.list_backups()
        assert len(backups) == 1
        assert entry.backup_file == str(backups[0])
        assert backups[0].read_text(encoding="utf-8") == sample_resume

        state = manager.get_current_state()
        assert state.has_changes is True
        assert state.yaml_content == "header:\n  name: New\n"

    def test_save_without_backup(self, manager):
        entry = manager.save_yaml_content("a: 1\n", create_backup=False)
        assert entry.backup_file is None
        assert manager.list_backups() == []

    def test_invalid_yaml_touches_nothing(self, manager, pii_dir):
        with pytest.raises(InvalidYamlError, match="^Invalid YAML: "):
            manager.save_yaml_content("key: [unclosed")
        assert not (pii_dir / "data.temp.yml").exists()
        assert manager.list_backups() == []
        assert manager.get_recent_changelog() == []

    def test_commit_promotes_temp(self, manager, pii_dir):
        manager.save_yaml_content("a: 1\n")
        entry = manager.commit_changes()

        assert entry.action == "commit"
        assert not (pii_dir / "data.temp.yml").exists()
        assert (pii_dir / "data.yml").read_text(encoding="utf-8") == "a: 1\n"
        assert manager.get_current_state().has_changes is False

    def test_discard_keeps_main(self, manager, pii_dir, sample_resume):
        manager.save_yaml_content("a: 1\n")
        entry = manager.discard_changes()

        assert entry.action == "discard"
        assert not (pii_dir / "data.temp.yml").exists()
        assert (pii_dir / "data.yml").read_text(encoding="utf-8") == sample_resume

    def test_commit_without_changes(self, manager):
        with pytest.raises(NoPendingChangesError, match="No temporary changes to commit"):
            manager.commit_changes()

    def test_discard_without_changes(self, manager):
        with pytest.raises(NoPendingChangesError):
            manager.discard_changes()

    def test_changelog_order(self, manager):
        manager.save_yaml_content("a: 1\n", create_backup=False)
        manager.commit_changes()
        assert [e.action for e in manager.get_recent_changelog()] == ["commit", "update"]


class TestStatsAndBackups:
    def test_file_stats(self, manager, sample_resume):
        stats = manager.get_file_stats()
        assert stats.original_exists is True
        assert stats.temp_exists is False
        assert stats.original_size == len(sample_resume.encode("utf-8"))
        assert stats.temp_size is None

        manager.save_yaml_content("a: 1\n")
        data = manager.get_file_stats().to_dict()
        assert data["tempExists"] is True
        assert data["tempSize"] == 5
        assert data["tempModified"].endswith("Z")

    def test_cleanup_keeps_newest_by_name(self, manager, pii_dir):
        stamps = [
            "2026-01-01T00-00-00-000Z",
            "2026-01-02T00-00-00-000Z",
            "2026-01-03T00-00-00-000Z",
        ]
        for stamp in stamps:
            (pii_dir / f"data.backup.{stamp}.yml").write_text("a: 1\n", encoding="utf-8")
        (pii_dir / "data.backup.notes.yml").write_text("ignored\n", encoding="utf-8")

        assert [p.name for p in manager.list_backups()] == [
            f"data.backup.{stamp}.yml" for stamp in reversed(stamps)
        ]
        assert manager.cleanup_backups(keep=1) == 2
        assert [p.name for p in manager.list_backups()] == [f"data.backup.{stamps[-1]}.yml"]
        assert (pii_dir / "data.backup.notes.yml").exists()

    def test_cleanup_counts_only_removed_files(self, manager, pii_dir, monkeypatch):
        for day in ("01", "02", "03"):
            (pii_dir / f"data.backup.2026-01-{day}T00-00-00-000Z.yml").write_text("a: 1\n", encoding="utf-8")
        stuck = "data.backup.2026-01-01T00-00-00-000Z.yml"
        real_unlink = Path.unlink

        def unlink(path, *args, **kwargs):
            if path.name == stuck:
                raise PermissionError("read-only")
            return real_unlink(path, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", unlink)
        assert manager.cleanup_backups(keep=1) == 1
        assert (pii_dir / stuck).exists()
