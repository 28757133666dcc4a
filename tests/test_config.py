"""Tests for settings loading and validation."""

import pytest

from resume_builder.config import (
    ConfigIssue,
    Settings,
    Severity,
    get_pii_directory,
    get_pii_path,
    has_errors,
    load_raw_config,
    load_settings,
    resolve_log_level,
    validate_config,
)
from resume_builder.errors import ConfigurationError


class TestGetPiiDirectory:
    def test_unset_raises(self):
        with pytest.raises(ConfigurationError, match="PII_PATH environment variable is not set"):
            get_pii_directory()

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="PII directory not found"):
            get_pii_directory(tmp_path / "nope")

    def test_env_fallback(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PII_PATH", str(tmp_path))
        assert get_pii_directory() == tmp_path

    def test_explicit_path_wins_over_env(self, tmp_path, monkeypatch):
        other = tmp_path / "other"
        other.mkdir()
        monkeypatch.setenv("PII_PATH", str(tmp_path))
        assert get_pii_directory(str(other)) == other

    def test_get_pii_path_requires_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="File not found"):
            get_pii_path(pii_path=tmp_path)

    def test_get_pii_path(self, pii_dir):
        assert get_pii_path(pii_path=pii_dir) == pii_dir / "data.yml"


class TestLoadSettings:
    def test_defaults_without_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings == Settings()

    def test_local_file_merges_over_base(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text(
            "server:\n  host: 0.0.0.0\n  port: 9000\nchangelog:\n  limit: 50\n", encoding="utf-8"
        )
        (tmp_path / "config" / "config.local.yaml").write_text(
            "server:\n  port: 9100\n", encoding="utf-8"
        )

        raw = load_raw_config()
        assert raw["server"] == {"host": "0.0.0.0", "port": 9100}

        settings = load_settings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 9100
        assert settings.changelog_limit == 50

    def test_env_overrides(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yaml"
        config.write_text("pii_path: /from/config\nmulti_resume:\n  enabled: true\n", encoding="utf-8")
        monkeypatch.setenv("PII_PATH", "/from/env")
        monkeypatch.setenv("MULTI_RESUME_ENABLED", "false")
        monkeypatch.setenv("RESUME_BUILDER_LOG_LEVEL", "debug")
        monkeypatch.setenv("RESUME_BUILDER_PORT", "8123")

        settings = load_settings(str(config))
        assert settings.pii_path == "/from/env"
        assert settings.multi_resume_enabled is False
        assert settings.log_level == "DEBUG"
        assert settings.port == 8123

    def test_bad_port_env_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RESUME_BUILDER_PORT", "eighty")
        with pytest.raises(ConfigurationError, match="RESUME_BUILDER_PORT"):
            load_settings(str(tmp_path / "missing.yaml"))

    def test_non_mapping_config_raises(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_settings(str(config))


class TestValidateConfig:
    def test_valid_settings(self, pii_dir):
        issues = validate_config(Settings(pii_path=str(pii_dir)))
        assert issues == []
        assert not has_errors(issues)

    def test_missing_pii_path(self):
        issues = validate_config(Settings())
        assert has_errors(issues)
        assert issues[0].field == "pii_path"

    def test_missing_data_file_is_warning(self, tmp_path):
        issues = validate_config(Settings(pii_path=str(tmp_path)))
        assert [i.severity for i in issues] == [Severity.WARNING]
        assert not has_errors(issues)

    def test_numeric_bounds(self, pii_dir):
        issues = validate_config(Settings(pii_path=str(pii_dir), changelog_limit=0, backup_keep=-1, port=70000))
        fields = {i.field for i in issues if i.severity == Severity.ERROR}
        assert fields == {"changelog.limit", "backups.keep", "server.port"}

    def test_unknown_log_level(self, pii_dir):
        settings = Settings(pii_path=str(pii_dir), log_level="LOUD")
        issues = validate_config(settings)
        assert issues == [ConfigIssue("logging.level", issues[0].message, Severity.WARNING)]
        assert resolve_log_level(settings) == 30
