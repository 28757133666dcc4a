"""Settings loading, data-root resolution and startup validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/config.yaml"
LOCAL_CONFIG_PATH = "config/config.local.yaml"
PRIMARY_DATA_FILE = "data.yml"

DEFAULT_CHANGELOG_LIMIT = 100
DEFAULT_BACKUP_KEEP = 10

_TRUE_VALUES = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

PathLike = Union[str, Path]


@dataclass
class Settings:
    """Runtime settings for the CLI and HTTP server."""

    pii_path: Optional[str] = None
    multi_resume_enabled: bool = True
    changelog_limit: int = DEFAULT_CHANGELOG_LIMIT
    backup_keep: int = DEFAULT_BACKUP_KEEP
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "WARNING"


def load_raw_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load raw configuration from YAML.

    With no explicit path, ``config/config.yaml`` is loaded and
    ``config/config.local.yaml`` is merged over it. Missing files count as empty.
    """
    if config_path:
        return _load_yaml(Path(config_path))

    base = _load_yaml(Path(DEFAULT_CONFIG_PATH))
    local = _load_yaml(Path(LOCAL_CONFIG_PATH))
    return _deep_merge(base, local)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings from config files, then environment overrides."""
    raw = load_raw_config(config_path)

    settings = Settings(
        pii_path=raw.get("pii_path") or None,
        multi_resume_enabled=bool(raw.get("multi_resume", {}).get("enabled", True)),
        changelog_limit=raw.get("changelog", {}).get("limit", DEFAULT_CHANGELOG_LIMIT),
        backup_keep=raw.get("backups", {}).get("keep", DEFAULT_BACKUP_KEEP),
        host=raw.get("server", {}).get("host", "127.0.0.1"),
        port=raw.get("server", {}).get("port", 8000),
        log_level=str(raw.get("logging", {}).get("level", "WARNING")).upper(),
    )

    env = os.environ
    if env.get("PII_PATH"):
        settings.pii_path = env["PII_PATH"]
    if "MULTI_RESUME_ENABLED" in env:
        settings.multi_resume_enabled = env["MULTI_RESUME_ENABLED"].strip().lower() in _TRUE_VALUES
    if env.get("RESUME_BUILDER_LOG_LEVEL"):
        settings.log_level = env["RESUME_BUILDER_LOG_LEVEL"].strip().upper()
    if env.get("RESUME_BUILDER_HOST"):
        settings.host = env["RESUME_BUILDER_HOST"]
    if env.get("RESUME_BUILDER_PORT"):
        try:
            settings.port = int(env["RESUME_BUILDER_PORT"])
        except ValueError as exc:
            raise ConfigurationError(
                f"RESUME_BUILDER_PORT must be an integer, got {env['RESUME_BUILDER_PORT']!r}"
            ) from exc

    return settings


def get_pii_directory(pii_path: Optional[PathLike] = None) -> Path:
    """Return the data root, falling back to the ``PII_PATH`` environment variable.

    Raises:
        ConfigurationError: if no root is configured or the directory is missing.
    """
    value = pii_path or os.environ.get("PII_PATH")
    if not value:
        raise ConfigurationError(
            "PII_PATH environment variable is not set. "
            "Please set it to the directory containing your PII files."
        )

    root = Path(value)
    if not root.is_dir():
        raise ConfigurationError(
            f"PII directory not found: {root}. Please ensure the directory exists."
        )
    return root


def get_pii_path(filename: str = PRIMARY_DATA_FILE, pii_path: Optional[PathLike] = None) -> Path:
    """Return ``<data root>/<filename>``, which must exist."""
    full_path = get_pii_directory(pii_path) / filename
    if not full_path.exists():
        raise ConfigurationError(
            f"File not found: {full_path}. Please ensure the file exists in your PII directory."
        )
    return full_path


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ConfigIssue:
    """A single configuration issue."""
    field: str
    message: str
    severity: Severity


def validate_config(settings: Settings) -> List[ConfigIssue]:
    """Validate settings and return a list of issues (empty = valid)."""
    issues: List[ConfigIssue] = []

    # --- Data root ---
    if not settings.pii_path:
        issues.append(ConfigIssue(
            field="pii_path",
            message="PII_PATH not set. Export PII_PATH or add pii_path to config/config.local.yaml",
            severity=Severity.ERROR,
        ))
    else:
        root = Path(settings.pii_path)
        if not root.is_dir():
            issues.append(ConfigIssue(
                field="pii_path",
                message=f"PII directory does not exist: {settings.pii_path}",
                severity=Severity.ERROR,
            ))
        elif not (root / PRIMARY_DATA_FILE).exists():
            issues.append(ConfigIssue(
                field="pii_path",
                message=f"{PRIMARY_DATA_FILE} not found in PII directory: {settings.pii_path}",
                severity=Severity.WARNING,
            ))

    # --- Changelog ---
    if not isinstance(settings.changelog_limit, int) or settings.changelog_limit <= 0:
        issues.append(ConfigIssue(
            field="changelog.limit",
            message=f"changelog.limit must be a positive integer, got {settings.changelog_limit!r}",
            severity=Severity.ERROR,
        ))

    # --- Backups ---
    if not isinstance(settings.backup_keep, int) or settings.backup_keep < 0:
        issues.append(ConfigIssue(
            field="backups.keep",
            message=f"backups.keep must be a non-negative integer, got {settings.backup_keep!r}",
            severity=Severity.ERROR,
        ))

    # --- Server ---
    if not isinstance(settings.port, int) or not 0 < settings.port < 65536:
        issues.append(ConfigIssue(
            field="server.port",
            message=f"server.port must be between 1 and 65535, got {settings.port!r}",
            severity=Severity.ERROR,
        ))

    if settings.log_level not in _LOG_LEVELS:
        issues.append(ConfigIssue(
            field="logging.level",
            message=f"Unknown log level {settings.log_level!r}; falling back to WARNING",
            severity=Severity.WARNING,
        ))

    return issues


def has_errors(issues: List[ConfigIssue]) -> bool:
    return any(issue.severity == Severity.ERROR for issue in issues)


def resolve_log_level(settings: Settings) -> int:
    if settings.log_level in _LOG_LEVELS:
        return getattr(logging, settings.log_level)
    return logging.WARNING


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file is not valid YAML: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must be a mapping: {path}")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(base_value, value)
        else:
            merged[key] = value
    return merged
