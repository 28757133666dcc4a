"""Guardrails for packaging configuration."""

from __future__ import annotations

from pathlib import Path

import tomllib

REPO_ROOT = Path(__file__).resolve().parents[1]
PYPROJECT_PATH = REPO_ROOT / "pyproject.toml"


def _load_pyproject() -> dict:
    return tomllib.loads(PYPROJECT_PATH.read_text(encoding="utf-8"))


def test_wheel_includes_package() -> None:
    pyproject = _load_pyproject()
    wheel_cfg = pyproject.get("tool", {}).get("hatch", {}).get("build", {}).get("targets", {}).get("wheel", {})
    assert wheel_cfg.get("packages") == ["resume_builder"]


def test_cli_entrypoint_remains_stable() -> None:
    pyproject = _load_pyproject()
    scripts = pyproject.get("project", {}).get("scripts", {})
    assert scripts.get("resume-builder") == "resume_builder.cli:main"


def test_runtime_dependencies_declared() -> None:
    deps = " ".join(_load_pyproject()["project"]["dependencies"]).lower()
    for name in ("fastapi", "uvicorn", "pydantic", "pyyaml", "python-dotenv", "rich"):
        assert name in deps
