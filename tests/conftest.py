"""Global pytest fixtures for deterministic test environment."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_RESUME = """\
info:
  role: Backend Engineer
header:
  name: Jane Smith
  title:
    - Backend Engineer
workExperience:
  - position: Senior Engineer
    company: Acme
    location: Remote
    icon: acme.png
    years: 2020 - Present
    lines:
      - text: Built the billing platform
profile:
  shouldDisplayProfileImage: false
  lines:
    - jane@example.com
  links:
    - name: GitHub
      link: github.com/jane
technical:
  - category: Languages
    bubbles:
      - Python
"""


@pytest.fixture(autouse=True)
def _isolate_runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear local runtime env that can leak into tests on developer machines."""
    for key in (
        "PII_PATH",
        "MULTI_RESUME_ENABLED",
        "RESUME_BUILDER_LOG_LEVEL",
        "RESUME_BUILDER_HOST",
        "RESUME_BUILDER_PORT",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sample_resume() -> str:
    return SAMPLE_RESUME


@pytest.fixture
def pii_dir(tmp_path: Path) -> Path:
    """Data root holding a valid primary ``data.yml``."""
    (tmp_path / "data.yml").write_text(SAMPLE_RESUME, encoding="utf-8")
    return tmp_path
