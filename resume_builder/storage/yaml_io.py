"""YAML parse/dump helpers used by every storage backend."""

from __future__ import annotations

from typing import Any

import yaml

from ..errors import InvalidYamlError


def validate_yaml(content: str) -> Any:
    """Parse ``content`` and return the loaded document.

    Raises:
        InvalidYamlError: if the text is not valid YAML.
    """
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise InvalidYamlError(str(exc)) from exc


def dump_yaml(data: Any) -> str:
    """Block-style YAML with key order preserved and no line wrapping."""
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
