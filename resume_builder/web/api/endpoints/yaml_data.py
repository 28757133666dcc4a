"""Primary resume (``data.yml``) editing endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_file_system_manager
from ....domain.cvdata import validate_cv_data
from ....errors import FileNotFoundInRootError
from ....storage.file_system_manager import FileSystemManager
from ....storage.yaml_io import validate_yaml
from ....timeutil import to_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/yaml-data", tags=["yaml-data"])


class SaveYamlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    yaml_content: str = Field(alias="yamlContent", min_length=1)
    create_backup: bool = Field(default=True, alias="createBackup")


class ManageRequest(BaseModel):
    action: Literal["commit", "discard"]


class ValidateYamlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    yaml_content: str = Field(alias="yamlContent")


class ValidateYamlResponse(BaseModel):
    valid: bool
    errors: List[str]


def _state_payload(manager: FileSystemManager) -> Optional[Dict[str, Any]]:
    try:
        state = manager.get_current_state()
    except FileNotFoundInRootError:
        # Discarding the only copy leaves nothing to show.
        return None
    return {
        "yamlContent": state.yaml_content,
        "hasChanges": state.has_changes,
        "lastModified": to_iso(state.last_modified),
    }


@router.get("")
async def get_yaml_data(manager: FileSystemManager = Depends(get_file_system_manager)) -> Dict[str, Any]:
    def _load() -> Dict[str, Any]:
        state = manager.get_current_state()
        payload = state.to_dict()
        del payload["changelogEntries"]
        payload["changelog"] = [e.to_dict() for e in manager.get_recent_changelog(10)]
        payload["fileStats"] = manager.get_file_stats().to_dict()
        return payload

    return await asyncio.to_thread(_load)


@router.post("")
async def save_yaml_data(
    request: SaveYamlRequest,
    manager: FileSystemManager = Depends(get_file_system_manager),
) -> Dict[str, Any]:
    def _save() -> Dict[str, Any]:
        entry = manager.save_yaml_content(request.yaml_content, request.create_backup)
        logger.info("Saved %d characters to temp file", len(request.yaml_content))
        return {
            "success": True,
            "message": "Changes saved to file system",
            "changelogEntry": entry.to_dict(),
            "newState": _state_payload(manager),
            "fileStats": manager.get_file_stats().to_dict(),
        }

    return await asyncio.to_thread(_save)


@router.post("/manage")
async def manage_changes(
    request: ManageRequest,
    manager: FileSystemManager = Depends(get_file_system_manager),
) -> Dict[str, Any]:
    def _apply() -> Dict[str, Any]:
        if request.action == "commit":
            entry = manager.commit_changes()
            message = "Changes committed to main file"
        else:
            entry = manager.discard_changes()
            message = "Changes discarded"
        return {
            "success": True,
            "action": request.action,
            "message": message,
            "changelogEntry": entry.to_dict(),
            "newState": _state_payload(manager),
            "fileStats": manager.get_file_stats().to_dict(),
        }

    return await asyncio.to_thread(_apply)


@router.post("/validate", response_model=ValidateYamlResponse)
async def validate_yaml_data(request: ValidateYamlRequest) -> ValidateYamlResponse:
    """Check YAML syntax (400 on failure) and report CVData schema problems."""
    errors = validate_cv_data(validate_yaml(request.yaml_content))
    return ValidateYamlResponse(valid=not errors, errors=errors)
