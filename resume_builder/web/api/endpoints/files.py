"""Versioned file APIs over every YAML file in the data root."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_unified_file_manager
from ....storage.unified_file_manager import (
    CURRENT,
    DuplicateOptions,
    FileFilters,
    SaveOptions,
    UnifiedFileManager,
)

router = APIRouter(prefix="/files", tags=["files"])


class SaveFileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(min_length=1)
    commit: bool = False
    message: Optional[str] = None
    tags: Optional[List[str]] = None
    create_backup: bool = Field(default=True, alias="createBackup")


class CommitRequest(BaseModel):
    message: Optional[str] = None


class MetadataRequest(BaseModel):
    metadata: Dict[str, Any]


class DuplicateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    suffix: Optional[str] = None
    auto_increment: bool = Field(default=True, alias="autoIncrement")


class RestoreRequest(BaseModel):
    version: str = Field(min_length=1)


@router.get("")
async def list_files(
    type: Optional[str] = None,
    tags: Optional[str] = None,
    search: Optional[str] = None,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    filters = FileFilters(
        type=type or None,
        tags=[tag for tag in (tags or "").split(",") if tag],
        search=search or None,
    )
    files = await asyncio.to_thread(manager.list, filters)
    return {"success": True, "files": [f.to_dict() for f in files]}


# Suffixed routes first: ``{file_path:path}`` would otherwise swallow them.

@router.get("/{file_path:path}/versions")
async def get_versions(
    file_path: str,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    versions = await asyncio.to_thread(manager.get_versions, file_path)
    return {"success": True, "versions": [v.to_dict() for v in versions]}


@router.get("/{file_path:path}/diff")
async def get_diff(
    file_path: str,
    from_: str = Query(default=CURRENT, alias="from"),
    to: str = Query(default=CURRENT),
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    diff = await asyncio.to_thread(manager.get_diff, file_path, from_, to)
    return {"success": True, **diff.to_dict()}


@router.post("/{file_path:path}/metadata")
async def update_metadata(
    file_path: str,
    request: MetadataRequest,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    await asyncio.to_thread(manager.update_embedded_metadata, file_path, request.metadata)
    return {"success": True, "message": "Metadata updated successfully"}


@router.post("/{file_path:path}/duplicate")
async def duplicate_file(
    file_path: str,
    request: DuplicateRequest,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    options = DuplicateOptions(
        name=request.name or None,
        suffix=request.suffix or "_copy",
        auto_increment=request.auto_increment,
    )
    result = await asyncio.to_thread(manager.duplicate, file_path, options)
    return {"success": True, **result.to_dict()}


@router.post("/{file_path:path}/restore")
async def restore_file(
    file_path: str,
    request: RestoreRequest,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    await asyncio.to_thread(manager.restore, file_path, request.version)
    return {
        "success": True,
        "message": "File restored successfully",
        "restoredFrom": request.version,
    }


@router.put("/{file_path:path}/commit")
async def commit_file(
    file_path: str,
    request: Optional[CommitRequest] = None,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    message = request.message if request else None
    result = await asyncio.to_thread(manager.commit, file_path, message)
    return {"success": True, **result.to_dict()}


@router.delete("/{file_path:path}/discard")
async def discard_file(
    file_path: str,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    await asyncio.to_thread(manager.discard, file_path)
    return {"success": True, "message": "Changes discarded successfully"}


@router.get("/{file_path:path}")
async def read_file(
    file_path: str,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    content = await asyncio.to_thread(manager.read, file_path)
    return {"success": True, **content.to_dict()}


@router.post("/{file_path:path}")
async def save_file(
    file_path: str,
    request: SaveFileRequest,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    options = SaveOptions(
        commit=request.commit,
        message=request.message,
        tags=request.tags,
        create_backup=request.create_backup,
    )
    result = await asyncio.to_thread(manager.save, file_path, request.content, options)
    return {"success": True, **result.to_dict()}


@router.delete("/{file_path:path}")
async def delete_file(
    file_path: str,
    createBackup: bool = True,
    manager: UnifiedFileManager = Depends(get_unified_file_manager),
) -> Dict[str, Any]:
    await asyncio.to_thread(manager.delete, file_path, createBackup)
    return {"success": True, "message": "File deleted successfully"}
