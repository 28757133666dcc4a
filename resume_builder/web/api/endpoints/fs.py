"""Plain file operations under the data root (``/api/fs``)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_pii_root
from ...errors import APIError
from ....errors import InvalidPathError
from ....storage import file_operations
from ....storage.paths import resolve_within

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fs", tags=["fs"])


class WriteFileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: Optional[Any] = None
    yaml_content: Optional[str] = Field(default=None, alias="yamlContent")
    file_path: Optional[str] = Field(default=None, alias="filePath")
    directory: Optional[str] = None
    create_diff: bool = Field(default=True, alias="createDiff")


class CopyFileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_path: str = Field(alias="sourcePath", min_length=1)
    destination_path: str = Field(alias="destinationPath", min_length=1)
    directory: Optional[str] = None
    overwrite: bool = False


class GetFilesRequest(BaseModel):
    files: List[str]
    directory: Optional[str] = None


def resolve_directory(root: Path, directory: Optional[str]) -> Path:
    """Base directory for an operation; must be the data root or inside it."""
    if not directory:
        return root
    requested = Path(directory)
    if not requested.is_absolute():
        return resolve_within(root, directory)

    resolved = requested.resolve()
    try:
        resolved.relative_to(root.resolve())
    except ValueError as exc:
        raise InvalidPathError(f"Directory is outside the data directory: {directory}") from exc
    return resolved


@router.get("")
async def list_files(directory: Optional[str] = None, root: Path = Depends(get_pii_root)) -> Dict[str, Any]:
    base = resolve_directory(root, directory)
    listing = await asyncio.to_thread(file_operations.get_all_files, base)
    return {"success": True, "directory": str(base), **listing.to_dict()}


@router.post("")
async def write_file(request: WriteFileRequest, root: Path = Depends(get_pii_root)) -> Dict[str, Any]:
    if (request.data is None and not request.yaml_content) or not request.file_path:
        raise APIError(400, "BAD_REQUEST", "Either data or yamlContent and filePath are required")

    base = resolve_directory(root, request.directory)
    logger.info("Writing %s under %s", request.file_path, base)

    if request.yaml_content:
        result = await asyncio.to_thread(
            file_operations.write_yaml_file,
            request.yaml_content,
            request.file_path,
            base,
            request.create_diff,
        )
    else:
        result = await asyncio.to_thread(
            file_operations.write_data_file,
            request.data,
            request.file_path,
            base,
            request.create_diff,
        )

    if not result.success:
        raise APIError(500, "WRITE_FAILED", result.error or "Write failed")
    return {"message": "File written successfully", **result.to_dict()}


@router.post("/copy")
async def copy_file(request: CopyFileRequest, root: Path = Depends(get_pii_root)) -> Dict[str, Any]:
    base = resolve_directory(root, request.directory)
    result = await asyncio.to_thread(
        file_operations.copy_file,
        request.source_path,
        request.destination_path,
        base,
        request.overwrite,
    )
    if not result.success:
        raise APIError(400, "COPY_FAILED", result.error or "Copy failed")
    return {"message": "File copied successfully", **result.to_dict()}


@router.post("/move")
async def move_file(request: CopyFileRequest, root: Path = Depends(get_pii_root)) -> Dict[str, Any]:
    base = resolve_directory(root, request.directory)
    result = await asyncio.to_thread(
        file_operations.move_file,
        request.source_path,
        request.destination_path,
        base,
        request.overwrite,
    )
    if not result.success:
        details = {"note": result.note} if result.note else None
        raise APIError(400, "MOVE_FAILED", result.error or "Move failed", details)
    return {"message": "File moved successfully", **result.to_dict()}


@router.delete("/delete")
async def delete_file(
    filePath: Optional[str] = None,
    directory: Optional[str] = None,
    createBackup: bool = True,
    root: Path = Depends(get_pii_root),
) -> Dict[str, Any]:
    if not filePath:
        raise APIError(400, "BAD_REQUEST", "filePath parameter is required")

    base = resolve_directory(root, directory)
    result = await asyncio.to_thread(file_operations.delete_file, filePath, base, createBackup)
    if not result.success:
        raise APIError(404, "NOT_FOUND", result.error or "File does not exist")
    return {"message": "File deleted successfully", **result.to_dict()}


@router.post("/get-files")
async def get_files(request: GetFilesRequest, root: Path = Depends(get_pii_root)) -> Dict[str, Any]:
    base = resolve_directory(root, request.directory)
    contents = await asyncio.to_thread(file_operations.read_files, request.files, base)
    return {
        "success": True,
        "directory": str(base),
        "files": contents,
        "totalFiles": len(contents),
    }
