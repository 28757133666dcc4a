"""Multi-resume endpoints: one GET/POST/DELETE each, dispatched on ``action``."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_multi_resume_manager
from ...errors import APIError
from ....errors import ResumeBuilderError
from ....multi_resume.manager import MultiResumeManager
from ....multi_resume.models import (
    CreateResumeVersionOptions,
    ResumeContext,
    ResumeListOptions,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/multi-resume", tags=["multi-resume"])

GET_ACTIONS = ("list", "get", "navigation", "data", "scan")
POST_ACTIONS = ("create", "copy", "update-content", "update-metadata")


class VersionOptionsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    position: Optional[str] = None
    company: Optional[str] = None
    based_on: Optional[str] = Field(default=None, alias="basedOn")
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    application_deadline: Optional[str] = Field(default=None, alias="applicationDeadline")
    job_url: Optional[str] = Field(default=None, alias="jobUrl")
    notes: Optional[str] = None

    def to_options(self) -> CreateResumeVersionOptions:
        return CreateResumeVersionOptions(
            position=self.position or "",
            company=self.company or None,
            based_on=self.based_on or None,
            description=self.description,
            tags=self.tags,
            application_deadline=self.application_deadline,
            job_url=self.job_url,
            notes=self.notes,
        )


class MultiResumeRequest(VersionOptionsModel):
    action: str
    date: Optional[str] = None
    content: Optional[str] = None
    updates: Optional[Dict[str, Any]] = None
    source_position: Optional[str] = Field(default=None, alias="sourcePosition")
    source_company: Optional[str] = Field(default=None, alias="sourceCompany")
    source_date: Optional[str] = Field(default=None, alias="sourceDate")
    target_options: Optional[VersionOptionsModel] = Field(default=None, alias="targetOptions")


def _bad_request(message: str) -> APIError:
    return APIError(400, "BAD_REQUEST", message)


def _not_found() -> APIError:
    return APIError(404, "NOT_FOUND", "Resume version not found")


def _auto_scan(manager: MultiResumeManager) -> None:
    """Re-sync the index after a mutation; failures are logged only."""
    try:
        manager.scan_and_update_index()
    except (OSError, ResumeBuilderError) as exc:
        logger.warning("Auto-scan failed: %s", exc)


@router.get("")
async def query_resumes(
    action: Optional[str] = None,
    position: Optional[str] = None,
    company: Optional[str] = None,
    date: Optional[str] = None,
    status: Optional[Literal["draft", "active", "submitted", "archived"]] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    sortBy: Literal["dateCreated", "lastModified", "company", "position"] = "lastModified",
    sortOrder: Literal["asc", "desc"] = "desc",
    manager: MultiResumeManager = Depends(get_multi_resume_manager),
) -> Dict[str, Any]:
    if action not in GET_ACTIONS:
        raise _bad_request(f"Invalid action. Supported actions: {', '.join(GET_ACTIONS)}")

    def _run() -> Dict[str, Any]:
        if action == "list":
            options = ResumeListOptions(
                position=position or None,
                company=company or None,
                status=status,
                limit=limit,
                sort_by=sortBy,
                sort_order=sortOrder,
            )
            return manager.list_resume_versions(options).to_dict()

        if action == "get":
            if not position:
                raise _bad_request("Position is required")
            version = manager.get_resume_version(position, company or None, date or None)
            if version is None:
                raise _not_found()
            return version.to_dict()

        if action == "navigation":
            return manager.get_navigation_data().to_dict()

        if action == "data":
            context = ResumeContext(position, company or None, date or None) if position else None
            return {"yamlContent": manager.get_yaml_data(context)}

        return {
            "message": "File system scan completed",
            "result": manager.scan_and_update_index().to_dict(),
        }

    return await asyncio.to_thread(_run)


@router.post("")
async def mutate_resumes(
    request: MultiResumeRequest,
    manager: MultiResumeManager = Depends(get_multi_resume_manager),
) -> Dict[str, Any]:
    if request.action not in POST_ACTIONS:
        raise _bad_request(f"Invalid action. Supported actions: {', '.join(POST_ACTIONS)}")

    def _run() -> Dict[str, Any]:
        if request.action == "create":
            if not request.position:
                raise _bad_request("Position is required")
            payload = manager.create_resume_version(request.to_options()).to_dict()

        elif request.action == "copy":
            target = request.target_options
            if not request.source_position or target is None or not target.position:
                raise _bad_request("Source position and target options are required")
            payload = manager.copy_resume_version(
                request.source_position,
                target.to_options(),
                request.source_company or None,
                request.source_date or None,
            ).to_dict()

        elif request.action == "update-content":
            if not request.position or not request.content:
                raise _bad_request("Position and content are required")
            manager.update_resume_content(
                request.position,
                request.content,
                request.company or None,
                request.date or None,
            )
            payload = {"success": True}

        else:
            if not request.position or request.updates is None:
                raise _bad_request("Position and updates are required")
            updated = manager.update_resume_metadata(
                request.position,
                request.updates,
                request.company or None,
                request.date or None,
            )
            if updated is None:
                raise _not_found()
            payload = updated.to_dict()

        _auto_scan(manager)
        return payload

    return await asyncio.to_thread(_run)


@router.delete("")
async def delete_resume(
    position: Optional[str] = None,
    company: Optional[str] = None,
    date: Optional[str] = None,
    manager: MultiResumeManager = Depends(get_multi_resume_manager),
) -> Dict[str, Any]:
    if not position:
        raise _bad_request("Position is required")

    def _run() -> Dict[str, Any]:
        if not manager.delete_resume_version(position, company or None, date or None):
            raise _not_found()
        _auto_scan(manager)
        return {"success": True}

    return await asyncio.to_thread(_run)
