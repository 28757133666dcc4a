"""Configuration introspection endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..deps import get_settings
from ....config import Settings

router = APIRouter(prefix="/config", tags=["system"])


class PiiPathResponse(BaseModel):
    piiPath: Optional[str]
    exists: bool
    multiResumeEnabled: bool


@router.get("/pii-path", response_model=PiiPathResponse)
async def get_pii_path(settings: Settings = Depends(get_settings)) -> PiiPathResponse:
    return PiiPathResponse(
        piiPath=settings.pii_path,
        exists=bool(settings.pii_path) and Path(settings.pii_path).is_dir(),
        multiResumeEnabled=settings.multi_resume_enabled,
    )
