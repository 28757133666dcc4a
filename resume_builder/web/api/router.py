"""Top-level API router."""

from __future__ import annotations

from fastapi import APIRouter

from .endpoints.files import router as files_router
from .endpoints.fs import router as fs_router
from .endpoints.multi_resume import router as multi_resume_router
from .endpoints.system import router as system_router
from .endpoints.yaml_data import router as yaml_data_router

api_router = APIRouter(prefix="/api")
api_router.include_router(system_router)
api_router.include_router(yaml_data_router)
api_router.include_router(files_router)
api_router.include_router(multi_resume_router)
api_router.include_router(fs_router)
