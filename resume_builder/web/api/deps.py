"""Dependency providers for the API."""

from __future__ import annotations

from pathlib import Path

from fastapi import Depends, Request

from ...config import Settings, get_pii_directory
from ...multi_resume.manager import MultiResumeManager
from ...storage.file_system_manager import FileSystemManager
from ...storage.unified_file_manager import UnifiedFileManager
from ..errors import APIError


def get_settings(request: Request) -> Settings:
    """Access settings resolved at app creation."""
    return request.app.state.settings


def get_pii_root(settings: Settings = Depends(get_settings)) -> Path:
    return get_pii_directory(settings.pii_path)


# Managers are built per request so every call reflects what is on disk.

def get_file_system_manager(settings: Settings = Depends(get_settings)) -> FileSystemManager:
    return FileSystemManager(settings.pii_path, changelog_limit=settings.changelog_limit)


def get_unified_file_manager(settings: Settings = Depends(get_settings)) -> UnifiedFileManager:
    return UnifiedFileManager(settings.pii_path, changelog_limit=settings.changelog_limit)


def get_multi_resume_manager(settings: Settings = Depends(get_settings)) -> MultiResumeManager:
    if not settings.multi_resume_enabled:
        raise APIError(404, "MULTI_RESUME_DISABLED", "Multi-resume support is disabled")
    return MultiResumeManager(settings.pii_path)
