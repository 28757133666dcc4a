"""Multiple resume versions keyed by position, company and date."""

from .index_manager import ResumeIndexManager
from .manager import MultiResumeManager
from .metadata_manager import ResumeMetadataManager
from .models import (
    CompanyVersion,
    CreateResumeVersionOptions,
    NavigationData,
    PositionGroup,
    ResumeContext,
    ResumeIndex,
    ResumeListOptions,
    ResumeMetadata,
    ResumeNavigationResult,
    ResumeVersion,
    ScanResult,
)

__all__ = [
    "CompanyVersion",
    "CreateResumeVersionOptions",
    "MultiResumeManager",
    "NavigationData",
    "PositionGroup",
    "ResumeContext",
    "ResumeIndex",
    "ResumeIndexManager",
    "ResumeListOptions",
    "ResumeMetadata",
    "ResumeMetadataManager",
    "ResumeNavigationResult",
    "ResumeVersion",
    "ScanResult",
]
