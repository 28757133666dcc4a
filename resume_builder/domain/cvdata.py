"""Schema of a resume document (CVData) and a validator that reports problems."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_SCHEME_RE = re.compile(r"^https?://")


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Line(_Model):
    text: str
    bullet_point: Optional[bool] = Field(default=None, alias="bulletPoint")


class WorkExperience(_Model):
    position: str
    company: str
    location: str
    icon: str
    years: str
    bubbles: Optional[List[str]] = None
    lines: List[Line]


class Link(_Model):
    name: str
    icon: Optional[str] = None
    link: str

    @field_validator("link")
    @classmethod
    def _no_scheme(cls, value: str) -> str:
        if _SCHEME_RE.match(value):
            raise ValueError("URL must not include http:// or https://")
        return value


class ProjectLine(_Model):
    text: Union[str, List[str]]


class Project(_Model):
    name: str
    duration: Optional[str] = None
    bubbles: Optional[List[str]] = None
    lines: Optional[List[ProjectLine]] = None
    links: Optional[List[Link]] = None


class TechnicalCategory(_Model):
    category: str
    bubbles: List[str]


class Education(_Model):
    degree: Optional[str] = None
    school: str
    location: Optional[str] = None
    years: Optional[str] = None


class Profile(_Model):
    should_display_profile_image: bool = Field(alias="shouldDisplayProfileImage")
    lines: List[str]
    links: List[Link]


class Header(_Model):
    name: str
    resume: Optional[List[str]] = None
    title: Optional[List[str]] = None


class CareerSummaryItem(_Model):
    title: str
    text: str


class CVData(_Model):
    info: Optional[Dict[str, Any]] = None
    header: Header
    work_experience: List[WorkExperience] = Field(alias="workExperience")
    projects: Optional[List[Project]] = None
    profile: Profile
    technical: List[TechnicalCategory]
    languages: Optional[List[Any]] = None
    education: Optional[List[Education]] = None
    cover_letter: Optional[List[Optional[str]]] = Field(default=None, alias="coverLetter")
    career_summary: Optional[List[CareerSummaryItem]] = Field(default=None, alias="careerSummary")
    metadata: Optional[Dict[str, Any]] = None


def validate_cv_data(data: Any) -> List[str]:
    """Human-readable problems with ``data`` as a CVData document; empty when valid."""
    if not isinstance(data, dict):
        return ["document: must be a mapping"]
    try:
        CVData.model_validate(data)
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "document"
            problems.append(f"{location}: {error['msg']}")
        return problems
    return []
