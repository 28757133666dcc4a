"""API error helpers and exception handlers."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import (
    ConfigurationError,
    FileAlreadyExistsError,
    FileNotFoundInRootError,
    InvalidMetadataError,
    InvalidPathError,
    InvalidYamlError,
    NoPendingChangesError,
    ResumeBuilderError,
)

# Most specific first; the first isinstance match wins.
_DOMAIN_STATUS: Tuple[Tuple[type, int, str], ...] = (
    (InvalidYamlError, 400, "INVALID_YAML"),
    (InvalidMetadataError, 400, "INVALID_METADATA"),
    (FileNotFoundInRootError, 404, "NOT_FOUND"),
    (FileAlreadyExistsError, 409, "ALREADY_EXISTS"),
    (NoPendingChangesError, 409, "NO_PENDING_CHANGES"),
    (InvalidPathError, 422, "INVALID_PATH"),
    (ConfigurationError, 500, "CONFIGURATION_ERROR"),
)


class APIError(Exception):
    """Application-level API error with status/code mapping."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload

    @classmethod
    def from_domain(cls, exc: ResumeBuilderError) -> "APIError":
        for exc_type, status_code, code in _DOMAIN_STATUS:
            if isinstance(exc, exc_type):
                return cls(status_code, code, exc.message)
        return cls(400, "BAD_REQUEST", exc.message)


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Render contract-compliant error response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def domain_error_handler(request: Request, exc: ResumeBuilderError) -> JSONResponse:
    """Translate storage and multi-resume exceptions into API errors."""
    return await api_error_handler(request, APIError.from_domain(exc))


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to API contract shape."""
    error = APIError(
        400,
        "BAD_REQUEST",
        "Invalid request payload",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=400, content=error.to_dict())
