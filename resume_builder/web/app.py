"""FastAPI app entrypoint for the Resume Builder APIs."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .. import __version__
from ..config import Settings, Severity, load_settings, validate_config
from ..errors import ResumeBuilderError
from .api.router import api_router
from .errors import APIError, api_error_handler, domain_error_handler, validation_error_handler

logger = logging.getLogger("resume_builder.web.api")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create configured FastAPI app."""
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        for issue in validate_config(settings):
            log = logger.error if issue.severity == Severity.ERROR else logger.warning
            log("config %s: %s", issue.field, issue.message)
        yield

    app = FastAPI(title="Resume Builder API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api_router)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        start = perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.info(
                "api_request method=%s path=%s status=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                500,
                (perf_counter() - start) * 1000,
            )
            raise

        logger.info(
            "api_request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            (perf_counter() - start) * 1000,
        )
        return response

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict:
        return {"status": "ok"}

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(ResumeBuilderError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app


app = create_app()


def main() -> None:
    """Run development API server."""
    import uvicorn
    from dotenv import load_dotenv

    from ..config import resolve_log_level
    from ..observability import configure_logging

    load_dotenv()
    settings = load_settings()
    configure_logging(resolve_log_level(settings))
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
