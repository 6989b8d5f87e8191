"""FastAPI application factory.

Usage:
    uvicorn mealscan.app:create_app --factory --port 3000
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mealscan import __version__
from mealscan.api.analyze import router as analyze_router
from mealscan.api.errors import domain_error_handler, request_validation_handler
from mealscan.api.middleware import BodySizeLimitMiddleware
from mealscan.application.meal.orchestrator import MealAnalysisOrchestrator
from mealscan.domain.shared.errors import DomainError
from mealscan.infrastructure.config import Settings

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging at ``level``."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(message)s")
    logging.getLogger().setLevel(log_level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[MealAnalysisOrchestrator] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (loaded from .env / environment if None)
        orchestrator: Analysis orchestrator (built from settings if None)

    Returns:
        FastAPI app with routes, middleware and error handlers installed
    """
    if settings is None:
        load_dotenv()
        settings = Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Mealscan", version=__version__)
    app.state.settings = settings
    app.state.orchestrator = orchestrator or MealAnalysisOrchestrator(settings)

    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]

    @app.middleware("http")
    async def access_log(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.time()
        response = await call_next(request)
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return response

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(analyze_router)

    # Mounted last: "/" would shadow the API routes otherwise
    if settings.static_dir:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("static.missing_dir", static_dir=settings.static_dir)

    logger.info(
        "app.configured",
        gemini_key_present=bool(settings.gemini_api_key),
        openai_key_present=bool(settings.openai_api_key),
        hf_key_present=bool(settings.hf_api_key),
        static_dir=settings.static_dir,
    )
    return app
