"""projectdesk FastAPI application."""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projectdesk import __version__
from projectdesk.config import get_settings
from projectdesk.database import close_db, init_db
from projectdesk.exceptions import (
    NotAuthenticatedError,
    ProjectDeskError,
    problem_detail,
)
from projectdesk.logging_config import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from projectdesk.routes.admin import router as admin_router
from projectdesk.routes.projects import router as projects_router
from projectdesk.routes.submissions import router as submissions_router
from projectdesk.routes.user import router as user_router
from projectdesk.schemas import HealthResponse

logger = get_logger(__name__)

APP_TITLE = "projectdesk"
APP_DESCRIPTION = "Challenge catalog, applications, submissions and admin review"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and the database."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service_name=settings.service_name,
    )

    logger.info("starting_database_init")
    await init_db(create_tables=settings.auto_create_schema)

    logger.info("application_started", version=__version__)
    yield

    logger.info("shutting_down")
    await close_db()
    logger.info("shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_request_context(request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context("request_id", "principal_id", "method", "path")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(ProjectDeskError)
    async def projectdesk_error_handler(request: Request, exc: ProjectDeskError):
        logger.warning(
            "request_rejected",
            error_type=exc.error_type,
            status=exc.status_code,
            detail=exc.message,
        )
        headers = None
        if isinstance(exc, NotAuthenticatedError):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content=problem_detail(exc),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": "An unexpected error occurred",
            },
        )

    app.include_router(projects_router)
    app.include_router(user_router)
    app.include_router(submissions_router)
    app.include_router(admin_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        return HealthResponse(status="healthy", service=settings.service_name)

    return app


app = create_app()
