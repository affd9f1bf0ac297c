"""Policy CRM API: FastAPI application factory."""


import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from policy_crm.core.config import settings
from policy_crm.core.exceptions import register_exception_handlers
from policy_crm.middleware.request_log import RequestLogMiddleware
from policy_crm.routers.auth import router as auth_router
from policy_crm.routers.costs import router as costs_router
from policy_crm.routers.dashboard import router as dashboard_router
from policy_crm.routers.policies import router as policies_router
from policy_crm.routers.settings import router as settings_router
from policy_crm.routers.telecallers import router as telecallers_router
from policy_crm.routers.uploads import internal_router as upload_internal_router
from policy_crm.routers.uploads import router as uploads_router
from policy_crm.routers.users import password_router
from policy_crm.routers.users import router as users_router
from policy_crm.schemas.common import HealthResponse


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    for name in ("sqlalchemy.engine", "httpcore", "httpx", "openai", "botocore", "boto3", "urllib3", "pdfminer"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- API routes (/api/*) ---
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(password_router, prefix="/api")
    app.include_router(policies_router, prefix="/api")
    # Internal Lambda callbacks must match before /upload/{upload_id}
    app.include_router(upload_internal_router, prefix="/api")
    app.include_router(uploads_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")
    app.include_router(telecallers_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(costs_router, prefix="/api")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
