"""
Postboard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn postboard.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌────────────┐ ┌──────┐ ┌──────┐      │
    │  │  Req ID  │→│ Access Log │→│ GZip │→│ CORS │      │
    │  └──────────┘ └────────────┘ └──────┘ └──────┘      │
    │                                                     │
    │  Routes:                                            │
    │  /api/auth  /api/users  /api/posts  /health         │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ →500    │
    └─────────────────────────────────────────────────────┘

Error Body Contract:
    400 validation / credentials:  {"errors": [{"msg": ..., ...}]}
    every other error:             {"msg": ...}
    unexpected failures:           {"msg": "Server Error"} (details only logged)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from postboard import __version__
from postboard.config import settings
from postboard.database import dispose_engine, init_models
from postboard.exceptions import DatabaseError, PostboardError, ValidationError
from postboard.middleware.logging import RequestLoggingMiddleware
from postboard.middleware.request_id import RequestIDMiddleware, request_id_var
from postboard.routes import auth, health, posts, users

logger = logging.getLogger(__name__)

SERVER_ERROR_BODY = {"msg": "Server Error"}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] postboard.services.post_service: ...
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, config validation, table creation.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("Postboard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: a development setup is allowed to run on defaults
        logger.warning("%s", str(e))

    if settings.db_create_tables:
        await init_models()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Postboard Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _validation_entries(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """
    Flatten FastAPI/Pydantic errors into {"msg", "param", "location"} entries.

    Messages raised by our own field validators (ValueError) are passed
    through verbatim; Pydantic's "Value error, " prefix is dropped.
    """
    entries = []
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if isinstance(part, str)]
        location = loc[0] if loc else None
        param = loc[-1] if len(loc) > 1 else None

        ctx_error = (err.get("ctx") or {}).get("error")
        if err.get("type") == "value_error" and ctx_error is not None:
            msg = str(ctx_error)
        elif err.get("type") == "missing" and param:
            msg = f"{param.capitalize()} is required"
        else:
            msg = err.get("msg", "Invalid value")

        entries.append({"msg": msg, "param": param, "location": location})
    return entries


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and bodies.

    Handler hierarchy (most specific wins):
        RequestValidationError  → 400 {"errors": [...]}
        ValidationError family  → 400 {"errors": [...]}
        StarletteHTTPException  → exc.status_code, {"msg": exc.detail}
        DatabaseError           → 500 {"msg": "Server Error"}
        PostboardError (base)   → exc.status_code, {"msg": ...}
        Exception (fallback)    → 500 {"msg": "Server Error"}
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError(errors=_validation_entries(exc))
        logger.warning("[%s] Validation error on %s: %s",
                       request_id_var.get(""), request.url.path,
                       [entry["msg"] for entry in error.errors])
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Routing misses, 405s and unparseable bodies raised by the framework
        logger.info("[%s] HTTP %d on %s %s: %s", request_id_var.get(""), exc.status_code,
                    request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"msg": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        # Context is logged server-side only
        logger.error("[%s] Database error: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=SERVER_ERROR_BODY)

    @app.exception_handler(PostboardError)
    async def handle_app_error(request: Request, exc: PostboardError):
        logger.info("[%s] %s (%d): %s", request_id_var.get(""), type(exc).__name__,
                    exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc),
                     exc_info=True)
        return JSONResponse(status_code=500, content=SERVER_ERROR_BODY)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Postboard API",
        description="Token-authenticated posts, likes and comments.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(health.router)

    return app


app = create_app()
