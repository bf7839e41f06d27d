"""
DishManager Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application and mounts the
       Socket.IO broadcast channel next to it.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       `asgi_app` wraps it with socketio.ASGIApp.
Who:   uvicorn serves `dishmanager.main:asgi_app` (REST + real-time).
       Tests drive `create_app()` directly over httpx.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │              socketio.ASGIApp (asgi_app)            │
    │  /socket.io/  → SocketIOBroadcaster.server          │
    │  everything else ↓                                  │
    │  ┌───────────────────────────────────────────────┐  │
    │  │                 FastAPI App                   │  │
    │  │  Middleware: Request ID → Logging → CORS      │  │
    │  │  Routes: /api/dishes…  /api/health            │  │
    │  │  Errors: Validation→400 NotFound→404 Store→500│  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, create missing tables (DB_CREATE_TABLES)
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dishmanager import __version__
from dishmanager.config import settings
from dishmanager.database import dispose_engine, init_models
from dishmanager.exceptions import DishManagerError, StoreError
from dishmanager.middleware.logging import RequestLoggingMiddleware
from dishmanager.middleware.request_id import RequestIDMiddleware, request_id_var
from dishmanager.routes import dishes, health
from dishmanager.services.broadcast_base import BroadcastPublisher
from dishmanager.services.socketio_broadcaster import SocketIOBroadcaster

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("DishManager Backend starting up...")

    if settings.db_create_tables:
        await init_models()
        logger.info("Dish table ready")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("Socket.IO initialized (allowed origin: %s)", settings.frontend_url)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DishManager Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_envelope(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if error:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the uniform {success: false, message, error?} envelope.

    Handler hierarchy:
        DishManagerError        → its status_code (400 / 404 / 500)
        RequestValidationError  → 400 (malformed body or wrong field types)
        HTTPException 404/405   → 404 "Route not found"
        Exception (fallback)    → 500 "Internal server error"
    """

    @app.exception_handler(DishManagerError)
    async def handle_app_error(request: Request, exc: DishManagerError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] %s", rid, exc.message)
        error = exc.error if isinstance(exc, StoreError) else None
        return error_envelope(exc.status_code, exc.message, error)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
            for err in errors
        )
        logger.warning("[%s] Invalid request body: %s", request_id_var.get(""), detail)
        return error_envelope(400, "Invalid request body", detail or None)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown path and unsupported method both mean "no such route"
        if exc.status_code in (404, 405):
            return error_envelope(404, "Route not found")
        return error_envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_envelope(500, "Internal server error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(broadcaster: Optional[BroadcastPublisher] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        broadcaster: Channel that receives mutation events. Defaults to a
                     SocketIOBroadcaster restricted to FRONTEND_URL.
    """
    app = FastAPI(
        title="DishManager API",
        description="CRUD API for dishes with real-time mutation broadcasts over Socket.IO.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(dishes.router)

    app.state.broadcaster = broadcaster or SocketIOBroadcaster(
        cors_allowed_origins=settings.frontend_url,
    )
    return app


# ── Application Instances ─────────────────────────────────────────────────
app = create_app()
asgi_app = app.state.broadcaster.asgi_app(app)
