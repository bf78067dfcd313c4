"""FastAPI application factory.

create_app() returns a configured FastAPI instance. Lifespan manages
startup/shutdown (Redis pool, database engine). Middleware, CORS,
exception handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard import __version__
from taskboard.api import api_router
from taskboard.config import settings
from taskboard.errors import TaskboardError
from taskboard.schemas.error import ErrorResponse

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "taskboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from taskboard.redis_client import close_redis, init_redis
    try:
        await init_redis()
        logger.info("taskboard.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; only rate limiting is lost without it
        logger.warning("taskboard.redis_unavailable", error=str(e))

    yield

    logger.info("taskboard.shutdown")
    await close_redis()

    from taskboard.db.engine import engine
    await engine.dispose()


# ── Exception handlers ───────────────────────────────────────
# Every failure leaves the API as {status, error, message, timestamp}.


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    body = ErrorResponse.for_status(exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.to_content(), headers=exc.headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    body = ErrorResponse.for_status(exc.status_code, message)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.to_content(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse.for_status(
        422,
        "Invalid request payload",
        details={"errors": jsonable_errors(exc)},
    )
    return JSONResponse(status_code=422, content=body.to_content())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: anything unexpected still leaves as the envelope."""
    logger.exception("taskboard.unhandled_error", path=request.url.path, method=request.method)
    body = ErrorResponse.for_status(500, "Internal error")
    return JSONResponse(status_code=500, content=body.to_content())


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw input/context (may hold passwords)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Taskboard",
        description="Multi-user task board — accounts, bearer tokens, per-owner tasks",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from taskboard.middleware.rate_limit import RateLimitMiddleware
    from taskboard.middleware.request_id import RequestIdMiddleware
    from taskboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskboardError, taskboard_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskboard.main:app)
app = create_app()
