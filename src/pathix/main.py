"""FastAPI application factory.

Learn: App factory pattern — create_app(settings) returns a configured
FastAPI instance. Everything that depends on configuration (database
engine, token signer, Google verifier, quota locks) is built here once
and parked on app.state; dependencies read it back per request.

Run with:  uvicorn pathix.main:create_app --factory   (or: pathix serve)
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request

from pathix import __version__
from pathix.api import api_router
from pathix.auth.google import GoogleIdentityVerifier
from pathix.auth.jwt import SessionTokens
from pathix.config import Settings
from pathix.db.engine import build_engine, build_session_factory
from pathix.errors import AppError
from pathix.services.quota import QuotaEnforcer

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at
    shutdown. A database we cannot reach at startup is fatal: the error
    propagates and the server process exits instead of serving 500s.
    """
    settings: Settings = app.state.settings
    logger.info(
        "pathix.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        async with app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("pathix.database_unreachable")
        raise
    logger.info("pathix.database_connected")

    yield

    logger.info("pathix.shutdown")
    await app.state.engine.dispose()


# ─── Error handlers ─────────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("pathix.app_error", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=exc.headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed input is a 400 with the first problem as the message."""
    errors = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request."
    # model_validator messages come back prefixed by pydantic
    message = message.removeprefix("Value error, ")
    return JSONResponse(
        status_code=400, content={"message": message, "errors": errors}
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures answer 500 from inside the middleware stack.

    Learn: Starlette hands handlers for bare Exception to the outermost
    ServerErrorMiddleware, so their responses skip our middleware (no
    X-Request-ID, no security headers, no access log). Handlers for any
    narrower class run inside the stack, so the common failure gets one.
    """
    logger.error("pathix.database_error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error."})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("pathix.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error."})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="Pathix API",
        description="Accounts, maps and themes for Pathix map sharing",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.session_tokens = SessionTokens(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_days=settings.token_expire_days,
    )
    app.state.identity_verifier = GoogleIdentityVerifier(
        settings.google_client_id,
        jwks_url=settings.google_jwks_url,
        issuers=settings.google_issuers,
    )
    app.state.quota = QuotaEnforcer()

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler

    from pathix.middleware.request_id import RequestIdMiddleware
    from pathix.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root():
        return "API is running"

    app.include_router(api_router)

    from pathix.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app
