"""
api/main.py -- FastAPI application entry point for Character Vault.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the process-wide collaborators once and stores them on
app.state:
  settings        -- core.config.Settings (read-only)
  token_issuer    -- auth.tokens.TokenIssuer built from settings (read-only)
  account_store   -- auth.store.AccountStore
  character_store -- characters.store.CharacterStore
Shutdown disposes both stores.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import HealthResponse
from api.responses import error_envelope
from api.routes.auth import router as auth_router
from api.routes.character import router as character_router
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from characters.store import CharacterStore
from core.config import get_settings

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("charvault.api")


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the read-only config objects and the stores; dispose stores on shutdown.

    The TokenIssuer is constructed here, once, from the Settings object and
    handed to request handlers through app.state. No module reads the signing
    secret on its own.
    """
    settings = get_settings()
    app.state.settings = settings
    app.state.token_issuer = TokenIssuer.from_settings(settings)
    logger.info(
        "Token issuer ready (algorithm=%s, ttl=%ds)",
        app.state.token_issuer.algorithm,
        app.state.token_issuer.ttl_seconds,
    )
    app.state.account_store = AccountStore(settings.database_url)
    app.state.character_store = CharacterStore(settings.database_url)
    logger.info("Stores initialized")

    yield

    app.state.account_store.close()
    app.state.character_store.close()
    logger.info("Character Vault API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Character Vault API",
    description="Accounts, bearer tokens, and owner-scoped RPG characters.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(character_router, tags=["Character"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {data, success, message} envelope as the
# routes, so clients parse one shape regardless of status.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header when a rate limit is exceeded.

    Retry-After is the length of the exceeded window (60 for "10/minute").
    """
    retry_after = exc.limit.limit.get_expiry()
    logger.info("Rate limit %s exceeded on %s", exc.detail, request.url.path)
    return error_envelope(429, "Too many requests.", headers={"Retry-After": str(retry_after)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body or path parameters fail validation.

    Only field locations and messages are echoed back; submitted values (which
    may include a password) are not.
    """
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in exc.errors()
    )
    return error_envelope(422, f"Request validation failed. {problems}".strip())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap FastAPI/Starlette HTTP exceptions (401 from auth, 404 for unknown routes) in the envelope."""
    return error_envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged only, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_envelope(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=API_VERSION)
