"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /auth/register  -- create an account; data = account id
  POST /auth/login     -- verify credentials; data = bearer token

Security:
  Both routes are rate-limited per client IP (LOGIN_RATE_LIMIT,
  REGISTER_RATE_LIMIT).
  Login answers unknown username and wrong password with the same 400 body;
  auth.service.login() also equalizes their timing.
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit, register_limit
from api.models import Credentials, Envelope
from api.responses import envelope_response
from auth import service
from auth.store import AccountStore
from auth.tokens import TokenIssuer

# Auth policy: both endpoints are public -- they are how a caller gets a token.
router = APIRouter()


@router.post("/auth/register", response_model=Envelope[int])
@limiter.limit(register_limit)  # below @router so the registered endpoint is the limited wrapper
def register(request: Request, body: Credentials) -> JSONResponse:
    """Create an account. 400 if the username is already taken."""
    account_store: AccountStore = request.app.state.account_store
    return envelope_response(service.register(account_store, body.username, body.password))


@router.post("/auth/login", response_model=Envelope[str])
@limiter.limit(login_limit)
def login(request: Request, body: Credentials) -> JSONResponse:
    """Exchange username and password for a bearer token.

    Returns the same generic 400 for wrong username and wrong password to
    avoid leaking username existence.
    """
    account_store: AccountStore = request.app.state.account_store
    issuer: TokenIssuer = request.app.state.token_issuer
    resp = envelope_response(service.login(account_store, issuer, body.username, body.password))
    resp.headers["Cache-Control"] = "no-store"
    return resp
