"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user identity from the request. This is the
one place the bearer-token check lives; routers compose it instead of
re-declaring their own middleware.

- get_current_identity: hard gate, 401 without a valid token
- get_optional_identity: soft gate, None without a header (anonymous export)
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from starlette.requests import HTTPConnection

from pathix.auth.google import GoogleIdentityVerifier
from pathix.auth.jwt import InvalidToken, SessionTokens
from pathix.errors import Unauthorized

_BEARER = {"WWW-Authenticate": "Bearer"}


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request (decoded token claims)."""

    user_id: str
    email: str


def get_session_tokens(conn: HTTPConnection) -> SessionTokens:
    return conn.app.state.session_tokens


def get_identity_verifier(conn: HTTPConnection) -> GoogleIdentityVerifier:
    return conn.app.state.identity_verifier


def _authenticate(token: str, tokens: SessionTokens) -> CurrentIdentity:
    try:
        claims = tokens.verify(token)
    except InvalidToken:
        raise Unauthorized("Invalid token", headers=_BEARER)
    return CurrentIdentity(user_id=str(claims["sub"]), email=claims.get("email", ""))


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_optional_identity(
    authorization: Optional[str] = Header(None),
    tokens: SessionTokens = Depends(get_session_tokens),
) -> Optional[CurrentIdentity]:
    """Soft auth — None when no token is sent, 401 when a bad one is."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return _authenticate(token, tokens)


async def get_current_identity(
    authorization: Optional[str] = Header(None),
    tokens: SessionTokens = Depends(get_session_tokens),
) -> CurrentIdentity:
    """Hard auth — requires `Authorization: Bearer <token>`."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthorized("No token", headers=_BEARER)
    return _authenticate(token, tokens)
