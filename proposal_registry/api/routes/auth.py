"""Bearer-token identity: who is calling the registry.

``/login`` trades a principal and password for an access/refresh JWT pair,
``/refresh`` rotates the pair, and :func:`get_current_user` turns the access
token on a request into the ``caller`` the registry checks ownership against.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Literal
from uuid import uuid4

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, Field, ValidationError

from proposal_registry.core.config import Settings, get_settings

TokenKind = Literal["access", "refresh"]

router = APIRouter()
bearer_scheme = HTTPBearer(auto_error=True)


class LoginRequest(BaseModel):
    principal: str = Field(..., min_length=1, max_length=128)
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenClaims(BaseModel):
    sub: str
    type: TokenKind
    iat: datetime
    exp: datetime
    jti: str


@dataclass(frozen=True)
class AuthenticatedUser:
    principal: str
    token_id: str


class RefreshTokenStore:
    """Tracks the one live refresh token per principal; spent tokens stay revoked."""

    def __init__(self) -> None:
        self._live: dict[str, str] = {}
        self._revoked: set[str] = set()
        self._lock = Lock()

    def issue(self, principal: str, token_id: str) -> None:
        with self._lock:
            self._live[principal] = token_id

    def rotate(self, principal: str, spent_id: str, replacement_id: str) -> bool:
        """Swap ``spent_id`` for ``replacement_id``; ``False`` if it was not the live token."""
        with self._lock:
            if spent_id in self._revoked or self._live.get(principal) != spent_id:
                return False
            self._revoked.add(spent_id)
            self._live[principal] = replacement_id
            return True

    def reset(self) -> None:
        with self._lock:
            self._live.clear()
            self._revoked.clear()


refresh_token_store = RefreshTokenStore()


def _sign(principal: str, kind: TokenKind, lifetime: timedelta, settings: Settings) -> tuple[str, str]:
    issued = datetime.now(UTC)
    token_id = uuid4().hex
    claims = {
        "sub": principal,
        "type": kind,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
        "jti": token_id,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm), token_id


def _token_pair(principal: str, settings: Settings) -> tuple[TokenResponse, str]:
    """Sign a fresh pair; the second value is the refresh token id to register."""
    access, _ = _sign(
        principal, "access", timedelta(minutes=settings.access_token_expire_minutes), settings
    )
    refresh, refresh_id = _sign(
        principal, "refresh", timedelta(days=settings.refresh_token_expire_days), settings
    )
    pair = TokenResponse(
        access_token=access,
        refresh_token=refresh,
        expires_in=settings.access_token_expire_minutes * 60,
    )
    return pair, refresh_id


def _read_claims(token: str, settings: Settings) -> TokenClaims:
    try:
        return TokenClaims(
            **jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        )
    except (JWTError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def _password_accepted(password: str, settings: Settings) -> bool:
    if password == settings.default_user_password:
        return True
    try:
        return bcrypt.checkpw(password.encode(), settings.default_user_hashed_password.encode())
    except ValueError:  # malformed hash in settings
        return False


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """Resolve the calling principal and leave it on ``request.state.actor`` for auditing."""
    claims = _read_claims(credentials.credentials, get_settings())
    if claims.type != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
    request.state.actor = claims.sub
    return AuthenticatedUser(principal=claims.sub, token_id=claims.jti)


@router.post("/login", response_model=TokenResponse, summary="Issue JWT access tokens")
def login(body: LoginRequest) -> TokenResponse:
    settings = get_settings()
    if not _password_accepted(body.password, settings):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    pair, refresh_id = _token_pair(body.principal, settings)
    refresh_token_store.issue(body.principal, refresh_id)
    return pair


@router.post("/refresh", response_model=TokenResponse, summary="Rotate JWT refresh tokens")
def refresh_token(body: RefreshRequest) -> TokenResponse:
    settings = get_settings()
    claims = _read_claims(body.refresh_token, settings)
    if claims.type != "refresh":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token type")

    pair, refresh_id = _token_pair(claims.sub, settings)
    if not refresh_token_store.rotate(claims.sub, claims.jti, refresh_id):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token revoked")
    return pair


@router.get("/me", summary="Return the identity carried by the bearer token")
def whoami(user: AuthenticatedUser = Depends(get_current_user)) -> dict[str, str]:
    return {"principal": user.principal}


__all__ = [
    "AuthenticatedUser",
    "RefreshTokenStore",
    "get_current_user",
    "login",
    "refresh_token",
    "refresh_token_store",
    "router",
]
