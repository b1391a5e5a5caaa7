# app/auth.py
"""Password hashing, access tokens and session validation.

A session is valid only while both hold:

* the JWT verifies (signature and `exp`), and
* the session cache still maps the token owner's email to that exact token.

Logout, password or email changes and account deletion remove the cache entry,
which revokes the token before its signed expiry. A new login overwrites the
entry, revoking any older token for the same account.
"""
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import bcrypt
import jwt
from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .cache import SessionCache, cache_key, get_session_cache
from .permissions import authorize
from .utils import logger

load_dotenv()
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    raise RuntimeError("JWT_SECRET_KEY not set")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", "7200"))

security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id, email: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=JWT_EXPIRES_SECONDS),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode `token`, returning None when it is malformed, forged or expired."""
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


@dataclass(frozen=True)
class Subject:
    id: int
    email: str
    role: str


@dataclass(frozen=True)
class SessionResult:
    valid: bool
    subject: Optional[Subject] = field(default=None)
    token: Optional[str] = field(default=None)


INVALID = SessionResult(valid=False)


def validate_session(token, cache: SessionCache) -> SessionResult:
    if not token or not isinstance(token, str):
        return INVALID
    payload = verify_token(token)
    if not payload:
        return INVALID
    email = payload.get("email")
    if not email:
        return INVALID
    if cache.get(cache_key(email)) != token:
        return INVALID
    try:
        subject = Subject(id=int(payload["sub"]), email=email, role=payload["role"])
    except (KeyError, TypeError, ValueError):
        return INVALID
    return SessionResult(valid=True, subject=subject, token=token)


def establish_session(token: str, email: str, cache: SessionCache) -> bool:
    stored = cache.set(cache_key(email), token)
    if not stored:
        logger.error("Failed to cache session token for %s", email)
    return stored


def revoke_session(email: str, cache: SessionCache) -> int:
    removed = cache.delete(cache_key(email))
    if removed:
        logger.info("Revoked session for %s", email)
    return removed


# FastAPI dependencies

def presented_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    x_token: Annotated[str | None, Header()] = None,
) -> str | None:
    """Bearer token from the Authorization header, falling back to X-Token."""
    if credentials:
        return credentials.credentials
    return x_token


def get_session(
    token: Annotated[str | None, Depends(presented_token)],
    cache: Annotated[SessionCache, Depends(get_session_cache)],
) -> SessionResult:
    return validate_session(token, cache)


def require_session(
    token: Annotated[str | None, Depends(presented_token)],
    session: Annotated[SessionResult, Depends(get_session)],
) -> SessionResult:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized, no access token provided, proceed to '/login' route",
        )
    if not session.valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token, or expired session",
        )
    return session


def require_capability(capability: str):
    def dependency(session: Annotated[SessionResult, Depends(require_session)]) -> SessionResult:
        if not authorize(session.subject.role, capability):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden, access denied.")
        return session
    return dependency
