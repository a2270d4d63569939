"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (each token carries a jti so it can be revoked)
- FastAPI dependencies that build the per-request AuthSession
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext

from internhub.core.config import get_settings
from internhub.core.errors import AuthenticationRequired, AuthorizationDenied
from internhub.core.session import AuthSession
from internhub.models import Role
from internhub.services.entity_store import EntityStore, get_entity_store
from internhub.services.identity_service import IdentityResolver

settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor. Missing tokens give an anonymous session instead of a 403.
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def _log_session_change(session: AuthSession) -> None:
    logger.debug("Session changed: principal=%s role=%s", session.principal_id, session.role)


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: EntityStore = Depends(get_entity_store)
) -> Optional[dict]:
    """
    FastAPI dependency - Claims of a valid, unrevoked bearer token, else None.
    """
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        return None

    jti = payload.get("jti")
    if jti and store.is_token_revoked(jti):
        return None

    return payload


async def get_auth_session(
    claims: Optional[dict] = Depends(get_token_claims),
    store: EntityStore = Depends(get_entity_store)
) -> AuthSession:
    """
    FastAPI dependency - The caller's session, resolved once per request.

    Anonymous callers get an unauthenticated session; operations decide
    for themselves whether that is acceptable.
    """
    session = AuthSession(IdentityResolver(store))
    session.subscribe(_log_session_change)
    if claims:
        session.restore(claims["sub"])
    return session


async def require_session(session: AuthSession = Depends(get_auth_session)) -> AuthSession:
    """Dependency - Require any signed-in principal."""
    if not session.is_authenticated:
        raise AuthenticationRequired("Please sign in to continue.")
    return session


async def require_student(session: AuthSession = Depends(require_session)) -> AuthSession:
    """Dependency - Require a principal with a student profile."""
    if session.role != Role.student:
        raise AuthorizationDenied("Only student accounts can do this.")
    return session


async def require_recruiter(session: AuthSession = Depends(require_session)) -> AuthSession:
    """Dependency - Require a principal with a recruiter profile."""
    if session.role != Role.recruiter:
        raise AuthorizationDenied("Only recruiters can do this.")
    return session
