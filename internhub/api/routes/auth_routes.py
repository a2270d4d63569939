"""
Authentication Routes

POST /auth/register - Register a student or recruiter (creates the profile)
POST /auth/login - Login and get JWT token
GET /auth/me - Current principal, role, profile and notifications
POST /auth/logout - Revoke the current token
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from internhub.core.auth import (
    hash_password, verify_password, create_access_token, get_token_claims, require_session
)
from internhub.core.errors import AuthenticationRequired, AuthorizationDenied
from internhub.core.session import AuthSession
from internhub.models import Role
from internhub.services.entity_store import EntityStore, get_entity_store
from internhub.services.identity_service import IdentityResolver
from internhub.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, SessionResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest, store: EntityStore = Depends(get_entity_store)):
    """
    Register a new account and create its profile for the chosen role.

    After registration, login to get access token.
    """
    fields = {"full_name": request.full_name, "email": request.email, "phone": request.phone}
    if request.role == Role.recruiter:
        fields.update({"company": request.company, "position": request.position})

    store.register_user(request.email, hash_password(request.password), request.role, fields)

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, store: EntityStore = Depends(get_entity_store)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = store.get_user_by_email(request.email)

    if not user or not verify_password(request.password, user["password_hash"]):
        raise AuthenticationRequired("Invalid email or password", title="Sign in failed")

    if not user["is_active"]:
        raise AuthorizationDenied("Account deactivated")

    identity = IdentityResolver(store).resolve_profile(user["user_id"])
    token = create_access_token(data={"sub": user["user_id"]})

    return TokenResponse(
        access_token=token,
        user_id=user["user_id"],
        role=identity.role if identity else None
    )


@router.get("/me", response_model=SessionResponse)
async def get_me(session: AuthSession = Depends(require_session), store: EntityStore = Depends(get_entity_store)):
    """Get the current session: principal, derived role and profile."""
    user = store.get_user(session.principal_id)
    if not user:
        raise AuthenticationRequired("Your account no longer exists. Please sign in again.")

    return SessionResponse(
        user_id=session.principal_id,
        email=user["email"],
        role=session.role,
        profile=session.profile,
        notifications=session.notifications
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    claims: dict = Depends(get_token_claims),
    session: AuthSession = Depends(require_session),
    store: EntityStore = Depends(get_entity_store)
):
    """Revoke the bearer token and clear the session."""
    if claims.get("jti"):
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        store.revoke_token(claims["jti"], expires_at)
    session.sign_out()
    return MessageResponse(message="You have been successfully logged out")
