"""Auth API — signup, sign-in, Google sign-in, profile.

Learn: Routes for the account lifecycle:
- POST /auth/signup → create a local account
- POST /auth/google → Google ID token → session token (creates account on first use)
- POST /auth/signin → email/password → session token
- GET /auth/me → current user's profile
- POST /auth/avatar → replace avatar
- POST /auth/edit → edit profile fields
- POST /auth/change-password → verify old password, store new one

The last four sit behind the shared bearer-token dependency.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from pathix.auth.dependencies import (
    CurrentIdentity,
    get_current_identity,
    get_identity_verifier,
    get_session_tokens,
)
from pathix.auth.google import GoogleIdentityVerifier
from pathix.auth.jwt import SessionTokens
from pathix.config import Settings, get_settings
from pathix.db.engine import get_db
from pathix.schemas.auth import (
    AvatarUpdate,
    GoogleLoginRequest,
    PasswordChange,
    ProfileEdit,
    ProfileRead,
    SigninRequest,
    SignupRequest,
    TokenResponse,
)
from pathix.schemas.common import MessageResponse
from pathix.services.account_service import AccountService

router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    tokens: SessionTokens = Depends(get_session_tokens),
    settings: Settings = Depends(get_settings),
) -> AccountService:
    return AccountService(
        db,
        tokens=tokens,
        bcrypt_rounds=settings.bcrypt_rounds,
        avatar_max_bytes=settings.avatar_max_bytes,
    )


# ─── Signup / sign-in ───────────────────────────────────


@router.post("/signup", response_model=MessageResponse, status_code=201)
async def signup(body: SignupRequest, svc: AccountService = Depends(_svc)):
    """Create a new local account."""
    await svc.signup(
        email=body.email,
        password=body.password,
        phone=body.phone,
        organization=body.organization,
    )
    return MessageResponse(message="User created successfully.")


@router.post("/google", response_model=TokenResponse)
async def google_login(
    body: GoogleLoginRequest,
    svc: AccountService = Depends(_svc),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
):
    """Sign in with a Google ID token. First use creates the account."""
    # Key-set fetches are blocking HTTP calls
    identity = await run_in_threadpool(verifier.verify, body.credential)
    token = await svc.google_login(
        identity, phone=body.phone, organization=body.organization
    )
    return TokenResponse(token=token)


@router.post("/signin", response_model=TokenResponse)
async def signin(body: SigninRequest, svc: AccountService = Depends(_svc)):
    """Email + password → session token."""
    token = await svc.signin(body.email, body.password)
    return TokenResponse(token=token)


# ─── Profile (bearer token required) ────────────────────


@router.get("/me", response_model=ProfileRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    """Current user's profile (never includes the password hash)."""
    return await svc.get_user(identity.user_id)


@router.post("/avatar", response_model=MessageResponse)
async def update_avatar(
    body: AvatarUpdate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    await svc.update_avatar(identity.user_id, body.avatar, body.avatar_type)
    return MessageResponse(message="Avatar updated.")


@router.post("/edit", response_model=MessageResponse)
async def edit_profile(
    body: ProfileEdit,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    updated = await svc.edit_profile(
        identity.user_id,
        name=body.name,
        phone=body.phone,
        organization=body.organization,
        avatar=body.avatar,
        avatar_type=body.avatar_type,
    )
    return MessageResponse(message="User info updated." if updated else "No changes made.")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: AccountService = Depends(_svc),
):
    await svc.change_password(identity.user_id, body.old_password, body.new_password)
    return MessageResponse(message="Password changed successfully.")
