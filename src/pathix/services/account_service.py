"""Account service — signup, sign-in, Google sign-in and profile edits.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. The same service
backs the admin CLI (set_plan), which is why errors are raised as
pathix.errors types instead of HTTPException.

Account states:
    anonymous → local       (signup with email + password)
    anonymous → google      (first Google sign-in; phone + organization required)
    google → google+profile (later Google sign-in fills in missing fields)
"""

import base64
import binascii
import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pathix.auth.google import ExternalIdentity
from pathix.auth.jwt import SessionTokens
from pathix.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from pathix.db.models import ACCOUNT_TYPES, User
from pathix.errors import (
    EmailTaken,
    InvalidCredentials,
    MissingProfileFields,
    NoLocalPassword,
    NotFound,
    PayloadTooLarge,
    Unauthorized,
    UseExternalLogin,
    ValidationError,
)
from pathix.services.quota import PLAN_SCAN_ALLOWANCE

logger = structlog.get_logger()

AVATAR_TOO_LARGE = "Avatar image is too large. Please upload a smaller image."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def decoded_size(b64: str) -> int:
    """Byte size of a base64 payload once decoded (data: URL prefix ignored)."""
    _, sep, tail = b64.partition("base64,")
    payload = tail if sep else b64
    payload = "".join(payload.split())
    try:
        return len(base64.b64decode(payload + "=" * (-len(payload) % 4)))
    except (binascii.Error, ValueError):
        # Not valid base64; estimate from length like a lenient decoder would
        return len(payload.rstrip("=")) * 3 // 4


class AccountService:
    """Business logic for user accounts."""

    def __init__(
        self,
        db: AsyncSession,
        tokens: Optional[SessionTokens] = None,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
        avatar_max_bytes: int = 1572864,
    ):
        self.db = db
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self.avatar_max_bytes = avatar_max_bytes

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalars().first()

    async def get_user(self, user_id: str | uuid.UUID) -> User:
        try:
            uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            raise NotFound("User not found")
        user = await self.db.get(User, uid)
        if not user:
            raise NotFound("User not found")
        return user

    def _issue(self, user: User) -> str:
        return self.tokens.issue(str(user.id), user.email)

    # ─── Signup / sign-in ───────────────────────────────

    async def signup(
        self,
        email: str,
        password: str,
        phone: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> User:
        """Create a local account. Raises EmailTaken if the email exists."""
        email = normalize_email(email)
        if await self.get_by_email(email):
            raise EmailTaken()

        user = User(
            email=email,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            phone=phone or None,
            organization=organization or None,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise EmailTaken()
        logger.info("auth.signup", user_id=str(user.id))
        return user

    async def signin(self, email: str, password: str) -> str:
        """Check email + password and return a session token."""
        user = await self.get_by_email(email)
        if not user:
            raise InvalidCredentials()
        if not user.password_hash:
            raise UseExternalLogin()
        if not verify_password(password, user.password_hash):
            logger.info("auth.signin_failed", user_id=str(user.id))
            raise InvalidCredentials()
        logger.info("auth.signin", user_id=str(user.id))
        return self._issue(user)

    async def google_login(
        self,
        identity: ExternalIdentity,
        phone: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> str:
        """Sign in (or sign up) with a verified Google identity."""
        user = await self.get_by_email(identity.email)
        if user is None:
            if not phone or not organization:
                raise MissingProfileFields()
            user = User(
                email=identity.email,
                google_id=identity.subject,
                phone=phone,
                organization=organization,
            )
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise EmailTaken()
            logger.info("auth.google_signup", user_id=str(user.id))
            return self._issue(user)

        # Existing account: fill in whatever is still missing
        changed = False
        if not user.phone and phone:
            user.phone = phone
            changed = True
        if not user.organization and organization:
            user.organization = organization
            changed = True
        if not user.google_id:
            user.google_id = identity.subject
            changed = True
        if changed:
            await self.db.commit()
        logger.info("auth.google_signin", user_id=str(user.id), linked=changed)
        return self._issue(user)

    # ─── Profile ────────────────────────────────────────

    def _check_avatar(self, avatar: str) -> None:
        if decoded_size(avatar) > self.avatar_max_bytes:
            raise PayloadTooLarge(AVATAR_TOO_LARGE)

    async def update_avatar(self, user_id: str, avatar: str, avatar_type: str) -> User:
        if not avatar or not avatar_type:
            raise ValidationError("Avatar and avatarType are required.")
        self._check_avatar(avatar)
        user = await self.get_user(user_id)
        user.avatar = avatar
        user.avatar_type = avatar_type
        await self.db.commit()
        return user

    async def edit_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        organization: Optional[str] = None,
        avatar: Optional[str] = None,
        avatar_type: Optional[str] = None,
    ) -> bool:
        """Apply the non-empty fields that differ. Returns True if anything changed."""
        user = await self.get_user(user_id)
        if avatar:
            self._check_avatar(avatar)

        changes = {
            "name": name,
            "phone": phone,
            "organization": organization,
            "avatar": avatar,
            "avatar_type": avatar_type,
        }
        updated = False
        for field, value in changes.items():
            if value and value != getattr(user, field):
                setattr(user, field, value)
                updated = True

        if updated:
            await self.db.commit()
            logger.info("auth.profile_updated", user_id=str(user.id))
        return updated

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        if not old_password or not new_password:
            raise ValidationError("Old and new password are required.")
        user = await self.get_user(user_id)
        if not user.password_hash:
            raise NoLocalPassword()
        if not verify_password(old_password, user.password_hash):
            raise Unauthorized("Old password is incorrect.")
        user.password_hash = hash_password(new_password, rounds=self.bcrypt_rounds)
        await self.db.commit()
        logger.info("auth.password_changed", user_id=str(user.id))

    # ─── Plans ──────────────────────────────────────────

    async def set_plan(self, email: str, plan: str) -> User:
        """Move a user to another plan and reset their scan allowance."""
        if plan not in ACCOUNT_TYPES:
            raise ValidationError(f"Unknown plan {plan!r}. Choose one of: {', '.join(ACCOUNT_TYPES)}")
        user = await self.get_by_email(email)
        if not user:
            raise NotFound("User not found")
        user.account_type = plan
        user.scan_left = PLAN_SCAN_ALLOWANCE[plan]
        await self.db.commit()
        logger.info("auth.plan_changed", user_id=str(user.id), plan=plan)
        return user
