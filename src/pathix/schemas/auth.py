"""Pydantic schemas for accounts and session tokens.

Learn: Request bodies declare every field as optional and check presence
in a model validator, so a missing field produces the same message the
frontend already shows (e.g. "Email and password are required.") rather
than a generic "Field required". Lengths match the users table columns
so an oversized value is a 400, not a database error.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from pathix.schemas.common import CamelModel

EMAIL_MAX = 255
NAME_MAX = 100
PHONE_MAX = 50
ORGANIZATION_MAX = 200
AVATAR_TYPE_MAX = 100


class SignupRequest(CamelModel):
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    password: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    organization: Optional[str] = Field(None, max_length=ORGANIZATION_MAX)

    @model_validator(mode="after")
    def require_credentials(self):
        if not self.email or not self.email.strip() or not self.password:
            raise ValueError("Email and password are required.")
        return self


class SigninRequest(CamelModel):
    email: Optional[str] = Field(None, max_length=EMAIL_MAX)
    password: Optional[str] = None

    @model_validator(mode="after")
    def require_credentials(self):
        if not self.email or not self.email.strip() or not self.password:
            raise ValueError("Email and password are required.")
        return self


class GoogleLoginRequest(CamelModel):
    credential: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    organization: Optional[str] = Field(None, max_length=ORGANIZATION_MAX)

    @model_validator(mode="after")
    def require_credential(self):
        if not self.credential:
            raise ValueError("Missing Google credential.")
        return self


class TokenResponse(BaseModel):
    token: str


class ProfileRead(CamelModel):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    organization: Optional[str] = None
    account_type: str
    scan_left: int
    avatar_type: Optional[str] = None
    avatar: Optional[str] = None


class AvatarUpdate(CamelModel):
    avatar: Optional[str] = None
    avatar_type: Optional[str] = Field(None, max_length=AVATAR_TYPE_MAX)


class ProfileEdit(CamelModel):
    name: Optional[str] = Field(None, max_length=NAME_MAX)
    phone: Optional[str] = Field(None, max_length=PHONE_MAX)
    organization: Optional[str] = Field(None, max_length=ORGANIZATION_MAX)
    avatar: Optional[str] = None
    avatar_type: Optional[str] = Field(None, max_length=AVATAR_TYPE_MAX)


class PasswordChange(CamelModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None
