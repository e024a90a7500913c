"""Error taxonomy shared by services and routes.

Learn: Services raise these instead of HTTPException so the business
logic stays HTTP-agnostic (the CLI calls the same services). Each class
carries its HTTP status; one exception handler in main.py turns any
AppError into a JSON body of the form {"message": "..."}.
"""

from typing import Optional


class AppError(Exception):
    """Base class. Unexpected failures surface as a plain 500."""

    status_code: int = 500
    default_message: str = "Server error."

    def __init__(
        self,
        message: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


Internal = AppError


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request."


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized."


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden."


class NotFound(AppError):
    status_code = 404
    default_message = "Not found."


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict."


class PayloadTooLarge(AppError):
    status_code = 413
    default_message = "Payload too large."


# ─── Accounts ────────────────────────────────────────────


class EmailTaken(Conflict):
    default_message = "Email already registered."


class InvalidCredentials(Unauthorized):
    default_message = "Invalid credentials."


class UseExternalLogin(ValidationError):
    default_message = "You signed up with Google. Please use Google Sign-In."


class NoLocalPassword(ValidationError):
    default_message = "Password change not available for Google accounts."


class MissingProfileFields(ValidationError):
    default_message = "Phone and organization are required for Google sign up."


# ─── External identity ───────────────────────────────────


class InvalidIdentityToken(ValidationError):
    default_message = "Invalid Google credential."


class MissingEmail(ValidationError):
    default_message = "Google account has no email."


class UnverifiedEmail(InvalidIdentityToken):
    default_message = "Google email is not verified."


class IdentityProviderUnavailable(AppError):
    default_message = "Google authentication failed."


# ─── Quotas ──────────────────────────────────────────────


class QuotaExceeded(Forbidden):
    default_message = "Starter plan allows only 1 map. Upgrade to pro plan"
