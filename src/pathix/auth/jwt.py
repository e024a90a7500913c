"""Session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A session
token carries the user id (sub) and email, and is valid for a fixed
7 days. There is no revocation list: a token stays valid for its whole
lifetime, even across a later password change.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt


class InvalidToken(Exception):
    """Raised when a session token fails verification."""


class SessionTokens:
    """Issues and verifies signed session tokens with one server secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_days: int = 7):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_days = expire_days

    def issue(self, user_id: str, email: str) -> str:
        """Create a signed token for the given user."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify and decode a token.

        Returns the claims dict on success.
        Raises InvalidToken on a bad signature, malformed structure or expiry.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Invalid token: {e}")
        return payload
