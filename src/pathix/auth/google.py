"""Google ID token verification.

Learn: The frontend runs Google Sign-In and posts the resulting ID token
(a JWT signed by Google with RS256). We verify it ourselves with PyJWT:
PyJWKClient downloads and caches Google's public key set, picks the key
matching the token's `kid`, and jwt.decode checks signature, audience
(our client id), issuer and expiry. No Google SDK needed.
"""

from dataclasses import dataclass
from typing import Optional

import jwt
import structlog
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError, PyJWKClientError

from pathix.errors import (
    IdentityProviderUnavailable,
    InvalidIdentityToken,
    MissingEmail,
    UnverifiedEmail,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExternalIdentity:
    """A verified third-party identity."""

    email: str
    subject: str


class GoogleIdentityVerifier:
    """Verifies Google ID tokens for one OAuth client id."""

    def __init__(
        self,
        client_id: str,
        jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs",
        issuers: Optional[list[str]] = None,
        jwk_client: Optional[PyJWKClient] = None,
        leeway: int = 60,
    ):
        self.client_id = client_id
        self.issuers = issuers or ["accounts.google.com", "https://accounts.google.com"]
        self.leeway = leeway
        self._jwks_url = jwks_url
        self._jwk_client = jwk_client

    def _client(self) -> PyJWKClient:
        # Created lazily so building the app never touches the network
        if self._jwk_client is None:
            self._jwk_client = PyJWKClient(self._jwks_url)
        return self._jwk_client

    def verify(self, token: str) -> ExternalIdentity:
        """Verify a Google ID token and return its email and subject.

        Raises InvalidIdentityToken (UnverifiedEmail when Google has not
        verified the address), MissingEmail, or IdentityProviderUnavailable
        (key set unreachable / not configured).
        """
        if not self.client_id:
            logger.error("google.not_configured")
            raise IdentityProviderUnavailable()

        try:
            signing_key = self._client().get_signing_key_from_jwt(token).key
            payload = jwt.decode(
                token,
                signing_key,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=self.issuers,
                leeway=self.leeway,
                options={"require": ["exp", "iss", "sub"]},
            )
        except PyJWKClientConnectionError as e:
            logger.warning("google.jwks_unavailable", error=str(e))
            raise IdentityProviderUnavailable()
        except (PyJWKClientError, jwt.InvalidTokenError) as e:
            logger.info("google.token_rejected", error=str(e))
            raise InvalidIdentityToken()

        email = payload.get("email")
        if not isinstance(email, str) or not email.strip():
            raise MissingEmail()
        if payload.get("email_verified") is not True:
            logger.info("google.email_unverified", subject=str(payload["sub"]))
            raise UnverifiedEmail()

        return ExternalIdentity(email=email.strip().lower(), subject=str(payload["sub"]))
