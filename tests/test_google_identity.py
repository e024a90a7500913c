"""Google ID token verification tests.

Learn: We sign tokens with a locally generated RSA key and hand the
verifier a key source that returns its public half, standing in for
Google's JWKS endpoint. Everything else is the real PyJWT verification.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientConnectionError

from pathix.auth.google import GoogleIdentityVerifier
from pathix.errors import (
    IdentityProviderUnavailable,
    InvalidIdentityToken,
    MissingEmail,
    UnverifiedEmail,
)

CLIENT_ID = "test-client.apps.googleusercontent.com"


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


class StaticKeySource:
    def __init__(self, public_key):
        self.public_key = public_key

    def get_signing_key_from_jwt(self, token):
        return SimpleNamespace(key=self.public_key)


class UnreachableKeySource:
    def get_signing_key_from_jwt(self, token):
        raise PyJWKClientConnectionError("connection refused")


def _google_token(key, **overrides):
    now = datetime.now(timezone.utc)
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "1234567890",
        "email": "Hiker@Example.com",
        "email_verified": True,
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, key, algorithm="RS256", headers={"kid": "test-kid"})


@pytest.fixture()
def verifier(rsa_key):
    return GoogleIdentityVerifier(CLIENT_ID, jwk_client=StaticKeySource(rsa_key.public_key()))


def test_valid_token(verifier, rsa_key):
    identity = verifier.verify(_google_token(rsa_key))
    assert identity.email == "hiker@example.com"
    assert identity.subject == "1234567890"


def test_wrong_audience(verifier, rsa_key):
    with pytest.raises(InvalidIdentityToken):
        verifier.verify(_google_token(rsa_key, aud="someone-else"))


def test_wrong_issuer(verifier, rsa_key):
    with pytest.raises(InvalidIdentityToken):
        verifier.verify(_google_token(rsa_key, iss="https://evil.example"))


def test_expired(verifier, rsa_key):
    past = datetime.now(timezone.utc) - timedelta(hours=3)
    with pytest.raises(InvalidIdentityToken):
        verifier.verify(_google_token(rsa_key, iat=past, exp=past + timedelta(hours=1)))


def test_signed_by_other_key(verifier):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(InvalidIdentityToken):
        verifier.verify(_google_token(other))


def test_garbage_token(verifier):
    with pytest.raises(InvalidIdentityToken):
        verifier.verify("not-a-jwt")


def test_missing_email(verifier, rsa_key):
    token = _google_token(rsa_key, email=None)
    with pytest.raises(MissingEmail):
        verifier.verify(token)


@pytest.mark.parametrize("email_verified", [False, None, "true"])
def test_unverified_email_is_rejected(verifier, rsa_key, email_verified):
    """An address Google has not verified cannot be used to link accounts."""
    token = _google_token(
        rsa_key, email="victim@example.com", email_verified=email_verified
    )
    with pytest.raises(UnverifiedEmail) as exc:
        verifier.verify(token)
    assert isinstance(exc.value, InvalidIdentityToken)
    assert exc.value.status_code == 400


def test_key_set_unreachable(rsa_key):
    verifier = GoogleIdentityVerifier(CLIENT_ID, jwk_client=UnreachableKeySource())
    with pytest.raises(IdentityProviderUnavailable):
        verifier.verify(_google_token(rsa_key))


def test_not_configured(rsa_key):
    verifier = GoogleIdentityVerifier("", jwk_client=StaticKeySource(rsa_key.public_key()))
    with pytest.raises(IdentityProviderUnavailable):
        verifier.verify(_google_token(rsa_key))
