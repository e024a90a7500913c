"""Session token tests."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from pathix.auth.jwt import InvalidToken, SessionTokens


@pytest.fixture()
def tokens():
    return SessionTokens("unit-test-secret")


def test_issue_and_verify(tokens):
    token = tokens.issue("user-1", "a@x.com")
    claims = tokens.verify(token)
    assert claims["sub"] == "user-1"
    assert claims["email"] == "a@x.com"


def test_valid_for_seven_days(tokens):
    claims = tokens.verify(tokens.issue("user-1", "a@x.com"))
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_expired_token_rejected(tokens):
    past = datetime.now(timezone.utc) - timedelta(days=8)
    token = jwt.encode(
        {"sub": "user-1", "email": "a@x.com", "iat": past, "exp": past + timedelta(days=7)},
        "unit-test-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken, match="expired"):
        tokens.verify(token)


@pytest.mark.parametrize("position", [0, 10, 20, -2])
def test_tampered_signature_rejected(tokens, position):
    token = tokens.issue("user-1", "a@x.com")
    header, payload, signature = token.split(".")
    sig = list(signature)
    sig[position] = "B" if sig[position] == "A" else "A"
    tampered = ".".join([header, payload, "".join(sig)])
    with pytest.raises(InvalidToken):
        tokens.verify(tampered)


def test_tampered_payload_rejected(tokens):
    token = tokens.issue("user-1", "a@x.com")
    header, _, signature = token.split(".")
    other = SessionTokens("unit-test-secret").issue("user-2", "b@x.com").split(".")[1]
    with pytest.raises(InvalidToken):
        tokens.verify(".".join([header, other, signature]))


def test_wrong_secret_rejected(tokens):
    token = SessionTokens("another-secret").issue("user-1", "a@x.com")
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_malformed_token_rejected(tokens):
    for garbage in ("", "abc", "a.b.c", "Bearer x.y.z"):
        with pytest.raises(InvalidToken):
            tokens.verify(garbage)


def test_missing_subject_rejected(tokens):
    token = jwt.encode(
        {"email": "a@x.com", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        "unit-test-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        tokens.verify(token)
