"""Tests for session-token verification."""

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from app.core import security
from app.core.config import settings


class TestDecodeSessionToken:
    def test_valid_token(self, token_factory):
        claims = security.decode_session_token(token_factory("user_abc"))

        assert claims["sub"] == "user_abc"

    def test_expired_token(self, token_factory):
        assert security.decode_session_token(token_factory(expires_in=-60)) is None

    def test_token_signed_by_another_key(self, token_factory):
        token_factory()  # configures the expected key
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        forged = jwt.encode({"sub": "user_abc", "exp": 4102444800}, other, algorithm="RS256")

        assert security.decode_session_token(forged) is None

    def test_symmetric_token_rejected(self, token_factory):
        token_factory()
        forged = jwt.encode({"sub": "user_abc", "exp": 4102444800}, "shared-secret", algorithm="HS256")

        assert security.decode_session_token(forged) is None

    def test_subject_is_required(self, token_factory, signing_keys):
        token_factory()
        token = jwt.encode({"exp": 4102444800}, signing_keys.private_pem, algorithm="RS256")

        assert security.decode_session_token(token) is None

    def test_garbage(self, token_factory):
        token_factory()

        assert security.decode_session_token("not-a-jwt") is None

    def test_garbage_with_jwks_url(self, monkeypatch):
        monkeypatch.setattr(settings, "CLERK_JWT_KEY", "")
        monkeypatch.setattr(settings, "CLERK_JWKS_URL", "https://clerk.example.com/.well-known/jwks.json")

        assert security.decode_session_token("not-a-jwt") is None

    def test_no_key_configured(self, token_factory, monkeypatch):
        token = token_factory()
        monkeypatch.setattr(settings, "CLERK_JWT_KEY", "")

        assert security.decode_session_token(token) is None

    @pytest.mark.parametrize("azp, accepted", [("http://localhost:3000", True), ("https://evil.example", False)])
    def test_authorized_parties(self, token_factory, monkeypatch, azp, accepted):
        monkeypatch.setattr(settings, "CLERK_AUTHORIZED_PARTIES", ["http://localhost:3000"])

        claims = security.decode_session_token(token_factory(azp=azp))

        assert (claims is not None) is accepted
