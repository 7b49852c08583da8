"""
Session-token verification for identity-provider (Clerk) JWTs.

Tokens are RS256-signed.  The verification key is either the PEM public key
in CLERK_JWT_KEY (no network) or fetched from CLERK_JWKS_URL and cached.
"""

from __future__ import annotations

from typing import Any

import jwt
from jwt import PyJWKClient

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

ALGORITHMS = ["RS256"]

_jwks_clients: dict[str, PyJWKClient] = {}


def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    client = _jwks_clients.get(jwks_url)
    if client is None:
        client = PyJWKClient(jwks_url, cache_keys=True, cache_jwk_set=True, lifespan=300)
        _jwks_clients[jwks_url] = client
    return client


def _resolve_signing_key(token: str) -> Any:
    if settings.CLERK_JWT_KEY:
        return settings.CLERK_JWT_KEY
    if settings.CLERK_JWKS_URL:
        return _get_jwks_client(settings.CLERK_JWKS_URL).get_signing_key_from_jwt(token).key
    return None


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Verify a session token and return its claims, or None when invalid."""
    try:
        key = _resolve_signing_key(token)
    except jwt.PyJWKClientError as exc:
        logger.warning("JWKS key lookup failed", error=str(exc))
        return None
    except jwt.InvalidTokenError as exc:
        logger.info("Session token rejected", error=str(exc))
        return None
    if key is None:
        logger.error("No session token key configured (CLERK_JWT_KEY / CLERK_JWKS_URL)")
        return None

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=ALGORITHMS,
            options={"require": ["exp", "sub"], "verify_aud": False},
            leeway=5,
        )
    except jwt.InvalidTokenError as exc:
        logger.info("Session token rejected", error=str(exc))
        return None

    parties = settings.CLERK_AUTHORIZED_PARTIES
    azp = claims.get("azp")
    if parties and azp and azp not in parties:
        logger.info("Session token from unauthorized party", azp=azp)
        return None

    return claims
