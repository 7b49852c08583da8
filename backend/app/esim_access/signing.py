"""
Request signing for the eSIM Access API.

Every request carries five headers; the signature is the lowercase hex
HMAC-SHA256 of ``timestamp + request_id + access_code + body`` keyed with
the account's secret key.  The body must be the exact bytes sent.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from typing import Any

from app.core.errors import MissingCredentialsError


def serialize_body(body: dict[str, Any]) -> str:
    """Compact JSON with no whitespace, unicode left unescaped."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def generate_signature(
    timestamp: str,
    request_id: str,
    access_code: str,
    body: str,
    secret_key: str,
) -> str:
    sign_data = timestamp + request_id + access_code + body
    digest = hmac.new(secret_key.encode(), sign_data.encode(), hashlib.sha256)
    return digest.hexdigest().lower()


def build_auth_headers(body: str, access_code: str, secret_key: str) -> dict[str, str]:
    """Build the signed header set for one request body."""
    if not access_code or not secret_key:
        raise MissingCredentialsError()

    timestamp = str(int(time.time() * 1000))
    request_id = str(uuid.uuid4())
    signature = generate_signature(timestamp, request_id, access_code, body, secret_key)

    return {
        "Content-Type": "application/json",
        "RT-Timestamp": timestamp,
        "RT-RequestID": request_id,
        "RT-AccessCode": access_code,
        "RT-Signature": signature,
    }
