"""Tests for partner request signing."""

import hashlib
import hmac
import json
import uuid

import pytest

from app.core.errors import MissingCredentialsError
from app.esim_access.signing import build_auth_headers, generate_signature, serialize_body


class TestGenerateSignature:
    def test_matches_hmac_sha256_over_concatenated_fields(self):
        body = '{"iccid":"8985200001"}'
        expected = hmac.new(
            b"secret",
            ("1700000000000" + "req-1" + "access" + body).encode(),
            hashlib.sha256,
        ).hexdigest()

        assert generate_signature("1700000000000", "req-1", "access", body, "secret") == expected

    def test_is_lowercase_hex(self):
        signature = generate_signature("1", "2", "3", "{}", "key")

        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_changes_when_body_changes(self):
        first = generate_signature("1", "2", "3", '{"a":1}', "key")
        second = generate_signature("1", "2", "3", '{"a":2}', "key")

        assert first != second


class TestSerializeBody:
    def test_compact_separators(self):
        assert serialize_body({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'

    def test_empty_body(self):
        assert serialize_body({}) == "{}"

    def test_unicode_is_not_escaped(self):
        assert serialize_body({"name": "Côte d’Ivoire"}) == '{"name":"Côte d’Ivoire"}'


class TestBuildAuthHeaders:
    def test_header_set(self):
        body = serialize_body({"locationCode": "JP"})

        headers = build_auth_headers(body, "access", "secret")

        assert headers["Content-Type"] == "application/json"
        assert headers["RT-AccessCode"] == "access"
        assert headers["RT-Timestamp"].isdigit()
        uuid.UUID(headers["RT-RequestID"])

    def test_signature_covers_the_exact_body(self):
        body = serialize_body({"locationCode": "JP"})

        headers = build_auth_headers(body, "access", "secret")

        expected = generate_signature(
            headers["RT-Timestamp"], headers["RT-RequestID"], "access", body, "secret"
        )
        assert headers["RT-Signature"] == expected

    def test_request_ids_are_unique(self):
        first = build_auth_headers("{}", "access", "secret")
        second = build_auth_headers("{}", "access", "secret")

        assert first["RT-RequestID"] != second["RT-RequestID"]

    @pytest.mark.parametrize(("access_code", "secret_key"), [("", "secret"), ("access", ""), ("", "")])
    def test_missing_credentials(self, access_code, secret_key):
        with pytest.raises(MissingCredentialsError) as exc_info:
            build_auth_headers(json.dumps({}), access_code, secret_key)

        assert exc_info.value.status_code == 500
        assert "ESIM_ACCESS_CODE" in exc_info.value.message
