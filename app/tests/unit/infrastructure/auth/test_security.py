"""Unit tests for infrastructure.auth.security module.

Tests cover:
- Scope extraction
- Admin token verification
- Bearer credential handling
"""

import asyncio
import time
from unittest.mock import Mock

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from infrastructure.auth.security import (
    decode_admin_token,
    get_relay_token,
    token_scopes,
    validate_admin_token,
)

pytestmark = pytest.mark.unit

SECRET = "test-admin-secret-with-enough-length"
SCOPE = "geolocate:admin"


def _token(secret=SECRET, **claims):
    payload = {"sub": "ops@example.com", "exp": int(time.time()) + 300}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


class TestTokenScopes:
    """Test suite for token_scopes."""

    def test_space_delimited_string(self):
        assert token_scopes({"scope": "read geolocate:admin"}) == {
            "read",
            "geolocate:admin",
        }

    def test_list(self):
        assert token_scopes({"scope": ["geolocate:admin"]}) == {"geolocate:admin"}

    def test_missing(self):
        assert token_scopes({}) == set()


class TestDecodeAdminToken:
    """Test suite for decode_admin_token."""

    def test_valid_token(self):
        payload = decode_admin_token(
            _token(scope=SCOPE), SECRET, ["HS256"], SCOPE
        )

        assert payload["sub"] == "ops@example.com"

    def test_missing_secret_disables_admin(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(_token(scope=SCOPE), None, ["HS256"], SCOPE)

        assert exc_info.value.status_code == 503

    def test_wrong_signature(self):
        token = _token(secret="another-secret-with-enough-length", scope=SCOPE)

        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(token, SECRET, ["HS256"], SCOPE)

        assert exc_info.value.status_code == 401

    def test_expired_token(self):
        token = _token(scope=SCOPE, exp=int(time.time()) - 10)

        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(token, SECRET, ["HS256"], SCOPE)

        assert exc_info.value.status_code == 401

    def test_missing_scope(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_admin_token(_token(scope="read"), SECRET, ["HS256"], SCOPE)

        assert exc_info.value.status_code == 403


class TestValidateAdminToken:
    """Test suite for the validate_admin_token dependency."""

    def _settings(self):
        settings = Mock()
        settings.server.ADMIN_JWT_SECRET = SECRET
        settings.server.ADMIN_JWT_ALGORITHMS = ["HS256"]
        settings.server.ADMIN_JWT_SCOPE = SCOPE
        return settings

    def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(validate_admin_token(self._settings(), None))

        assert exc_info.value.status_code == 401

    def test_valid_credentials(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=_token(scope=SCOPE)
        )

        payload = asyncio.run(validate_admin_token(self._settings(), credentials))

        assert payload["scope"] == SCOPE


class TestGetRelayToken:
    """Test suite for the get_relay_token dependency."""

    def _settings(self):
        settings = Mock()
        settings.server.ADMIN_JWT_SECRET = SECRET
        settings.server.ADMIN_JWT_ALGORITHMS = ["HS256"]
        settings.server.RELAY_JWT_SCOPE = "geolocate:relay"
        return settings

    def test_anonymous_caller(self):
        assert asyncio.run(get_relay_token(self._settings(), None)) is None

    def test_relay_scope(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=_token(scope="geolocate:relay")
        )

        payload = asyncio.run(get_relay_token(self._settings(), credentials))

        assert payload["sub"] == "ops@example.com"

    def test_admin_scope_is_not_a_relay(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=_token(scope=SCOPE)
        )

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_relay_token(self._settings(), credentials))

        assert exc_info.value.status_code == 403

    def test_invalid_token_is_rejected(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=_token(secret="another-secret-of-some-length")
        )

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_relay_token(self._settings(), credentials))

        assert exc_info.value.status_code == 401
