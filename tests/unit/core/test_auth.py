"""
Tests for JWT bearer token utilities.
"""

from datetime import timedelta

import pytest
from jose import jwt

from backoffice.core.auth import create_access_token, verify_token
from backoffice.core.config import settings
from backoffice.core.exceptions import TokenExpiredError, TokenInvalidError


class TestTokens:
    """Tests for token creation and verification."""

    def test_round_trip_carries_user_id(self):
        payload = verify_token(create_access_token({"user_id": 12}))

        assert payload["user_id"] == 12
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token({"user_id": 1}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredError):
            verify_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"user_id": 1}, "another-secret", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(TokenInvalidError) as exc_info:
            verify_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage(self):
        with pytest.raises(TokenInvalidError):
            verify_token("not-a-jwt")
