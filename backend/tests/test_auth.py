"""
Postboard Backend — Bearer Token Tests
========================================

What:  Tests for decode_token (signature, expiry, claims, missing secret).
"""

from unittest.mock import patch

import jwt
import pytest

from postboard.config import Settings
from postboard.exceptions import AuthenticationError
from postboard.middleware.auth import AuthData, decode_token


class TestDecodeToken:

    def test_valid_token(self, make_token):
        auth = decode_token(make_token(user_id="user-7", email="u7@example.com"))
        assert auth == AuthData(user_id="user-7", email="u7@example.com")

    def test_token_without_expiry_accepted(self, make_token):
        assert decode_token(make_token(expires_in=None)).user_id == "user-1"

    def test_expired_token(self, make_token):
        with pytest.raises(AuthenticationError) as exc_info:
            decode_token(make_token(expires_in=-60))
        assert exc_info.value.context["reason"] == "token expired"

    def test_wrong_secret(self):
        token = jwt.encode({"userId": "user-1"}, "some-other-secret-0123456789abcdef", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_missing_user_id_claim(self, make_token):
        with pytest.raises(AuthenticationError) as exc_info:
            decode_token(make_token(user_id=None))
        assert exc_info.value.context["reason"] == "missing userId claim"

    def test_garbage(self):
        with pytest.raises(AuthenticationError):
            decode_token("definitely-not-a-token")

    def test_no_secret_configured(self, make_token):
        token = make_token()
        with patch("postboard.middleware.auth.settings", Settings(jwt_secret="")):
            with pytest.raises(AuthenticationError) as exc_info:
                decode_token(token)
        assert exc_info.value.message == "You are not authenticated!"


@pytest.mark.asyncio
async def test_lowercase_bearer_scheme_accepted(test_client, make_token):
    response = await test_client.post(
        "/api/posts",
        json={"title": "T", "content": "C"},
        headers={"Authorization": f"bearer {make_token()}"},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_other_scheme_rejected(test_client, make_token):
    response = await test_client.post(
        "/api/posts",
        json={"title": "T", "content": "C"},
        headers={"Authorization": f"Basic {make_token()}"},
    )
    assert response.status_code == 401
