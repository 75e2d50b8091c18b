"""Tests for auth security functions."""

from datetime import timedelta

import pytest
from jose import JWTError, jwt

from src.auth.security import create_access_token, decode_access_token
from src.config.settings import get_settings


class TestAccessToken:
    """Tests for access token creation and decoding."""

    def test_create_access_token(self) -> None:
        token = create_access_token({"sub": "alice"})
        assert token is not None
        assert len(token) > 0

    def test_decode_access_token(self) -> None:
        """Should decode token and return payload."""
        token = create_access_token({"sub": "alice", "scope": "forum"})
        payload = decode_access_token(token)

        assert payload["sub"] == "alice"
        assert payload["scope"] == "forum"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_decode_access_token_expired(self) -> None:
        """Should raise JWTError for expired token."""
        token = create_access_token(
            {"sub": "alice"}, expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_decode_access_token_invalid(self) -> None:
        with pytest.raises(JWTError):
            decode_access_token("invalid.token.here")

    def test_decode_access_token_wrong_signature(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": "alice", "type": "access"},
            "not-the-secret",
            algorithm=settings.auth_algorithm,
        )

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_decode_access_token_wrong_type(self) -> None:
        """Should raise JWTError if token type is not 'access'."""
        settings = get_settings()
        token = jwt.encode(
            {"sub": "alice", "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )

        with pytest.raises(JWTError, match="expected 'access'"):
            decode_access_token(token)

    def test_decode_access_token_without_subject(self) -> None:
        token = create_access_token({"scope": "forum"})

        with pytest.raises(JWTError, match="no subject"):
            decode_access_token(token)


class TestCurrentUserDependency:
    """The bearer dependency as seen through a protected route."""

    def test_missing_token(self, client) -> None:
        response = client.post("/v1/posts/1/vote", json={"value": 1})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_malformed_header(self, client) -> None:
        response = client.post(
            "/v1/posts/1/vote",
            json={"value": 1},
            headers={"Authorization": "Token abc"},
        )

        assert response.status_code == 401

    def test_expired_token(self, client) -> None:
        token = create_access_token(
            {"sub": "alice"}, expires_delta=timedelta(seconds=-1)
        )

        response = client.post(
            "/v1/posts/1/vote",
            json={"value": 1},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_invalid_token_reads_as_anonymous(self, client, seed) -> None:
        seed.post(1)

        response = client.get(
            "/v1/posts/1", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 200
        assert response.json()["user_vote"] is None
