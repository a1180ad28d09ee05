"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException

from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_token,
)
from app.core.config import settings


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        """Test that hashing returns a different value than input"""
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert len(hashed) > 0

    def test_hash_password_different_each_time(self):
        """Test that hashing same password returns different hashes"""
        password = "testpassword123"

        # Bcrypt generates different salts
        assert get_password_hash(password) != get_password_hash(password)

    def test_verify_password_correct(self):
        """Test verifying correct password"""
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        """Test verifying incorrect password"""
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_hash_long_password_truncated(self):
        """Test that long passwords are truncated to bcrypt limit"""
        long_password = "a" * 100
        hashed = get_password_hash(long_password)

        assert verify_password(long_password, hashed) is True
        assert verify_password("a" * 72, hashed) is True


class TestAccessTokens:
    """Test JWT token creation and decoding"""

    def test_create_access_token_contains_claims(self):
        """Test token carries subject, role, type and expiry"""
        token = create_access_token({"sub": "user-1", "role": "admin"})
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_create_access_token_custom_expiry(self):
        """Test custom expiry is honoured"""
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=5))
        payload = decode_token(token)

        expires = datetime.utcfromtimestamp(payload["exp"])
        assert expires < datetime.utcnow() + timedelta(minutes=6)

    def test_decode_token_round_trip(self):
        """Test decoding a freshly created token"""
        token = create_access_token({"sub": "user-2"})

        assert decode_token(token)["sub"] == "user-2"

    def test_decode_invalid_token_raises_401(self):
        """Test malformed token is rejected"""
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-jwt")

        assert exc_info.value.status_code == 401

    def test_decode_expired_token_raises_401(self):
        """Test expired token is rejected"""
        token = create_access_token({"sub": "user-3"}, expires_delta=timedelta(seconds=-10))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_decode_token_wrong_secret_raises_401(self):
        """Test token signed with another key is rejected"""
        token = jwt.encode({"sub": "user-4", "type": "access"}, "other-secret", algorithm="HS256")

        with pytest.raises(HTTPException):
            decode_token(token)
