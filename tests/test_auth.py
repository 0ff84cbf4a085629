"""
Tests for resolving the caller's owner key from a JWT.

Covers:
- Valid access tokens yield the uid claim as an ObjectId.
- Missing, expired, malformed and wrong-type tokens are rejected with 401.
"""

from datetime import timedelta

import jwt
import pytest
from bson import ObjectId
from fastapi import HTTPException

from contribution_api.app.config import settings
from contribution_api.app.dependencies.auth import get_current_owner
from contribution_api.app.util.auth import create_access_token, decode_token
from conftest import make_token


class TestGetCurrentOwner:
    """Tests for get_current_owner."""

    @pytest.mark.asyncio
    async def test_valid_token(self):
        user_id = ObjectId()

        assert await get_current_owner(make_token(user_id)) == user_id

    @pytest.mark.asyncio
    async def test_missing_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_owner(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self):
        token = create_access_token({"uid": str(ObjectId())}, expires_delta=timedelta(seconds=-60))

        with pytest.raises(HTTPException) as exc_info:
            await get_current_owner(token)
        assert exc_info.value.detail == "Token has expired"

    @pytest.mark.asyncio
    async def test_wrong_signature(self):
        token = create_access_token({"uid": str(ObjectId())}, secret_key="another-secret-" + "y" * 50)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_owner(token)
        assert exc_info.value.detail == "Could not validate credentials"

    @pytest.mark.asyncio
    async def test_wrong_token_type(self):
        payload = decode_token(make_token(ObjectId()))
        payload["type"] = "refresh"
        refresh = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_owner(refresh)
        assert exc_info.value.detail == "Invalid token type"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("uid", ["", "abc", None, 12345])
    async def test_invalid_uid_claim(self, uid):
        token = create_access_token({"uid": uid})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_owner(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "invalid user id"
