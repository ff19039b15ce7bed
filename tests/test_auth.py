from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from google.auth.exceptions import TransportError

from spotfeed.auth import firebase_auth


def bearer(token="token"):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
async def test_returns_uid(monkeypatch):
    monkeypatch.setattr(firebase_auth.auth, "verify_id_token", MagicMock(return_value={"uid": "u1"}))

    assert await firebase_auth.get_current_user_id(bearer()) == "u1"


@pytest.mark.asyncio
async def test_missing_token():
    with pytest.raises(HTTPException) as exc:
        await firebase_auth.get_current_user_id(None)

    assert exc.value.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,status_code",
    [
        (ValueError("malformed"), 401),
        (TransportError("offline"), 503),
    ],
)
async def test_verification_errors(monkeypatch, error, status_code):
    monkeypatch.setattr(firebase_auth.auth, "verify_id_token", MagicMock(side_effect=error))

    with pytest.raises(HTTPException) as exc:
        await firebase_auth.get_current_user_id(bearer())

    assert exc.value.status_code == status_code
