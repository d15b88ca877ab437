from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from starlette.requests import Request

from app.core.auth import ADMIN, COORDINATOR, get_current_user, require_roles
from app.core.rate_limit import get_client_ip
from app.core.security import create_access_token, decode_access_token
from app.schemas.user import TokenUser


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _request(headers=None, client=("10.0.0.9", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_token_round_trip():
    token = create_access_token({"sub": "7", "rol": 12})
    payload = decode_access_token(token)
    assert payload["sub"] == "7"
    assert payload["rol"] == 12
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "7", "rol": 12}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(JWTError):
        decode_access_token(token)


async def test_current_user_from_claims():
    token = create_access_token({"sub": "8", "correo": "coord@istla.edu.ec", "cedula": "0510", "rol": 17})
    user = await get_current_user(_credentials(token))
    assert user == TokenUser(id=8, correo="coord@istla.edu.ec", cedula="0510", rol=17)


@pytest.mark.parametrize("token", ["not-a-jwt", create_access_token({"rol": 12}), create_access_token({"sub": "x", "rol": 12})])
async def test_bad_tokens_are_unauthorized(token):
    with pytest.raises(HTTPException) as info:
        await get_current_user(_credentials(token))
    assert info.value.status_code == 401


async def test_require_roles():
    checker = require_roles(ADMIN, COORDINATOR)
    coordinator = TokenUser(id=1, rol=17)
    assert await checker(current_user=coordinator) is coordinator

    with pytest.raises(HTTPException) as info:
        await checker(current_user=TokenUser(id=2, rol=14))
    assert info.value.status_code == 403


def test_client_ip_resolution_order():
    assert get_client_ip(_request({"X-Real-IP": " 1.2.3.4 ", "X-Forwarded-For": "5.6.7.8"})) == "1.2.3.4"
    assert get_client_ip(_request({"X-Forwarded-For": "5.6.7.8, 10.0.0.1"})) == "5.6.7.8"
    assert get_client_ip(_request()) == "10.0.0.9"
    assert get_client_ip(_request(client=None)) == "unknown"
