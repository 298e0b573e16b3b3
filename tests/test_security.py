"""
Tests for bearer token handling and role checks.
"""

from datetime import timedelta

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import ForbiddenError, UnauthenticatedError
from app.core.security import (
    check_role,
    create_access_token,
    decode_access_token,
)
from app.models.user import Role


def test_token_round_trip_carries_claims():
    token = create_access_token(
        12, Role.DIRECTOR, department="Sales", email="d@example.com", name="Dee"
    )

    data = decode_access_token(token)

    assert data.user_id == 12
    assert data.role == Role.DIRECTOR
    assert data.department == "Sales"
    assert data.name == "Dee"


def test_expired_token_is_rejected():
    token = create_access_token(1, Role.CEO, expires_delta=timedelta(seconds=-5))

    with pytest.raises(UnauthenticatedError) as exc_info:
        decode_access_token(token)

    assert exc_info.value.message == "Token has expired"


def test_token_signed_with_another_key_is_rejected():
    token = jwt.encode(
        {"sub": "1", "role": "CEO"},
        "some-other-secret-key-of-sufficient-length",
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthenticatedError):
        decode_access_token(token)


def test_unknown_role_is_rejected():
    token = jwt.encode(
        {"sub": "1", "role": "JANITOR"},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthenticatedError):
        decode_access_token(token)


def test_check_role():
    data = decode_access_token(create_access_token(5, Role.EMPLOYEE))

    check_role(data, (Role.EMPLOYEE, Role.CEO))
    with pytest.raises(ForbiddenError):
        check_role(data, (Role.CEO,))


def test_non_numeric_subject_is_rejected(client):
    token = jwt.encode(
        {"sub": "abc", "role": "CEO"},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    response = client.get("/api/attendance", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
