"""
Bearer token verification and role checks.

Tokens are JWTs signed with settings.JWT_SECRET_KEY. The claim set
``{sub, role, department, email, name}`` is trusted verbatim once the
signature and expiry check out.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import ForbiddenError, UnauthenticatedError
from app.core.logging import get_logger
from app.models.user import Role

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Verified identity of the caller."""

    sub: str
    role: Role
    department: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)


def create_access_token(
    user_id: int,
    role: Role,
    department: Optional[str] = None,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed token for a trusted caller."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role.value,
        "exp": expire,
    }
    if department:
        payload["department"] = department
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token verification failed: {e}")
        raise UnauthenticatedError()

    try:
        return TokenData(**payload)
    except PydanticValidationError:
        logger.warning("Token is missing required claims")
        raise UnauthenticatedError("Token is missing required claims")


async def get_current_user(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
) -> TokenData:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("No authentication token, access denied")
    token_data = decode_access_token(credentials.credentials)
    if not token_data.sub.isdigit():
        raise UnauthenticatedError("Invalid user information")
    return token_data


async def get_current_active_user(
    current_user: Annotated[TokenData, Depends(get_current_user)],
) -> TokenData:
    logger.debug(f"Authenticated user: {current_user.sub}, role: {current_user.role.value}")
    return current_user


def check_role(user: TokenData, roles: tuple[Role, ...]) -> None:
    if user.role not in roles:
        logger.warning(
            f"Authorization failed: role {user.role.value} not in "
            f"[{', '.join(r.value for r in roles)}]"
        )
        raise ForbiddenError()


def require_role(*roles: Role):
    """Dependency factory permitting only the given roles."""

    async def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_active_user)],
    ) -> TokenData:
        check_role(current_user, roles)
        return current_user

    return role_checker
