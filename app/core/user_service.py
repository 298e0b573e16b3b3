"""
User lookups shared by the attendance, meeting and task flows.

Department resolution follows a fixed chain:
1. the department claim carried by the token
2. the department stored on the user row
3. settings.DEFAULT_DEPARTMENT
Each fallback is logged so that missing profile data shows up in the logs.
"""

from collections.abc import Iterable

from sqlmodel import Session, col, select

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.scoping import Caller
from app.core.security import TokenData
from app.models.user import User

logger = get_logger(__name__)


def resolve_department(session: Session, current_user: TokenData) -> str:
    if current_user.department:
        return current_user.department

    user = session.get(User, current_user.user_id)
    if user is not None and user.department:
        logger.info(
            f"Token for user {current_user.sub} carries no department, "
            f"using stored department {user.department}"
        )
        return user.department

    logger.warning(
        f"No department found for user {current_user.sub}, "
        f"defaulting to {settings.DEFAULT_DEPARTMENT}"
    )
    return settings.DEFAULT_DEPARTMENT


def build_caller(session: Session, current_user: TokenData) -> Caller:
    return Caller(
        user_id=current_user.user_id,
        role=current_user.role,
        department=resolve_department(session, current_user),
    )


def get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        logger.warning(f"User {user_id} not found")
        raise NotFoundError("User not found")
    return user


def load_users(session: Session, user_ids: Iterable[int]) -> list[User]:
    """Fetch users in the order given; unknown ids are a validation error."""
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []
    found = {
        u.id: u for u in session.exec(select(User).where(col(User.id).in_(ids))).all()
    }
    missing = [i for i in ids if i not in found]
    if missing:
        raise ValidationError("Unknown users referenced", unknown_user_ids=missing)
    return [found[i] for i in ids]
