from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.api.dependencies import CurrentUserDep, SessionDep
from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.core.security import TokenData, require_role
from app.core.user_service import get_user_or_404
from app.models.user import Role, User, UserCreate, UserPublic, UserUpdate

logger = get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "User not found"}},
)

AdminDep = Annotated[TokenData, Depends(require_role(Role.ADMIN))]


def _ensure_email_available(
    session: Session, email: str, exclude_id: int | None = None
) -> None:
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing and existing.id != exclude_id:
        logger.warning(f"User with email {email} already exists")
        raise ConflictError("User already exists")


@router.get("", response_model=list[UserPublic])
async def list_users(
    session: SessionDep,
    current_user: CurrentUserDep,
    department: str | None = None,
) -> list[User]:
    """
    List users, optionally filtered by department.
    """
    statement = select(User)
    if department:
        statement = statement.where(User.department == department)
    return session.exec(statement.order_by(User.name)).all()


@router.post("", response_model=UserPublic, status_code=201)
async def create_user(
    user_in: UserCreate,
    session: SessionDep,
    current_user: AdminDep,
) -> User:
    """
    Create a user profile.

    **RBAC:** Admin only.

    Raises:
        ConflictError: 409 if the email is already registered
    """
    _ensure_email_available(session, user_in.email)

    user = User.model_validate(user_in)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"User {user.id} ({user.role.value}) created by {current_user.sub}")
    return user


@router.patch("/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: int,
    user_update: UserUpdate,
    session: SessionDep,
    current_user: AdminDep,
) -> User:
    """
    Update a user profile. Fields sent as null are left unchanged.

    **RBAC:** Admin only.
    """
    user = get_user_or_404(session, user_id)
    updates = user_update.model_dump(exclude_unset=True, exclude_none=True)
    if updates.get("email"):
        _ensure_email_available(session, updates["email"], exclude_id=user_id)

    user.sqlmodel_update(updates)
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"User {user_id} updated by {current_user.sub}")
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    session: SessionDep,
    current_user: AdminDep,
) -> dict[str, str]:
    """
    Delete a user profile.

    **RBAC:** Admin only.
    """
    user = get_user_or_404(session, user_id)
    session.delete(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(f"User {user_id} still has related records")
        raise ConflictError("User has related records and cannot be deleted")
    logger.info(f"User {user_id} deleted by {current_user.sub}")
    return {"message": "User deleted"}
