from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, col, select

from app.api.dependencies import CurrentUserDep, SessionDep
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.security import TokenData, require_role
from app.core.user_service import get_user_or_404
from app.models.department import (
    Department,
    DepartmentCreate,
    DepartmentPublic,
    DepartmentUpdate,
)
from app.models.user import Role, User

logger = get_logger(__name__)

router = APIRouter(
    prefix="/departments",
    tags=["departments"],
    responses={404: {"description": "Department not found"}},
)

AdminDep = Annotated[TokenData, Depends(require_role(Role.ADMIN))]


def _employee_count(session: Session, name: str) -> int:
    statement = select(func.count(col(User.id))).where(User.department == name)
    return session.exec(statement).one()


def _to_public(session: Session, department: Department) -> DepartmentPublic:
    public = DepartmentPublic.model_validate(department)
    public.employee_count = _employee_count(session, department.name)
    return public


def _get_department_or_404(session: Session, department_id: int) -> Department:
    department = session.get(Department, department_id)
    if not department:
        raise NotFoundError("Department not found")
    return department


def _ensure_name_available(
    session: Session, name: str, exclude_id: int | None = None
) -> None:
    statement = select(Department).where(Department.name == name)
    existing = session.exec(statement).first()
    if existing and existing.id != exclude_id:
        logger.warning(f"Department {name} already exists")
        raise ConflictError("Department already exists")


@router.get("", response_model=list[DepartmentPublic])
async def list_departments(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> list[DepartmentPublic]:
    """
    List departments with their current employee counts.
    """
    departments = session.exec(select(Department).order_by(Department.name)).all()
    return [_to_public(session, d) for d in departments]


@router.post("", response_model=DepartmentPublic, status_code=201)
async def create_department(
    department_in: DepartmentCreate,
    session: SessionDep,
    current_user: AdminDep,
) -> DepartmentPublic:
    """
    Create a department.

    **RBAC:** Admin only.

    Raises:
        ConflictError: 409 if a department with the same name exists
        NotFoundError: 404 if the director does not exist
    """
    _ensure_name_available(session, department_in.name)
    if department_in.director_id is not None:
        get_user_or_404(session, department_in.director_id)

    department = Department.model_validate(department_in)
    session.add(department)
    session.commit()
    session.refresh(department)
    logger.info(f"Department {department.name} created by {current_user.sub}")
    return _to_public(session, department)


@router.patch("/{department_id}", response_model=DepartmentPublic)
async def update_department(
    department_id: int,
    department_update: DepartmentUpdate,
    session: SessionDep,
    current_user: AdminDep,
) -> DepartmentPublic:
    """
    Update a department. Fields sent as null are left unchanged.

    **RBAC:** Admin only.
    """
    department = _get_department_or_404(session, department_id)
    updates = department_update.model_dump(exclude_unset=True, exclude_none=True)
    if updates.get("name"):
        _ensure_name_available(session, updates["name"], exclude_id=department_id)
    if updates.get("director_id") is not None:
        get_user_or_404(session, updates["director_id"])

    department.sqlmodel_update(updates)
    department.updated_at = datetime.utcnow()
    session.add(department)
    session.commit()
    session.refresh(department)
    logger.info(f"Department {department_id} updated by {current_user.sub}")
    return _to_public(session, department)


@router.delete("/{department_id}")
async def delete_department(
    department_id: int,
    session: SessionDep,
    current_user: AdminDep,
) -> dict[str, str]:
    """
    Delete a department that no user belongs to.

    **RBAC:** Admin only.

    Raises:
        ValidationError: 400 if users still belong to the department
    """
    department = _get_department_or_404(session, department_id)
    if _employee_count(session, department.name) > 0:
        logger.warning(
            f"Refusing to delete department {department.name} with active users"
        )
        raise ValidationError("Cannot delete department with active users")

    session.delete(department)
    session.commit()
    logger.info(f"Department {department_id} deleted by {current_user.sub}")
    return {"message": "Department deleted successfully"}
