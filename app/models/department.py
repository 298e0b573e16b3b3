"""
Department model and schemas.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Department(SQLModel, table=True):
    """ORM model for the departments table."""

    __tablename__ = "departments"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True, max_length=255, nullable=False)
    description: Optional[str] = Field(default=None, max_length=1000)
    director_id: Optional[int] = Field(default=None, foreign_key="users.id")
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


class DepartmentCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    director_id: Optional[int] = Field(default=None, gt=0)


class DepartmentUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    director_id: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class DepartmentPublic(SQLModel):
    id: int
    name: str
    description: Optional[str] = None
    director_id: Optional[int] = None
    is_active: bool
    employee_count: int = 0
    created_at: datetime
    updated_at: datetime
