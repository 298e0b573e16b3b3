"""
User model and schemas.

Users are the people that attendance, meetings, tasks and notifications refer
to. Identity itself is verified from the bearer token; this table stores the
profile data (role, department) used for scoping and display.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class Role(str, Enum):
    """Closed set of roles a caller can hold."""

    CEO = "CEO"
    DIRECTOR = "DIRECTOR"
    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"


# Database Model


class User(SQLModel, table=True):
    """ORM model for the users table."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(index=True, unique=True, max_length=255, nullable=False)
    role: Role = Field(default=Role.EMPLOYEE, nullable=False)
    department: Optional[str] = Field(default=None, index=True, max_length=255)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


# Request Schemas


class UserCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    role: Role = Role.EMPLOYEE
    department: Optional[str] = Field(default=None, max_length=255)


class UserUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    role: Optional[Role] = None
    department: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None


# Response Schemas


class UserPublic(SQLModel):
    id: int
    name: str
    email: str
    role: Role
    department: Optional[str] = None
    is_active: bool


class UserSummary(SQLModel):
    """Compact user reference embedded in other responses."""

    id: int
    name: str
    email: str
    department: Optional[str] = None
