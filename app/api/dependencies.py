"""
Shared API dependencies.
Contains reusable dependency functions for FastAPI endpoints.
Centralizes common dependencies like database sessions, authentication, the
server clock and the diagnostic sink.
"""

from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from app.core.clock import get_now
from app.core.database import get_session
from app.core.diagnostics import DiagnosticSink, get_diagnostics
from app.core.scoping import Caller
from app.core.security import TokenData, get_current_active_user
from app.core.user_service import build_caller

# Database session dependency
# Use this type annotation in route handlers to get automatic session injection
SessionDep = Annotated[Session, Depends(get_session)]

# Current User dependency for security
CurrentUserDep = Annotated[TokenData, Depends(get_current_active_user)]

# Current server time, overridden in tests
NowDep = Annotated[datetime, Depends(get_now)]

DiagnosticsDep = Annotated[DiagnosticSink, Depends(get_diagnostics)]


def get_caller(session: SessionDep, current_user: CurrentUserDep) -> Caller:
    """Authenticated caller with the department fallback chain applied."""
    return build_caller(session, current_user)


CallerDep = Annotated[Caller, Depends(get_caller)]
