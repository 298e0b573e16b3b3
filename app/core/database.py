"""
Database engine and session management.

The engine is created once from settings.DATABASE_URL. Routes receive a
request-scoped Session through the ``get_session`` dependency.
"""

from collections.abc import Generator

from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    connect_args=connect_args,
    pool_pre_ping=True,
)


def create_db_and_tables() -> None:
    """Create all tables registered on SQLModel.metadata."""
    # Import models so their tables are registered before create_all
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def check_connection(session: Session | None = None) -> bool:
    """Return True when the database answers a trivial query."""
    try:
        if session is not None:
            session.connection().execute(text("SELECT 1"))
        else:
            with Session(engine) as own_session:
                own_session.connection().execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connectivity check failed: {e}")
        return False
