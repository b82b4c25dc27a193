"""
Database session management. SQLAlchemy 2.x style.
"""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from clearfund.config import get_settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def configure_sqlite_engine(sqlite_engine: Engine) -> Engine:
    """Make pysqlite transactions explicit so SAVEPOINT works.

    pysqlite defers BEGIN until the first DML statement, which breaks
    begin_nested(). Emitting BEGIN IMMEDIATE ourselves also serializes
    writers instead of failing with "database is locked" on lock upgrade.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


def build_engine(database_url: str, debug: bool = False, connect_timeout: int = 10) -> Engine:
    """Create the engine for a database URL (PostgreSQL in production, SQLite locally)."""
    if _is_sqlite(database_url):
        return configure_sqlite_engine(
            create_engine(
                database_url,
                echo=debug,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=debug,
        connect_args={
            "connect_timeout": connect_timeout,
            "options": "-c timezone=UTC",
        },
    )


settings = get_settings()
engine = build_engine(
    settings.database_url,
    debug=settings.debug,
    connect_timeout=settings.db_connect_timeout,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


def check_db_connection() -> None:
    """
    Verify database connectivity. Raises if unreachable.
    Call during application startup.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
