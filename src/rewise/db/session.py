"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import rewise.models  # noqa: E402,F401


class Database:
    """Store handle owned by the application.

    Wraps one SQLAlchemy engine and its session factory. The engine connects
    lazily, so constructing a ``Database`` never blocks.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        echo: bool = False,
        engine: Engine | None = None,
    ) -> None:
        if engine is None:
            if url is None:
                raise ValueError("Database requires either a URL or an engine")
            connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
            engine = create_engine(
                url,
                pool_pre_ping=True,
                echo=echo,
                connect_args=connect_args,
            )
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )

    def session(self) -> Session:
        """Open a new session bound to this database."""
        return self.session_factory()

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
