from contextlib import contextmanager
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hms.core.config import Settings


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured DATABASE_URL.

    In-memory SQLite (tests) shares one connection across threads so that
    every session sees the same database.
    """
    url = str(settings.database_url)
    kwargs: dict = {"future": True, "echo": settings.database_echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class Database:
    """
    Owns the engine and session factory for one application instance.

    Created in the app lifespan and disposed on shutdown.
    """

    def __init__(self, settings: Settings):
        self.engine = build_engine(settings)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            future=True,
            expire_on_commit=True,
        )

    def create_all(self) -> None:
        from hms.models.metadata import Base

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for work outside of a request (scripts, background jobs).
        Commits on success, rolls back on error.
        """
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a DB session from the app's Database.
    """
    db = request.app.state.services.database.session_factory()
    try:
        yield db
    finally:
        db.close()
