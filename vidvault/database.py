"""
Database Engine & Session State

The engine is process-wide state: init_db() is called once at application
startup and close_db() at shutdown. Request handlers obtain sessions through
the get_db() dependency.
"""
import logging
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class DatabaseState:
    """Holds the engine and session factory between init_db() and close_db()"""

    def __init__(self):
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self.engine is not None


_state = DatabaseState()


def _engine_kwargs(database_url: str) -> dict:
    if not database_url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite must share one connection or every session sees an empty db
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


def init_db(database_url: str, create_tables: bool = True) -> Engine:
    """
    Create the process-wide engine and session factory

    Args:
        database_url: SQLAlchemy database URL
        create_tables: Create missing tables for the registered models

    Returns:
        The new engine
    """
    if _state.initialized:
        close_db()

    engine = create_engine(database_url, **_engine_kwargs(database_url))
    _state.engine = engine
    _state.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    if create_tables:
        # Import models to register them with Base
        from vidvault.models import Video  # noqa
        Base.metadata.create_all(bind=engine)

    logger.info(f"Database initialized: {engine.url.render_as_string(hide_password=True)}")
    return engine


def close_db() -> None:
    """Dispose the engine and forget the session factory"""
    if _state.engine is not None:
        _state.engine.dispose()
        logger.info("Database connections closed")
    _state.engine = None
    _state.session_factory = None


def get_engine() -> Engine:
    if not _state.initialized:
        raise RuntimeError("Database is not initialized. Call init_db() at startup")
    return _state.engine


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session bound to the process-wide engine

    Usage in FastAPI:
        @router.get("/videos")
        def list_videos(db: Session = Depends(get_db)):
            ...
    """
    if not _state.initialized:
        raise RuntimeError("Database is not initialized. Call init_db() at startup")

    db = _state.session_factory()
    try:
        yield db
    finally:
        db.close()
