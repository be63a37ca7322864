"""
Storage sessions for the Circulation Desk.

One SQLite engine hosts the documents and the settings table. Tool calls
open a short-lived session through ``session_scope()``; driver errors are
surfaced to the services as ``ResourceUnavailableError``.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..models.result import ResourceUnavailableError
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """Owns the engine and session factory for one SQLite file."""

    def __init__(self, database_url: str | None = None):
        if database_url is None:
            config = get_config()
            config.database_path.parent.mkdir(exist_ok=True, parents=True)
            database_url = config.get_database_url()

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            # One shared connection; SQLite locks the file per writer
            self._engine = create_engine(
                self.database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )

            @event.listens_for(self._engine, "connect")
            def enable_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            logger.info("Storage engine ready: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autoflush=False, expire_on_commit=False
            )
        return self._session_factory

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Yield a session that commits on exit and rolls back on error.

        ```python
        with db_manager.session_scope() as session:
            library = Library.from_session(session)
        ```
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            logger.exception("Storage session failed, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self) -> None:
        """Create the documents, rows and settings tables when missing."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Storage tables ready")

    def verify_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Storage connection failed")
            return False
        return True

    def close(self) -> None:
        """Dispose of the engine on shutdown."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """Return the process-wide manager; ``database_url`` applies on first call only."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    return _db_manager


def reset_db_manager() -> None:
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    with get_db_manager().session_scope() as session:
        yield session


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit ``session``.

    Raises:
        ResourceUnavailableError: If the commit fails; the session is rolled back
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise ResourceUnavailableError(f"Storage operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Run ``query_func`` against ``session``.

    Raises:
        ResourceUnavailableError: If the driver fails
    """
    try:
        return query_func(session)
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise ResourceUnavailableError(f"{error_msg}: storage query failed") from e
