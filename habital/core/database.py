import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.errors import DomainError, PersistenceError
from ..models.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a synchronous engine; SQLite gets foreign keys and a data dir."""
    url = make_url(database_url)
    kwargs = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # One shared connection so every session sees the same in-memory DB
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    if url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """Owns the engine and session factory for one store.

    Sessions are handed out through :meth:`session_scope`, a
    begin-mutate-commit transaction that rolls back on any error and
    reports storage failures as :class:`PersistenceError`.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine = create_db_engine(database_url, echo=echo)
        self.session_factory = sessionmaker(
            self.engine, class_=Session, expire_on_commit=False
        )

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error("Creating tables failed: %s", e)
            raise PersistenceError("create tables", e) from e
        logger.info("Database tables created/verified")

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connection closed")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transactional session: commit on success, roll back on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except DomainError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database session error: %s", e)
            raise PersistenceError("transaction", e) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """Check if the database is accessible."""
        try:
            with self.session_factory() as session:
                return session.execute(text("SELECT 1")).scalar() == 1
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e, exc_info=True)
            return False


def init_database(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Database:
    """Open the configured store and make sure its tables exist."""
    from .config import get_settings

    settings = get_settings()
    url = database_url or settings.database_url
    logger.info("Initializing database: %s", url)
    database = Database(url, echo=settings.database_echo if echo is None else echo)
    database.create_all()
    return database


def close_database(database: Optional[Database]) -> None:
    """Close database connection"""
    if database is not None:
        database.dispose()
