"""
SQLite engine and session management.

One Database object owns the engine and the session factory. Every
storage call runs inside session_scope(), which commits on success and
rolls back on any exception.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from renovation.config import get_logger, get_settings
from renovation.services.storage.tables import Base


logger = get_logger("storage.database")

IN_MEMORY_URL = "sqlite://"
CASEFOLD_FUNCTION = "py_casefold"


def _is_in_memory(url: str) -> bool:
    return url in (IN_MEMORY_URL, "sqlite:///:memory:")


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _register_casefold(dbapi_connection, connection_record) -> None:
    """SQLite lower() and LIKE only fold ASCII, so keyword search uses Python's casefold."""
    dbapi_connection.create_function(CASEFOLD_FUNCTION, 1, _casefold, deterministic=True)


class Database:
    """
    Engine plus session factory for the local SQLite store.

    An in-memory URL shares one connection (StaticPool) so every session
    sees the same database.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        settings = get_settings().storage
        self.url = url or settings.url
        echo = settings.echo if echo is None else echo

        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_in_memory(self.url):
            engine_kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self.url, echo=echo, **engine_kwargs)
        event.listen(self._engine, "connect", _enable_foreign_keys)
        event.listen(self._engine, "connect", _register_casefold)

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

        logger.info(
            "database_initialized",
            url=self.url,
            in_memory=_is_in_memory(self.url),
            echo=echo,
        )

    @classmethod
    def in_memory(cls) -> "Database":
        """A fresh in-memory database with all tables created."""
        database = cls(url=IN_MEMORY_URL, echo=False)
        database.create_tables()
        return database

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_tables(self) -> None:
        """Create any missing tables. Existing tables are left untouched."""
        Base.metadata.create_all(self._engine)
        logger.info("tables_created", tables=sorted(Base.metadata.tables))

    def drop_tables(self) -> None:
        Base.metadata.drop_all(self._engine)
        logger.warning("tables_dropped")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Usage:
            with database.session_scope() as session:
                session.add(row)
                # Commits on successful exit, rolls back on exception
        """
        session = self._session_factory()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", exc_info=True)
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self._engine.dispose()
