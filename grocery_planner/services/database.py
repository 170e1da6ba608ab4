"""
Database connection, session and transaction management for the Grocery Planner.

This module provides:
- Database engine creation and configuration
- Session factory for database operations
- The unit of work: session_scope() and run_in_transaction()
- Database initialization (create tables, seed units)
- Foreign key enforcement and SAVEPOINT support for SQLite
"""

import logging
import math
from contextlib import contextmanager
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session, close_all_sessions, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models import Base, Unit
from ..utils.config import DEFAULT_DB_TIMEOUT, get_config
from ..utils.constants import DEFAULT_UNITS
from .exceptions import (
    ConflictError,
    ConnectivityError,
    DatabaseError,
    ServiceError,
    TransactionError,
    TransactionTimeout,
)
from .querier import Deadline, Querier

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Global engine and session factory
_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None

# Execution option carrying the SQLite lock wait (ms) for one unit of work
BUSY_TIMEOUT_OPTION = "grocery_planner_busy_timeout_ms"


def _configure_sqlite(engine: Engine, timeout: float) -> None:
    """
    Attach SQLite connection settings to an engine.

    pysqlite's own transaction handling is switched off so that SQLAlchemy
    emits BEGIN itself; without this SAVEPOINT (used by the ingredient
    get-or-create) does not work reliably. Transactions take the write lock
    at BEGIN, so concurrent writers wait on each other (up to the busy
    timeout) instead of failing on a stale snapshot.

    The busy timeout is set again at every BEGIN: to the engine timeout, or
    to the time left before a caller deadline when the unit of work passed
    one through the BUSY_TIMEOUT_OPTION execution option.
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

        cursor = dbapi_connection.cursor()
        # Enable foreign key constraints (critical for referential integrity)
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    default_busy_ms = int(timeout * 1000)

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        busy_ms = conn.get_execution_options().get(BUSY_TIMEOUT_OPTION, default_busy_ms)
        conn.exec_driver_sql(f"PRAGMA busy_timeout = {int(busy_ms)}")
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_database_engine(
    database_url: str, echo: bool = False, timeout: int = DEFAULT_DB_TIMEOUT
) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: SQLAlchemy database URL
        echo: If True, log all SQL statements (useful for debugging)
        timeout: Seconds a SQLite connection waits on a locked database

    Returns:
        Configured SQLAlchemy Engine
    """
    logger.info(f"Creating database engine: {database_url}")

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    if ":memory:" in database_url or "mode=memory" in database_url:
        # For in-memory databases (testing), use StaticPool
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )

    _configure_sqlite(engine, timeout)
    return engine


def init_database(engine: Optional[Engine] = None) -> None:
    """
    Initialize the database by creating all tables.

    Safe to call multiple times - existing tables won't be recreated.

    Args:
        engine: Optional engine to use. If None, uses global engine.
    """
    if engine is None:
        engine = get_engine()

    logger.info("Initializing database tables")
    Base.metadata.create_all(engine)
    logger.info("Database tables initialized successfully")


def get_engine(force_recreate: bool = False) -> Engine:
    """
    Get the global database engine, created from the application config.

    Args:
        force_recreate: If True, recreate the engine even if one exists

    Returns:
        Database engine
    """
    global _engine

    if _engine is None or force_recreate:
        config = get_config()
        _engine = create_database_engine(
            config.database_url, echo=config.echo_sql, timeout=config.db_timeout
        )

    return _engine


def bind_engine(engine: Engine) -> None:
    """
    Use ``engine`` as the global engine instead of the configured one.

    Args:
        engine: Engine created with create_database_engine()
    """
    global _engine, _SessionFactory

    _engine = engine
    _SessionFactory = None


def get_session_factory() -> sessionmaker:
    """
    Get the global session factory.

    Returns:
        Session factory (sessionmaker)
    """
    global _SessionFactory

    if _SessionFactory is None:
        engine = get_engine()
        _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)

    return _SessionFactory


def get_session() -> Session:
    """
    Create a new database session.

    Returns:
        New Session instance
    """
    session_factory = get_session_factory()
    return session_factory()


def translate_error(exc: Exception) -> Exception:
    """
    Map a store error onto the service exception hierarchy.

    Service errors and non-database exceptions are returned unchanged.

    Args:
        exc: Exception raised inside a unit of work

    Returns:
        The exception to surface to the caller
    """
    if isinstance(exc, ServiceError):
        return exc
    if isinstance(exc, IntegrityError):
        return ConflictError(f"Constraint violated: {exc.orig}", exc)
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError)):
        return ConnectivityError(str(getattr(exc, "orig", None) or exc), exc)
    if isinstance(exc, SQLAlchemyError):
        return DatabaseError(str(exc), exc)
    return exc


def _rollback(session: Session, error: Exception) -> None:
    """Roll back, raising a TransactionError naming both failures if rollback fails."""
    try:
        session.rollback()
    except Exception as rollback_error:
        logger.error(f"Rollback failed after {error!r}: {rollback_error!r}")
        raise TransactionError(
            f"transaction error: {error}, rollback error: {rollback_error}",
            original_error=error,
            rollback_error=rollback_error,
        ) from error
    logger.warning(f"Transaction rolled back: {error!r}")


@contextmanager
def session_scope():
    """
    Provide a transactional scope for database operations.

    This context manager handles session lifecycle automatically:
    - Creates a new session
    - Commits on success; a failed commit raises TransactionError
    - Rolls back on exception and re-raises it, translated by translate_error();
      if the rollback itself fails, raises TransactionError carrying both errors
    - Always closes the session

    Yields:
        Database session

    Example:
        with session_scope() as session:
            session.add(Unit(name="g"))
            # Commit happens automatically if no exception
    """
    session = get_session()
    try:
        yield session
    except Exception as exc:
        _rollback(session, exc)
        error = translate_error(exc)
        if error is exc:
            raise
        raise error from exc
    else:
        try:
            session.commit()
        except Exception as exc:
            _rollback(session, exc)
            raise TransactionError(f"commit failed: {exc}", original_error=exc) from exc
    finally:
        session.close()


def run_in_transaction(fn: Callable[[Querier], T], timeout: Optional[float] = None) -> T:
    """
    Run ``fn`` as a single unit of work.

    ``fn`` receives a Querier bound to a fresh transaction. Everything it
    writes is committed together if it returns, and rolled back if it raises.
    No retries happen here.

    With a ``timeout``, the wait for the SQLite write lock at BEGIN is limited
    to the time left, and any store error raised once the deadline has passed
    is reported as TransactionTimeout.

    Args:
        fn: Callable taking the transaction-scoped Querier
        timeout: Optional deadline in seconds; Querier calls made after it has
            passed raise TransactionTimeout and the transaction is rolled back

    Returns:
        Whatever ``fn`` returns
    """
    if timeout is None:
        with session_scope() as session:
            return fn(Querier(session))

    deadline = Deadline(timeout)
    try:
        with session_scope() as session:
            deadline.check()
            if not session.in_transaction():
                busy_ms = math.ceil(deadline.remaining() * 1000)
                session.connection(execution_options={BUSY_TIMEOUT_OPTION: busy_ms})
            return fn(Querier(session, deadline=deadline))
    except (ConnectivityError, DatabaseError) as exc:
        if deadline.expired():
            raise TransactionTimeout(timeout) from exc
        raise


def seed_units(session: Optional[Session] = None) -> int:
    """
    Insert the default units that are not present yet.

    Args:
        session: Optional session for transaction sharing

    Returns:
        Number of units inserted
    """

    def _impl(sess: Session) -> int:
        existing = {name for (name,) in sess.query(Unit.name).all()}
        missing = [name for name in DEFAULT_UNITS if name not in existing]
        for name in missing:
            sess.add(Unit(name=name))
        sess.flush()
        return len(missing)

    if session is not None:
        return _impl(session)
    with session_scope() as sess:
        inserted = _impl(sess)
    logger.info(f"Seeded {inserted} unit(s)")
    return inserted


def verify_database(engine: Optional[Engine] = None) -> bool:
    """
    Verify that the database is accessible and has tables.

    Returns:
        True if database is valid, False otherwise
    """
    try:
        engine = engine or get_engine()
        tables = inspect(engine).get_table_names()
        expected_tables = ["ingredients", "recipes", "schedules"]
        return all(table in tables for table in expected_tables)
    except SQLAlchemyError as e:
        logger.error(f"Database verification failed: {e}")
        return False


def reset_database(confirm: bool = False, engine: Optional[Engine] = None) -> None:
    """
    Drop all tables and recreate the database.

    WARNING: This will delete all data!

    Args:
        confirm: Must be True to actually reset. Safety check.
        engine: Optional engine to use. If None, uses global engine.

    Raises:
        ValueError: If confirm is not True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

    engine = engine or get_engine()
    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")
    Base.metadata.create_all(engine)
    logger.info("Tables recreated")


def close_connections() -> None:
    """
    Close all sessions and dispose of the global engine.

    Useful for cleanup or before application exit.
    """
    global _engine, _SessionFactory

    if _SessionFactory is not None:
        close_all_sessions()
        _SessionFactory = None

    if _engine is not None:
        _engine.dispose()
        _engine = None

    logger.info("Database connections closed")

