"""Database engine and connection management."""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from datagen.errors import StorageError
from datagen.settings import get_settings

logger = logging.getLogger(__name__)

# Slow query threshold in milliseconds
SLOW_QUERY_THRESHOLD_MS = 1000

# Statement statistics by engine
_query_stats: dict[int, "QueryStats"] = {}


@dataclass
class QueryStats:
    """Track statement statistics for an engine."""
    total_queries: int = 0
    total_time_ms: float = 0.0
    slow_queries: int = 0
    by_operation: dict = field(default_factory=dict)

    def record(self, op_type: str, elapsed_ms: float):
        """Record a statement execution."""
        self.total_queries += 1
        self.total_time_ms += elapsed_ms
        self.by_operation[op_type] = self.by_operation.get(op_type, 0) + 1
        if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
            self.slow_queries += 1


def _get_operation_type(statement: str) -> str:
    """Determine the operation type from a SQL statement."""
    words = statement.strip().split(None, 1)
    if not words:
        return "QUERY"
    keyword = words[0].upper()
    if keyword in ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ANALYZE"):
        return keyword
    return "QUERY"


def _setup_query_logging(engine: Engine) -> QueryStats:
    """Set up statement timing and logging for an engine."""
    stats = QueryStats()

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start_times = conn.info.get("query_start_time", [])
        if not start_times:
            return
        elapsed = (time.perf_counter() - start_times.pop()) * 1000
        stmt_display = " ".join(statement.split())
        if len(stmt_display) > 200:
            stmt_display = stmt_display[:200] + "..."
        op_type = _get_operation_type(statement)
        stats.record(op_type, elapsed)

        # Batch parameters are large; never log them
        if elapsed > SLOW_QUERY_THRESHOLD_MS:
            logger.warning(
                "[%s] SLOW QUERY %.2fms (threshold: %dms): %s",
                op_type,
                elapsed,
                SLOW_QUERY_THRESHOLD_MS,
                stmt_display,
            )
        else:
            logger.debug("[%s] %.2fms: %s", op_type, elapsed, stmt_display)

    return stats


def _enable_sqlite_foreign_keys(engine: Engine):
    """Make SQLite enforce declared foreign keys on every connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(url: Optional[str] = None) -> Engine:
    """Create an engine for the given URL or the configured DSN.

    Args:
        url: SQLAlchemy URL; defaults to the settings DSN

    Returns:
        Engine with statement timing attached
    """
    settings = get_settings()
    url = url or settings.dsn
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        engine = create_engine(url)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(
            url,
            pool_size=settings.pool_size,
            max_overflow=settings.pool_max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=True,
        )

    _query_stats[id(engine)] = _setup_query_logging(engine)
    logger.debug("Created %s engine for %s", backend, engine.url.render_as_string(hide_password=True))
    return engine


def get_query_stats(engine: Engine) -> QueryStats:
    """Get statement statistics for an engine created by this module."""
    return _query_stats.setdefault(id(engine), QueryStats())


def ensure_database(url: Optional[str] = None) -> bool:
    """Create the target PostgreSQL database if it does not exist.

    Args:
        url: SQLAlchemy URL; defaults to the settings DSN

    Returns:
        True if the database was created, False if it already existed
        or the backend creates databases implicitly

    Raises:
        StorageError: If the server cannot be reached or refuses the create
    """
    target = make_url(url or get_settings().dsn)
    if target.get_backend_name() != "postgresql":
        return False

    admin_engine = create_engine(
        target.set(database="postgres"), isolation_level="AUTOCOMMIT"
    )
    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": target.database},
            ).scalar()
            if exists:
                logger.info("Database %s exists", target.database)
                return False
            logger.info("Creating database %s", target.database)
            conn.execute(text(f'CREATE DATABASE "{target.database}"'))
            return True
    except SQLAlchemyError as e:
        raise StorageError("bootstrap", f"cannot create database {target.database}: {e}", e) from e
    finally:
        admin_engine.dispose()


def check_connection(engine: Engine) -> bool:
    """Run a trivial query to confirm the database is reachable."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1
