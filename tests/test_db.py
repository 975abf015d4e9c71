"""Tests for engine setup."""

from sqlalchemy import text

from datagen.db import (
    _get_operation_type,
    check_connection,
    create_db_engine,
    ensure_database,
    get_query_stats,
)


def test_get_operation_type():
    """Test statement classification."""
    assert _get_operation_type("SELECT 1") == "SELECT"
    assert _get_operation_type("  insert into tag values (1)") == "INSERT"
    assert _get_operation_type("DROP TABLE tag") == "DROP"
    assert _get_operation_type("PRAGMA foreign_keys") == "QUERY"
    assert _get_operation_type("") == "QUERY"


def test_sqlite_foreign_keys_enabled(engine):
    """Test SQLite connections enforce foreign keys."""
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_query_stats_recorded(engine):
    """Test statements are timed per engine."""
    stats = get_query_stats(engine)
    before = stats.total_queries
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        conn.execute(text("SELECT 2"))

    assert stats.total_queries >= before + 2
    assert stats.by_operation["SELECT"] >= 2


def test_check_connection(engine):
    """Test the connectivity probe."""
    assert check_connection(engine)


def test_ensure_database_noop_for_sqlite(db_url):
    """SQLite creates its file on connect; nothing to bootstrap."""
    assert ensure_database(db_url) is False


def test_create_engine_from_url(db_url):
    """Test building an engine from an explicit URL."""
    engine = create_db_engine(db_url)
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        engine.dispose()
