"""Pytest configuration and fixtures."""

import os

import pytest

from datagen.config import ScaleConfig
from datagen.db import create_db_engine
from datagen.pipeline import DatasetGenerator


def is_pg_available():
    """Check if a PostgreSQL DATABASE_URL is configured."""
    return os.environ.get("DATABASE_URL", "").startswith("postgresql")


# Skip marker for tests that need PostgreSQL-only behaviour
requires_pg = pytest.mark.skipif(
    not is_pg_available(),
    reason="PostgreSQL not available - set DATABASE_URL=postgresql+psycopg2://... to run",
)


@pytest.fixture
def db_url(tmp_path):
    """SQLite database file private to the test."""
    return f"sqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def engine(db_url):
    """Engine with foreign keys enforced."""
    engine = create_db_engine(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def small_scale():
    """Scale without product/tag links."""
    return ScaleConfig(
        name="test",
        description="Unit test scale",
        categories=4,
        tags=6,
        products=50,
    )


@pytest.fixture
def linked_scale():
    """Scale with the association stage enabled."""
    return ScaleConfig(
        name="test-linked",
        description="Unit test scale with links",
        categories=4,
        tags=6,
        products=50,
        associations=200,
    )


@pytest.fixture
def populated_engine(engine, small_scale):
    """Engine holding a freshly generated small dataset."""
    DatasetGenerator(engine, small_scale, seed=7, batch_size=16).run()
    return engine
