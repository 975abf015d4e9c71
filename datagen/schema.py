"""Table definitions for the benchmark catalog."""

import logging

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

metadata = MetaData()

category = Table(
    "category",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
)

tag = Table(
    "tag",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
)

product = Table(
    "product",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("category_id", Integer, ForeignKey("category.id"), nullable=False),
    Column("hits", BigInteger, nullable=False),
    # Serves top-N-by-hits lookups within a category
    Index("ix_product_category_hits", "category_id", "hits"),
)

product_tag = Table(
    "product_tag",
    metadata,
    Column("tag_id", Integer, ForeignKey("tag.id"), nullable=False),
    Column("product_id", Integer, ForeignKey("product.id"), nullable=False),
    PrimaryKeyConstraint("tag_id", "product_id"),
)

# Tables with a dense 1..N identity
IDENTITY_TABLES = (category, tag, product)


def drop_tables(conn: Connection):
    """Drop all catalog tables, dependents first.

    On PostgreSQL each drop cascades so views or tables built on top of
    the catalog by downstream workloads go with it.
    """
    if conn.dialect.name == "postgresql":
        for table in reversed(metadata.sorted_tables):
            conn.execute(text(f"DROP TABLE IF EXISTS {table.name} CASCADE"))
    else:
        metadata.drop_all(conn, checkfirst=True)


def reset_schema(conn: Connection):
    """Drop and recreate the catalog tables, leaving them empty."""
    logger.info("Resetting schema: %s", ", ".join(t.name for t in metadata.sorted_tables))
    drop_tables(conn)
    metadata.create_all(conn)
