"""Access paths the benchmark workloads run against the catalog."""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from datagen.models import Product

logger = logging.getLogger(__name__)


def _to_product(row) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description,
        category_id=row.category_id,
        hits=row.hits,
    )


def get_product(conn: Connection, product_id: int) -> Optional[Product]:
    """Get a product by ID."""
    row = conn.execute(
        text("""
            SELECT id, name, description, category_id, hits
            FROM product
            WHERE id = :product_id
        """),
        {"product_id": product_id},
    ).fetchone()
    if not row:
        return None
    return _to_product(row)


def mark_hit(conn: Connection, product: Product) -> bool:
    """Increment a product's hit counter.

    Returns:
        True if the product row exists and was updated
    """
    result = conn.execute(
        text("UPDATE product SET hits = hits + 1 WHERE id = :product_id"),
        {"product_id": product.id},
    )
    return result.rowcount == 1


def recommend_by_category(conn: Connection, product: Product, limit: int = 5) -> list[Product]:
    """Get the most hit products in the same category.

    Served by the (category_id, hits) index. The product itself is
    eligible.
    """
    rows = conn.execute(
        text("""
            SELECT id, name, description, category_id, hits
            FROM product
            WHERE category_id = :category_id
            ORDER BY hits DESC, id
            LIMIT :limit
        """),
        {"category_id": product.category_id, "limit": limit},
    ).fetchall()
    return [_to_product(row) for row in rows]


def recommend_by_tags(conn: Connection, product: Product, limit: int = 5) -> list[Product]:
    """Get the most hit products sharing at least one tag with a product.

    Returns an empty list when the product has no tags.
    """
    rows = conn.execute(
        text("""
            SELECT DISTINCT p.id, p.name, p.description, p.category_id, p.hits
            FROM product AS p
            JOIN product_tag AS t ON p.id = t.product_id
            WHERE t.tag_id IN (
                SELECT tag_id FROM product_tag WHERE product_id = :product_id
            )
            ORDER BY p.hits DESC, p.id
            LIMIT :limit
        """),
        {"product_id": product.id, "limit": limit},
    ).fetchall()
    logger.debug(f"Tag recommendations for product {product.id}: {len(rows)} rows")
    return [_to_product(row) for row in rows]
