"""Invariant checks for a generated dataset."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import Table, func, or_, select
from sqlalchemy.engine import Connection, Engine

from datagen import schema
from datagen.config import MAX_HITS, ScaleConfig

logger = logging.getLogger(__name__)


@dataclass
class VerificationReport:
    """Row counts and invariant violations found in the catalog."""

    scale_name: str
    counts: dict[str, int] = field(default_factory=dict)
    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def add(self, message: str):
        logger.warning(f"Verification failed: {message}")
        self.violations.append(message)


def _count(conn: Connection, table: Table, *conditions) -> int:
    query = select(func.count()).select_from(table)
    if conditions:
        query = query.where(*conditions)
    return conn.execute(query).scalar_one()


def _check_identity_range(conn: Connection, report: VerificationReport, table: Table, expected: int):
    """Check that ids are exactly 1..expected.

    With a primary key on id, count == expected, min == 1 and
    max == expected together rule out gaps and duplicates.
    """
    count, low, high = conn.execute(
        select(func.count(), func.min(table.c.id), func.max(table.c.id))
    ).one()
    report.counts[table.name] = count

    if count != expected:
        report.add(f"{table.name}: expected {expected} rows, found {count}")
    if count and (low != 1 or high != count):
        report.add(f"{table.name}: ids span [{low}, {high}] instead of [1, {count}]")


def verify_dataset(engine: Engine, scale: ScaleConfig) -> VerificationReport:
    """Check a generated catalog against the expected scale.

    Args:
        engine: Database holding the catalog
        scale: Scale the catalog was generated with

    Returns:
        VerificationReport; ``ok`` is True when no invariant is broken
    """
    report = VerificationReport(scale_name=scale.name)
    product = schema.product
    product_tag = schema.product_tag

    with engine.connect() as conn:
        _check_identity_range(conn, report, schema.category, scale.categories)
        _check_identity_range(conn, report, schema.tag, scale.tags)
        _check_identity_range(conn, report, product, scale.products)

        out_of_range = _count(
            conn,
            product,
            or_(product.c.category_id < 1, product.c.category_id > scale.categories),
        )
        if out_of_range:
            report.add(f"product: {out_of_range} rows reference a category outside [1, {scale.categories}]")

        dangling = conn.execute(
            select(func.count())
            .select_from(product.outerjoin(schema.category, product.c.category_id == schema.category.c.id))
            .where(schema.category.c.id.is_(None))
        ).scalar_one()
        if dangling:
            report.add(f"product: {dangling} rows reference a missing category")

        bad_hits = _count(conn, product, or_(product.c.hits < 0, product.c.hits >= MAX_HITS))
        if bad_hits:
            report.add(f"product: {bad_hits} rows have hits outside [0, {MAX_HITS - 1}]")

        links = _count(conn, product_tag)
        report.counts[product_tag.name] = links
        if not scale.associations_enabled and links:
            report.add(f"product_tag: expected no rows, found {links}")
        elif links > scale.associations:
            report.add(f"product_tag: {links} rows exceed {scale.associations} attempts")

        orphans = conn.execute(
            select(func.count())
            .select_from(
                product_tag.outerjoin(product, product_tag.c.product_id == product.c.id).outerjoin(
                    schema.tag, product_tag.c.tag_id == schema.tag.c.id
                )
            )
            .where(or_(product.c.id.is_(None), schema.tag.c.id.is_(None)))
        ).scalar_one()
        if orphans:
            report.add(f"product_tag: {orphans} rows reference a missing product or tag")

        duplicates = conn.execute(
            select(func.count()).select_from(
                select(product_tag.c.tag_id, product_tag.c.product_id)
                .group_by(product_tag.c.tag_id, product_tag.c.product_id)
                .having(func.count() > 1)
                .subquery()
            )
        ).scalar_one()
        if duplicates:
            report.add(f"product_tag: {duplicates} (tag, product) pairs repeat")

    if report.ok:
        logger.info(f"Dataset matches scale '{scale.name}': {report.counts}")
    return report
