"""Dataset generation pipeline.

Stages run strictly in order because each one samples references from
the id ranges committed by the stages before it:

    reset -> categories -> tags -> products -> product_tags -> finalize

Every batch is committed on its own. A failed run leaves the schema reset
but incomplete; the next run starts with a full reset.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from sqlalchemy import func, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from datagen import schema
from datagen.config import ScaleConfig
from datagen.errors import ConfigurationError, ConstraintViolationError, StorageError
from datagen.generators import Row, RowGenerator, batched, dedupe_pairs
from datagen.metrics import GenerationResult, StageMetrics
from datagen.settings import get_settings

logger = logging.getLogger(__name__)

# Log progress each time a stage crosses a multiple of this many rows
PROGRESS_INTERVAL = 100_000

# Dialects with an INSERT ... ON CONFLICT DO NOTHING construct
_INSERT_IGNORE = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class DatasetGenerator:
    """Populate the benchmark catalog at a given scale."""

    def __init__(
        self,
        engine: Engine,
        scale: ScaleConfig,
        seed: Optional[int] = None,
        batch_size: Optional[int] = None,
    ):
        """Initialize dataset generator.

        Args:
            engine: Target database engine
            scale: Row counts to generate
            seed: Random seed for reproducibility
            batch_size: Rows per insert batch (defaults to settings)

        Raises:
            ConfigurationError: If batch_size is below 1, or links are
                requested on a dialect that cannot ignore duplicate keys
        """
        if batch_size is None:
            batch_size = get_settings().batch_size
        if batch_size < 1:
            raise ConfigurationError(f"Batch size must be at least 1, got {batch_size}")

        self.engine = engine
        self.scale = scale
        self.seed = seed
        self.batch_size = batch_size
        self.rows = RowGenerator(seed=seed)
        self.result = GenerationResult(scale_name=scale.name, seed=seed)
        if scale.associations_enabled:
            self._link_insert()

    def _link_insert(self):
        """Build the duplicate-ignoring insert for product/tag links."""
        dialect = self.engine.dialect.name
        if dialect not in _INSERT_IGNORE:
            raise ConfigurationError(
                f"Association stage needs INSERT ... ON CONFLICT support; '{dialect}' is not supported"
            )
        return _INSERT_IGNORE[dialect](schema.product_tag).on_conflict_do_nothing()

    @contextmanager
    def _stage(self, name: str) -> Iterator[StageMetrics]:
        """Run a stage, timing it and translating storage errors."""
        metrics = self.result.begin_stage(name)
        logger.info(f"Stage '{name}' started")
        try:
            yield metrics
        except IntegrityError as e:
            logger.error(f"Stage '{name}' hit a constraint violation: {e.orig}")
            raise ConstraintViolationError(name, f"constraint violation: {e.orig}", e) from e
        except SQLAlchemyError as e:
            logger.error(f"Stage '{name}' failed: {e}")
            raise StorageError(name, f"storage failure: {e}", e) from e
        finally:
            metrics.finish()
        logger.info(
            f"Stage '{name}' finished: {metrics.rows:,} rows in "
            f"{metrics.elapsed_seconds:.2f}s ({metrics.rows_per_second:,.0f} rows/s)"
        )

    def _insert(self, metrics: StageMetrics, statement, rows: Iterable[Row], dedupe: bool = False):
        """Insert rows in batches, committing after each batch."""
        with self.engine.connect() as conn:
            for batch in batched(rows, self.batch_size):
                if dedupe:
                    batch = dedupe_pairs(batch)
                before = metrics.rows
                conn.execute(statement, batch)
                conn.commit()
                metrics.record_batch(len(batch))
                if metrics.rows // PROGRESS_INTERVAL > before // PROGRESS_INTERVAL:
                    logger.info(f"  {metrics.stage}: {metrics.rows:,} rows written")

    def reset(self):
        """Drop and recreate the catalog tables.

        Destroys any previously generated dataset. Safe to call on an
        empty database and safe to call repeatedly.
        """
        with self._stage("reset"):
            with self.engine.begin() as conn:
                schema.reset_schema(conn)

    def generate_categories(self):
        """Insert categories 1..N."""
        with self._stage("categories") as metrics:
            self._insert(
                metrics,
                schema.category.insert(),
                self.rows.category_rows(self.scale.categories),
            )

    def generate_tags(self):
        """Insert tags 1..M."""
        with self._stage("tags") as metrics:
            self._insert(
                metrics,
                schema.tag.insert(),
                self.rows.tag_rows(self.scale.tags),
            )

    def generate_products(self):
        """Insert products 1..P, each linked to a random category."""
        with self._stage("products") as metrics:
            self._insert(
                metrics,
                schema.product.insert(),
                self.rows.product_rows(self.scale.products, self.scale.categories),
            )

    def generate_product_tags(self):
        """Insert random product/tag links, ignoring repeated pairs.

        Does nothing when the scale has no association attempts.

        Raises:
            ConfigurationError: If the dialect cannot ignore duplicate keys
        """
        if not self.scale.associations_enabled:
            logger.info("Stage 'product_tags' skipped: no associations requested")
            return

        statement = self._link_insert()

        with self._stage("product_tags") as metrics:
            self._insert(
                metrics,
                statement,
                self.rows.product_tag_pairs(
                    self.scale.associations, self.scale.products, self.scale.tags
                ),
                dedupe=True,
            )
            # Conflicting pairs were skipped by the store; report what landed
            with self.engine.connect() as conn:
                metrics.rows = conn.execute(
                    select(func.count()).select_from(schema.product_tag)
                ).scalar_one()

    def finalize(self):
        """Advance id sequences and refresh planner statistics on PostgreSQL."""
        if self.engine.dialect.name != "postgresql":
            return

        with self._stage("finalize"):
            with self.engine.begin() as conn:
                for table in schema.IDENTITY_TABLES:
                    conn.execute(
                        text(
                            f"SELECT setval(pg_get_serial_sequence('{table.name}', 'id'), "
                            f"COALESCE(MAX(id), 1), MAX(id) IS NOT NULL) FROM {table.name}"
                        )
                    )

            # ANALYZE cannot run inside a transaction block
            with self.engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
                for table in schema.metadata.sorted_tables:
                    conn.execute(text(f"ANALYZE {table.name}"))

    def populate(self) -> GenerationResult:
        """Run the generation stages against an already reset schema."""
        self.generate_categories()
        self.generate_tags()
        self.generate_products()
        self.generate_product_tags()
        self.finalize()
        return self.result

    def run(self) -> GenerationResult:
        """Reset the schema and regenerate the full dataset.

        Returns:
            GenerationResult with per-stage metrics

        Raises:
            ConstraintViolationError: If the store rejects a row
            StorageError: If the store is unreachable or rejects a write
        """
        self.result = GenerationResult(scale_name=self.scale.name, seed=self.seed)
        # Restart the random stream so a seeded generator repeats its rows
        self.rows = RowGenerator(seed=self.seed)
        logger.info(
            f"Generating scale '{self.scale.name}': {self.scale.categories:,} categories, "
            f"{self.scale.tags:,} tags, {self.scale.products:,} products, "
            f"{self.scale.associations:,} association attempts"
        )
        self.reset()
        self.populate()
        logger.info(
            f"Generation complete: {self.result.total_rows:,} rows in "
            f"{self.result.elapsed_seconds:.2f}s"
        )
        return self.result
