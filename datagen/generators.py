"""Row generators for the benchmark catalog."""

import random
from itertools import islice
from typing import Any, Iterable, Iterator, Optional

from datagen.config import MAX_HITS

Row = dict[str, Any]


def batched(rows: Iterable[Row], size: int) -> Iterator[list[Row]]:
    """Split a row stream into lists of at most ``size`` rows."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    iterator = iter(rows)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class RowGenerator:
    """Generate catalog rows with dense 1-based identities."""

    def __init__(self, seed: Optional[int] = None):
        """Initialize row generator.

        Args:
            seed: Random seed for reproducibility
        """
        self.seed = seed
        self.rng = random.Random(seed)

    def category_rows(self, count: int) -> Iterator[Row]:
        """Generate category rows.

        Args:
            count: Number of categories

        Yields:
            Rows with ids 1..count and names "Category <id>"
        """
        for i in range(1, count + 1):
            yield {"id": i, "name": f"Category {i}"}

    def tag_rows(self, count: int) -> Iterator[Row]:
        """Generate tag rows with ids 1..count and names "Tag <id>"."""
        for i in range(1, count + 1):
            yield {"id": i, "name": f"Tag {i}"}

    def product_rows(self, count: int, category_count: int) -> Iterator[Row]:
        """Generate product rows.

        Each product draws its category uniformly from [1, category_count]
        and its hit counter uniformly from [0, MAX_HITS).

        Args:
            count: Number of products
            category_count: Size of the committed category id range

        Yields:
            Product rows
        """
        if count > 0 and category_count < 1:
            raise ValueError("Products need at least one category to reference")

        rng = self.rng
        for i in range(1, count + 1):
            yield {
                "id": i,
                "name": f"Product {i}",
                "description": f"Description for Product {i}",
                "category_id": rng.randint(1, category_count),
                "hits": rng.randrange(MAX_HITS),
            }

    def product_tag_pairs(
        self, attempts: int, product_count: int, tag_count: int
    ) -> Iterator[Row]:
        """Generate candidate product/tag links.

        Both sides are drawn independently and uniformly, so pairs can
        repeat; the caller drops repeats on insert.

        Args:
            attempts: Number of pairs to draw
            product_count: Size of the committed product id range
            tag_count: Size of the committed tag id range

        Yields:
            Rows with tag_id and product_id
        """
        if attempts > 0 and (product_count < 1 or tag_count < 1):
            raise ValueError("Associations need at least one product and one tag")

        rng = self.rng
        for _ in range(attempts):
            yield {
                "tag_id": rng.randint(1, tag_count),
                "product_id": rng.randint(1, product_count),
            }


def dedupe_pairs(batch: list[Row]) -> list[Row]:
    """Drop repeated (tag_id, product_id) pairs, keeping first occurrences."""
    seen = set()
    unique = []
    for row in batch:
        key = (row["tag_id"], row["product_id"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(row)
    return unique
