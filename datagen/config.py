"""Scale configuration and presets for dataset generation."""

from dataclasses import dataclass, replace
from typing import Optional

from datagen.errors import ConfigurationError

# Popularity counters are drawn from [0, MAX_HITS)
MAX_HITS = 1000


@dataclass(frozen=True)
class ScaleConfig:
    """Row counts for one generation run."""

    name: str
    description: str
    categories: int = 100
    tags: int = 500
    products: int = 1_000_000

    # Product/tag link attempts; 0 disables the association stage
    associations: int = 0

    def __post_init__(self):
        """Validate scale parameters after initialization."""
        counts = {
            "categories": self.categories,
            "tags": self.tags,
            "products": self.products,
            "associations": self.associations,
        }
        negative = [field for field, value in counts.items() if value < 0]
        if negative:
            raise ConfigurationError(
                f"Counts must be non-negative for scale '{self.name}': {', '.join(negative)}"
            )

        # Products sample their category from [1, categories]
        if self.products > 0 and self.categories == 0:
            raise ConfigurationError(
                f"Scale '{self.name}' has {self.products} products but no categories to reference"
            )

        if self.associations > 0 and (self.products == 0 or self.tags == 0):
            raise ConfigurationError(
                f"Scale '{self.name}' requests {self.associations} associations "
                f"but has {self.products} products and {self.tags} tags"
            )

    @property
    def associations_enabled(self) -> bool:
        """Whether the product/tag stage runs."""
        return self.associations > 0

    def with_overrides(
        self,
        categories: Optional[int] = None,
        tags: Optional[int] = None,
        products: Optional[int] = None,
        associations: Optional[int] = None,
    ) -> "ScaleConfig":
        """Create a new config with some counts replaced.

        Args:
            categories: Category count override
            tags: Tag count override
            products: Product count override
            associations: Association attempt override

        Returns:
            New ScaleConfig; the original is returned when nothing changes

        Raises:
            ConfigurationError: If the combined counts are invalid
        """
        overrides = {
            "categories": categories,
            "tags": tags,
            "products": products,
            "associations": associations,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if not overrides:
            return self
        return replace(self, name=f"{self.name}*", **overrides)


# Predefined scales; "reference" matches the benchmark's published dataset
SCALES = {
    "reference": ScaleConfig(
        name="reference",
        description="Benchmark reference dataset",
    ),
    "linked": ScaleConfig(
        name="linked",
        description="Reference dataset with product/tag links",
        associations=5_000_000,
    ),
    "small": ScaleConfig(
        name="small",
        description="Quick local runs",
        categories=10,
        tags=50,
        products=10_000,
    ),
    "tiny": ScaleConfig(
        name="tiny",
        description="Smoke tests",
        categories=3,
        tags=5,
        products=20,
    ),
}


def get_scale(name: str) -> ScaleConfig:
    """Get a scale preset by name.

    Args:
        name: Scale name (reference, linked, small, tiny)

    Returns:
        ScaleConfig

    Raises:
        ValueError: If scale name is not found
    """
    if name not in SCALES:
        available = ", ".join(SCALES.keys())
        raise ValueError(f"Unknown scale '{name}'. Available: {available}")
    return SCALES[name]


def list_scales() -> list[ScaleConfig]:
    """List all available scale presets."""
    return list(SCALES.values())
