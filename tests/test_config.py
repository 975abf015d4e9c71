"""Tests for scale configuration and presets."""

import pytest

from datagen.config import SCALES, ScaleConfig, get_scale, list_scales
from datagen.errors import ConfigurationError


def test_scales_exist():
    """Test that all presets exist."""
    for name in ["reference", "linked", "small", "tiny"]:
        assert name in SCALES


def test_reference_scale():
    """Test the benchmark reference dimensions."""
    scale = get_scale("reference")
    assert scale.categories == 100
    assert scale.tags == 500
    assert scale.products == 1_000_000
    assert scale.associations == 0
    assert not scale.associations_enabled


def test_linked_scale_enables_associations():
    """Test that the linked preset turns on the association stage."""
    scale = get_scale("linked")
    assert scale.associations == 5_000_000
    assert scale.associations_enabled
    assert scale.products == get_scale("reference").products


def test_get_scale_invalid():
    """Test getting invalid scale raises error."""
    with pytest.raises(ValueError, match="Unknown scale"):
        get_scale("enormous")


def test_list_scales():
    """Test listing all presets."""
    names = [s.name for s in list_scales()]
    assert names == list(SCALES.keys())


def test_products_without_categories_rejected():
    """Products cannot reference an empty category range."""
    with pytest.raises(ConfigurationError, match="no categories"):
        ScaleConfig(name="bad", description="", categories=0, products=10)


def test_configuration_error_is_value_error():
    """Callers catching ValueError also see precondition failures."""
    with pytest.raises(ValueError):
        ScaleConfig(name="bad", description="", categories=0, products=1)


def test_negative_counts_rejected():
    """Test that negative counts are rejected."""
    with pytest.raises(ConfigurationError, match="tags"):
        ScaleConfig(name="bad", description="", tags=-1)


def test_associations_need_tags():
    """Test that links need a non-empty tag range."""
    with pytest.raises(ConfigurationError, match="associations"):
        ScaleConfig(name="bad", description="", tags=0, associations=10)


def test_empty_scale_allowed():
    """A scale with no rows at all is valid."""
    scale = ScaleConfig(name="empty", description="", categories=0, tags=0, products=0)
    assert scale.products == 0


def test_with_overrides():
    """Test overriding counts on a preset."""
    scale = get_scale("small").with_overrides(products=123, associations=7)
    assert scale.products == 123
    assert scale.associations == 7
    assert scale.categories == get_scale("small").categories
    assert scale.name == "small*"


def test_with_overrides_noop_returns_same():
    """No overrides keep the preset untouched."""
    scale = get_scale("tiny")
    assert scale.with_overrides() is scale


def test_with_overrides_revalidates():
    """Overrides are validated like a new config."""
    with pytest.raises(ConfigurationError):
        get_scale("reference").with_overrides(categories=0)
