"""Tests for dataset verification."""

from sqlalchemy import delete, update

from datagen import schema
from datagen.config import ScaleConfig
from datagen.verify import verify_dataset


def test_verify_clean_dataset(populated_engine, small_scale):
    """Test a generated dataset has no violations."""
    report = verify_dataset(populated_engine, small_scale)
    assert report.ok
    assert report.violations == []
    assert report.scale_name == "test"


def test_verify_count_mismatch(populated_engine):
    """Test verification against a different scale reports it."""
    other = ScaleConfig(name="other", description="", categories=4, tags=6, products=60)
    report = verify_dataset(populated_engine, other)
    assert not report.ok
    assert any("product: expected 60 rows, found 50" in v for v in report.violations)


def test_verify_detects_id_gap(populated_engine, small_scale):
    """Test a missing id breaks the contiguous range."""
    with populated_engine.begin() as conn:
        conn.execute(delete(schema.product).where(schema.product.c.id == 1))

    report = verify_dataset(populated_engine, small_scale)
    assert any("ids span [2, 50]" in v for v in report.violations)


def test_verify_detects_hits_out_of_range(populated_engine, small_scale):
    """Test hit counters past 999 are reported."""
    with populated_engine.begin() as conn:
        conn.execute(update(schema.product).where(schema.product.c.id <= 3).values(hits=5000))

    report = verify_dataset(populated_engine, small_scale)
    assert any("3 rows have hits outside [0, 999]" in v for v in report.violations)


def test_verify_detects_category_outside_scale(populated_engine):
    """Test references past the expected category range are reported."""
    fewer = ScaleConfig(name="fewer", description="", categories=1, tags=6, products=50)
    report = verify_dataset(populated_engine, fewer)
    assert any("outside [1, 1]" in v for v in report.violations)


def test_verify_detects_unexpected_links(populated_engine, small_scale):
    """Test links are reported when the association stage was disabled."""
    with populated_engine.begin() as conn:
        conn.execute(schema.product_tag.insert(), [{"tag_id": 1, "product_id": 1}])

    report = verify_dataset(populated_engine, small_scale)
    assert report.counts["product_tag"] == 1
    assert any("product_tag: expected no rows" in v for v in report.violations)
