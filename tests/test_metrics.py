"""Tests for generation metrics."""

from datagen.metrics import GenerationResult, StageMetrics


def test_stage_metrics_initial_state():
    """Test an unstarted stage reports zeros."""
    metrics = StageMetrics(stage="products")
    assert metrics.rows == 0
    assert metrics.elapsed_seconds == 0.0
    assert metrics.rows_per_second == 0.0


def test_record_batch():
    """Test batches accumulate rows."""
    metrics = StageMetrics(stage="products")
    metrics.start()
    metrics.record_batch(100)
    metrics.record_batch(50)
    metrics.finish()

    assert metrics.rows == 150
    assert metrics.batches == 2
    assert metrics.elapsed_seconds >= 0


def test_to_dict():
    """Test the serialized form."""
    metrics = StageMetrics(stage="tags")
    metrics.record_batch(3)
    data = metrics.to_dict()
    assert data["stage"] == "tags"
    assert data["rows"] == 3
    assert data["batches"] == 1


def test_generation_result_stages():
    """Test stage bookkeeping on a result."""
    result = GenerationResult(scale_name="tiny", seed=1)
    result.begin_stage("reset").finish()
    categories = result.begin_stage("categories")
    categories.record_batch(3)
    categories.finish()

    assert result.last_stage == "categories"
    assert result.get_stage("categories") is categories
    assert result.get_stage("products") is None
    assert result.total_rows == 3


def test_generation_result_summary():
    """Test summary contents."""
    result = GenerationResult(scale_name="tiny", seed=9)
    result.begin_stage("tags").record_batch(5)

    summary = result.get_summary()
    assert summary["scale"] == "tiny"
    assert summary["seed"] == 9
    assert summary["last_stage"] == "tags"
    assert summary["total_rows"] == 5
    assert len(summary["stages"]) == 1
