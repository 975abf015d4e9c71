"""Metrics tracking for generation runs."""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class StageMetrics:
    """Track row counts and timing for one pipeline stage."""

    stage: str
    rows: int = 0
    batches: int = 0
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    def start(self):
        """Mark the stage as started."""
        self.started_at = time.perf_counter()

    def record_batch(self, rows: int):
        """Record a committed batch.

        Args:
            rows: Number of rows written in the batch
        """
        self.rows += rows
        self.batches += 1

    def finish(self):
        """Mark the stage as finished."""
        self.finished_at = time.perf_counter()

    @property
    def elapsed_seconds(self) -> float:
        """Seconds between start and finish (or now, if still running)."""
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else time.perf_counter()
        return end - self.started_at

    @property
    def rows_per_second(self) -> float:
        """Calculate write throughput.

        Returns:
            Rows per second, 0 when nothing was timed
        """
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return 0.0
        return self.rows / elapsed

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "rows": self.rows,
            "batches": self.batches,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "rows_per_second": round(self.rows_per_second, 1),
        }


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    scale_name: str
    seed: Optional[int] = None
    started_at: datetime = field(default_factory=datetime.now)
    stages: list[StageMetrics] = field(default_factory=list)
    last_stage: Optional[str] = None

    def begin_stage(self, stage: str) -> StageMetrics:
        """Open metrics for a new stage and mark it as the last reached."""
        metrics = StageMetrics(stage=stage)
        metrics.start()
        self.stages.append(metrics)
        self.last_stage = stage
        return metrics

    def get_stage(self, stage: str) -> Optional[StageMetrics]:
        for metrics in self.stages:
            if metrics.stage == stage:
                return metrics
        return None

    @property
    def total_rows(self) -> int:
        return sum(m.rows for m in self.stages)

    @property
    def elapsed_seconds(self) -> float:
        return sum(m.elapsed_seconds for m in self.stages)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the run.

        Returns:
            Dictionary of run-level and per-stage figures
        """
        return {
            "scale": self.scale_name,
            "seed": self.seed,
            "started_at": self.started_at.isoformat(),
            "last_stage": self.last_stage,
            "total_rows": self.total_rows,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "stages": [m.to_dict() for m in self.stages],
        }
