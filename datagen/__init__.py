"""Synthetic catalog dataset generator for query and dataflow benchmarks."""

__version__ = "0.1.0"
