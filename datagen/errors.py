"""Exceptions raised by the dataset generator."""

from typing import Optional


class DatagenError(Exception):
    """Base class for generator failures."""


class ConfigurationError(DatagenError, ValueError):
    """Exception raised when scale parameters make generation impossible."""


class StageError(DatagenError):
    """A failure that happened while a pipeline stage was running."""

    def __init__(self, stage: str, message: str, original: Optional[BaseException] = None):
        self.stage = stage
        self.original = original
        super().__init__(f"[{stage}] {message}")


class ConstraintViolationError(StageError):
    """Exception raised when the store rejects a row on a key constraint."""


class StorageError(StageError):
    """Exception raised when the store is unreachable or rejects a write."""
