"""Custom exception hierarchy for Quarry.

These exceptions allow the platform and its hosts to discriminate error
categories (configuration, storage, engine) while preserving the original
context through exception chaining.
"""

from __future__ import annotations


class QuarryError(Exception):
    """Base class for all Quarry exceptions."""


class ConfigError(QuarryError):
    """Raised when configuration is invalid or the storage directory cannot be created."""


class PlatformError(QuarryError):
    """Raised when a platform operation is called in the wrong lifecycle state."""


class StorageError(QuarryError):
    """Raised when the relational store encounters an error."""


class TransactionError(StorageError):
    """Raised when a write fails mid-transaction; the transaction has been rolled back."""


class DocumentNotFoundError(StorageError):
    """Raised when a lookup that requires an existing document finds none."""

    def __init__(self, key: object) -> None:
        super().__init__(f"Document not found: {key!r}")
        self.key = key


class EngineError(QuarryError):
    """Raised for full-text index build or query failures."""
