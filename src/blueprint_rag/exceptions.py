"""Custom exception hierarchy for Blueprint RAG.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations

from typing import Iterable, List


class BlueprintRagError(Exception):
    """Base class for all Blueprint RAG exceptions."""


class ConfigError(BlueprintRagError):
    """Raised when configuration loading or validation fails."""


class StorageError(BlueprintRagError):
    """Raised when the persisted document store fails on a write path."""


class StoreUnavailableError(StorageError):
    """Raised when the persisted store cannot be read (unreachable, timed out, etc.).

    Search paths absorb this error and fall back to the in-memory corpus.
    """


class InvalidDocumentError(StorageError):
    """Raised when a document payload is missing required fields or is malformed."""

    def __init__(self, message: str, *, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields: List[str] = list(fields)


class SearchError(BlueprintRagError):
    """Raised for search query issues (e.g., unsupported platform filter)."""


class IngestionError(BlueprintRagError):
    """Raised when a file or URL cannot be loaded for ingestion.

    ``stored_ids`` lists the chunks already committed before the failure;
    they stay in the corpus.
    """

    def __init__(self, message: str, *, stored_ids: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.stored_ids: List[str] = list(stored_ids)
