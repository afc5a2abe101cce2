# errors.py - Indexing Error Taxonomy
# =============================================================================
# Every fatal condition of an indexing run maps to one of these. The
# orchestrator tags the raised error with the stage that failed and the
# progress reached before the failure.
# =============================================================================

from typing import Any


class IngestError(Exception):
    """Base exception for all indexing errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        # Filled in by the orchestrator
        self.stage: str | None = None
        self.report = None
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ExtractionError(IngestError):
    """Source document is missing, unreadable, or yields no text."""


class ChunkConfigError(IngestError):
    """Requested chunk budget cannot be honoured by the tokenizer."""


class StoreUnavailableError(IngestError):
    """The vector store cannot be reached or refused a management call."""


class CollectionProvisionError(IngestError):
    """Target collection is absent and auto-provisioning is disabled."""


class EmbeddingUnavailableError(IngestError):
    """The embedding model could not be loaded or invoked."""


class InvariantViolation(IngestError):
    """Internal wiring mismatch, e.g. chunk/vector counts or dimensions."""


class UpsertError(IngestError):
    """A batch was rejected by the store."""

    def __init__(
        self,
        message: str,
        acknowledged: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Args:
            message: Error message
            acknowledged: Points acknowledged before the failing batch
            details: Additional context
        """
        details = details or {}
        details["acknowledged"] = acknowledged
        self.acknowledged = acknowledged
        super().__init__(message, details)
