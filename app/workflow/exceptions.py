from typing import Any


class WorkflowError(Exception):
    """Base exception for ingestion workflow errors."""


class StepFailedError(WorkflowError):
    """A fatal step exhausted its retry budget; the document fails."""

    def __init__(self, step_name: str, message: str) -> None:
        super().__init__(message)
        self.step_name = step_name
        self.message = message


class AuditWriteFailed(StepFailedError):
    """The immutable audit record could not be written."""


class IndexWriteFailed(StepFailedError):
    """The search index entry could not be written."""


class StepDegraded(WorkflowError):
    """A non-fatal step fell back; recorded as a warning, never raised."""

    def as_warning(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self)}


class ExtractionDegraded(StepDegraded):
    """Extraction used the fallback or the safety-net path."""


class EmbeddingUnavailable(StepDegraded):
    """No embedding was stored; the document has no semantic search coverage."""
