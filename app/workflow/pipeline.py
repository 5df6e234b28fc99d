from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from app.database.models import Document
from app.workflow.exceptions import StepFailedError


@dataclass(slots=True)
class WorkflowContext:
    """Per-run state: the document plus each completed step's result."""

    document: Document
    raw_bytes: bytes = b""
    results: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def document_id(self) -> str:
        return self.document.id

    def require(self, step_name: str) -> dict[str, Any]:
        result = self.results.get(step_name)
        if result is None:
            raise ValueError(
                f"Step '{step_name}' must complete before it is used "
                f"(document {self.document_id})"
            )
        return result


class WorkflowStep(ABC):
    """One checkpointed unit of the ingestion workflow.

    run() returns a JSON-serializable result that is stored as the step's
    checkpoint. Fatal steps raise; their errors are retried and then wrapped
    in failure_error.
    """

    name: ClassVar[str]
    fatal: ClassVar[bool] = False
    failure_error: ClassVar[type[StepFailedError]] = StepFailedError

    @abstractmethod
    def run(self, context: WorkflowContext) -> dict[str, Any]:
        raise NotImplementedError
