from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class VectorEntry:
    """One embedding plus the metadata linking it back to its document."""

    id: str
    embedding: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VectorMatch:
    """A nearest-neighbor hit; score is a similarity in [0, 1], higher is closer."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def document_id(self) -> str:
        return str(self.metadata.get("document_id", ""))

    @property
    def text(self) -> str:
        return str(self.metadata.get("text", ""))
