from dataclasses import dataclass, field


@dataclass(frozen=True)
class QuerySource:
    """A document that contributed context to an answer."""

    document_id: str
    confidence: float
    snippet: str


@dataclass(frozen=True)
class QueryAnswer:
    """Generated answer plus the sources it was grounded on."""

    answer: str
    sources: list[QuerySource] = field(default_factory=list)
    confidence: float = 0.0
