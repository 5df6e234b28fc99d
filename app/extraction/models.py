from dataclasses import dataclass

KIND_MODEL = "model"
KIND_FALLBACK = "fallback"
KIND_ERROR_FALLBACK = "error-fallback"

MODEL_CONFIDENCE = 0.85
FALLBACK_CONFIDENCE = 0.5
ERROR_CONFIDENCE = 0.1


@dataclass(frozen=True)
class ExtractionResult:
    """Best-effort text for an uploaded file.

    error carries the failure that pushed extraction off the primary path,
    if any. It is informational only; the result is always usable.
    """

    text: str
    confidence: float
    extraction_kind: str
    error: str | None = None
