from app.extraction.exceptions import ExtractionError
from app.extraction.fallback import FallbackExtractor, format_size_mb
from app.extraction.file_types import is_image
from app.extraction.models import (
    ERROR_CONFIDENCE,
    FALLBACK_CONFIDENCE,
    KIND_ERROR_FALLBACK,
    KIND_FALLBACK,
    KIND_MODEL,
    MODEL_CONFIDENCE,
    ExtractionResult,
)
from app.extraction.vision import VisionOcr
from app.logging.logger import Log


class DocumentExtractor:
    """Produces text and a confidence score for any file; never raises.

    Images go to the vision model first. Model failures and non-image files
    use the fallback extractor; if that fails too, a notice naming the file
    is returned as the text. NUL characters never reach the result.
    """

    def __init__(self, vision: VisionOcr, fallback: FallbackExtractor) -> None:
        self._vision = vision
        self._fallback = fallback

    def extract(self, file_bytes: bytes, file_name: str) -> ExtractionResult:
        file_name = file_name or "unnamed"
        model_error: str | None = None
        if is_image(file_name):
            try:
                text = _without_nul(self._vision.read(file_bytes, file_name))
                if not text.strip():
                    raise ExtractionError("AI model returned only NUL characters")
                return ExtractionResult(
                    text=text,
                    confidence=MODEL_CONFIDENCE,
                    extraction_kind=KIND_MODEL,
                )
            except Exception as exc:
                model_error = _without_nul(str(exc) or type(exc).__name__)
                Log.warning(
                    f"Vision OCR failed for {file_name}, using fallback: {model_error}"
                )

        try:
            text = _without_nul(self._fallback.extract(file_bytes, file_name))
            if not text.strip():
                raise ExtractionError(f"No text extracted from '{file_name}'")
            return ExtractionResult(
                text=text,
                confidence=FALLBACK_CONFIDENCE,
                extraction_kind=KIND_FALLBACK,
                error=model_error,
            )
        except Exception as exc:
            Log.error(f"Fallback extraction failed for {file_name}: {exc}")
            return ExtractionResult(
                text=(
                    f"File could not be processed: {_without_nul(file_name)} "
                    f"({format_size_mb(len(file_bytes or b''))}) - please contact support"
                ),
                confidence=ERROR_CONFIDENCE,
                extraction_kind=KIND_ERROR_FALLBACK,
                error=_without_nul(str(exc) or type(exc).__name__),
            )


def _without_nul(text: str) -> str:
    return text.replace("\x00", "")
