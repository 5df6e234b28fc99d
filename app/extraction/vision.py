from app.extraction.exceptions import ExtractionError
from app.extraction.file_types import guess_mime_type
from app.llm.client_base import BaseLlmClient

VISION_PROMPT = (
    "Transcribe all readable text in this document image. Preserve the reading "
    "order, keep numbers, amounts and dates exactly as written, and put each "
    "table row on its own line. Return only the transcribed text."
)


class VisionOcr:
    """Primary OCR path: a vision-capable model reads the image."""

    def __init__(self, client: BaseLlmClient, model: str) -> None:
        self._client = client
        self._model = model

    def read(self, image_bytes: bytes, file_name: str) -> str:
        """Return the text the model reads from an image.

        Raises:
            ExtractionError: if the image is empty or the model returns no text.
            LlmError: if the model call itself fails.
        """
        if not image_bytes:
            raise ExtractionError(f"Empty image: {file_name}")
        text = self._client.extract_image_text(
            model=self._model,
            image_bytes=image_bytes,
            mime_type=guess_mime_type(file_name),
            prompt=VISION_PROMPT,
        ).strip()
        if not text:
            raise ExtractionError("AI model returned empty response")
        return text
