from abc import ABC, abstractmethod


class BaseLlmClient(ABC):
    """Contract for provider-specific model clients.

    One client covers the three model calls the pipeline makes: vision text
    extraction, text embedding and chat completion.
    """

    @abstractmethod
    def extract_image_text(
        self,
        *,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> str:
        """Return the text a vision model reads from an image."""

    @abstractmethod
    def create_embeddings(self, *, model: str, texts: list[str]) -> list[list[float]]:
        """Return one embedding vector per input text, in input order."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return provider response as plain text."""
