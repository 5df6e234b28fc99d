"""Example model client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseLlmClient and register the provider in LlmClientFactory.
"""

import hashlib
import math
from typing import ClassVar

from app.llm.client_base import BaseLlmClient


class ExampleClientAdapter(BaseLlmClient):
    """Example adapter with deterministic, offline responses.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters. Embeddings are bag-of-words vectors
    hashed into a fixed number of buckets, so texts sharing words score as
    similar under cosine distance.
    """

    DIMENSION: ClassVar[int] = 64
    IMAGE_TEXT: ClassVar[str] = "Example OCR text extracted from image"

    def extract_image_text(
        self,
        *,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> str:
        _ = model, mime_type, prompt
        return f"{self.IMAGE_TEXT} ({len(image_bytes)} bytes)"

    def create_embeddings(self, *, model: str, texts: list[str]) -> list[list[float]]:
        _ = model
        return [self._embed(text) for text in texts]

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        _ = model, temperature
        return (
            f"Example answer based on {len(system_prompt)} characters of context "
            f"for: {user_prompt.strip()}"
        )

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.DIMENSION
        for token in text.lower().split():
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self.DIMENSION
            vector[bucket] += 1.0
        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            vector[0] = 1.0
            return vector
        return [value / norm for value in vector]
