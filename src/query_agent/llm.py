"""
Text generation client shared by the classifier and the summarizer.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

from google.genai import Client as GenAIClient
from google.genai.types import HttpOptions

from .config import resolve_llm_model

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str,
        temperature: float,
        max_output_tokens: int | None = None,
    ) -> str:
        """Return the generated text for *prompt*. Provider errors propagate."""


class GeminiTextGenerator:
    """Generate text with a Gemini model via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = resolve_llm_model(model)
        if client is not None:
            self._client = client
            return
        if api_key is None:
            api_key = os.getenv("GOOGLE_API_KEY")
        if api_key is None:
            raise ValueError(
                "GOOGLE_API_KEY not found within the current environment: please export it or provide it to the class constructor."
            )
        self._client = GenAIClient(
            api_key=api_key, http_options=HttpOptions(api_version="v1beta")
        )

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str,
        temperature: float,
        max_output_tokens: int | None = None,
    ) -> str:
        config: dict[str, Any] = {
            "system_instruction": system_instruction,
            "temperature": temperature,
        }
        if max_output_tokens is not None:
            config["max_output_tokens"] = max_output_tokens
        logger.debug("Generating with %s (prompt_len=%d)", self.model, len(prompt))
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return (response.text or "").strip()
