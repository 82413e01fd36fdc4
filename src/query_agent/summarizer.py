"""
Collapse scraped page texts into a single answer.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .llm import TextGenerator

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "No content found to summarize."
SUMMARY_FAILED_MESSAGE = (
    "Could not summarize content. Please try again later or refine your query."
)
FALLBACK_ANSWERS: frozenset[str] = frozenset({NO_CONTENT_MESSAGE, SUMMARY_FAILED_MESSAGE})

SNIPPET_SEPARATOR = "\n\n---\n\n"
MAX_SUMMARY_INPUT_CHARS = 30000

SUMMARY_SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that summarizes web content concisely and informatively."
)
SUMMARY_PREAMBLE = (
    "Summarize the following content from multiple web pages into a concise, "
    "informative overview. Focus on key information and answer potential "
    "questions related to the content."
)


def is_fallback_answer(text: str) -> bool:
    """True when *text* is one of the fixed messages used instead of a summary."""
    return text in FALLBACK_ANSWERS


class Summarizer:
    def __init__(
        self,
        generator: TextGenerator,
        *,
        max_input_chars: int = MAX_SUMMARY_INPUT_CHARS,
        temperature: float = 0.7,
    ) -> None:
        self.generator = generator
        self.max_input_chars = max_input_chars
        self.temperature = temperature

    async def summarize(self, snippets: Sequence[str]) -> str:
        if not snippets:
            return NO_CONTENT_MESSAGE

        full_text = SNIPPET_SEPARATOR.join(snippets)[: self.max_input_chars]
        try:
            summary = await self.generator.generate(
                f"{SUMMARY_PREAMBLE}\n\nContent:\n{full_text}",
                system_instruction=SUMMARY_SYSTEM_INSTRUCTION,
                temperature=self.temperature,
            )
        except Exception as exc:
            logger.warning("Error summarizing content with the language model: %s", exc)
            return SUMMARY_FAILED_MESSAGE

        if not summary:
            logger.warning("Language model returned an empty summary")
            return SUMMARY_FAILED_MESSAGE
        return summary
