"""
Query classification.

Cheap deny rules reject obvious personal commands ("walk my pet") without
touching the network; everything else is judged by a language model. The
model call fails open, because classification only saves wasted searches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .llm import TextGenerator
from .models import Classification

logger = logging.getLogger(__name__)

INVALID_REASON = "This is not a valid query."
FAIL_OPEN_REASON = "AI classification failed, defaulting to valid."

CLASSIFY_INSTRUCTION = """
Classify the following user query as 'valid' or 'invalid'.
An 'invalid' query is a command, multiple unrelated commands, or clearly non-searchable personal requests (e.g., "walk my pet, add apples to grocery", "remind me to call mom").
A 'valid' query is a request for information that can be searched on the web (e.g., "Best places to visit in Delhi", "What is the capital of France?").
Respond ONLY with the word "valid" or "invalid" followed by a period.
"""


@dataclass(frozen=True)
class PhraseRule:
    """Matches when every phrase occurs somewhere in the query."""

    phrases: tuple[str, ...]

    def matches(self, normalized: str) -> bool:
        return all(phrase in normalized for phrase in self.phrases)


@dataclass(frozen=True)
class VerbTargetRule:
    """Matches imperative queries such as "feed my cat"."""

    verbs: tuple[str, ...]
    target: str

    def matches(self, normalized: str) -> bool:
        starts_with_verb = any(normalized.startswith(verb + " ") for verb in self.verbs)
        return starts_with_verb and self.target in normalized


DenyRule = PhraseRule | VerbTargetRule

DEFAULT_DENY_RULES: tuple[DenyRule, ...] = (
    PhraseRule(phrases=("add", "to grocery")),
    PhraseRule(phrases=("walk my pet",)),
    VerbTargetRule(
        verbs=("make", "cook", "feed", "give", "tell", "show", "remind"),
        target="my cat",
    ),
)


def normalize_query(query: str) -> str:
    return query.strip().lower()


def parse_verdict(response: str) -> bool:
    """Return True when the model's answer marks the query as valid."""
    tokens = response.strip().lower().split()
    if not tokens:
        return True
    return "invalid" not in tokens[0]


class TextClassifier:
    """Decide whether a query is worth searching the web for."""

    def __init__(
        self,
        generator: TextGenerator,
        *,
        deny_rules: tuple[DenyRule, ...] = DEFAULT_DENY_RULES,
    ) -> None:
        self.generator = generator
        self.deny_rules = deny_rules

    def match_deny_rules(self, query: str) -> DenyRule | None:
        normalized = normalize_query(query)
        for rule in self.deny_rules:
            if rule.matches(normalized):
                return rule
        return None

    async def classify(self, query: str) -> Classification:
        rule = self.match_deny_rules(query)
        if rule is not None:
            logger.info("Query %r rejected by %s", query, rule)
            return Classification(valid=False, reason=INVALID_REASON)

        try:
            response = await self.generator.generate(
                f'Query: "{query}"',
                system_instruction=CLASSIFY_INSTRUCTION,
                temperature=0.1,
                max_output_tokens=10,
            )
        except Exception as exc:
            logger.warning("Error classifying query with the language model: %s", exc)
            return Classification(valid=True, reason=FAIL_OPEN_REASON)

        if parse_verdict(response):
            return Classification(valid=True)
        return Classification(valid=False, reason=INVALID_REASON)
