"""
Configuration helpers for the query agent.

Values are read from environment variables at construction time so that
tests (and callers) can override them with explicit arguments.
"""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_STORE_PATH = "~/.query_agent/past_queries.json"
ENV_STORE_PATH = "QUERY_AGENT_STORE_PATH"

ENV_LLM_MODEL = "QUERY_AGENT_LLM_MODEL"
DEFAULT_LLM_MODEL = "gemini-2.0-flash"

ENV_SIMILARITY_THRESHOLD = "QUERY_AGENT_SIMILARITY_THRESHOLD"
DEFAULT_SIMILARITY_THRESHOLD = 0.85

ENV_HEADLESS = "QUERY_AGENT_HEADLESS"

ENV_WORKFLOW_TIMEOUT = "QUERY_AGENT_WORKFLOW_TIMEOUT"
DEFAULT_WORKFLOW_TIMEOUT = 300.0

_TRUTHY = {"1", "true", "yes", "on"}


def resolve_store_path(override_path: str | None = None) -> str:
    """
    Resolve the result store path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) QUERY_AGENT_STORE_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_STORE_PATH) or DEFAULT_STORE_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def resolve_llm_model(override: str | None = None) -> str:
    return override or os.getenv(ENV_LLM_MODEL, DEFAULT_LLM_MODEL)


def resolve_similarity_threshold(override: float | None = None) -> float:
    if override is not None:
        return override
    raw = os.getenv(ENV_SIMILARITY_THRESHOLD)
    if raw is None or not raw.strip():
        return DEFAULT_SIMILARITY_THRESHOLD
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(
            f"{ENV_SIMILARITY_THRESHOLD} must be a number, got {raw!r}"
        ) from exc


def resolve_headless(override: bool | None = None) -> bool:
    if override is not None:
        return override
    raw = os.getenv(ENV_HEADLESS)
    if raw is None:
        return True
    return raw.strip().lower() in _TRUTHY


def resolve_workflow_timeout(override: float | None = None) -> float:
    if override is not None:
        return override
    raw = os.getenv(ENV_WORKFLOW_TIMEOUT)
    return float(raw) if raw else DEFAULT_WORKFLOW_TIMEOUT
