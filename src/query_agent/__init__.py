"""
QueryAgent - answer questions from past answers or fresh web searches.

A query is classified first; valid queries are matched against previously
answered ones by embedding similarity, and only on a miss does the agent
search the web with a headless browser and summarize what it finds.

Example usage:
    >>> from query_agent import create_workflow, resolve_query
    >>> workflow = create_workflow()
    >>> response = await resolve_query(workflow, "Best places to visit in Delhi")
    >>> response.source
    'web-search'
"""

from .cache import SimilarityCache, cosine_similarity
from .classifier import TextClassifier
from .embeddings import EmbeddingProvider
from .llm import GeminiTextGenerator
from .models import Classification, QueryRecord, QueryResponse
from .retrieval import SearchBackendProfile, WebRetriever
from .storage import DuckDBResultStore, JsonResultStore, open_result_store
from .summarizer import Summarizer
from .workflow import (
    QueryResolutionWorkflow,
    QueryEvent,
    ResolutionEndEvent,
    create_workflow,
    resolve_query,
)

__all__ = [
    # Pipeline
    "QueryResolutionWorkflow",
    "QueryEvent",
    "ResolutionEndEvent",
    "create_workflow",
    "resolve_query",
    # Components
    "TextClassifier",
    "SimilarityCache",
    "cosine_similarity",
    "WebRetriever",
    "SearchBackendProfile",
    "Summarizer",
    "EmbeddingProvider",
    "GeminiTextGenerator",
    # Storage
    "JsonResultStore",
    "DuckDBResultStore",
    "open_result_store",
    # Models
    "Classification",
    "QueryRecord",
    "QueryResponse",
]
