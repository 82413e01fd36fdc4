import asyncio
import logging

from workflows import Workflow, Context, step
from workflows.events import StartEvent, StopEvent, Event

from .cache import SimilarityCache
from .classifier import INVALID_REASON, TextClassifier
from .config import resolve_headless, resolve_workflow_timeout
from .embeddings import EmbeddingClient, EmbeddingProvider
from .llm import GeminiTextGenerator
from .models import QueryRecord, QueryResponse, Source
from .retrieval import WebRetriever, playwright_factory
from .storage import ResultStore, open_result_store
from .summarizer import Summarizer, is_fallback_answer

logger = logging.getLogger(__name__)

NO_WEB_CONTENT_MESSAGE = "Could not find relevant content on the web for your query."


class QueryEvent(StartEvent):
    query: str


class CacheLookupEvent(Event):
    query: str


class WebSearchEvent(Event):
    query: str


class SummarizeEvent(Event):
    query: str
    snippets: list[str]


class PersistEvent(Event):
    query: str
    answer: str


class ResolutionEndEvent(StopEvent):
    answer: str = ""
    source: Source = "agent"
    original_query: str | None = None

    def to_response(self) -> QueryResponse:
        return QueryResponse(
            answer=self.answer, source=self.source, original_query=self.original_query
        )


class QueryResolutionWorkflow(Workflow):
    """Classify, look up past answers, and fall back to searching the web."""

    def __init__(
        self,
        *,
        classifier: TextClassifier,
        cache: SimilarityCache,
        retriever: WebRetriever,
        summarizer: Summarizer,
        store: ResultStore,
        embeddings: EmbeddingClient,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.classifier = classifier
        self.cache = cache
        self.retriever = retriever
        self.summarizer = summarizer
        self.store = store
        self.embeddings = embeddings

    @step
    async def classify_query(
        self, ev: QueryEvent, ctx: Context
    ) -> CacheLookupEvent | ResolutionEndEvent:
        classification = await self.classifier.classify(ev.query)
        if not classification.valid:
            return ResolutionEndEvent(
                answer=classification.reason or INVALID_REASON, source="agent"
            )
        if classification.reason:
            logger.info("Classifier note for %r: %s", ev.query, classification.reason)
        res = CacheLookupEvent(query=ev.query)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def lookup_cache(
        self, ev: CacheLookupEvent, ctx: Context
    ) -> WebSearchEvent | ResolutionEndEvent:
        match = await asyncio.to_thread(self.cache.find_similar, ev.query)
        if match is not None:
            logger.info("Found similar past query: %r", match.query)
            return ResolutionEndEvent(
                answer=match.answer, source="cache", original_query=match.query
            )
        logger.info("No similar past query found. Searching the web...")
        res = WebSearchEvent(query=ev.query)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def search_web(
        self, ev: WebSearchEvent, ctx: Context
    ) -> SummarizeEvent | ResolutionEndEvent:
        snippets = await self.retriever.retrieve(ev.query)
        if not snippets:
            return ResolutionEndEvent(answer=NO_WEB_CONTENT_MESSAGE, source="web-search")
        res = SummarizeEvent(query=ev.query, snippets=snippets)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def summarize_content(
        self, ev: SummarizeEvent
    ) -> PersistEvent | ResolutionEndEvent:
        answer = await self.summarizer.summarize(ev.snippets)
        if is_fallback_answer(answer):
            # Only successful summaries become cache entries.
            return ResolutionEndEvent(answer=answer, source="web-search")
        return PersistEvent(query=ev.query, answer=answer)

    @step
    async def store_result(self, ev: PersistEvent) -> ResolutionEndEvent:
        await asyncio.to_thread(self._store_result, ev.query, ev.answer)
        return ResolutionEndEvent(answer=ev.answer, source="web-search")

    def _store_result(self, query: str, answer: str) -> None:
        embedding = self.embeddings.embed(query)
        if embedding is None:
            logger.warning("Could not generate embedding for storage. Skipping storage.")
            return
        self.store.append(QueryRecord(query=query, embedding=embedding, answer=answer))


def create_workflow(
    *,
    store_path: str | None = None,
    api_key: str | None = None,
    headless: bool | None = None,
    timeout: float | None = None,
) -> QueryResolutionWorkflow:
    """Wire the default Google GenAI, Playwright and file-store collaborators."""
    store = open_result_store(store_path)
    embeddings = EmbeddingProvider(api_key=api_key)
    generator = GeminiTextGenerator(api_key=api_key)
    return QueryResolutionWorkflow(
        classifier=TextClassifier(generator),
        cache=SimilarityCache(store, embeddings),
        retriever=WebRetriever(
            browser_factory=playwright_factory(headless=resolve_headless(headless))
        ),
        summarizer=Summarizer(generator),
        store=store,
        embeddings=embeddings,
        timeout=resolve_workflow_timeout(timeout),
    )


async def resolve_query(workflow: QueryResolutionWorkflow, query: str) -> QueryResponse:
    result = await workflow.run(start_event=QueryEvent(query=query))
    return result.to_response()
