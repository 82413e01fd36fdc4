"""
FastAPI server for the query agent.

Exposes the query resolution workflow over HTTP together with a read-only
view of the stored history.
"""

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .models import QueryRequest
from .workflow import QueryResolutionWorkflow, create_workflow, resolve_query

logger = logging.getLogger(__name__)


def create_app(workflow: QueryResolutionWorkflow | None = None) -> FastAPI:
    """
    Build the API application.

    When no workflow is given, the default one (Google GenAI + Playwright +
    configured store) is created on the first request that needs it.
    """
    app = FastAPI(
        title="Query Agent",
        description="Answer questions from past answers or fresh web searches",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.workflow = workflow

    def get_workflow(request: Request) -> QueryResolutionWorkflow:
        if request.app.state.workflow is None:
            request.app.state.workflow = create_workflow()
        return request.app.state.workflow

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/query")
    async def query_endpoint(request: Request, body: QueryRequest | None = None):
        """Resolve a query and report where the answer came from."""
        query = ((body.query if body else None) or "").strip()
        if not query:
            return JSONResponse(
                {"error": "Query parameter is required."}, status_code=400
            )

        logger.info("Received query: %r", query)
        try:
            response = await resolve_query(get_workflow(request), query)
        except Exception as exc:
            logger.exception("Error processing query %r", query)
            return JSONResponse(
                {"error": "An internal server error occurred.", "details": str(exc)},
                status_code=500,
            )
        return response.model_dump()

    @app.get("/api/history")
    async def history(request: Request, limit: int = 20):
        """List stored queries, newest first."""
        try:
            store = get_workflow(request).store
            records = await asyncio.to_thread(store.load)
        except Exception as exc:
            logger.exception("Error loading history")
            return JSONResponse({"error": str(exc)}, status_code=500)

        newest_first = list(reversed(records))[: max(limit, 0)]
        return {
            "total": len(records),
            "items": [
                {
                    "query": record.query,
                    "answer": record.answer,
                    "timestamp": record.timestamp.isoformat(),
                }
                for record in newest_first
            ],
        }

    return app


app = create_app()


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
