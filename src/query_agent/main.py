import asyncio
import logging

from typer import Typer, Option, Exit
from typing import Annotated
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .models import QueryResponse
from .storage import open_result_store
from .workflow import (
    CacheLookupEvent,
    QueryEvent,
    SummarizeEvent,
    WebSearchEvent,
    create_workflow,
)

app = Typer(help="Answer questions from past answers or fresh web searches.")

SOURCE_STYLES = {
    "agent": ("Rejected", "bold red"),
    "cache": ("Answer from a similar past query", "bold cyan"),
    "web-search": ("Answer from the web", "bold green"),
}


async def run_query(query: str, store_path: str | None = None) -> QueryResponse:
    console = Console()
    workflow = create_workflow(store_path=store_path)
    handler = workflow.run(start_event=QueryEvent(query=query))
    with console.status(status="Classifying your query...") as status:
        async for event in handler.stream_events():
            if isinstance(event, CacheLookupEvent):
                status.update("Checking past answers...")
            elif isinstance(event, WebSearchEvent):
                status.update("Searching the web...")
            elif isinstance(event, SummarizeEvent):
                status.update(f"Summarizing {len(event.snippets)} pages...")
        result = await handler
        status.stop()
    response = result.to_response()
    title, border_style = SOURCE_STYLES[response.source]
    if response.original_query:
        title = f"{title}: {response.original_query!r}"
    console.print(
        Panel(
            Markdown(response.answer),
            title_align="left",
            title=title,
            border_style=border_style,
        )
    )
    return response


@app.callback()
def main(
    verbose: Annotated[
        bool, Option("--verbose", "-v", help="Log pipeline progress to the console.")
    ] = False,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(rich_tracebacks=True)],
        )


@app.command()
def ask(
    query: Annotated[
        str,
        Option("--query", "-q", help="Question to answer."),
    ],
    store_path: Annotated[
        str | None,
        Option("--store-path", help="Result store file (JSON, or .duckdb)."),
    ] = None,
) -> None:
    """Answer a question."""
    if not query.strip():
        Console().print("[bold red]Query parameter is required.[/]")
        raise Exit(code=1)
    asyncio.run(run_query(query, store_path))


@app.command()
def history(
    limit: Annotated[int, Option("--limit", "-n", help="Rows to show.")] = 20,
    store_path: Annotated[
        str | None,
        Option("--store-path", help="Result store file (JSON, or .duckdb)."),
    ] = None,
) -> None:
    """Show stored queries, newest first."""
    records = open_result_store(store_path).load()
    table = Table(title=f"Past queries ({len(records)} stored)")
    table.add_column("When", style="dim")
    table.add_column("Query", style="bold")
    table.add_column("Answer")
    for record in list(reversed(records))[: max(limit, 0)]:
        answer = record.answer if len(record.answer) <= 80 else record.answer[:77] + "..."
        table.add_row(record.timestamp.strftime("%Y-%m-%d %H:%M"), record.query, answer)
    Console().print(table)


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", help="Port to listen on.")] = 8000,
) -> None:
    """Run the HTTP API."""
    from .server import run_server

    run_server(host=host, port=port)
