"""CLI entry point — Typer app for callbrief commands.

Usage:
    callbrief summarize BRZE TTD --message "Summarize the quarter"
    callbrief excerpts "What did they say about RPO?" -t BRZE
    callbrief ask "How are companies monetizing AI?" -t BRZE -t TTD --detail brief
    callbrief suggest BRZE TTD
    callbrief ingest BRZE TTD --store faiss --save .index
    callbrief status
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="callbrief",
    help="Earnings-call summaries, excerpts and retrieval-backed answers.",
    no_args_is_help=True,
)

console = Console()

_TICKERS = typer.Argument(..., help="Ticker symbols")


@app.command()
def summarize(
    tickers: list[str] = _TICKERS,
    message: str = typer.Option(
        "Summarize the earnings call", "--message", "-m", help="Question or instruction",
    ),
) -> None:
    """Summarize tickers from local transcripts and parsed output."""
    from callbrief.config import load_settings
    from callbrief.pipeline.chat import ChatPipeline
    from callbrief.pipeline.schemas import ChatQuery

    pipeline = ChatPipeline.from_settings(load_settings())
    response = pipeline.answer(ChatQuery(message=message, tickers=tickers))

    console.print(f"\n{response.answer}\n")
    model = f" | Model: {response.model}" if response.model else ""
    console.print(f"[dim]Mode: {response.mode}{model}[/]")


@app.command()
def excerpts(
    query: str = typer.Argument(..., help="Search query"),
    ticker: list[str] = typer.Option(..., "--ticker", "-t", help="Ticker (repeatable)"),
    limit: int = typer.Option(8, "--limit", "-n", help="Maximum excerpts"),
) -> None:
    """Show the best-matching sentences from the tickers' documents."""
    from callbrief.config import load_settings
    from callbrief.pipeline.chat import ChatPipeline
    from callbrief.pipeline.schemas import ChatQuery

    pipeline = ChatPipeline.from_settings(load_settings())
    found = pipeline.find_excerpts(ChatQuery(message=query, tickers=ticker), limit=limit)

    if not found:
        console.print("[yellow]No matching excerpts.[/]")
        return

    table = Table(title=f"Excerpts: {query}")
    table.add_column("Ticker", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Excerpt")
    table.add_column("Source", style="dim")
    for ex in found:
        table.add_row(ex.ticker, str(ex.score), ex.text, Path(ex.source_ref).name)
    console.print(table)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask"),
    ticker: list[str] = typer.Option([], "--ticker", "-t", help="Filter by ticker (repeatable)"),
    top_k: int | None = typer.Option(None, "--top-k", "-k", help="Passages to retrieve"),
    detail: str = typer.Option(
        "detailed", "--detail", "-d", help="Answer depth (brief, detailed, comprehensive)",
    ),
) -> None:
    """Answer a question from the vector index of earnings calls."""
    from callbrief.config import load_settings
    from callbrief.errors import CallbriefError
    from callbrief.pipeline.research import ResearchPipeline
    from callbrief.pipeline.schemas import ChatQuery

    try:
        query = ChatQuery.from_body(
            {"message": question, "tickers": ticker, "topK": top_k, "detail": detail},
            require_tickers=False,
        )
        response = ResearchPipeline.from_settings(load_settings()).answer(query)
    except CallbriefError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(f"\n[bold]Q:[/] {question}")
    console.print(f"\n[bold green]A:[/] {response.answer}")
    if response.matches:
        console.print(f"\n[dim]Matches: {response.matches} | Top score: {response.top_score:.3f}[/]")


@app.command()
def suggest(tickers: list[str] = _TICKERS) -> None:
    """Suggest cross-company questions for the selected tickers."""
    from callbrief.config import load_settings
    from callbrief.errors import CallbriefError
    from callbrief.pipeline.suggest import SuggestionPipeline

    try:
        response = SuggestionPipeline.from_settings(load_settings()).suggest(tickers)
    except CallbriefError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    for i, question in enumerate(response.suggestions, start=1):
        console.print(f"{i}. {question}")
    if response.context_chunks:
        console.print(
            f"\n[dim]Companies: {response.companies_analyzed} "
            f"| Categories: {', '.join(response.categories_found) or '-'} "
            f"| Context chunks: {response.context_chunks}[/]",
        )


@app.command()
def ingest(
    tickers: list[str] = _TICKERS,
    embedding_provider: str | None = typer.Option(
        None, "--embedding", "-e", help="Embedding provider (default from settings)",
    ),
    vector_store: str = typer.Option("faiss", "--store", "-s", help="Vector store backend"),
    category: str | None = typer.Option(
        None, "--category", "-c", help="Business category stored with each passage",
    ),
    save: Path | None = typer.Option(None, "--save", help="Directory to save a FAISS index to"),
) -> None:
    """Embed the tickers' documents into a vector store."""
    from callbrief.config import load_settings
    from callbrief.documents.loader import DocumentLoader
    from callbrief.embeddings.factory import embedding_from_settings
    from callbrief.errors import CallbriefError
    from callbrief.pipeline.ingest import IngestPipeline
    from callbrief.vectorstore.factory import get_vector_store

    settings = load_settings()
    if embedding_provider:
        settings.embedding.provider = embedding_provider
    try:
        emb = embedding_from_settings(settings.embedding)
    except CallbriefError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if vector_store == "faiss":
        store = get_vector_store("faiss", dimension=emb.dimension)
    else:
        store = get_vector_store(
            vector_store,
            collection_name=settings.vectorstore.collection,
            dimension=emb.dimension,
            url=settings.vectorstore.url,
            path=settings.vectorstore.path,
        )

    docs = settings.documents
    loader = DocumentLoader(
        transcripts_dir=docs.transcripts_dir,
        parsed_dir=docs.parsed_dir,
        max_files_per_ticker=docs.max_files_per_ticker,
        aliases=docs.ticker_aliases,
    )
    pipeline = IngestPipeline(loader=loader, embedding_provider=emb, vector_store=store)

    for t in tickers:
        result = pipeline.ingest_ticker(t, category=category)
        console.print(f"\n[bold green]Ingested:[/] {result.ticker}")
        console.print(f"  Units: {result.units_found}")
        console.print(f"  Embedded: {result.units_embedded}")
        console.print(f"  Stored: {result.units_stored}")
        for w in result.warnings:
            console.print(f"  [yellow]Warning:[/] {w}")

    if save is not None:
        if vector_store != "faiss":
            console.print("[yellow]--save applies to the faiss store only; skipped.[/]")
            return
        store.save(str(save))
        console.print(f"\n[dim]Saved index to {save}[/]")


@app.command()
def status() -> None:
    """Show system status (providers, document roots, credentials)."""
    from callbrief.config import PROVIDER_SECRETS, get_secret, load_settings
    from callbrief.embeddings.factory import available_providers as emb_providers
    from callbrief.llm.factory import available_providers as llm_providers
    from callbrief.vectorstore.factory import available_stores

    settings = load_settings()
    console.print("\n[bold green]callbrief[/] v0.1.0\n")

    table = Table(title="Available Components")
    table.add_column("Layer", style="cyan")
    table.add_column("Available")
    table.add_row("Embedding Providers", ", ".join(emb_providers()))
    table.add_row("Vector Stores", ", ".join(available_stores()))
    table.add_row("LLM Providers", ", ".join(llm_providers()))
    console.print(table)

    config = Table(title="Configuration")
    config.add_column("Setting", style="cyan")
    config.add_column("Value")
    config.add_row("Transcripts", settings.documents.transcripts_dir)
    config.add_row("Parsed output", settings.documents.parsed_dir)
    config.add_row("LLM", f"{settings.llm.provider} / {settings.llm.model}")
    config.add_row("Vector store", f"{settings.vectorstore.backend} / {settings.vectorstore.collection}")
    for name in PROVIDER_SECRETS.values():
        config.add_row(name, "set" if get_secret(name) else "[yellow]missing[/]")
    console.print(config)


if __name__ == "__main__":
    app()
