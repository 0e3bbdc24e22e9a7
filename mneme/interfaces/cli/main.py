"""
CLI Main - Typer-based command-line interface.

Usage:
    mneme search "auth"
    mneme search "login flow" --keywords --type session --json
    mneme expand "認証"
    echo "how did we fix the jwt refresh bug?" | mneme inject
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from mneme.config import ErrorCode, MnemeError, SearchError, Settings, get_settings

if TYPE_CHECKING:
    from mneme.domains.search import DocumentType, SearchQuery

app = typer.Typer(
    name="mneme",
    help="mneme - Fuzzy search over sessions, decisions, patterns and rules",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Route log records to stderr so command output stays clean."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(name)s | %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, markup=False)],
    )


def _settings(data_dir: Path | None) -> Settings:
    settings = get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    return settings


def _parse_types(values: list[str] | None) -> frozenset[DocumentType] | None:
    """Turn --type values into a DocumentType filter."""
    from mneme.domains.search import DocumentType

    if not values:
        return None
    try:
        return frozenset(DocumentType(value.lower()) for value in values)
    except ValueError as e:
        raise SearchError(
            f"Unknown document type in {values}",
            {"allowed": [t.value for t in DocumentType]},
            code=ErrorCode.SEARCH_UNKNOWN_TYPE,
        ) from e


def _build_query(query: str, limit: int, types: list[str] | None, keywords: bool) -> SearchQuery:
    """Validate command-line search options."""
    from mneme.domains.search import SearchQuery

    try:
        return SearchQuery(
            query=query,
            limit=limit,
            types=_parse_types(types),
            split_keywords=keywords,
        )
    except ValidationError as e:
        raise SearchError("Invalid search options", {"errors": e.errors(include_url=False)}) from e


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Number of results"),
    types: list[str] | None = typer.Option(
        None, "--type", "-t", help="Restrict to session/decision/pattern/rule (repeatable)"
    ),
    keywords: bool = typer.Option(False, "--keywords", "-k", help="Also match each keyword"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Knowledge base directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Search the knowledge base."""
    from mneme.adapters import FileStore
    from mneme.domains.search import FuzzySearchEngine

    settings = _settings(data_dir)
    _setup_logging(settings, verbose)

    try:
        store = FileStore(settings.data_dir, settings.tags_file)
        engine = FuzzySearchEngine(store.load_aliases())
        request = _build_query(
            query,
            settings.search_default_limit if limit is None else limit,
            types,
            keywords,
        )
        results = engine.search(request, store.load_corpus())
    except MnemeError as e:
        if as_json:
            typer.echo(json.dumps({"success": False, "error": e.to_dict()}, ensure_ascii=False))
        else:
            err_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    if as_json:
        payload = {
            "success": True,
            "results": [r.model_dump(mode="json", by_alias=True) for r in results],
        }
        typer.echo(json.dumps(payload, ensure_ascii=False))
        return

    if not results:
        console.print(f"[yellow]No matches for:[/yellow] {escape(query)}")
        return

    table = Table(title=f"Results for '{escape(query)}'")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Matched", style="dim")

    for result in results:
        table.add_row(
            str(result.score),
            result.type.value,
            escape(result.id),
            escape(result.title),
            ", ".join(result.matched_fields),
        )

    console.print(table)


@app.command()
def expand(
    query: str = typer.Argument(..., help="Query to expand"),
    keywords: bool = typer.Option(False, "--keywords", "-k", help="Also expand each keyword"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Knowledge base directory"),
) -> None:
    """Show the alias expansion of a query."""
    from mneme.adapters import load_alias_dictionary
    from mneme.domains.search import expand_query

    settings = _settings(data_dir)
    _setup_logging(settings, verbose=False)

    try:
        aliases = load_alias_dictionary(settings.tags_path)
    except MnemeError as e:
        err_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    for term in expand_query(query, aliases, split_keywords=keywords):
        typer.echo(term)


@app.command()
def inject(
    prompt: str | None = typer.Argument(None, help="User prompt (read from stdin if omitted)"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Knowledge base directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Print related context for a prompt, or nothing."""
    from mneme.adapters import FileStore
    from mneme.domains.injection import ContextInjector, InjectionPolicy
    from mneme.domains.search import FuzzySearchEngine

    settings = _settings(data_dir)
    _setup_logging(settings, verbose)

    if prompt is None:
        prompt = sys.stdin.read()

    try:
        policy = InjectionPolicy.from_settings(settings)
        store = FileStore(settings.data_dir, settings.tags_file)
        injector = ContextInjector(FuzzySearchEngine(store.load_aliases()), policy)
        if not injector.qualifies(prompt):
            return
        block = injector.build_context(prompt, store.load_corpus())
    except (MnemeError, ValidationError) as e:
        # Any knowledge base failure means no context, never an error.
        logging.getLogger(__name__).debug("Context injection skipped: %s", e)
        return

    if block:
        typer.echo(block)


@app.command()
def version() -> None:
    """Show version information."""
    from mneme import __version__

    console.print(f"mneme v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
