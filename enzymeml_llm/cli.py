"""
CLI for enzymeml-llm

This module provides a command-line interface to run extractions, search
the supported databases and list known models.
"""

import argparse
import asyncio
import json
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config.settings import get_settings
from .core.extraction import extract_data
from .core.llm_client import create_llm_client
from .core.providers import get_model_registry
from .errors import EnzymeMLError
from .inputs import ImageUpload, PDFUpload, SystemQuery, UserQuery
from .logging_config import setup_logging
from .schemas.document import EnzymeMLDocument
from .schemas.events import ChainEvent, ChainEventType
from .tools.search_databases import SEARCH_DATABASES_TOOL, SUPPORTED_DATABASES, search_databases

console = Console()
err_console = Console(stderr=True)


def print_event(event: ChainEvent) -> None:
    """Print tool-chain progress."""
    if event.type == ChainEventType.PLANNING_RESULT:
        err_console.print(f"[cyan]Planned {event.count} tool call(s):[/cyan] {', '.join(event.tool_names)}")
    elif event.type == ChainEventType.TOOL_RETRY:
        err_console.print(f"[yellow]Retrying {event.tool_name} (attempt {event.attempt}):[/yellow] {event.error}")
    elif event.type == ChainEventType.TOOL_SUCCESS:
        err_console.print(f"[green]{event.tool_name} done in {event.duration_ms}ms[/green]")
    elif event.type == ChainEventType.TOOL_ERROR:
        err_console.print(f"[red]{event.tool_name} failed ({event.error_type.value}):[/red] {event.error}")


def extract_command(args):
    """Stream an extraction for text, PDF and image inputs."""
    settings = get_settings()
    api_key = args.api_key or settings.llm.api_key
    if not api_key:
        console.print("[red]Error: No API key provided.[/red]")
        console.print("Set OPENAI_API_KEY environment variable or use --api-key option.")
        sys.exit(1)

    async def run_extraction():
        client = create_llm_client(model=args.model, api_key=api_key, settings=settings.llm)

        inputs = []
        if args.system:
            inputs.append(SystemQuery(args.system))
        inputs.append(UserQuery(args.query))
        for path in args.pdf or []:
            inputs.append(PDFUpload(path))
        for path in args.image or []:
            inputs.append(ImageUpload(path))
        for item in inputs:
            await item.upload(client)

        result = await extract_data(
            client.model,
            inputs,
            schema=EnzymeMLDocument if args.document else None,
            schema_key="enzymeml_document",
            tools=[SEARCH_DATABASES_TOOL] if args.search else None,
            client=client,
            observer=print_event,
            settings=settings,
        )
        async for chunk in result.chunks:
            if chunk.kind == "text":
                console.print(chunk.delta, end="", soft_wrap=True, highlight=False)
            elif chunk.kind == "refusal":
                console.print(chunk.delta, end="", style="yellow", highlight=False)
            else:
                err_console.print(f"\n[red]Stream error: {chunk.error}[/red]")
        await result.final
        return client

    try:
        client = asyncio.run(run_extraction())
        console.print()
        usage = client.get_usage_stats()
        err_console.print(f"[dim]Tokens used: {usage['total_tokens']} (prompt: {usage['prompt_tokens']}, completion: {usage['completion_tokens']})[/dim]")
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[red]Error: {str(e)}[/red]")
        sys.exit(1)


def search_command(args):
    """Search the supported databases."""
    databases = args.database or list(SUPPORTED_DATABASES)

    try:
        results = asyncio.run(search_databases(databases, args.query, limit=args.limit))
    except (EnzymeMLError, ValueError) as e:
        console.print(f"[red]Error: {str(e)}[/red]")
        sys.exit(1)

    if args.json:
        console.print_json(json.dumps(results))
        return

    table = Table(title=f"Results for '{args.query}'")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Reference", style="dim")
    for entity in results:
        references = entity.get("references") or []
        table.add_row(entity["id"], entity["name"], references[0] if references else "")
    console.print(table)


def models_command(args):
    """List known models."""
    registry = get_model_registry()
    table = Table(title="Models")
    table.add_column("ID", style="cyan")
    table.add_column("Provider")
    table.add_column("Context", justify="right")
    table.add_column("Reasoning")
    for model in registry.list_models(only_configured=args.configured):
        table.add_row(
            model.id,
            model.provider.value,
            str(model.context_window),
            "yes" if model.reasoning else "",
        )
    console.print(table)


def version_command(args):
    """Show the enzymeml-llm version."""
    from . import __version__
    console.print(Panel(f"enzymeml-llm version {__version__}", border_style="blue"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enzymeml-llm",
        description="enzymeml-llm: LLM-assisted extraction of enzymology data",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract data from text, PDFs and images")
    extract_parser.add_argument("query", help="What to extract")
    extract_parser.add_argument("-m", "--model", default=None, help="LLM model to use")
    extract_parser.add_argument("--system", help="System prompt")
    extract_parser.add_argument("--pdf", action="append", help="PDF file to include (repeatable)")
    extract_parser.add_argument("--image", action="append", help="Image file to include (repeatable)")
    extract_parser.add_argument("--search", action="store_true", help="Let the model search the databases first")
    extract_parser.add_argument("--document", action="store_true", help="Extract an EnzymeML document as JSON")
    extract_parser.add_argument("--api-key", help="API key for the LLM provider")
    extract_parser.set_defaults(func=extract_command)

    # Search command
    search_parser = subparsers.add_parser("search", help="Search ChEBI, PDB, PubChem and UniProt")
    search_parser.add_argument("query", help="Search term")
    search_parser.add_argument(
        "-d", "--database",
        action="append",
        choices=SUPPORTED_DATABASES,
        help="Database to search (repeatable, default: all)",
    )
    search_parser.add_argument("--limit", type=int, default=None, help="Hits per database")
    search_parser.add_argument("--json", action="store_true", help="Print raw JSON")
    search_parser.set_defaults(func=search_command)

    # Models command
    models_parser = subparsers.add_parser("models", help="List known models")
    models_parser.add_argument("--configured", action="store_true", help="Only models of configured providers")
    models_parser.set_defaults(func=models_command)

    # Version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=version_command)

    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    setup_logging(get_settings().logging)
    args.func(args)


if __name__ == "__main__":
    main()
