"""
Site-to-Store Synthesis Pipeline - CLI Entry Point.
Command line interface built on Click and Rich.
"""

import asyncio
import json
import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from storesynth import __version__
from storesynth.analyzers.design_analyzer import FALLBACK_RECOMMENDATIONS
from storesynth.config.settings import get_settings
from storesynth.generators.catalog import build_default_catalog
from storesynth.generators.store_files import StoreFileGenerator
from storesynth.pipeline.orchestrator import PipelineOrchestrator
from storesynth.utils.errors import AppError, ErrorHandler
from storesynth.utils.formatters import save_analysis
from storesynth.utils.logger import setup_logging

# Initialize Rich Console
console = Console()

# =============================================================================
# Helper Functions
# =============================================================================

def async_command(f):
    """Decorator to run async click commands."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return wrapper


def setup_logger(verbose: bool):
    """Configure logging based on verbosity."""
    level = "DEBUG" if verbose else "WARNING"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    setup_logging(level=level, json_format=False)


def print_error(error: Exception, verbose: bool = False) -> None:
    payload = ErrorHandler.to_response(error)
    console.print(f"[bold red]Error ({payload['error']}):[/bold red] {payload['message']}")
    if verbose:
        console.print_exception()


# =============================================================================
# CLI Group
# =============================================================================

@click.group()
@click.version_option(version=__version__)
def cli():
    """Site-to-Store Synthesis Pipeline"""
    pass


# =============================================================================
# Commands
# =============================================================================

@cli.command()
@click.argument("url")
@click.option("--output-dir", default=None, help="Directory for analysis artifacts")
@click.option("--verbose", is_flag=True, help="Detailed logging")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@async_command
async def analyze(url: str, output_dir: Optional[str], verbose: bool, as_json: bool):
    """
    Analyze a storefront and synthesize a new template.

    URL: The store's address (e.g., shop.example.com)
    """
    setup_logger(verbose)

    settings = get_settings()
    if output_dir:
        settings = settings.model_copy(update={"output_dir": Path(output_dir)})

    console.print(Panel.fit(f"[bold blue]Storefront Analysis[/bold blue]\nTarget: [cyan]{url}[/cyan]"))
    start_time = time.perf_counter()

    try:
        async with PipelineOrchestrator(settings=settings) as pipeline:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("[cyan]Capturing and analyzing...", total=None)
                result = await pipeline.analyze(url)
                progress.update(task, completed=True, description="[green]Analysis complete!")

        artifacts_dir = save_analysis(result, settings.output_dir)

    except AppError as e:
        print_error(e, verbose)
        sys.exit(1)

    if as_json:
        console.print_json(json.dumps(result.to_api_dict()))
        return

    duration = time.perf_counter() - start_time
    analysis = result.analysis
    recommendations = "fallback" if analysis.ai_recommendations == FALLBACK_RECOMMENDATIONS else "AI"

    table = Table(title="Analysis Summary", show_header=False)
    table.add_row("Page Title", result.scraped_summary.title or "-")
    table.add_row("Colors", ", ".join([analysis.colors.primary, analysis.colors.secondary, analysis.colors.accent]))
    table.add_row("Fonts", f"{analysis.typography.heading.family} / {analysis.typography.body.family}")
    table.add_row("Products Found", str(result.scraped_summary.products_found))
    table.add_row("Base Template", result.template.base_template_id)
    table.add_row("Components", ", ".join(c.type for c in result.template.customizations.components))
    table.add_row("Recommendations", recommendations)
    table.add_row("Duration", f"{duration:.2f}s")
    table.add_row("Output", str(artifacts_dir))

    console.print(table)
    console.print("[green]✓[/green] Template generated successfully.")


@cli.command()
def templates():
    """List the base template catalog."""
    table = Table(title="Base Templates", show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Layout")
    table.add_column("Features")
    table.add_column("Description")

    for entry in build_default_catalog().list():
        table.add_row(entry.id, entry.name, entry.layout, ", ".join(entry.features), entry.description)

    console.print(table)


@cli.command()
@click.option("--name", required=True, help="Store name")
@click.option("--user-id", required=True, help="Owner user id")
@click.option("--template-id", default=None, help="Catalog template id (see `templates`)")
@click.option("--customizations", "customizations_file", type=click.Path(exists=True), default=None,
              help="JSON file with customizations or a saved analysis.json")
@click.option("--subdomain", default=None, help="Subdomain override")
@click.option("--source-url", default=None, help="Original store URL")
@click.option("--verbose", is_flag=True, help="Detailed logging")
@async_command
async def generate(
    name: str,
    user_id: str,
    template_id: Optional[str],
    customizations_file: Optional[str],
    subdomain: Optional[str],
    source_url: Optional[str],
    verbose: bool,
):
    """Create a draft store from a template id or customizations."""
    setup_logger(verbose)

    customizations = None
    if customizations_file:
        try:
            data = json.loads(Path(customizations_file).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            console.print(f"[bold red]Invalid customizations file:[/bold red] {e}")
            sys.exit(1)
        # A saved analysis.json carries the analysis under "analysis"
        customizations = data.get("analysis", data) if isinstance(data, dict) else data

    store_info = {"name": name, "subdomain": subdomain, "source_url": source_url}

    try:
        async with PipelineOrchestrator(settings=get_settings()) as pipeline:
            result = await pipeline.generate_store(
                user_id=user_id,
                store_info=store_info,
                template_id=template_id,
                customizations=customizations,
            )
    except AppError as e:
        print_error(e, verbose)
        sys.exit(1)

    table = Table(title="Store Created", show_header=False)
    table.add_row("Store ID", result.store_id)
    table.add_row("URL", result.url)
    table.add_row("Status", result.status)
    console.print(table)


@cli.command()
@click.argument("store_id")
@click.option("--verbose", is_flag=True, help="Detailed logging")
@async_command
async def improve(store_id: str, verbose: bool):
    """
    Recommend design improvements for a store created with `generate`.

    STORE_ID: The id printed by `generate`
    """
    setup_logger(verbose)
    settings = get_settings()

    try:
        async with PipelineOrchestrator(settings=settings) as pipeline:
            for record in StoreFileGenerator(settings).load_records():
                await pipeline.repository.upsert(record)
            result = await pipeline.improve_design(store_id)
    except AppError as e:
        print_error(e, verbose)
        sys.exit(1)

    recommendations = result.recommendations
    table = Table(title=f"Design Improvements ({result.source})", show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Recommendation")
    for category, items in (
        ("Design", recommendations.improvements),
        ("UX", recommendations.ux),
        ("Mobile", recommendations.mobile),
        ("Conversion", recommendations.conversion),
    ):
        for item in items:
            table.add_row(category, item)

    console.print(table)


@cli.command()
def validate_setup():
    """Check API keys and environment configuration."""
    console.print("[bold]Validating Setup...[/bold]")

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        sys.exit(1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")

    if settings.ai_enabled:
        key = settings.anthropic_api_key.get_secret_value()
        table.add_row("Anthropic API Key", "[green]Pass[/green]", f"configured ({len(key)} chars)")
    else:
        table.add_row("Anthropic API Key", "[yellow]Missing[/yellow]", "fallback recommendations only")

    table.add_row("Model", "[blue]Info[/blue]", settings.claude_model)
    table.add_row("Browser", "[blue]Info[/blue]", "headless" if settings.browser_headless else "headed")
    table.add_row("Navigation Timeout", "[blue]Info[/blue]", f"{settings.navigation_timeout_seconds:g}s")
    table.add_row("Max Concurrent Pages", "[blue]Info[/blue]", str(settings.max_concurrent_pages))
    table.add_row("Output Dir", "[green]Pass[/green]", str(settings.output_dir))
    table.add_row("Environment", "[blue]Info[/blue]", settings.app_env)

    console.print(table)

    if not settings.ai_enabled:
        console.print("\n[yellow]Warning: ANTHROPIC_API_KEY not set. Recommendations will use the fallback set.[/yellow]")


if __name__ == "__main__":
    cli()
