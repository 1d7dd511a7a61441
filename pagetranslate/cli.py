"""
Command-line interface for pagetranslate.
"""

import asyncio
import logging
import os
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import MAX_RETRY_ATTEMPTS, RETRY_BASE_DELAY, TARGET_LANGUAGE, load_layout_thresholds, validate_config
from .core.exporter import Exporter
from .core.page_reconstructor import PageReconstructor
from .core.pdf_loader import PDFLoader
from .core.retry_scheduler import RetryScheduler
from .core.translator import Translator
from .errors import ConfigurationError, ExtractionError
from .models import TranslationUnit, UnitStatus
from .session import TranslationSession

app = typer.Typer(help="pagetranslate: reflow PDF pages into paragraphs and translate them page by page.")
console = Console()

EXIT_DOCUMENT_FAILED = 1
EXIT_PAGES_FAILED = 2


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _default_output(pdf_path: str, suffix: str) -> str:
    base_filename = os.path.splitext(pdf_path)[0]
    return f"{base_filename}_{suffix}.txt"


def _failure_table(units: List[TranslationUnit]) -> Table:
    table = Table(title="Failed pages")
    table.add_column("Page", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("Error")
    for unit in units:
        if unit.status == UnitStatus.ERROR:
            table.add_row(str(unit.id), str(unit.retry_count), unit.error_message or "")
    return table


@app.command()
def translate(
    pdf_path: str = typer.Argument(..., help="PDF file to translate"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output text file (default: <input>_translated.txt)"),
    target_language: str = typer.Option(TARGET_LANGUAGE, "--target-language", "-t", help="Language to translate into"),
    max_attempts: int = typer.Option(MAX_RETRY_ATTEMPTS, "--max-attempts", help="Attempts per page before it is marked failed"),
    base_delay: float = typer.Option(RETRY_BASE_DELAY, "--base-delay", help="Backoff before the second attempt, doubled each time (seconds)"),
    retry_failed: bool = typer.Option(False, "--retry-failed", help="Give failed pages one more round after the sweep"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Translate a PDF page by page into a plain-text document."""
    _setup_logging(verbose)
    output_path = output or _default_output(pdf_path, "translated")

    try:
        validate_config()
        scheduler = RetryScheduler(max_attempts=max_attempts, base_delay=base_delay)
        translator = Translator(target_language=target_language)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_DOCUMENT_FAILED)

    with Progress(TextColumn("[progress.description]{task.description}"), BarColumn(),
                  TaskProgressColumn(), console=console) as progress:
        task = progress.add_task("Translating...", total=100)

        def on_progress(units: List[TranslationUnit], percent: int):
            done = sum(1 for u in units if u.status in (UnitStatus.COMPLETED, UnitStatus.ERROR))
            progress.update(task, completed=percent, description=f"Translating ({done}/{len(units)} pages)")

        session = TranslationSession(translator=translator, scheduler=scheduler, on_progress=on_progress)

        async def run_document() -> List[TranslationUnit]:
            units = await session.translate_document(pdf_path)
            if retry_failed and session.orchestrator.failed_units:
                progress.update(task, description="Retrying failed pages...")
                units = await session.retry_failed()
            return units

        try:
            units = asyncio.run(run_document())
        except (ExtractionError, ConfigurationError) as e:
            progress.stop()
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(EXIT_DOCUMENT_FAILED)

    Exporter().save_text(units, output_path)
    failed = [u for u in units if u.status == UnitStatus.ERROR]
    console.print(f"[green]✓ Saved {len(units) - len(failed)}/{len(units)} translated pages to {output_path}[/green]")

    if failed:
        console.print(_failure_table(units))
        console.print("Run again with [bold]--retry-failed[/bold] to give failed pages another round.")
        raise typer.Exit(EXIT_PAGES_FAILED)


@app.command()
def extract(
    pdf_path: str = typer.Argument(..., help="PDF file to read"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output text file (default: print to console)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Reconstruct the paragraphs of a PDF without translating them."""
    _setup_logging(verbose)
    loader = PDFLoader()
    try:
        reconstructor = PageReconstructor(load_layout_thresholds(loader.origin))
        texts = reconstructor.reconstruct_document(loader.load_fragments(pdf_path))
    except (ExtractionError, ConfigurationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_DOCUMENT_FAILED)

    units = [TranslationUnit(id=i, original_text=text) for i, text in enumerate(texts, start=1)]
    exporter = Exporter()
    if output:
        exporter.save_original_text(units, output)
        console.print(f"[green]✓ Saved {len(units)} pages to {output}[/green]")
    else:
        console.print(exporter.render_original(units), markup=False, highlight=False)
