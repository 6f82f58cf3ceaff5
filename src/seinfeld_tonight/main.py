# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands to build the episode and quote datasets and to validate written datasets

from pathlib import Path

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from seinfeld_tonight.config import get_config
from seinfeld_tonight.core.pipeline import DatasetValidationError, EpisodePipeline, PipelineResult, QuotePipeline
from seinfeld_tonight.core.validation import SCHEMAS, validate_records
from seinfeld_tonight.extraction.base import ExtractionError, SourcesExhaustedError
from seinfeld_tonight.persistence import DatasetWriter, PersistenceError, load_dataset
from seinfeld_tonight.utils.logging import LoggingMode, configure_logging, get_logger, get_logging_status
from seinfeld_tonight.utils.rich_tables import (
    create_logging_status_table,
    create_run_summary_table,
    create_violations_table,
    print_rich_table,
)

console = Console()

FATAL_ERRORS = (ExtractionError, PersistenceError, DatasetValidationError, FileNotFoundError)


def _report_fatal(error: Exception, json_output: bool) -> None:
    """Log a fatal condition and print a human-readable diagnostic."""
    get_logger(__name__).error("Run aborted", error=str(error), error_type=type(error).__name__)
    if json_output:
        return
    console.print(f"[red]❌ {error}[/red]")
    if isinstance(error, SourcesExhaustedError):
        for url in error.attempted:
            console.print(f"   [dim]tried {url}[/dim]")
    if isinstance(error, DatasetValidationError):
        print_rich_table(console, create_violations_table(error.report))


async def _run_pipeline(ctx, pipeline, message: str) -> PipelineResult | None:
    json_output = ctx.obj["json_output"]
    try:
        if json_output:
            return await pipeline.run()
        with console.status(message):
            return await pipeline.run()
    except FATAL_ERRORS as e:
        _report_fatal(e, json_output)
        ctx.exit(1)
    return None


def _display_result(result: PipelineResult, json_output: bool) -> None:
    if json_output:
        return
    print_rich_table(console, create_run_summary_table(result))
    console.print(f"✅ Wrote [bold green]{len(result.records)}[/bold green] {result.dataset}")


def _pipeline_options(func):
    """Options shared by the dataset-building commands."""
    options = [
        click.option("--debug", is_flag=True, help="Log parser diagnostics"),
        click.option("--enrich-all", is_flag=True, help="Enrich every record, ignoring the cap"),
        click.option("--enrich-limit", type=int, default=None, help="Enrich only the first N records"),
        click.option("--delay", type=float, default=None, help="Seconds to wait between enrichment calls"),
        click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Output directory"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command()
@_pipeline_options
@click.option("--topics", type=click.Path(dir_okay=False, path_type=Path), help="Topic vocabulary JSON file")
@click.pass_context
async def episodes(
    ctx,
    debug: bool,
    enrich_all: bool,
    enrich_limit: int | None,
    delay: float | None,
    data_dir: Path | None,
    topics: Path | None,
):
    """
    📺 Build the episode dataset from the Wikipedia episode list.

    Writes episodes.json, episodes.js and topics.js. Episodes with a summary are
    labelled with a subtitle and topics when an enrichment credential is set.
    """
    config = get_config()
    topics_file = topics or (data_dir / "topics.json" if data_dir else config.topics_file)
    pipeline = EpisodePipeline(
        writer=DatasetWriter(data_dir),
        debug=debug or None,
        enrich_all=enrich_all or None,
        enrich_limit=enrich_limit,
        delay=delay,
        topics_file=topics_file,
    )
    result = await _run_pipeline(ctx, pipeline, "📺 Building episodes")
    if result is not None:
        _display_result(result, ctx.obj["json_output"])


@click.command()
@_pipeline_options
@click.pass_context
async def quotes(
    ctx,
    debug: bool,
    enrich_all: bool,
    enrich_limit: int | None,
    delay: float | None,
    data_dir: Path | None,
):
    """
    💬 Build the quote dataset from the Wikiquote season pages.

    Writes quotes.json and quotes.js. Only the first quotes of a run are enriched
    unless --enrich-all is given.
    """
    pipeline = QuotePipeline(
        writer=DatasetWriter(data_dir),
        debug=debug or None,
        enrich_all=enrich_all or None,
        enrich_limit=enrich_limit,
        delay=delay,
    )
    result = await _run_pipeline(ctx, pipeline, "💬 Harvesting quotes")
    if result is not None:
        _display_result(result, ctx.obj["json_output"])


@click.command()
@click.argument("dataset", type=click.Choice(sorted(SCHEMAS)), default="quotes")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Directory holding the dataset")
@click.pass_context
def validate(ctx, dataset: str, data_dir: Path | None):
    """
    🔎 Validate a written dataset and list every violation.
    """
    json_output = ctx.obj["json_output"]
    logger = get_logger(__name__)
    path = (data_dir or get_config().data_dir) / f"{dataset}.json"

    try:
        records = load_dataset(path)
    except (FileNotFoundError, PersistenceError) as e:
        _report_fatal(e, json_output)
        ctx.exit(1)

    report = validate_records(records, SCHEMAS[dataset])
    if not report.ok:
        logger.error("Dataset validation failed", dataset=dataset, violations=len(report.violations))
        if not json_output:
            print_rich_table(console, create_violations_table(report))
        ctx.exit(1)

    logger.info("Dataset validation passed", dataset=dataset, records=report.checked)
    if not json_output:
        console.print(f"✅ {dataset.title()} validation passed ({report.checked} entries).")


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    try:
        config = get_config()
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

        # Use config defaults when CLI parameters are not provided
        final_log_level = log_level or config.log_level
        final_log_file = log_file or (str(config.log_file) if config.log_file else None)

        configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)
    except (FileNotFoundError, PermissionError, OSError):
        # Log directory not writable: fall back to stdout only
        configure_logging(mode=LoggingMode.PRODUCTION, log_level=log_level or "INFO")


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    logging_table = create_logging_status_table(status)
    print_rich_table(console, logging_table)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    📺 Seinfeld Tonight - episode and quote datasets

    Scrape the Seinfeld episode list and Wikiquote season pages into validated,
    deduplicated JSON datasets, optionally enriched with subtitles, topics and
    quote attribution.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    # Initialize logging once here instead of in each command
    _initialize_logging(json, log_level, log_file)

    if ctx.invoked_subcommand is None:
        if not json:
            console.print(Panel.fit("📺 [bold cyan]Seinfeld Tonight[/bold cyan] 📺", border_style="magenta"))
        click.echo(ctx.get_help())


app.add_command(episodes)
app.add_command(quotes)
app.add_command(validate)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
