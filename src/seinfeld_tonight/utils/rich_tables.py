# ABOUTME: Rich table utilities for the CLI run report, validation violations and logging status
# ABOUTME: Provides pre-configured table generators for common data display patterns

from typing import Any

from rich.box import ROUNDED, SIMPLE
from rich.console import Console
from rich.table import Table


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box_style=ROUNDED,
) -> Table:
    """Create a two-column key-value table.

    Args:
        title: Table title with emoji/styling
        data: Dictionary of key-value pairs to display
        title_style: Style for the table title
        key_style: Style for the key column
        value_style: Style for the value column
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=False,
    )

    table.add_column("Field", style=key_style, no_wrap=False)
    table.add_column("Value", style=value_style, no_wrap=False)

    for key, value in data.items():
        table.add_row(key, str(value))

    return table


def create_multi_column_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
    title_style: str = "bold cyan",
    header_style: str = "bold magenta",
    alternate_row_styles: list[str] | None = None,
    box_style=ROUNDED,
) -> Table:
    """Create a multi-column table with zebra striping."""
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style=header_style,
        border_style="cyan",
        title_justify="left",
        row_styles=alternate_row_styles or ["", "dim"],
        expand=True,
    )

    for name, style in columns:
        table.add_column(name, style=style)

    for row in rows:
        table.add_row(*row)

    return table


def create_run_summary_table(result: Any) -> Table:
    """Create a summary table for a finished pipeline run.

    Args:
        result: PipelineResult from the episode or quote pipeline

    Returns:
        Styled run summary table
    """
    enrichment = result.enrichment
    summary_data = {
        "📦 Dataset": result.dataset,
        "🔢 Records": f"{len(result.records):,}",
        "🧭 Parse Strategy": result.strategy or "None",
        "🪜 Strategies Tried": ", ".join(result.attempted) or "None",
        "✨ Enriched": f"{enrichment.enriched} of {enrichment.total}",
        "⚠️ Enrichment Misses": str(enrichment.failed),
        "⏭️ Not Sent": str(enrichment.skipped),
        "✅ Validation": "Passed" if result.validation.ok else f"{len(result.validation.violations)} violations",
    }
    if result.source:
        summary_data["🌐 Source"] = result.source
    if result.written:
        summary_data["💾 Written"] = "\n".join(str(path) for path in result.written)

    return create_key_value_table(
        title="🔄 Run Summary",
        data=summary_data,
        title_style="bold green",
        key_style="cyan",
        value_style="white",
        box_style=SIMPLE,
    )


def create_violations_table(report: Any) -> Table:
    """Create a table listing every validation violation in a report."""
    rows = [[str(v.index), v.code, v.message] for v in report.violations]
    return create_multi_column_table(
        title=f"🚨 {report.schema}: {len(report.violations)} violation(s) in {report.checked} records",
        columns=[("Index", "cyan"), ("Code", "magenta"), ("Message", "white")],
        rows=rows,
        title_style="bold red",
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Create a logging configuration status table.

    Args:
        status: Logging status dictionary

    Returns:
        Styled logging configuration table
    """
    logging_data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }

    if status["log_files"]["main"]:
        logging_data["📝 Main Log"] = status["log_files"]["main"]
    if status["log_files"]["json"]:
        logging_data["📊 JSON Log"] = status["log_files"]["json"]
    if status["log_files"]["errors"]:
        logging_data["🚨 Error Log"] = status["log_files"]["errors"]

    return create_key_value_table(
        title="🔍 Logging Configuration",
        data=logging_data,
        title_style="bold green",
        key_style="blue",
        value_style="white",
    )


def print_rich_table(console: Console, table: Table) -> None:
    """Print a rich table with consistent spacing."""
    console.print()
    console.print(table)
    console.print()
