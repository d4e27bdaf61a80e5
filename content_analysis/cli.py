from __future__ import annotations

"""
Command-line interface entrypoint.
"""

import argparse
import sys
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings
from .db import ensure_indexes, probe_availability
from .ddev import DataSourceError, DdevClient
from .models import AnalysisState
from .report import OutputDirectoryError, RunSummary, create_output_dir, generate_report, output_dir_for


console = Console()


_STATE_STYLES = {
    AnalysisState.COMPLETED: "green",
    AnalysisState.SKIPPED: "yellow",
    AnalysisState.FAILED: "red",
    AnalysisState.PENDING: "dim",
}


def _load_settings_or_exit(site: Optional[str]) -> Settings:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        sys.exit(1)
    return settings.with_site(site)


def print_run_summary(summary: RunSummary) -> None:
    table = Table(title="Content analysis")
    table.add_column("Analysis", style="bold")
    table.add_column("Status")
    table.add_column("Rows", justify="right")
    table.add_column("Artifact")

    for outcome in summary.outcomes:
        style = _STATE_STYLES[outcome.state]
        table.add_row(
            outcome.title,
            f"[{style}]{outcome.state.value}[/{style}]",
            str(outcome.row_count) if outcome.state is AnalysisState.COMPLETED else "-",
            outcome.artifact.name if outcome.artifact else "-",
        )

    console.print(table)
    console.print(f"Output: {escape(str(summary.output_dir))}/")


def run(settings: Settings, client: DdevClient) -> RunSummary:
    """
    Full run: environment check, index maintenance, then every analysis.
    """
    project_name = client.check_environment()
    console.print("[green][OK] DDEV project detected[/green]")

    flags = probe_availability(client)
    ensure_indexes(client, flags)

    now = datetime.now()
    output_dir = create_output_dir(output_dir_for(settings, now))
    console.print(f"[green][OK] Output directory created: {escape(str(output_dir))}[/green]")

    site_name = settings.site or project_name or "unknown"
    console.print("\nRunning analysis queries...\n")
    return generate_report(settings, client, flags, output_dir, site_name, now=now)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-analysis",
        description="Drupal content analysis report: content usage statistics for test prioritization.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--site",
        metavar="SITENAME",
        default=None,
        help="Site label used in the output directory name and report header.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _load_settings_or_exit(args.site)

    console.rule("Drupal Content Analysis Report")
    client = DdevClient(command=settings.ddev_command, project_dir=settings.ddev_project_dir)

    try:
        summary = run(settings, client)
    except (DataSourceError, OutputDirectoryError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.rule("[green]Analysis complete![/green]")
    print_run_summary(summary)


if __name__ == "__main__":
    main()
