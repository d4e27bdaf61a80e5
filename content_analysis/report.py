from __future__ import annotations

"""
Report assembly: runs each analysis in order, renders its section into the
markdown report and exports its result as a CSV artifact.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape

from .analyses import ANALYSES, AnalysisSpec, PreparedAnalysis
from .config import Settings
from .ddev import DataSource, QueryError
from .export import atomic_write_text, render_markdown_table, write_csv
from .models import AnalysisOutcome, AnalysisState, AvailabilityFlags, RectangularResult


console = Console()


REPORT_FILENAME = "content-analysis-report.md"
OUTPUT_DIR_PREFIX = "content-analysis-report"


class OutputDirectoryError(RuntimeError):
    pass


def output_dir_for(settings: Settings, now: datetime) -> Path:
    timestamp = now.strftime("%Y%m%d-%H%M%S")
    if settings.site:
        name = f"{OUTPUT_DIR_PREFIX}-{settings.site}-{timestamp}"
    else:
        name = f"{OUTPUT_DIR_PREFIX}-{timestamp}"
    return settings.reports_dir / name


def create_output_dir(path: Path) -> Path:
    """
    Create a fresh run directory. An existing directory is never reused.
    """
    try:
        path.mkdir(parents=True, exist_ok=False)
    except OSError as e:
        raise OutputDirectoryError(f"Could not create output directory {path}: {e}") from e
    return path


def preamble(settings: Settings, site_name: str, generated_at: datetime) -> str:
    return (
        "# Drupal Content Analysis Report\n"
        "\n"
        f"**Generated:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"**Site:** {site_name}\n"
        f"**Analysis Period:** Last {settings.days_recent} days (content activity), "
        f"Last {settings.days_editor_activity} days (editor activity)\n"
        "\n"
        "---\n"
        "\n"
        "## Executive Summary\n"
        "\n"
        "This report analyzes production content patterns to inform test prioritization. "
        "It identifies:\n"
        "- Which content types see the most editing activity\n"
        "- Content sync patterns (local vs syndicated)\n"
        "- Editor workflows and activity\n"
        "- Potential pain points (high-revision content)\n"
        "- Paragraph/component usage\n"
        "\n"
        "---\n"
        "\n"
    )


CLOSING_SECTION = """---

## Mapping Results to Test Priorities

| Finding | Testing Implication |
| --- | --- |
| High edit frequency content types | Prioritize Playwright tests for these workflows |
| Content types with high revision counts | May indicate UX issues; consider edge case testing |
| Locally-modified syndicated content | Test the "edit after sync" workflow |
| Top paragraph types | Focus component tests on these |
| Top block types | Include block editing in test coverage |
| High-traffic taxonomies | Test taxonomy term management workflows |
| Top media types | Test media library and upload workflows |
| Recently edited content | Use edit URLs to verify current editorial patterns |
| Editor patterns by role | Validate against QA Account roles |

---

## Notes

- This analysis uses a **point-in-time snapshot**. For trend analysis, repeat periodically with fresh backups.
- The indexes added locally **do not affect production databases**.
- Results should be cross-referenced with team knowledge about upcoming deprecations or migrations.

## Related Resources

- [Drupal Testing Guide](https://www.drupal.org/docs/testing)
- [Content Moderation](https://www.drupal.org/docs/8/core/modules/content-moderation)
- [Paragraphs Module](https://www.drupal.org/project/paragraphs)
- [CMS Content Sync](https://www.drupal.org/project/cms_content_sync)
"""


@dataclass
class ReportDocument:
    """
    Append-only markdown document; nothing is written until `save`.
    """

    preamble: str
    sections: list[str] = field(default_factory=list)

    def append(self, section: str) -> None:
        self.sections.append(section)

    @property
    def body(self) -> str:
        return "".join(self.sections)

    def render(self) -> str:
        return self.preamble + self.body

    def save(self, path: Path) -> Path:
        return atomic_write_text(path, self.render())


def render_section(prepared: PreparedAnalysis, result: RectangularResult) -> str:
    table = render_markdown_table(prepared.markdown_header, result)
    return f"## {prepared.title}\n\n{prepared.description}\n\n{table}\n\n"


def render_skip_note(prepared: PreparedAnalysis) -> str:
    return (
        f"## {prepared.title}\n\n"
        f"*{prepared.module_label} module not detected - skipping this analysis.*\n\n"
    )


def render_failure_note(prepared: PreparedAnalysis) -> str:
    return f"## {prepared.title}\n\n*Query failed - see console output for details.*\n\n"


def run_analysis(
    spec: AnalysisSpec,
    settings: Settings,
    source: DataSource,
    flags: AvailabilityFlags,
    output_dir: Path,
    document: ReportDocument,
) -> tuple[AnalysisOutcome, AvailabilityFlags]:
    """
    Run one analysis: skip it when its module is unavailable, otherwise query,
    append the rendered section and write the CSV artifact.

    Returns the outcome and the availability flags for the analyses after it.
    """
    prepared = spec.render(settings)
    outcome = AnalysisOutcome(slug=prepared.slug, title=prepared.title)

    precondition = prepared.requires or prepared.detects
    if precondition and not flags.is_available(precondition):
        document.append(render_skip_note(prepared))
        outcome.state = AnalysisState.SKIPPED
        console.print(f"[yellow]Skipping: {prepared.title} - {prepared.module_label} not available[/yellow]")
        if prepared.detects:
            flags = flags.with_flag(prepared.detects, False)
        return outcome, flags

    console.print(f"Running: {prepared.title}...")
    try:
        rows = source.run_query(prepared.query)
        result = RectangularResult.from_rows(prepared.width, rows)
    except (QueryError, ValueError) as e:
        document.append(render_failure_note(prepared))
        outcome.state = AnalysisState.FAILED
        outcome.message = str(e)
        console.print(f"[red]Query failed: {prepared.title}: {escape(str(e))}[/red]")
        if prepared.detects:
            flags = flags.with_flag(prepared.detects, False)
        return outcome, flags

    document.append(render_section(prepared, result))
    artifact = write_csv(output_dir / prepared.filename, prepared.csv_header, result)
    console.print(f"[green]    -> Saved: {escape(str(artifact))}[/green]")

    outcome.state = AnalysisState.COMPLETED
    outcome.row_count = len(result)
    outcome.artifact = artifact
    if prepared.detects:
        flags = flags.with_flag(prepared.detects, True)
    console.print(f"[green][OK] {prepared.title}[/green]")
    return outcome, flags


@dataclass
class RunSummary:
    output_dir: Path
    report_path: Path
    outcomes: list[AnalysisOutcome]
    flags: AvailabilityFlags


def generate_report(
    settings: Settings,
    source: DataSource,
    flags: AvailabilityFlags,
    output_dir: Path,
    site_name: str,
    now: Optional[datetime] = None,
    analyses: Iterable[AnalysisSpec] = ANALYSES,
) -> RunSummary:
    """
    Run every analysis in declaration order into `output_dir` and save the report.
    """
    generated_at = now or datetime.now()
    document = ReportDocument(preamble=preamble(settings, site_name, generated_at))
    console.print("[green][OK] Report initialized[/green]")

    outcomes: list[AnalysisOutcome] = []
    for spec in analyses:
        outcome, flags = run_analysis(spec, settings, source, flags, output_dir, document)
        outcomes.append(outcome)

    document.append(CLOSING_SECTION)
    report_path = document.save(output_dir / REPORT_FILENAME)
    console.print("[green][OK] Testing implications added[/green]")

    return RunSummary(output_dir=output_dir, report_path=report_path, outcomes=outcomes, flags=flags)
