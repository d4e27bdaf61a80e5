from __future__ import annotations

"""
Schema probing and performance index maintenance for the analysis queries.

Indexes are created on the local snapshot only; they never touch production.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .ddev import DataSource, QueryError
from .models import AvailabilityFlags


console = Console()


CONTENT_SYNC = "content-sync"
PARAGRAPHS = "paragraphs"
BLOCKS = "blocks"
TAXONOMY = "taxonomy"
MEDIA = "media"

OPTIONAL_TABLES = {
    CONTENT_SYNC: "cms_content_sync_entity_status",
    PARAGRAPHS: "paragraphs_item_field_data",
    BLOCKS: "block_content_field_data",
    TAXONOMY: "taxonomy_term_field_data",
    MEDIA: "media_field_data",
}


@dataclass(frozen=True)
class IndexSpec:
    table: str
    name: str
    columns: str
    requires: Optional[str] = None


PERFORMANCE_INDEXES = (
    IndexSpec("cms_content_sync_entity_status", "idx_last_import", "last_import", CONTENT_SYNC),
    IndexSpec(
        "cms_content_sync_entity_status",
        "idx_sync_lookup",
        "entity_type, entity__target_id, last_import",
        CONTENT_SYNC,
    ),
    # Content type activity, editor activity, recently edited
    IndexSpec("node_field_data", "idx_analysis_changed", "changed"),
    IndexSpec("node_field_data", "idx_analysis_type_changed", "type, changed"),
    IndexSpec("node_field_data", "idx_analysis_uid_changed", "uid, changed"),
    # High-revision content (JOIN + GROUP BY on nid)
    IndexSpec("node_revision", "idx_analysis_nid", "nid"),
    IndexSpec("paragraphs_item_field_data", "idx_analysis_parent", "parent_type, parent_id", PARAGRAPHS),
    IndexSpec("block_content_field_data", "idx_analysis_changed", "changed", BLOCKS),
    IndexSpec("taxonomy_term_field_data", "idx_analysis_changed", "changed", TAXONOMY),
    IndexSpec("media_field_data", "idx_analysis_changed", "changed", MEDIA),
)


def _quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"


def table_exists(source: DataSource, table: str) -> bool:
    rows = source.run_query(
        "SELECT table_name FROM information_schema.tables "
        f"WHERE table_schema = DATABASE() AND table_name = {_quote(table)};"
    )
    return bool(rows)


def index_exists(source: DataSource, table: str, index_name: str) -> bool:
    rows = source.run_query(
        "SELECT DISTINCT index_name FROM information_schema.statistics "
        f"WHERE table_schema = DATABASE() AND table_name = {_quote(table)} "
        f"AND index_name = {_quote(index_name)};"
    )
    return bool(rows)


def ensure_index(source: DataSource, table: str, index_name: str, columns: str) -> bool:
    """
    Create `index_name` on `table(columns)` unless it already exists.

    Returns True only if an index was created. Creation failures (for example
    a read-only user) are reported and otherwise ignored.
    """
    try:
        if index_exists(source, table, index_name):
            return False
        console.print(f"  Creating index {index_name} on {table}({columns})...")
        source.run_query(f"CREATE INDEX {index_name} ON {table}({columns});")
    except QueryError as e:
        console.print(f"[yellow]  Could not create index {index_name} on {table}: {escape(str(e))}[/yellow]")
        return False
    return True


def probe_availability(source: DataSource) -> AvailabilityFlags:
    """
    Check which optional module tables are present in the snapshot.
    """
    flags = AvailabilityFlags()
    for name, table in OPTIONAL_TABLES.items():
        flags = flags.with_flag(name, table_exists(source, table))

    if not flags.is_available(CONTENT_SYNC):
        console.print(
            f"[yellow]  Note: {OPTIONAL_TABLES[CONTENT_SYNC]} table not found. "
            "Content Sync queries will be skipped.[/yellow]"
        )
    return flags


def ensure_indexes(source: DataSource, flags: AvailabilityFlags) -> int:
    console.print("[yellow]Checking performance indexes...[/yellow]")
    created = 0
    for index in PERFORMANCE_INDEXES:
        if index.requires and not flags.is_available(index.requires):
            continue
        if ensure_index(source, index.table, index.name, index.columns):
            created += 1

    if created:
        console.print(f"[green][OK] Created {created} new index(es)[/green]")
    else:
        console.print("[green][OK] All indexes already exist[/green]")
    return created
