from __future__ import annotations

"""
The fixed, ordered set of analyses that make up the content analysis report.

Each analysis is a MySQL query over the Drupal schema plus the headers,
prose and artifact name used to present its result. Templates use
`str.format` fields named after `Settings` attributes.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from .config import Settings
from .db import BLOCKS, CONTENT_SYNC, MEDIA, PARAGRAPHS, TAXONOMY


MODULE_LABELS = {
    CONTENT_SYNC: "Content Sync",
    PARAGRAPHS: "Paragraphs",
    BLOCKS: "Block Content",
    TAXONOMY: "Taxonomy",
    MEDIA: "Media",
}


@dataclass(frozen=True)
class PreparedAnalysis:
    slug: str
    title: str
    description: str
    query: str
    csv_header: str
    markdown_header: str
    width: int
    requires: Optional[str]
    detects: Optional[str]

    @property
    def filename(self) -> str:
        return f"{self.slug}.csv"

    @property
    def module_label(self) -> str:
        flag = self.requires or self.detects
        return MODULE_LABELS.get(flag, flag or "")


@dataclass(frozen=True)
class AnalysisSpec:
    slug: str
    title: str
    description: str
    query: str
    columns: tuple[str, ...]
    labels: tuple[str, ...]
    requires: Optional[str] = None
    detects: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.labels):
            raise ValueError(f"{self.slug}: CSV columns and table labels differ in length")

    def render(self, settings: Settings) -> PreparedAnalysis:
        values = asdict(settings)
        columns = [column.format(**values) for column in self.columns]
        labels = [label.format(**values) for label in self.labels]
        return PreparedAnalysis(
            slug=self.slug,
            title=self.title,
            description=self.description.format(**values),
            query=self.query.format(**values),
            csv_header=",".join(columns),
            markdown_header="| " + " | ".join(labels) + " |",
            width=len(columns),
            requires=self.requires,
            detects=self.detects,
        )


_RECENT_CUTOFF = "UNIX_TIMESTAMP(DATE_SUB(NOW(), INTERVAL {days_recent} DAY))"

_TYPE_ACTIVITY_COLUMNS = (
    "type",
    "total_nodes",
    "edited_last_{days_recent}_days",
    "created_last_{days_recent}_days",
)
_TYPE_ACTIVITY_LABELS = ("Content Type", "Total Nodes", "Edited ({days_recent}d)", "Created ({days_recent}d)")


CONTENT_TYPE_ACTIVITY = AnalysisSpec(
    slug="content-type-activity",
    title="Content Type Activity",
    description=(
        "Which content types see the most editing activity? "
        "This helps prioritize which workflows to test first."
    ),
    query=f"""SELECT
        n.type,
        COUNT(*) as total_nodes,
        COUNT(CASE WHEN n.changed > {_RECENT_CUTOFF} THEN 1 END) as edited_last_{{days_recent}}_days,
        COUNT(CASE WHEN n.created > {_RECENT_CUTOFF} THEN 1 END) as created_last_{{days_recent}}_days
    FROM node_field_data n
    GROUP BY n.type
    ORDER BY edited_last_{{days_recent}}_days DESC;""",
    columns=_TYPE_ACTIVITY_COLUMNS,
    labels=_TYPE_ACTIVITY_LABELS,
)

CONTENT_TYPE_ACTIVITY_NO_SYNC = AnalysisSpec(
    slug="content-type-activity-no-sync",
    title="Content Type Activity (Excluding Content Sync Imports)",
    description=(
        "Same as above, but filters out content that was imported via Content Sync "
        "and not locally modified.\n"
        "This shows what editors are *actually* touching."
    ),
    query=f"""SELECT
        n.type,
        COUNT(*) as total_nodes,
        COUNT(CASE WHEN n.changed > {_RECENT_CUTOFF} THEN 1 END) as edited_last_{{days_recent}}_days,
        COUNT(CASE WHEN n.created > {_RECENT_CUTOFF} THEN 1 END) as created_last_{{days_recent}}_days
    FROM node_field_data n
    LEFT JOIN cms_content_sync_entity_status s ON n.nid = s.entity__target_id AND s.entity_type = 'node'
    WHERE s.last_import IS NULL OR s.last_import < n.changed
    GROUP BY n.type
    ORDER BY edited_last_{{days_recent}}_days DESC;""",
    columns=_TYPE_ACTIVITY_COLUMNS,
    labels=_TYPE_ACTIVITY_LABELS,
    requires=CONTENT_SYNC,
)

CONTENT_SYNC_STATUS = AnalysisSpec(
    slug="content-sync-status",
    title="Content Sync Status by Type",
    description=(
        "Distinguishes between locally-created content, syndicated content, "
        "and syndicated content that was locally modified.\n"
        "\n"
        "- **local_only**: Created on this site, not syndicated\n"
        "- **syndicated_unmodified**: Imported via Content Sync, not edited locally\n"
        "- **syndicated_locally_modified**: Imported via Content Sync, then edited locally"
    ),
    query="""SELECT
        n.type,
        CASE
            WHEN s.entity__target_id IS NULL THEN 'local_only'
            WHEN s.last_import >= n.changed THEN 'syndicated_unmodified'
            ELSE 'syndicated_locally_modified'
        END as sync_status,
        COUNT(*) as count
    FROM node_field_data n
    LEFT JOIN cms_content_sync_entity_status s ON n.nid = s.entity__target_id AND s.entity_type = 'node'
    GROUP BY n.type, sync_status
    ORDER BY count DESC, n.type, sync_status;""",
    columns=("type", "sync_status", "count"),
    labels=("Content Type", "Sync Status", "Count"),
    requires=CONTENT_SYNC,
)

SYNCED_NODE_COUNTS = AnalysisSpec(
    slug="synced-node-counts",
    title="Synced Node Counts by Type",
    description="A simpler view: how many nodes of each type came through Content Sync.",
    query="""SELECT
        n.type,
        COUNT(*) as synced_count
    FROM cms_content_sync_entity_status s
    JOIN node_field_data n ON s.entity__target_id = n.nid
    WHERE s.entity_type = 'node'
    GROUP BY n.type
    ORDER BY synced_count DESC;""",
    columns=("type", "synced_count"),
    labels=("Content Type", "Synced Count"),
    requires=CONTENT_SYNC,
)

EDITOR_ACTIVITY = AnalysisSpec(
    slug="editor-activity",
    title="Editor Activity Patterns",
    description=(
        "Shows which users are editing which content types. Useful for understanding "
        "role-based workflows\n"
        "and validating against QA Account roles.\n"
        "\n"
        "*Activity from the last {days_editor_activity} days*"
    ),
    query="""SELECT
        COALESCE(NULLIF(u.name, ''), CONCAT('uid:', u.uid)) as user_name,
        n.type,
        COUNT(*) as edits,
        MAX(FROM_UNIXTIME(n.changed)) as last_edit
    FROM node_field_data n
    JOIN users_field_data u ON n.uid = u.uid
    WHERE n.changed > UNIX_TIMESTAMP(DATE_SUB(NOW(), INTERVAL {days_editor_activity} DAY))
    GROUP BY u.uid, u.name, n.type
    ORDER BY edits DESC;""",
    columns=("user_name", "type", "edit_count", "last_edit"),
    labels=("User", "Content Type", "Edit Count", "Last Edit"),
)

HIGH_REVISION_CONTENT = AnalysisSpec(
    slug="high-revision-content",
    title="High-Revision Content (Potential Pain Points)",
    description=(
        "Content with many revisions may indicate editing friction or complex workflows "
        "worth investigating.\n"
        "Showing content with more than {high_revision_threshold} revisions "
        "(top {high_revision_limit})."
    ),
    query="""SELECT
        n.nid,
        n.title,
        n.type,
        COUNT(r.vid) as revision_count,
        FROM_UNIXTIME(n.created) as created,
        FROM_UNIXTIME(n.changed) as last_changed,
        CONCAT('/node/', n.nid, '/edit') as edit_url
    FROM node_field_data n
    JOIN node_revision r ON n.nid = r.nid
    GROUP BY n.nid, n.title, n.type, n.created, n.changed
    HAVING revision_count > {high_revision_threshold}
    ORDER BY revision_count DESC
    LIMIT {high_revision_limit};""",
    columns=("nid", "title", "type", "revision_count", "created", "last_changed", "edit_url"),
    labels=("NID", "Title", "Type", "Revisions", "Created", "Last Changed", "Edit URL"),
)

RECENT_NODES = AnalysisSpec(
    slug="recent-nodes",
    title="Recently Edited Nodes",
    description=(
        "Most recently edited content across all types (top {recent_content_limit}).\n"
        "Useful for understanding current editorial activity."
    ),
    query="""SELECT
        n.nid,
        n.title,
        n.type,
        FROM_UNIXTIME(n.changed) as last_changed,
        COALESCE(NULLIF(u.name, ''), CONCAT('uid:', u.uid)) as changed_by,
        CONCAT('/node/', n.nid, '/edit') as edit_url
    FROM node_field_data n
    JOIN users_field_data u ON n.uid = u.uid
    ORDER BY n.changed DESC
    LIMIT {recent_content_limit};""",
    columns=("nid", "title", "type", "last_changed", "changed_by", "edit_url"),
    labels=("NID", "Title", "Type", "Last Changed", "Changed By", "Edit URL"),
)

PARAGRAPH_SUMMARY = AnalysisSpec(
    slug="paragraph-summary",
    title="Paragraph Type Summary",
    description=(
        "Shows which paragraph components are most used across the site.\n"
        "Focus component tests on the most-used paragraph types."
    ),
    query="""SELECT
        p.type,
        COUNT(*) as usage_count
    FROM paragraphs_item_field_data p
    GROUP BY p.type
    ORDER BY usage_count DESC;""",
    columns=("type", "usage_count"),
    labels=("Paragraph Type", "Usage Count"),
    detects=PARAGRAPHS,
)

PARAGRAPH_LIST = AnalysisSpec(
    slug="paragraph-list",
    title="Paragraph Content List",
    description=(
        "Individual paragraph instances and their parent nodes (top {paragraph_list_limit}).\n"
        "Use the edit URL to investigate how specific paragraphs are configured."
    ),
    query="""SELECT
        p.type as paragraph_type,
        n.type as node_type,
        n.nid,
        n.title,
        CONCAT('/node/', n.nid, '/edit') as edit_url
    FROM paragraphs_item_field_data p
    JOIN node_field_data n ON p.parent_id = n.nid AND p.parent_type = 'node'
    ORDER BY p.type, n.type, n.nid
    LIMIT {paragraph_list_limit};""",
    columns=("paragraph_type", "node_type", "nid", "title", "edit_url"),
    labels=("Paragraph Type", "Node Type", "NID", "Title", "Edit URL"),
    requires=PARAGRAPHS,
)

BLOCK_SUMMARY = AnalysisSpec(
    slug="block-summary",
    title="Block Content Type Summary",
    description="Shows which custom block types are used across the site.",
    query="""SELECT
        b.type,
        COUNT(*) as usage_count
    FROM block_content_field_data b
    GROUP BY b.type
    ORDER BY usage_count DESC;""",
    columns=("type", "usage_count"),
    labels=("Block Type", "Usage Count"),
    detects=BLOCKS,
)

BLOCK_LIST = AnalysisSpec(
    slug="block-list",
    title="Block Content List",
    description="Individual custom blocks (top {block_list_limit} by most recently changed).",
    query="""SELECT
        b.id,
        b.info as block_description,
        b.type,
        FROM_UNIXTIME(b.changed) as last_changed,
        CONCAT('/admin/content/block/', b.id) as edit_url
    FROM block_content_field_data b
    ORDER BY b.changed DESC
    LIMIT {block_list_limit};""",
    columns=("id", "block_description", "type", "last_changed", "edit_url"),
    labels=("ID", "Description", "Type", "Last Changed", "Edit URL"),
    requires=BLOCKS,
)

TAXONOMY_SUMMARY = AnalysisSpec(
    slug="taxonomy-summary",
    title="Taxonomy Vocabulary Summary",
    description="Shows term counts by vocabulary.",
    query="""SELECT
        t.vid as vocabulary,
        COUNT(*) as term_count
    FROM taxonomy_term_field_data t
    GROUP BY t.vid
    ORDER BY term_count DESC;""",
    columns=("vocabulary", "term_count"),
    labels=("Vocabulary", "Term Count"),
    detects=TAXONOMY,
)

TAXONOMY_LIST = AnalysisSpec(
    slug="taxonomy-list",
    title="Taxonomy Term List",
    description="Individual taxonomy terms (top {taxonomy_list_limit} by most recently changed).",
    query="""SELECT
        t.tid,
        t.name,
        t.vid as vocabulary,
        FROM_UNIXTIME(t.changed) as last_changed,
        CONCAT('/taxonomy/term/', t.tid, '/edit') as edit_url
    FROM taxonomy_term_field_data t
    ORDER BY t.changed DESC
    LIMIT {taxonomy_list_limit};""",
    columns=("tid", "name", "vocabulary", "last_changed", "edit_url"),
    labels=("TID", "Name", "Vocabulary", "Last Changed", "Edit URL"),
    requires=TAXONOMY,
)

MEDIA_SUMMARY = AnalysisSpec(
    slug="media-summary",
    title="Media Type Summary",
    description="Shows media item counts by type (image, document, video, etc.).",
    query="""SELECT
        m.bundle as media_type,
        COUNT(*) as usage_count
    FROM media_field_data m
    GROUP BY m.bundle
    ORDER BY usage_count DESC;""",
    columns=("media_type", "usage_count"),
    labels=("Media Type", "Usage Count"),
    detects=MEDIA,
)

MEDIA_LIST = AnalysisSpec(
    slug="media-list",
    title="Media Content List",
    description="Individual media items (top {media_list_limit} by most recently changed).",
    query="""SELECT
        m.mid,
        m.name,
        m.bundle as media_type,
        FROM_UNIXTIME(m.changed) as last_changed,
        CONCAT('/media/', m.mid, '/edit') as edit_url
    FROM media_field_data m
    ORDER BY m.changed DESC
    LIMIT {media_list_limit};""",
    columns=("mid", "name", "media_type", "last_changed", "edit_url"),
    labels=("MID", "Name", "Media Type", "Last Changed", "Edit URL"),
    requires=MEDIA,
)


# Order matters: later descriptions refer back to earlier sections.
ANALYSES: tuple[AnalysisSpec, ...] = (
    CONTENT_TYPE_ACTIVITY,
    CONTENT_TYPE_ACTIVITY_NO_SYNC,
    CONTENT_SYNC_STATUS,
    SYNCED_NODE_COUNTS,
    EDITOR_ACTIVITY,
    HIGH_REVISION_CONTENT,
    RECENT_NODES,
    PARAGRAPH_SUMMARY,
    PARAGRAPH_LIST,
    BLOCK_SUMMARY,
    BLOCK_LIST,
    TAXONOMY_SUMMARY,
    TAXONOMY_LIST,
    MEDIA_SUMMARY,
    MEDIA_LIST,
)
