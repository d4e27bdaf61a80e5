from __future__ import annotations

from dataclasses import replace

import pytest

from content_analysis.analyses import (
    ANALYSES,
    AnalysisSpec,
    CONTENT_TYPE_ACTIVITY,
    EDITOR_ACTIVITY,
    HIGH_REVISION_CONTENT,
    PARAGRAPH_LIST,
    PARAGRAPH_SUMMARY,
    TAXONOMY_SUMMARY,
)
from content_analysis.export import count_header_columns


EXPECTED_ORDER = [
    "content-type-activity",
    "content-type-activity-no-sync",
    "content-sync-status",
    "synced-node-counts",
    "editor-activity",
    "high-revision-content",
    "recent-nodes",
    "paragraph-summary",
    "paragraph-list",
    "block-summary",
    "block-list",
    "taxonomy-summary",
    "taxonomy-list",
    "media-summary",
    "media-list",
]


def test_analyses_are_declared_in_report_order():
    assert [spec.slug for spec in ANALYSES] == EXPECTED_ORDER


def test_artifact_filenames_are_unique(settings):
    filenames = [spec.render(settings).filename for spec in ANALYSES]

    assert len(set(filenames)) == len(ANALYSES)


@pytest.mark.parametrize("spec", ANALYSES, ids=lambda spec: spec.slug)
def test_headers_agree_on_column_count(spec, settings):
    prepared = spec.render(settings)

    assert count_header_columns(prepared.markdown_header) == prepared.width
    assert len(prepared.csv_header.split(",")) == prepared.width
    assert "{" not in prepared.query
    assert "{" not in prepared.description


def test_render_substitutes_time_window(settings):
    prepared = CONTENT_TYPE_ACTIVITY.render(settings)

    assert prepared.csv_header == "type,total_nodes,edited_last_90_days,created_last_90_days"
    assert prepared.markdown_header == "| Content Type | Total Nodes | Edited (90d) | Created (90d) |"
    assert "INTERVAL 90 DAY" in prepared.query
    assert "ORDER BY edited_last_90_days DESC" in prepared.query


def test_render_follows_configuration(settings):
    custom = replace(settings, days_recent=30, days_editor_activity=60, high_revision_threshold=9, high_revision_limit=5)

    assert "INTERVAL 30 DAY" in CONTENT_TYPE_ACTIVITY.render(custom).query
    assert "INTERVAL 60 DAY" in EDITOR_ACTIVITY.render(custom).query
    assert "*Activity from the last 60 days*" in EDITOR_ACTIVITY.render(custom).description

    high = HIGH_REVISION_CONTENT.render(custom)
    assert "HAVING revision_count > 9" in high.query
    assert "LIMIT 5;" in high.query


def test_list_analyses_depend_on_their_summary():
    assert PARAGRAPH_SUMMARY.detects == PARAGRAPH_LIST.requires
    for summary, listing in zip(ANALYSES[7::2], ANALYSES[8::2]):
        assert summary.detects is not None
        assert listing.requires == summary.detects


def test_taxonomy_summary_headers(settings):
    prepared = TAXONOMY_SUMMARY.render(settings)

    assert prepared.csv_header == "vocabulary,term_count"
    assert prepared.markdown_header == "| Vocabulary | Term Count |"
    assert prepared.module_label == "Taxonomy"


def test_mismatched_columns_and_labels_are_rejected():
    with pytest.raises(ValueError):
        AnalysisSpec(slug="x", title="X", description="", query="SELECT 1;", columns=("a", "b"), labels=("A",))
