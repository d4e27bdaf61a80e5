from __future__ import annotations

from pathlib import Path

import pytest

from content_analysis import config
from content_analysis.config import Settings


ENV_VARS = [
    "DAYS_RECENT",
    "DAYS_EDITOR_ACTIVITY",
    "HIGH_REVISION_THRESHOLD",
    "HIGH_REVISION_LIMIT",
    "RECENT_CONTENT_LIMIT",
    "PARAGRAPH_LIST_LIMIT",
    "BLOCK_LIST_LIMIT",
    "TAXONOMY_LIST_LIMIT",
    "MEDIA_LIST_LIMIT",
    "CONTENT_ANALYSIS_REPORTS_DIR",
    "DDEV_PROJECT_DIR",
    "DDEV_COMMAND",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_env", lambda: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings.days_recent == 90
    assert settings.days_editor_activity == 180
    assert settings.high_revision_threshold == 5
    assert settings.high_revision_limit == 50
    assert settings.recent_content_limit == 50
    assert settings.paragraph_list_limit == 500
    assert settings.block_list_limit == 100
    assert settings.taxonomy_list_limit == 200
    assert settings.media_list_limit == 100
    assert settings.reports_dir == config.PROJECT_ROOT / "reports"
    assert settings.ddev_project_dir is None
    assert settings.ddev_command == "ddev"
    assert settings.site is None


def test_environment_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("DAYS_RECENT", "30")
    monkeypatch.setenv("MEDIA_LIST_LIMIT", " 25 ")
    monkeypatch.setenv("CONTENT_ANALYSIS_REPORTS_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("DDEV_PROJECT_DIR", str(tmp_path))

    settings = Settings.from_env()

    assert settings.days_recent == 30
    assert settings.media_list_limit == 25
    assert settings.reports_dir == tmp_path / "out"
    assert settings.ddev_project_dir == tmp_path


@pytest.mark.parametrize("value", ["abc", "0", "-5", "1.5"])
def test_invalid_numbers_name_the_variable(monkeypatch, value):
    monkeypatch.setenv("HIGH_REVISION_LIMIT", value)

    with pytest.raises(ValueError, match="HIGH_REVISION_LIMIT"):
        Settings.from_env()


def test_with_site_normalizes_blank_labels():
    settings = Settings()

    assert settings.with_site("  ").site is None
    assert settings.with_site(" intranet ").site == "intranet"
    assert settings.site is None
