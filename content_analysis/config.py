from __future__ import annotations

"""
Configuration loading for the content analysis report.

Reads settings from a `.env` file using `python-dotenv` and from the real
environment, exposing a simple `Settings` object to the rest of the app.
"""

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent


def load_env() -> None:
    """
    Load environment variables from a `.env` file at project root if present.
    """
    env_path = PROJECT_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """
    Run configuration, sourced from environment variables.

    Analysis windows and limits:
      - DAYS_RECENT: content activity window in days (default: 90).
      - DAYS_EDITOR_ACTIVITY: editor activity window in days (default: 180).
      - HIGH_REVISION_THRESHOLD: minimum revisions to count as high-revision (default: 5).
      - HIGH_REVISION_LIMIT, RECENT_CONTENT_LIMIT, PARAGRAPH_LIST_LIMIT,
        BLOCK_LIST_LIMIT, TAXONOMY_LIST_LIMIT, MEDIA_LIST_LIMIT: row limits.

    Environment:
      - CONTENT_ANALYSIS_REPORTS_DIR: where run directories are created
        (default: "reports" under the project root).
      - DDEV_PROJECT_DIR: directory `ddev` is run from (default: cwd).
      - DDEV_COMMAND: the ddev executable (default: "ddev").
    """

    days_recent: int = 90
    days_editor_activity: int = 180
    high_revision_threshold: int = 5
    high_revision_limit: int = 50
    recent_content_limit: int = 50
    paragraph_list_limit: int = 500
    block_list_limit: int = 100
    taxonomy_list_limit: int = 200
    media_list_limit: int = 100
    reports_dir: Path = PROJECT_ROOT / "reports"
    ddev_project_dir: Optional[Path] = None
    ddev_command: str = "ddev"
    site: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_env()
        project_dir = os.getenv("DDEV_PROJECT_DIR", "").strip()

        return cls(
            days_recent=_env_int("DAYS_RECENT", 90),
            days_editor_activity=_env_int("DAYS_EDITOR_ACTIVITY", 180),
            high_revision_threshold=_env_int("HIGH_REVISION_THRESHOLD", 5),
            high_revision_limit=_env_int("HIGH_REVISION_LIMIT", 50),
            recent_content_limit=_env_int("RECENT_CONTENT_LIMIT", 50),
            paragraph_list_limit=_env_int("PARAGRAPH_LIST_LIMIT", 500),
            block_list_limit=_env_int("BLOCK_LIST_LIMIT", 100),
            taxonomy_list_limit=_env_int("TAXONOMY_LIST_LIMIT", 200),
            media_list_limit=_env_int("MEDIA_LIST_LIMIT", 100),
            reports_dir=Path(
                os.getenv("CONTENT_ANALYSIS_REPORTS_DIR", str(PROJECT_ROOT / "reports"))
            ),
            ddev_project_dir=Path(project_dir) if project_dir else None,
            ddev_command=os.getenv("DDEV_COMMAND", "ddev").strip() or "ddev",
        )

    def with_site(self, site: Optional[str]) -> "Settings":
        return replace(self, site=(site or "").strip() or None)
