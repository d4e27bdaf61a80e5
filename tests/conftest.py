from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional

import pytest

from content_analysis.config import Settings
from content_analysis.ddev import QueryError


class FakeSource:
    """
    In-memory stand-in for the ddev data source.

    `results` maps exact SQL text to the rows it returns; anything else
    returns no rows. Queries containing a `failing` marker raise QueryError.
    """

    def __init__(
        self,
        tables: Iterable[str] = (),
        indexes: Iterable[tuple[str, str]] = (),
        results: Optional[dict[str, list[tuple[str, ...]]]] = None,
        failing: Iterable[str] = (),
    ):
        self.tables = set(tables)
        self.indexes = set(indexes)
        self.results = dict(results or {})
        self.failing = list(failing)
        self.queries: list[str] = []

    def run_query(self, sql: str) -> list[tuple[str, ...]]:
        self.queries.append(sql)
        for marker in self.failing:
            if marker in sql:
                raise QueryError(sql, "ERROR 1142 (42000) at line 1: command denied")

        if "information_schema.tables" in sql:
            table = re.search(r"table_name = '([^']+)'", sql).group(1)
            return [(table,)] if table in self.tables else []
        if "information_schema.statistics" in sql:
            table = re.search(r"table_name = '([^']+)'", sql).group(1)
            index = re.search(r"index_name = '([^']+)'", sql).group(1)
            return [(index,)] if (table, index) in self.indexes else []
        if sql.startswith("CREATE INDEX"):
            index, table = re.match(r"CREATE INDEX (\w+) ON (\w+)", sql).groups()
            self.indexes.add((table, index))
            return []
        return list(self.results.get(sql, []))


ALL_OPTIONAL_TABLES = (
    "cms_content_sync_entity_status",
    "paragraphs_item_field_data",
    "block_content_field_data",
    "taxonomy_term_field_data",
    "media_field_data",
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(reports_dir=tmp_path / "reports")
