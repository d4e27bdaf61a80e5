from __future__ import annotations

"""
Thin wrapper around the `ddev` CLI used to reach the local database snapshot.
"""

import json
import re
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, ValidationError


class DataSourceError(RuntimeError):
    pass


class EnvironmentFailure(DataSourceError):
    """
    The database cannot be reached at all (ddev missing or not running).
    """


class QueryError(DataSourceError):
    def __init__(self, sql: str, stderr: str):
        self.sql = sql
        self.stderr = stderr.strip()
        super().__init__(self.stderr or "query failed with no error output")


class DataSource(Protocol):
    def run_query(self, sql: str) -> list[tuple[str, ...]]:
        ...


class DdevProject(BaseModel):
    name: str


class DdevDescription(BaseModel):
    raw: DdevProject


_BATCH_ESCAPES = {"t": "\t", "n": "\n", "\\": "\\", "0": "\0"}
_BATCH_ESCAPE_RE = re.compile(r"\\(.)")


def _unescape_batch_field(value: str) -> str:
    return _BATCH_ESCAPE_RE.sub(lambda m: _BATCH_ESCAPES.get(m.group(1), m.group(0)), value)


def parse_batch_output(stdout: str) -> list[tuple[str, ...]]:
    """
    Parse `mysql --batch --skip-column-names` output into rows of text fields.

    Batch mode escapes tabs, newlines and backslashes inside values, so a raw
    newline always ends a row and a raw tab always ends a field. Carriage
    returns are not escaped and stay part of the field.
    """
    rows: list[tuple[str, ...]] = []
    for line in stdout.split("\n"):
        if not line:
            continue
        rows.append(tuple(_unescape_batch_field(field) for field in line.split("\t")))
    return rows


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def parse_project_name(payload: str) -> Optional[str]:
    """
    Extract the project name from `ddev describe -j` output, if present.
    """
    try:
        return DdevDescription.model_validate(json.loads(payload)).raw.name
    except (ValueError, ValidationError):
        return None


class DdevClient:
    """
    Runs SQL through `ddev mysql` in a DDEV project directory.
    """

    def __init__(self, command: str = "ddev", project_dir: Optional[Path] = None):
        self.command = command
        self.project_dir = project_dir
        self.project_name: Optional[str] = None

    def _run(self, args: Sequence[str]) -> tuple[int, str, str]:
        # Bytes in, decoded here: text mode would turn carriage returns in
        # field values into row breaks.
        proc = subprocess.run(
            [self.command, *args],
            capture_output=True,
            cwd=str(self.project_dir) if self.project_dir else None,
        )
        return proc.returncode, _decode(proc.stdout), _decode(proc.stderr)

    def check_environment(self) -> Optional[str]:
        """
        Make sure ddev is installed and the project is running.

        Returns the DDEV project name when `ddev describe` reports one.
        """
        try:
            returncode, stdout, _ = self._run(["describe", "-j"])
        except OSError as e:
            raise EnvironmentFailure(f"Could not run `{self.command}`: {e}") from e

        if returncode != 0:
            raise EnvironmentFailure(
                "Not in a DDEV project directory or DDEV is not running. "
                "Run from your DDEV project root and make sure DDEV is started."
            )

        self.project_name = parse_project_name(stdout)
        return self.project_name

    def run_query(self, sql: str) -> list[tuple[str, ...]]:
        try:
            returncode, stdout, stderr = self._run(["mysql", "--batch", "--skip-column-names", f"--execute={sql}"])
        except OSError as e:
            raise EnvironmentFailure(f"Could not run `{self.command}`: {e}") from e

        if returncode != 0:
            raise QueryError(sql, stderr)
        return parse_batch_output(stdout)
