from __future__ import annotations

from pathlib import Path

import pytest

from conftest import ALL_OPTIONAL_TABLES, FakeSource

from content_analysis import cli
from content_analysis.ddev import EnvironmentFailure
from content_analysis.models import AnalysisState
from content_analysis.report import REPORT_FILENAME


class FakeClient(FakeSource):
    def __init__(self, project_name="ddev-project", fail=False, **kwargs):
        super().__init__(**kwargs)
        self.project_name = project_name
        self.fail = fail

    def check_environment(self):
        if self.fail:
            raise EnvironmentFailure("DDEV is not running.")
        return self.project_name


@pytest.fixture
def patched_settings(monkeypatch, settings):
    monkeypatch.setattr(cli.Settings, "from_env", staticmethod(lambda: settings))
    return settings


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], None),
        (["--site=intranet"], "intranet"),
        (["--site", "intranet"], "intranet"),
    ],
)
def test_parser_accepts_site_forms(argv, expected):
    assert cli.build_parser().parse_args(argv).site == expected


@pytest.mark.parametrize("argv", [["--verbose"], ["--si", "x"], ["extra"]])
def test_parser_rejects_unknown_arguments(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.build_parser().parse_args(argv)

    assert excinfo.value.code != 0


def test_run_uses_ddev_project_name_without_site(settings):
    summary = cli.run(settings, FakeClient(tables=ALL_OPTIONAL_TABLES))

    report = (summary.output_dir / REPORT_FILENAME).read_text(encoding="utf-8")
    assert "**Site:** ddev-project" in report
    assert summary.output_dir.parent == settings.reports_dir
    assert all(o.state is AnalysisState.COMPLETED for o in summary.outcomes)


def test_run_prefers_site_label(settings):
    summary = cli.run(settings.with_site("intranet"), FakeClient())

    report = (summary.output_dir / REPORT_FILENAME).read_text(encoding="utf-8")
    assert "**Site:** intranet" in report
    assert summary.output_dir.name.startswith("content-analysis-report-intranet-")


def test_run_creates_indexes_before_analyses(settings):
    client = FakeClient()

    cli.run(settings, client)

    first_create = next(i for i, q in enumerate(client.queries) if q.startswith("CREATE INDEX"))
    first_select = next(i for i, q in enumerate(client.queries) if q.startswith("SELECT\n"))
    assert first_create < first_select


def test_main_exits_on_environment_failure(monkeypatch, patched_settings):
    monkeypatch.setattr(cli, "DdevClient", lambda **kwargs: FakeClient(fail=True))

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1
    assert not patched_settings.reports_dir.exists()


def test_main_exits_on_invalid_configuration(monkeypatch):
    def broken():
        raise ValueError("DAYS_RECENT must be a positive integer, got 'x'")

    monkeypatch.setattr(cli.Settings, "from_env", staticmethod(broken))

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1


def test_main_writes_output_bundle(monkeypatch, patched_settings):
    monkeypatch.setattr(cli, "DdevClient", lambda **kwargs: FakeClient(tables=["media_field_data"]))

    cli.main(["--site=intranet"])

    runs = list(patched_settings.reports_dir.iterdir())
    assert len(runs) == 1
    run_dir: Path = runs[0]
    assert run_dir.name.startswith("content-analysis-report-intranet-")
    assert (run_dir / REPORT_FILENAME).exists()
    assert (run_dir / "media-list.csv").exists()
    assert not (run_dir / "paragraph-list.csv").exists()
