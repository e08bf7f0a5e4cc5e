"""Tests for a complete download run."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from conftest import FakeClient, week_html
from runalyze_dump.clients.exc import LoginFailed, RedirectedToLogin
from runalyze_dump.config import Settings
from runalyze_dump.dates import DateValidationError
from runalyze_dump.services import runner as runner_module
from runalyze_dump.services.download import DownloadService
from runalyze_dump.services.presentation import PresentationService
from runalyze_dump.services.runner import DIR_MODE, DownloadRunner

SINCE = date(2024, 1, 1)
UNTIL = date(2024, 1, 15)


def _runner(client, fs, presentation=None):
    presentation = presentation or MagicMock(spec=PresentationService)
    return DownloadRunner(
        client,
        fs,
        presentation,
        download_service=DownloadService(client, fs, delay=0),
    )


def test_run_downloads_every_listed_activity(fake_fs):
    client = FakeClient(
        weeks={
            date(2024, 1, 15): week_html("30", "29"),
            date(2024, 1, 1): week_html("10"),
        },
        fit={"30": (b"F30", "30.fit")},
        tcx={"29": (b"T29", "29.tcx")},
    )
    fake_fs.files["/backup/10.fit"] = b"old"
    presentation = MagicMock(spec=PresentationService)

    summary = _runner(client, fake_fs, presentation).run(SINCE, UNTIL, "/backup")

    assert summary.processed == 3
    assert summary.errors == 0
    assert summary.downloaded == 2
    assert summary.existed == 1
    assert set(fake_fs.files) == {"/backup/30.fit", "/backup/29.tcx", "/backup/10.fit"}
    assert "/backup" in fake_fs.dirs

    headers = [c.args for c in presentation.show_week_header.call_args_list]
    assert headers == [
        (date(2024, 1, 15), date(2024, 1, 21)),
        (date(2024, 1, 1), date(2024, 1, 7)),
    ]
    assert presentation.show_activity_result.call_count == 3
    presentation.show_final_results.assert_called_once_with(summary)
    presentation.show_json_results.assert_called_once_with(summary)


def test_missing_exports_count_as_errors(fake_fs):
    client = FakeClient(weeks={UNTIL: week_html("1", "2")}, fit={"1": (b"F", "1.fit")})

    summary = _runner(client, fake_fs).run(UNTIL, UNTIL, "/backup")

    assert summary.processed == 2
    assert summary.errors == 1
    assert summary.unavailable == 1


def test_login_happens_when_session_expired(fake_fs):
    client = FakeClient()
    client.weeks[date.today()] = RedirectedToLogin("/login")

    def login():
        client.login_calls += 1
        client.weeks.pop(date.today())

    client.login = login

    _runner(client, fake_fs).run(SINCE, UNTIL, "/backup")

    assert client.login_calls == 1
    assert client.persist_calls == 1


def test_authentication_failure_stops_the_run(fake_fs):
    client = MagicMock()
    client.get_data_browser.side_effect = RedirectedToLogin("/login")
    client.login.side_effect = LoginFailed(200)
    presentation = MagicMock(spec=PresentationService)

    with pytest.raises(LoginFailed):
        _runner(client, fake_fs, presentation).run(SINCE, UNTIL, "/backup")

    presentation.show_error.assert_called_once()
    assert fake_fs.dirs == set()


def test_save_dir_is_created_with_directory_mode(tmp_path):
    fs = MagicMock()
    runner = _runner(FakeClient(), fs)

    path = runner.prepare_directory(tmp_path / "out")

    fs.mkdir_all.assert_called_once_with(tmp_path / "out", DIR_MODE)
    assert path == tmp_path / "out"


def test_json_mode_prints_only_the_summary(fake_fs, capsys):
    client = FakeClient(weeks={UNTIL: week_html("1")}, fit={"1": (b"F", "1.fit")})

    _runner(client, fake_fs, PresentationService(json_mode=True)).run(UNTIL, UNTIL, "/backup")

    out = capsys.readouterr().out
    assert json.loads(out) == {
        "summary": {"processed": 1, "errors": 0, "downloaded": 1, "existed": 0, "unavailable": 0},
        "date_range": {"since": "2024-01-15", "until": "2024-01-15"},
    }


def test_download_validates_dates_before_building_a_client(monkeypatch, tmp_path):
    built = MagicMock()
    monkeypatch.setattr(runner_module, "RunalyzeClient", built)
    settings = Settings(username="u", password="p", cookie_path=tmp_path / "c.json", save_dir=tmp_path)

    with pytest.raises(DateValidationError):
        runner_module.download(settings, until_str="2024-01-01", since_str="2024-02-01")

    built.assert_not_called()


def test_download_requires_credentials(monkeypatch, tmp_path):
    built = MagicMock()
    monkeypatch.setattr(runner_module, "RunalyzeClient", built)
    settings = Settings(username="", password="", cookie_path=tmp_path / "c.json", save_dir=tmp_path)

    with pytest.raises(ValueError, match="username and password"):
        runner_module.download(settings)

    built.assert_not_called()
