"""Shared fixtures and test doubles."""

from datetime import date
from pathlib import Path

import pytest

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.exc import NotFound
from runalyze_dump.models import ActivityInfo
from runalyze_dump.services.filesystem import FileSystem

TESTDATA_DIR = Path(__file__).parent / "testdata"

EMPTY_WEEK = "<html><body><table></table></body></html>"


def pytest_addoption(parser):
    parser.addoption(
        "--update-golden",
        action="store_true",
        default=False,
        help="Rewrite golden files from the current parser output",
    )


def week_html(*activity_ids, icon="icon-running"):
    """Data browser HTML with one row per activity ID."""
    rows = "".join(
        f'<tr id="training_{activity_id}"><td><i class="{icon}"></i></td><td>5,0&nbsp;km</td></tr>'
        for activity_id in activity_ids
    )
    return f"<html><body><table>{rows}</table></body></html>"


class FakeClient(BaseClient):
    """In-memory client. Unknown weeks are empty, missing exports are 404s."""

    def __init__(self, weeks=None, fit=None, tcx=None):
        super().__init__()
        self.weeks = weeks or {}
        self.fit = fit or {}
        self.tcx = tcx or {}
        self.calls = []
        self.login_calls = 0
        self.persist_calls = 0

    @staticmethod
    def _answer(value):
        if isinstance(value, Exception):
            raise value
        return value

    def login(self):
        self.login_calls += 1

    def get_data_browser(self, week_start):
        self.calls.append(("get_data_browser", week_start))
        return self._answer(self.weeks.get(week_start, EMPTY_WEEK))

    def get_fit(self, activity_id):
        self.calls.append(("get_fit", activity_id))
        if activity_id not in self.fit:
            raise NotFound()
        return self._answer(self.fit[activity_id])

    def get_tcx(self, activity_id):
        self.calls.append(("get_tcx", activity_id))
        if activity_id not in self.tcx:
            raise NotFound()
        return self._answer(self.tcx[activity_id])

    def persist_cookies(self):
        self.persist_calls += 1

    @property
    def export_calls(self):
        return [call for call in self.calls if call[0] in ("get_fit", "get_tcx")]


class InMemoryFileSystem(FileSystem):
    """FileSystem double that records writes."""

    def __init__(self):
        self.files = {}
        self.dirs = set()
        self.write_calls = []
        self.write_error = None

    def exists(self, path):
        return str(path) in self.files or str(path) in self.dirs

    def write_file(self, path, data, mode=0o644):
        self.write_calls.append((str(path), data, mode))
        if self.write_error is not None:
            raise self.write_error
        self.files[str(path)] = data

    def mkdir_all(self, path, mode=0o755):
        self.dirs.add(str(path))


@pytest.fixture
def fake_fs():
    return InMemoryFileSystem()


@pytest.fixture
def activity():
    return ActivityInfo(
        id="12345",
        type="icon-running",
        type_emoji="🏃",
        week_start=date(2024, 1, 8),
        week_end=date(2024, 1, 14),
    )
