"""Week-by-week activity iterator.

Walks the data browser backwards from ``until`` one week at a time, stopping
once the week start drops below ``since``. Weeks without activities are
skipped. A failed week fetch ends the iteration; the cause is kept in
``error`` for callers that want to tell "done" from "failed".
"""

import logging
from datetime import date, timedelta
from typing import Iterator, List, Optional, Tuple

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.exc import RunalyzeError
from runalyze_dump.models import ActivityInfo, UNKNOWN_EMOJI, UNKNOWN_TYPE
from runalyze_dump.services.activities import (
    ParseError,
    find_activity_ids,
    parse_activities_from_html,
)
from runalyze_dump.services.activity_types import ActivityTypeDetector

logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)


class ActivityIterator:
    """Yields ActivityInfo records, newest week first."""

    def __init__(
        self,
        client: BaseClient,
        until: date,
        since: Optional[date] = None,
        log: Optional[logging.Logger] = None,
        detector: Optional[ActivityTypeDetector] = None,
    ):
        self.client = client
        self.current_until = until
        self.since = since
        self.log = log or logger
        self.detector = detector or ActivityTypeDetector()
        self.done = False
        self.error: Optional[Exception] = None
        self._activities: List[ActivityInfo] = []
        self._index = 0

    def __iter__(self) -> Iterator[ActivityInfo]:
        return self

    def __next__(self) -> ActivityInfo:
        activity, ok = self.pull()
        if not ok:
            raise StopIteration
        return activity

    def pull(self) -> Tuple[Optional[ActivityInfo], bool]:
        """Return the next activity and True, or (None, False) once exhausted."""
        while not self.done and self._index >= len(self._activities):
            self._fetch_week()

        if self.done:
            return None, False

        activity = self._activities[self._index]
        self._index += 1
        return activity, True

    def _fetch_week(self) -> None:
        if self.since is not None and self.current_until < self.since:
            self.done = True
            return

        week_start = self.current_until
        try:
            html = self.client.get_data_browser(week_start)
        except RunalyzeError as e:
            self.log.warning(f"Failed to fetch week {week_start.isoformat()}, stopping: {e}")
            self.error = e
            self.done = True
            return

        try:
            activities = parse_activities_from_html(html, week_start, self.log, self.detector)
        except ParseError as e:
            self.log.debug(f"Falling back to ID scan for week {week_start.isoformat()}: {e}")
            activities = self._minimal_activities(html, week_start)

        self.log.debug(f"Found {len(activities)} activities in week {week_start.isoformat()}")

        self._activities = activities
        self._index = 0
        self.current_until = week_start - WEEK

    def _minimal_activities(self, html, week_start: date) -> List[ActivityInfo]:
        return [
            ActivityInfo(
                id=activity_id,
                type=UNKNOWN_TYPE,
                type_emoji=UNKNOWN_EMOJI,
                week_start=week_start,
                week_end=week_start + timedelta(days=6),
            )
            for activity_id in find_activity_ids(html)
        ]
