"""Parsing and validation of the --until/--since date window.

Weeks on Runalyze run Monday to Sunday, so every date the user gives is moved
forward to the Monday on or after it. ``since`` may also be a duration such as
``30d``, ``2w``, ``6m`` or ``1y`` counted back from ``until``.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

DURATION_RE = re.compile(r"^([0-9]+)([ywdm])$")

# Months and years are approximate
DURATION_DAYS = {
    "y": 365,
    "w": 7,
    "d": 1,
    "m": 30,
}

DEFAULT_SINCE = "4w"


class DateValidationError(ValueError):
    """The date window given by the user is invalid."""


def next_monday(day: date) -> date:
    """Return ``day`` if it is a Monday, otherwise the following Monday."""
    return day + timedelta(days=(7 - day.weekday()) % 7)


def parse_until_date(value: str) -> date:
    """Parse YYYY-MM-DD, YYYY-MM or YYYY and move it to the next Monday.

    A bare month means its last day, a bare year means December 31st.
    """
    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        try:
            month = datetime.strptime(value, "%Y-%m").date()
            day = month.replace(day=calendar.monthrange(month.year, month.month)[1])
        except ValueError:
            try:
                year = datetime.strptime(value, "%Y").date()
                day = year.replace(month=12, day=31)
            except ValueError:
                raise DateValidationError(
                    f"invalid date format: {value!r}. Use YYYY-MM-DD, YYYY-MM, or YYYY"
                ) from None

    return next_monday(day)


def parse_duration(value: str) -> timedelta:
    """Parse a single-unit duration like 30d, 2w, 6m or 1y (no combinations)."""
    match = DURATION_RE.match(value)
    if not match:
        raise DateValidationError(
            f"invalid duration format: {value!r}. Use format like '30d', '2w', '1y', or '6m'"
        )
    return timedelta(days=int(match.group(1)) * DURATION_DAYS[match.group(2)])


def parse_since_date(value: str, until: date) -> date:
    """Parse --since as a duration before ``until`` or as a date."""
    try:
        return until - parse_duration(value)
    except DateValidationError:
        return parse_until_date(value)


def validate_and_parse_dates(
    until_str: Optional[str] = None,
    since_str: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """Resolve the (since, until) window, failing before any network activity."""
    if until_str:
        until = parse_until_date(until_str)
    else:
        until = next_monday(today or date.today())

    if since_str:
        since = parse_since_date(since_str, until)
    else:
        since = until - parse_duration(DEFAULT_SINCE)

    if since >= until:
        raise DateValidationError(
            f"--since date ({since.isoformat()}) must be before --until date ({until.isoformat()})"
        )

    return since, until
