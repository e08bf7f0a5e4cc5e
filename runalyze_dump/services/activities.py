"""Extraction of activities from the Runalyze data browser HTML."""

import logging
import re
from datetime import date, timedelta
from typing import List, Optional, Union

import lxml.html
from lxml.etree import ParserError

from runalyze_dump.models import ActivityInfo, UNKNOWN_EMOJI
from runalyze_dump.services.activity_types import ActivityTypeDetector

logger = logging.getLogger(__name__)

ROW_ID_PREFIX = "training_"
HEALTH_NOTE_PATH = "/health/note/"

# "6,5 km" but not "18,7 km/h"
DISTANCE_RE = re.compile(r"(\d+)[,.](\d+)\s*km$")
ACTIVITY_ID_RE = re.compile(r'id="training_(\d+)"')

SNIPPET_LENGTH = 200


class ParseError(ValueError):
    """The data browser HTML could not be parsed at all."""


def _inner_html(element) -> str:
    parts = [element.text or ""]
    parts.extend(lxml.html.tostring(child, encoding="unicode") for child in element)
    return "".join(parts)


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def _activity_type(row) -> str:
    """Class of the activity icon: last icon in the first cell, else the last *icon* class in the row."""
    first_cell = row.find("td")
    if first_cell is not None:
        classes = first_cell.xpath(".//i/@class")
        if classes:
            return classes[-1]

    classes = row.xpath(".//i[contains(@class, 'icon')]/@class")
    return classes[-1] if classes else ""


def _activity_date(row) -> Optional[str]:
    hrefs = row.xpath(f".//a[contains(@href, '{HEALTH_NOTE_PATH}')]/@href")
    if not hrefs:
        return None
    return hrefs[-1].rstrip().rsplit("/", 1)[-1] or None


def parse_distance(text: str) -> Optional[float]:
    """Parse a cell text like "6,5 km" to kilometres; speeds and other text give None."""
    text = text.replace("\u00a0", " ").strip()
    match = DISTANCE_RE.search(text)
    if not match:
        return None
    return float(f"{match.group(1)}.{match.group(2)}")


def _row_distance(row) -> Optional[float]:
    distance = None
    for cell in row.xpath(".//td"):
        value = parse_distance(cell.text_content())
        if value is not None:
            distance = value
    return distance


def parse_activities_from_html(
    html: Union[str, bytes],
    week_start: date,
    log: Optional[logging.Logger] = None,
    detector: Optional[ActivityTypeDetector] = None,
) -> List[ActivityInfo]:
    """Extract the activities of one week, in document order.

    Rows are ``<tr id="training_<id>">``. Only the first row of each day links
    to the day's health note, so later rows inherit the date seen before them.
    """
    log = log or logger
    detector = detector or ActivityTypeDetector()

    try:
        document = lxml.html.document_fromstring(html)
    except (ParserError, ValueError) as e:
        raise ParseError(f"failed to parse data browser HTML: {e}") from e

    week_end = week_start + timedelta(days=6)
    activities = []
    current_date = None

    for row in document.xpath(f"//tr[starts-with(@id, '{ROW_ID_PREFIX}')]"):
        activity_id = row.get("id")[len(ROW_ID_PREFIX):]
        row_html = _inner_html(row)

        activity_date = _activity_date(row)
        if activity_date:
            current_date = activity_date
        else:
            activity_date = current_date

        activity_type = _activity_type(row)
        emoji = detector.detect(activity_type, row_html)

        if emoji == UNKNOWN_EMOJI:
            log.debug(
                f"unknown activity type found: activity_id={activity_id} "
                f"type={activity_type!r} row_html_snippet={_truncate(row_html, SNIPPET_LENGTH)!r}"
            )

        activities.append(ActivityInfo(
            id=activity_id,
            type=activity_type,
            type_emoji=emoji,
            week_start=week_start,
            week_end=week_end,
            date=activity_date,
            distance_km=_row_distance(row),
        ))

    return activities


def find_activity_ids(html: Union[str, bytes]) -> List[str]:
    """Plain regex scan for activity IDs, used when the HTML cannot be parsed."""
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    return ACTIVITY_ID_RE.findall(html)
