"""Tests for the week-by-week activity iterator."""

from datetime import date

from conftest import FakeClient, week_html
from runalyze_dump.clients.exc import RequestFailed
from runalyze_dump.services.iterator import ActivityIterator

UNTIL = date(2024, 1, 29)


def test_walks_weeks_backwards_until_since():
    client = FakeClient(weeks={
        date(2024, 1, 29): week_html("5", "4"),
        date(2024, 1, 22): week_html("3"),
        date(2024, 1, 15): week_html("2", "1"),
    })

    activities = list(ActivityIterator(client, UNTIL, since=date(2024, 1, 15)))

    assert [a.id for a in activities] == ["5", "4", "3", "2", "1"]
    assert [a.week_start for a in activities] == [
        date(2024, 1, 29), date(2024, 1, 29), date(2024, 1, 22), date(2024, 1, 15), date(2024, 1, 15),
    ]
    fetched = [call[1] for call in client.calls]
    assert fetched == [date(2024, 1, 29), date(2024, 1, 22), date(2024, 1, 15)]


def test_empty_weeks_are_skipped():
    client = FakeClient(weeks={
        date(2024, 1, 29): week_html("9"),
        # 2024-01-22 and 2024-01-15 are empty
        date(2024, 1, 8): week_html("8"),
    })

    iterator = ActivityIterator(client, UNTIL, since=date(2024, 1, 1))

    first, ok = iterator.pull()
    assert ok and first.id == "9"
    second, ok = iterator.pull()
    assert ok and second.id == "8"
    assert second.week_start == date(2024, 1, 8)

    # 2024-01-01 is empty as well; 2023-12-25 is below since
    assert iterator.pull() == (None, False)
    assert [call[1] for call in client.calls][-1] == date(2024, 1, 1)


def test_exhausted_iterator_stays_exhausted():
    client = FakeClient(weeks={UNTIL: week_html("1")})
    iterator = ActivityIterator(client, UNTIL, since=UNTIL)

    assert next(iterator).id == "1"
    assert iterator.pull() == (None, False)
    calls = len(client.calls)
    assert iterator.pull() == (None, False)
    assert len(client.calls) == calls


def test_fetch_error_ends_iteration_quietly():
    error = RequestFailed("connection reset")
    client = FakeClient(weeks={
        date(2024, 1, 29): week_html("2"),
        date(2024, 1, 22): error,
        date(2024, 1, 15): week_html("1"),
    })
    iterator = ActivityIterator(client, UNTIL, since=date(2024, 1, 1))

    assert [a.id for a in iterator] == ["2"]
    assert iterator.done
    assert iterator.error is error


def test_unparseable_page_falls_back_to_id_scan(monkeypatch):
    from runalyze_dump.services import iterator as iterator_module
    from runalyze_dump.services.activities import ParseError

    def broken_parser(*args, **kwargs):
        raise ParseError("boom")

    monkeypatch.setattr(iterator_module, "parse_activities_from_html", broken_parser)
    client = FakeClient(weeks={UNTIL: week_html("11", "12")})

    activities = list(ActivityIterator(client, UNTIL, since=UNTIL))

    assert [a.id for a in activities] == ["11", "12"]
    assert all(a.type == "unknown" and a.type_emoji == "❓" for a in activities)
    assert activities[0].week_end == date(2024, 2, 4)


def test_without_since_stops_on_error_only():
    client = FakeClient(weeks={
        date(2024, 1, 29): week_html("1"),
        date(2024, 1, 22): RequestFailed("offline"),
    })
    assert [a.id for a in ActivityIterator(client, UNTIL)] == ["1"]
