"""
Tests for caldom.calendar
"""

from datetime import timedelta

import pytest

from caldom.calendar import Calendar
from caldom.errors import ConfigParseFailure, FetchFailure, WriteFailure
from caldom.event import Status


def _unfold(ics):
    return ics.replace("\r\n ", "")


@pytest.fixture
def cal(schedule_data, fetcher):
    return Calendar.load(schedule_data, fetcher=fetcher)


class TestLoad:
    """Loading calendars"""

    def test_unknown_variant(self, schedule_data):
        schedule_data["variant"] = "does_not_exist"
        with pytest.raises(ConfigParseFailure):
            Calendar.load(schedule_data)

    def test_bad_yaml_file(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("name: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigParseFailure):
            Calendar.load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigParseFailure):
            Calendar.load(tmp_path / "nope.yml")

    def test_nothing_fetched_on_load(self, schedule_data):
        def explode(url):
            raise AssertionError("fetched too early")

        cal = Calendar.load(schedule_data, fetcher=explode)
        assert cal.name == "usmnt"


class TestExtractEvents:
    """One event per matched fragment"""

    def test_one_event_per_fragment(self, cal):
        events = cal.extract_events()
        assert len(events) == 3
        assert [e.status for e in events] == [Status.SCHEDULED, Status.ALL_DAY, Status.INVALID]
        assert len(cal.valid_events()) == 2

    def test_scheduled_row(self, cal):
        event = cal.events[0]
        assert event.title == "USA vs Mexico"
        assert event.zone.key == "America/New_York"
        assert event.start_time == "EST:20240615T190000"
        assert event.end - event.start == timedelta(hours=2)
        assert event.location == "Soldier Field & Museum Campus"
        assert event.url == "http://example.com/schedule/42"
        assert event.description == (
            "Watch on TNT or get\n\n"
            "TNT Live:\nhttps://tnt.example/live\n\n"
            "Tickets:\nhttp://example.com/tickets/42"
        )

    def test_tbd_row(self, cal):
        event = cal.events[1]
        assert event.status is Status.ALL_DAY
        assert event.start_time == "EST:20240620"
        assert event.url == "https://other.example/match/43"

    def test_invalid_row_keeps_zone(self, cal):
        event = cal.events[2]
        assert event.zone.key == "America/Los_Angeles"
        assert event.start is None

    def test_multiple_urls_in_order(self, schedule_data, schedule_html):
        schedule_data["url"] = ["https://a.example/1", "https://a.example/2"]
        seen = []

        def fetch(url):
            seen.append(url)
            return schedule_html

        cal = Calendar.load(schedule_data, fetcher=fetch)
        assert len(cal.extract_events()) == 6
        assert seen == ["https://a.example/1", "https://a.example/2"]

    def test_fetch_failure_aborts(self, schedule_data, schedule_html, tmp_path):
        schedule_data["url"] = ["https://a.example/1", "https://a.example/2"]

        def fetch(url):
            if url.endswith("/2"):
                raise FetchFailure(url, "connection refused")
            return schedule_html

        cal = Calendar.load(schedule_data, fetcher=fetch)
        with pytest.raises(FetchFailure):
            cal.generate_calendar(tmp_path)
        assert not (tmp_path / "usmnt.ics").exists()

    @pytest.mark.parametrize("page", ["", "  \n ", None])
    def test_empty_page_is_a_fetch_failure(self, schedule_data, tmp_path, page):
        cal = Calendar.load(schedule_data, fetcher=lambda url: page)
        with pytest.raises(FetchFailure) as exc:
            cal.generate_calendar(tmp_path)
        assert exc.value.url == "https://www.example.com/schedule"
        assert not (tmp_path / "usmnt.ics").exists()


class TestRender:
    """Calendar rendering"""

    def test_only_valid_events_rendered(self, cal):
        ics = cal.render()
        assert ics.count("BEGIN:VEVENT") == 2
        assert ics.count("END:VEVENT") == 2
        assert ics.startswith("BEGIN:VCALENDAR\r\n")
        assert ics.endswith("END:VCALENDAR\r\n")

    def test_event_lines(self, cal):
        ics = _unfold(cal.render())
        assert "UID:usmnt-EST:20240615T190000" in ics
        assert "SUMMARY:USA vs Mexico" in ics
        assert "DTSTART;TZID=EST:20240615T190000" in ics
        assert "DTEND;TZID=EST:20240615T210000" in ics
        assert "DTSTART;VALUE=DATE;TZID=EST:20240620" in ics
        assert "LOCATION:Soldier Field & Museum Campus" in ics
        assert "DESCRIPTION:Watch on TNT or get\\n\\nTNT Live:\\nhttps://tnt.example/live" in ics
        assert "X-WR-CALNAME:US Soccer Men's Schedule" in ics

    def test_document_order(self, cal):
        ics = cal.render()
        assert ics.index("USA vs Mexico") < ics.index("USA vs Brazil")

    def test_lines_are_folded(self, cal):
        for line in cal.render().split("\r\n"):
            assert len(line.encode("utf-8")) <= 75


class TestGenerateCalendar:
    """Writing the .ics file"""

    def test_writes_named_file(self, cal, tmp_path):
        path = cal.generate_calendar(tmp_path / "out")
        assert path == tmp_path / "out" / "usmnt.ics"
        data = path.read_bytes()
        assert data.count(b"BEGIN:VEVENT") == 2
        assert b"\r\n" in data

    def test_unwritable_destination(self, cal, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(WriteFailure):
            cal.generate_calendar(blocker)


class TestHelpers:
    """set_url_host and get_cal_info"""

    def test_relative_url(self, cal):
        assert cal.set_url_host("/schedule/42") == "http://example.com/schedule/42"
        assert cal.set_url_host("schedule/42") == "http://example.com/schedule/42"

    def test_absolute_url_unchanged(self, cal):
        assert cal.set_url_host("https://other.example/x") == "https://other.example/x"
        assert cal.set_url_host("mailto:tickets@example.com") == "mailto:tickets@example.com"

    def test_trailing_slash_on_base(self, make_config):
        cal = Calendar(make_config(base_url="http://example.com/"))
        assert cal.set_url_host("/a") == "http://example.com/a"

    def test_empty_url(self, cal):
        assert cal.set_url_host("") == ""

    def test_without_base_url(self, make_config):
        cal = Calendar(make_config(base_url=None))
        assert cal.set_url_host("/a") == "/a"

    def test_get_cal_info(self, cal):
        assert cal.get_cal_info("title") == "US Soccer Men's Schedule"
        assert cal.get_cal_info("missing") is None
        info = cal.get_cal_info()
        assert info["name"] == "usmnt"
        info["name"] = "changed"
        assert cal.get_cal_info("name") == "usmnt"
