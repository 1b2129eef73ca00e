"""
Shared fixtures: a small US Soccer style schedule page and its config.
"""

import pytest

from caldom.config import load_config

SCHEDULE_HTML = """
<html><body>
<table class="match-list"><tbody>
<tr class="match">
  <td class="date"><time datetime="2024-06-15T19:00:00Z">Sat, June 15</time></td>
  <td class="time">7:00 PM ET</td>
  <td class="matchup">
    <span class="name" data-name="USA vs Mexico, presented by Acme"></span>
    <a href="/schedule/42">USA vs Mexico</a>
  </td>
  <td class="venue">Soldier Field &amp; Museum Campus</td>
  <td class="info">Watch on TNT <a href="https://tnt.example/live">TNT Live</a> or get
    <a href="/tickets/42">Tickets</a></td>
</tr>
<tr class="match">
  <td class="date"><time datetime="2024-06-20">Thu, June 20</time></td>
  <td class="time">TBD</td>
  <td class="matchup">
    <span class="name" data-name="USA vs Brazil"></span>
    <a href="https://other.example/match/43">USA vs Brazil</a>
  </td>
  <td class="venue">Camping World Stadium</td>
  <td class="info">Broadcast to be announced</td>
</tr>
<tr class="match">
  <td class="date"><time datetime="">Date TBA</time></td>
  <td class="time">8:00 PM PT</td>
  <td class="matchup">
    <span class="name" data-name="USA vs Canada"></span>
    <a href="/schedule/44">USA vs Canada</a>
  </td>
  <td class="venue">Rose Bowl</td>
  <td class="info"></td>
</tr>
</tbody></table>
</body></html>
"""

SCHEDULE_URL = "https://www.example.com/schedule"


def schedule_config(**overrides):
    data = {
        "title": "US Soccer Men's Schedule",
        "name": "usmnt",
        "url": SCHEDULE_URL,
        "base_url": "http://example.com",
        "variant": "trailing_timezone",
        "events": {
            "selector": "tr.match",
            "title": {"selector": "td.matchup span.name", "attribute": "data-name"},
            "description": {"selector": "td.info"},
            "timezone": {"selector": "td.time"},
            "starttime": {"selector": "td.date time", "attribute": "datetime"},
            "endtime": {"duration": "2 hours"},
            "location": {"selector": "td.venue"},
            "url": {"selector": "td.matchup a", "attribute": "href"},
        },
    }
    data.update(overrides)
    return data


@pytest.fixture
def schedule_data():
    return schedule_config()


@pytest.fixture
def config(schedule_data):
    return load_config(schedule_data)


@pytest.fixture
def fetcher():
    pages = {SCHEDULE_URL: SCHEDULE_HTML}

    def _fetch(url):
        return pages[url]

    return _fetch


@pytest.fixture
def schedule_html():
    return SCHEDULE_HTML


@pytest.fixture
def make_config():
    def _make(**overrides):
        return load_config(schedule_config(**overrides))

    return _make
