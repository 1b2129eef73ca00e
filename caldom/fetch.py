# caldom/fetch.py
import os
import contextlib
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import FetchFailure

# some schedule hosts reject the default python-requests agent
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

REQ_TIMEOUT = int(os.environ.get("REQ_TIMEOUT", "25"))
PLAYWRIGHT_TIMEOUT_MS = int(os.environ.get("PLAYWRIGHT_TIMEOUT_MS", "20000"))
USE_PLAYWRIGHT = os.environ.get("USE_PLAYWRIGHT", "0").strip().lower() in {"1", "true", "yes", "on"}


def _requests_get(url: str) -> str:
    try:
        r = requests.get(
            url,
            headers={"User-Agent": USER_AGENT, "Accept-Language": "en-US,en;q=0.8"},
            timeout=REQ_TIMEOUT,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise FetchFailure(url, str(e)) from e
    return r.text


def _playwright_get(url: str, wait_for: Optional[str]) -> str:
    """Render `url` in headless Chromium, waiting for the event rows if given."""
    # playwright is the optional `js` extra
    from playwright.sync_api import sync_playwright

    with sync_playwright() as pw:
        browser = pw.chromium.launch(args=["--no-sandbox", "--disable-dev-shm-usage"])
        try:
            context = browser.new_context(user_agent=USER_AGENT, locale="en-US")
            page = context.new_page()
            page.set_default_timeout(PLAYWRIGHT_TIMEOUT_MS)
            page.goto(url, wait_until="domcontentloaded")
            if wait_for:
                # a schedule that never shows its rows still gets returned; extraction finds nothing
                with contextlib.suppress(Exception):
                    page.wait_for_selector(wait_for, state="attached")
                    time.sleep(0.5)
            html = page.content()
        finally:
            browser.close()
    return html


def _local_path(url: str) -> Optional[Path]:
    if url.startswith("file://"):
        return Path(unquote(urlparse(url).path))
    if "://" not in url and Path(url).is_file():
        return Path(url)
    return None


def fetch_html(url: str, render_js: bool = False, wait_selector: Optional[str] = None) -> str:
    """
    Fetch a schedule page. `file://` urls and local paths are read from disk,
    everything else goes through requests (or Playwright when the calendar
    asks for `render_js` and USE_PLAYWRIGHT is on).
    Raises FetchFailure when nothing usable comes back.
    """
    if not url:
        raise FetchFailure(url, "empty url")

    path = _local_path(url)
    if path is not None:
        try:
            html = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FetchFailure(url, str(e)) from e
    elif render_js and USE_PLAYWRIGHT:
        try:
            html = _playwright_get(url, wait_selector)
        except Exception as e:  # playwright raises its own error zoo
            raise FetchFailure(url, f"render failed: {e}") from e
    else:
        html = _requests_get(url)

    if not html or not html.strip():
        raise FetchFailure(url, "empty response")
    return html
