"""
Unit tests for the Playwright form driver.

Playwright is replaced by small fakes that track how many browsers and pages
are open, so cleanup can be asserted on every exit path.
"""

import asyncio
import os

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from backend.app.config import Settings, SubmitMode
from backend.app.core.exceptions import AutomationFailure
from backend.app.models.schemas import AutomationState, FieldStatus, PersonalInfo
from backend.app.services.form_automation import NullAutomationBackend, PlaywrightFormDriver


class Tracker:
    def __init__(self):
        self.open_browsers = 0
        self.open_pages = 0
        self.max_browsers = 0


class FakeLocator:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    @property
    def first(self):
        return self

    async def count(self):
        return 1 if self.selector in self.page.present else 0

    async def fill(self, value, timeout=None):
        if self.selector in self.page.broken:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self.page.filled[self.selector] = value

    async def set_input_files(self, files, timeout=None):
        os.stat(files)
        if self.selector in self.page.broken:
            raise PlaywrightError("element is not attached")
        self.page.uploaded.append(files)

    async def click(self, timeout=None):
        self.page.clicked.append(self.selector)


class FakePage:
    def __init__(self, tracker, present=(), broken=(), goto_error=None, goto_delay=0):
        self.tracker = tracker
        self.present = set(present)
        self.broken = set(broken)
        self.goto_error = goto_error
        self.goto_delay = goto_delay
        self.filled = {}
        self.uploaded = []
        self.clicked = []
        self.waited = None
        self.goto_kwargs = None

    async def goto(self, url, **kwargs):
        self.goto_kwargs = kwargs
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error is not None:
            raise self.goto_error

    def locator(self, selector):
        return FakeLocator(self, selector)

    async def wait_for_timeout(self, ms):
        self.waited = ms

    async def close(self):
        self.tracker.open_pages -= 1


class FakeBrowser:
    def __init__(self, tracker, page):
        self.tracker = tracker
        self.page = page

    async def new_page(self):
        self.tracker.open_pages += 1
        return self.page

    async def close(self):
        self.tracker.open_browsers -= 1


class FakeChromium:
    def __init__(self, tracker, page_factory):
        self.tracker = tracker
        self.page_factory = page_factory
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        self.tracker.open_browsers += 1
        self.tracker.max_browsers = max(self.tracker.max_browsers, self.tracker.open_browsers)
        return FakeBrowser(self.tracker, self.page_factory())


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _driver(page_factory, tracker, **overrides):
    values = dict(
        submit_mode=SubmitMode.DRY_RUN,
        automation_field_timeout_ms=100,
        automation_navigation_timeout_ms=1000,
        automation_max_sessions=2,
    )
    values.update(overrides)
    chromium = FakeChromium(tracker, page_factory)
    driver = PlaywrightFormDriver(Settings(**values), playwright_factory=lambda: FakePlaywright(chromium))
    return driver, chromium


PERSON = PersonalInfo(first_name="Ada", last_name="Lovelace", email="ada@example.com", location="London")

FULL_FORM = {
    "input[name='firstName']",
    "input[name='lastName']",
    "input[type='email']",
    "input[name='location']",
    "input[type='file']",
    "textarea[name='coverLetter']",
    "button[type='submit']",
}


def _status(report, field):
    return next(f.status for f in report.fields if f.field == field)


def test_fills_known_fields_and_closes():
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, chromium = _driver(lambda: page, tracker)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON, cover_letter="Hi there"))

    assert page.filled["input[name='firstName']"] == "Ada"
    assert page.filled["input[name='lastName']"] == "Lovelace"
    assert page.filled["input[type='email']"] == "ada@example.com"
    assert page.filled["input[name='location']"] == "London"
    assert page.filled["textarea[name='coverLetter']"] == "Hi there"
    assert report.cover_letter_filled is True
    assert _status(report, "phone") == FieldStatus.SKIPPED
    assert report.state == AutomationState.CLOSED
    assert page.goto_kwargs == {"wait_until": "networkidle", "timeout": 1000}
    assert chromium.launch_kwargs == {"headless": True}
    assert tracker.open_browsers == 0
    assert tracker.open_pages == 0


def test_dry_run_finds_but_never_clicks_submit():
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, _ = _driver(lambda: page, tracker)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON))

    assert report.mode == SubmitMode.DRY_RUN
    assert report.submit_found is True
    assert report.submitted is False
    assert page.clicked == []
    assert "dry run" in report.summary()


def test_live_mode_clicks_submit():
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, _ = _driver(lambda: page, tracker, submit_mode=SubmitMode.LIVE)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON))

    assert page.clicked == ["button[type='submit']"]
    assert report.submitted is True
    assert report.summary().startswith("Application submitted")


def test_missing_and_stuck_fields_do_not_abort():
    tracker = Tracker()
    page = FakePage(
        tracker,
        present={"input[name='first_name']", "input[type='email']", "button[type='submit']"},
        broken={"input[type='email']"},
    )
    driver, _ = _driver(lambda: page, tracker)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON))

    assert page.filled == {"input[name='first_name']": "Ada"}
    assert _status(report, "first_name") == FieldStatus.FILLED
    assert _status(report, "last_name") == FieldStatus.NOT_FOUND
    assert _status(report, "email") == FieldStatus.FAILED
    assert _status(report, "location") == FieldStatus.NOT_FOUND
    assert report.error is None
    assert report.submit_found is True
    assert report.state == AutomationState.CLOSED


def test_resume_upload(tmp_path):
    resume = tmp_path / "cv.pdf"
    resume.write_bytes(b"%PDF-1.4")
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, _ = _driver(lambda: page, tracker)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON, resume_path=resume))

    assert report.resume_uploaded is True
    assert page.uploaded == [str(resume)]


def test_resume_upload_failure_is_recorded(tmp_path):
    resume = tmp_path / "cv.pdf"
    resume.write_bytes(b"%PDF-1.4")
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM, broken={"input[type='file']"})
    driver, _ = _driver(lambda: page, tracker)

    report = asyncio.run(driver.apply("https://jobs.example.com/1", PERSON, resume_path=resume))

    assert report.resume_uploaded is False
    assert _status(report, "resume") == FieldStatus.FAILED
    assert _status(report, "first_name") == FieldStatus.FILLED


def test_missing_resume_file_is_recorded_and_run_continues(tmp_path):
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, _ = _driver(lambda: page, tracker)

    report = asyncio.run(
        driver.apply("https://jobs.example.com/1", PERSON, resume_path=tmp_path / "missing.pdf", cover_letter="Hi.")
    )

    assert report.resume_uploaded is False
    assert _status(report, "resume") == FieldStatus.FAILED
    assert report.cover_letter_filled is True
    assert report.submit_found is True
    assert report.error is None
    assert page.uploaded == []
    assert tracker.open_browsers == 0


def test_navigation_timeout_fails_and_releases_session():
    tracker = Tracker()
    page = FakePage(tracker, goto_error=PlaywrightTimeoutError("Timeout 1000ms exceeded."))
    driver, _ = _driver(lambda: page, tracker)

    with pytest.raises(AutomationFailure) as exc_info:
        asyncio.run(driver.apply("https://slow.example.com", PERSON))

    report = exc_info.value.report
    assert report is not None
    assert report.state == AutomationState.CLOSED
    assert "timed out" in report.error
    assert report.fields == []
    assert tracker.open_browsers == 0
    assert tracker.open_pages == 0


def test_navigation_error_fails():
    tracker = Tracker()
    page = FakePage(tracker, goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
    driver, _ = _driver(lambda: page, tracker)

    with pytest.raises(AutomationFailure, match="ERR_NAME_NOT_RESOLVED"):
        asyncio.run(driver.apply("https://nowhere.invalid", PERSON))
    assert tracker.open_browsers == 0


def test_unexpected_error_is_wrapped_with_report():
    tracker = Tracker()
    page = FakePage(tracker, goto_error=RuntimeError("driver crashed"))
    driver, _ = _driver(lambda: page, tracker)

    with pytest.raises(AutomationFailure, match="driver crashed") as exc_info:
        asyncio.run(driver.apply("https://jobs.example.com/1", PERSON))

    report = exc_info.value.report
    assert report.state == AutomationState.CLOSED
    assert "driver crashed" in report.error
    assert tracker.open_browsers == 0
    assert tracker.open_pages == 0


def test_review_delay_waits_before_closing():
    tracker = Tracker()
    page = FakePage(tracker, present=FULL_FORM)
    driver, _ = _driver(lambda: page, tracker, automation_review_delay_ms=250)

    asyncio.run(driver.apply("https://jobs.example.com/1", PERSON))
    assert page.waited == 250


def test_concurrent_sessions_are_bounded():
    tracker = Tracker()
    driver, _ = _driver(lambda: FakePage(tracker, goto_delay=0.02), tracker, automation_max_sessions=1)

    async def run_three():
        return await asyncio.gather(*[driver.apply(f"https://jobs.example.com/{i}", PERSON) for i in range(3)])

    reports = asyncio.run(run_three())

    assert len(reports) == 3
    assert tracker.max_browsers == 1
    assert tracker.open_browsers == 0


def test_null_backend_refuses():
    with pytest.raises(AutomationFailure, match="disabled"):
        asyncio.run(NullAutomationBackend().apply("https://x", PERSON))
