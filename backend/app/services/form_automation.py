"""
Browser automation for job application forms.

Opens the job page in Chromium (Playwright), fills whatever known applicant
fields it can find, optionally attaches a resume and a cover letter, then
locates the submit control. Every field is best-effort: a missing or stuck
field is recorded in the ``AutomationReport`` and the run continues. Only a
failed navigation aborts the run.

Whether submit is actually clicked is decided by ``SubmitMode``:
``dry_run`` (default) finds the button and leaves it alone, ``live`` clicks it.
"""
from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from backend.app.config import Settings, SubmitMode, get_settings
from backend.app.core.exceptions import AutomationFailure
from backend.app.models.schemas import (
    AutomationReport,
    AutomationState,
    FieldStatus,
    PersonalInfo,
)
from backend.app.utils.prometheus_metrics import (
    automation_sessions_in_progress,
    record_automation_run,
    record_field_outcome,
)

logger = logging.getLogger(__name__)

# Candidate selectors per applicant field, most specific first.
FIELD_SELECTORS: Dict[str, Tuple[str, ...]] = {
    "first_name": (
        "input[name='firstName']",
        "input[name='first_name']",
        "input[aria-label='First Name']",
        "input[autocomplete='given-name']",
    ),
    "last_name": (
        "input[name='lastName']",
        "input[name='last_name']",
        "input[aria-label='Last Name']",
        "input[autocomplete='family-name']",
    ),
    "email": (
        "input[name='email']",
        "input[type='email']",
        "input[aria-label='Email']",
    ),
    "phone": (
        "input[name='phone']",
        "input[type='tel']",
        "input[aria-label='Phone']",
    ),
    "location": (
        "input[name='location']",
        "input[name*='location' i]",
        "input[aria-label='Location']",
    ),
}

RESUME_SELECTORS = ("input[type='file']",)

COVER_LETTER_SELECTORS = (
    "textarea[name='coverLetter']",
    "textarea[name*='cover' i]",
    "textarea[id*='cover' i]",
    "textarea[name='comments']",
)

SUBMIT_SELECTORS = (
    "button[type='submit']",
    "input[type='submit']",
    "button:has-text('Submit')",
)


class AutomationBackend(Protocol):
    async def apply(
        self,
        url: str,
        personal_info: PersonalInfo,
        resume_path: Optional[Path] = None,
        cover_letter: Optional[str] = None,
    ) -> AutomationReport: ...


class PlaywrightFormDriver:
    """
    Fills one application form per call, each call in its own browser.

    Concurrent calls are bounded by ``automation_max_sessions``. The page and
    browser are always closed, and the returned (or raised) report always ends
    in ``AutomationState.CLOSED``.
    """

    def __init__(self, settings: Settings, playwright_factory: Callable = async_playwright):
        self.settings = settings
        self.mode = settings.submit_mode
        self._playwright_factory = playwright_factory
        self._sessions = asyncio.Semaphore(settings.automation_max_sessions)

    async def apply(
        self,
        url: str,
        personal_info: PersonalInfo,
        resume_path: Optional[Path] = None,
        cover_letter: Optional[str] = None,
    ) -> AutomationReport:
        report = AutomationReport(url=url, mode=self.mode)

        async with self._sessions:
            automation_sessions_in_progress.inc()
            try:
                async with self._playwright_factory() as p:
                    browser = await p.chromium.launch(headless=self.settings.automation_headless)
                    try:
                        page = await browser.new_page()
                        try:
                            await self._navigate(page, report)
                            await self._fill_form(page, report, personal_info, resume_path, cover_letter)
                            await self._submit(page, report)
                            if self.settings.automation_review_delay_ms > 0:
                                logger.info(f"Keeping page open {self.settings.automation_review_delay_ms}ms for review")
                                await page.wait_for_timeout(self.settings.automation_review_delay_ms)
                        finally:
                            await page.close()
                    finally:
                        await browser.close()
            except AutomationFailure as e:
                report.error = e.message
                e.report = report
                record_automation_run("failed", self.mode.value)
                raise
            except PlaywrightError as e:
                report.error = f"Browser automation failed: {e}"
                record_automation_run("failed", self.mode.value)
                raise AutomationFailure(report.error, report) from e
            except Exception as e:
                logger.exception(f"Unexpected error during automation of {url}")
                report.error = f"Unexpected automation error: {e}"
                record_automation_run("failed", self.mode.value)
                raise AutomationFailure(report.error, report) from e
            finally:
                report.state = AutomationState.CLOSED
                automation_sessions_in_progress.dec()

        record_automation_run("completed", self.mode.value)
        logger.info(f"Automation finished for {url}: {report.summary()}")
        return report

    async def _navigate(self, page: Page, report: AutomationReport) -> None:
        report.state = AutomationState.NAVIGATING
        timeout = self.settings.automation_navigation_timeout_ms
        logger.info(f"Navigating to: {report.url}")
        try:
            await page.goto(report.url, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise AutomationFailure(f"Navigation to {report.url} timed out after {timeout}ms", report) from e
        except PlaywrightError as e:
            raise AutomationFailure(f"Navigation to {report.url} failed: {e}", report) from e

    async def _fill_form(
        self,
        page: Page,
        report: AutomationReport,
        personal_info: PersonalInfo,
        resume_path: Optional[Path],
        cover_letter: Optional[str],
    ) -> None:
        report.state = AutomationState.FILLING_FIELDS
        values = personal_info.model_dump()
        for field, selectors in FIELD_SELECTORS.items():
            value = values.get(field) or ""
            if not value:
                self._record(report, field, FieldStatus.SKIPPED, detail="no value configured")
                continue
            await self._fill_first(page, report, field, selectors, value)

        if resume_path is not None:
            report.resume_uploaded = await self._upload_resume(page, report, resume_path)
        else:
            self._record(report, "resume", FieldStatus.SKIPPED, detail="no resume available")

        if cover_letter:
            report.cover_letter_filled = await self._fill_first(
                page, report, "cover_letter", COVER_LETTER_SELECTORS, cover_letter
            )
        else:
            self._record(report, "cover_letter", FieldStatus.SKIPPED, detail="no cover letter generated")

    async def _fill_first(
        self,
        page: Page,
        report: AutomationReport,
        field: str,
        selectors: Tuple[str, ...],
        value: str,
    ) -> bool:
        selector = await self._find(page, selectors)
        if selector is None:
            self._record(report, field, FieldStatus.NOT_FOUND)
            return False
        try:
            await page.locator(selector).first.fill(value, timeout=self.settings.automation_field_timeout_ms)
        except PlaywrightError as e:
            self._record(report, field, FieldStatus.FAILED, selector, str(e))
            return False
        self._record(report, field, FieldStatus.FILLED, selector)
        return True

    async def _upload_resume(self, page: Page, report: AutomationReport, resume_path: Path) -> bool:
        selector = await self._find(page, RESUME_SELECTORS)
        if selector is None:
            self._record(report, "resume", FieldStatus.NOT_FOUND)
            return False
        try:
            await page.locator(selector).first.set_input_files(
                str(resume_path), timeout=self.settings.automation_field_timeout_ms
            )
        except (PlaywrightError, OSError) as e:
            # set_input_files stats the path before talking to the browser
            self._record(report, "resume", FieldStatus.FAILED, selector, str(e))
            return False
        self._record(report, "resume", FieldStatus.FILLED, selector)
        return True

    async def _submit(self, page: Page, report: AutomationReport) -> None:
        report.state = AutomationState.SUBMITTING
        selector = await self._find(page, SUBMIT_SELECTORS)
        if selector is None:
            logger.info("No submit control found")
            return
        report.submit_found = True

        if self.mode != SubmitMode.LIVE:
            logger.info(f"Dry run: submit control {selector!r} found, not clicking")
            return

        logger.warning(f"Live mode: clicking submit control {selector!r} on {report.url}")
        try:
            await page.locator(selector).first.click(timeout=self.settings.automation_field_timeout_ms)
        except PlaywrightError as e:
            logger.warning(f"Submit click failed: {e}")
            report.error = f"Submit click failed: {e}"
            return
        report.submitted = True

    @staticmethod
    async def _find(page: Page, selectors: Tuple[str, ...]) -> Optional[str]:
        for selector in selectors:
            if await page.locator(selector).count():
                return selector
        return None

    @staticmethod
    def _record(
        report: AutomationReport,
        field: str,
        status: FieldStatus,
        selector: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        report.record(field, status, selector, detail)
        record_field_outcome(field, status.value)
        if status in (FieldStatus.NOT_FOUND, FieldStatus.FAILED):
            logger.info(f"Field {field} {status.value}{': ' + detail if detail else ''}, continuing")
        else:
            logger.debug(f"Field {field} {status.value}")


class NullAutomationBackend:
    """Used when automation is disabled. Fails only when called."""
    async def apply(
        self,
        url: str,
        personal_info: PersonalInfo,
        resume_path: Optional[Path] = None,
        cover_letter: Optional[str] = None,
    ) -> AutomationReport:
        report = AutomationReport(url=url, state=AutomationState.CLOSED, error="Browser automation is disabled")
        raise AutomationFailure("Browser automation is disabled. Set AUTOMATION_ENABLED=true.", report)


@lru_cache
def get_automation_backend() -> AutomationBackend:
    settings = get_settings()
    if not settings.automation_enabled:
        return NullAutomationBackend()
    logger.info(
        f"Form automation enabled: mode={settings.submit_mode.value}, "
        f"max_sessions={settings.automation_max_sessions}"
    )
    return PlaywrightFormDriver(settings)


def personal_info_from(settings: Settings) -> PersonalInfo:
    return PersonalInfo(
        first_name=settings.first_name,
        last_name=settings.last_name,
        email=settings.email,
        phone=settings.phone,
        location=settings.location,
    )
