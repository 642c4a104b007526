"""
Apply workflow shared by every HTTP entry point.

validate -> sanitize company -> (useAI) cover letter -> (automate) fill form
-> assemble result. Failures after validation follow the configured
``FailurePolicy``: lenient turns them into a 200 fallback result, strict
raises them for the HTTP layer to render as 5xx.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from backend.app.config import FailurePolicy, Settings
from backend.app.core.company_sanitizer import sanitize_company
from backend.app.core.cover_letter_gen import generate_cover_letter
from backend.app.core.exceptions import (
    AutomationFailure,
    JobApplierError,
    MethodNotAllowedError,
    ProcessingError,
    InvalidRequestError,
)
from backend.app.core.prompts import Prompts
from backend.app.models.schemas import ApplicationRequest, ApplicationResult, AutomationReport
from backend.app.services.form_automation import AutomationBackend, personal_info_from
from backend.app.services.resume_fetcher import discard_resume, fetch_resume
from backend.app.utils.timestamps import now_iso

logger = logging.getLogger(__name__)

AI_MESSAGE = "AI cover letter generated successfully"
DEFAULT_MESSAGE = "Job application endpoint is working"
FALLBACK_MESSAGE = "Fallback response due to processing error"


class ApplicationHandler:
    def __init__(
        self,
        settings: Settings,
        llm_client,
        automation: AutomationBackend,
        resume_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.llm_client = llm_client
        self.automation = automation
        self.resume_transport = resume_transport

    async def handle(self, method: str, body: Any) -> ApplicationResult:
        if method.upper() != "POST":
            logger.info(f"Method not allowed: {method}")
            raise MethodNotAllowedError("Only POST method is supported")

        req = self._validate(body)
        company = sanitize_company(req.company)
        automate = self.settings.automation_enabled if req.automate is None else req.automate

        logger.info(
            f"Processing job application: url={req.url} job_title={req.job_title!r} "
            f"company={req.company!r} -> {company!r} use_ai={req.use_ai} automate={automate}"
        )

        report: Optional[AutomationReport] = None
        try:
            cover_letter = None
            if req.use_ai:
                logger.info("Generating AI cover letter...")
                cover_letter = await generate_cover_letter(self.llm_client, req.job_title, company)

            if automate:
                report = await self._automate(req, cover_letter)

            message = report.summary() if report is not None else (AI_MESSAGE if req.use_ai else DEFAULT_MESSAGE)
            result = ApplicationResult(
                cover_letter=cover_letter or Prompts.default_cover_letter(req.job_title, company),
                job_title=req.job_title,
                company=company,
                url=req.url,
                message=message,
                timestamp=now_iso(),
                automation=report,
            )
        except Exception as e:
            if isinstance(e, AutomationFailure) and e.report is not None:
                report = e.report
            return self._on_failure(e, req, company, report)

        logger.info(f"Response prepared: success={result.success} message={result.message!r}")
        return result

    def _validate(self, body: Any) -> ApplicationRequest:
        if not isinstance(body, dict):
            logger.info("Validation failed: body is not a JSON object")
            raise InvalidRequestError("Please provide a valid job URL")
        try:
            req = ApplicationRequest.model_validate(body)
        except ValidationError as e:
            logger.info(f"Validation failed: {e.error_count()} invalid field(s)")
            raise InvalidRequestError(
                "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()),
                error="Invalid request",
            ) from e
        if not req.url or not req.url.strip():
            logger.info("Validation failed: URL is required")
            raise InvalidRequestError("Please provide a valid job URL")
        req.url = req.url.strip()
        return req

    async def _automate(self, req: ApplicationRequest, cover_letter: Optional[str]) -> AutomationReport:
        downloaded: Optional[Path] = None
        resume_path = self._local_resume(req)
        if req.resume_url:
            try:
                downloaded = await fetch_resume(
                    req.resume_url,
                    timeout_seconds=self.settings.resume_download_timeout_seconds,
                    transport=self.resume_transport,
                )
                resume_path = downloaded
            except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
                logger.warning(f"Resume download failed, continuing without it: {e}")

        try:
            return await self.automation.apply(
                req.url,
                personal_info_from(self.settings),
                resume_path=resume_path,
                cover_letter=cover_letter,
            )
        finally:
            discard_resume(downloaded)

    def _local_resume(self, req: ApplicationRequest) -> Optional[Path]:
        if req.resume_path:
            if self.settings.allow_client_resume_path:
                return Path(req.resume_path)
            logger.warning("Ignoring resumePath from request (ALLOW_CLIENT_RESUME_PATH is off)")
        return Path(self.settings.resume_path) if self.settings.resume_path else None

    def _on_failure(
        self,
        error: Exception,
        req: ApplicationRequest,
        company: str,
        report: Optional[AutomationReport],
    ) -> ApplicationResult:
        if self.settings.failure_policy == FailurePolicy.STRICT:
            logger.error(f"Apply failed (strict policy): {error}")
            if isinstance(error, JobApplierError):
                raise error
            raise ProcessingError(str(error)) from error

        logger.exception(f"Apply failed, returning fallback response: {error}")
        return ApplicationResult(
            cover_letter=Prompts.default_cover_letter(req.job_title, company),
            job_title=req.job_title,
            company=company,
            url=req.url,
            message=FALLBACK_MESSAGE,
            timestamp=now_iso(),
            automation=report,
            fallback=True,
        )
