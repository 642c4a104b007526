from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from backend.app.models.schemas import AutomationReport


class JobApplierError(Exception):
    """Base error carrying a machine-readable kind and a human-readable message."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class InvalidRequestError(JobApplierError):
    status_code = 400
    error = "URL is required"


class MethodNotAllowedError(JobApplierError):
    status_code = 405
    error = "Method not allowed"


class ProcessingError(JobApplierError):
    """Unexpected failure while handling an otherwise valid request."""


class UpstreamGenerationError(JobApplierError):
    """Text completion failed or came back empty. Always recovered locally."""

    status_code = 502
    error = "Generation failed"


class AutomationFailure(JobApplierError):
    """The browser run could not complete (navigation timeout, driver crash)."""

    error = "Automation failed"

    def __init__(self, message: str, report: Optional["AutomationReport"] = None):
        super().__init__(message)
        self.report = report
