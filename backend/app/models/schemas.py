from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.app.config import SubmitMode

DEFAULT_JOB_TITLE = "Software Engineer"
DEFAULT_COMPANY = "Tech Company"


class CamelModel(BaseModel):
    """Wire format is camelCase; python attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApplicationRequest(CamelModel):
    url: Optional[str] = None
    job_title: str = DEFAULT_JOB_TITLE
    # non-strings sanitize to "the company"
    company: Any = DEFAULT_COMPANY
    use_ai: bool = Field(default=False, alias="useAI")
    resume_url: Optional[str] = None
    resume_path: Optional[str] = None
    automate: Optional[bool] = None

    @field_validator("job_title", mode="before")
    @classmethod
    def _default_job_title(cls, v: Any) -> Any:
        return DEFAULT_JOB_TITLE if v is None else v


class PersonalInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""


class AutomationState(str, Enum):
    IDLE = "idle"
    NAVIGATING = "navigating"
    FILLING_FIELDS = "filling_fields"
    SUBMITTING = "submitting"
    CLOSED = "closed"


class FieldStatus(str, Enum):
    FILLED = "filled"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    SKIPPED = "skipped"


class FieldOutcome(CamelModel):
    field: str
    status: FieldStatus
    selector: Optional[str] = None
    detail: Optional[str] = None


class AutomationReport(CamelModel):
    url: str
    mode: SubmitMode = SubmitMode.DRY_RUN
    state: AutomationState = AutomationState.IDLE
    fields: List[FieldOutcome] = Field(default_factory=list)
    resume_uploaded: bool = False
    cover_letter_filled: bool = False
    submit_found: bool = False
    submitted: bool = False
    error: Optional[str] = None

    def record(self, field: str, status: FieldStatus, selector: Optional[str] = None,
               detail: Optional[str] = None) -> FieldOutcome:
        outcome = FieldOutcome(field=field, status=status, selector=selector, detail=detail)
        self.fields.append(outcome)
        return outcome

    def summary(self) -> str:
        filled = sum(1 for f in self.fields if f.status == FieldStatus.FILLED)
        if self.submitted:
            return f"Application submitted ({filled} fields filled)"
        if self.submit_found:
            return f"Application form filled, submit skipped in dry run ({filled} fields filled)"
        return f"Application form filled, no submit control found ({filled} fields filled)"


class ApplicationResult(CamelModel):
    success: bool = True
    cover_letter: Optional[str] = None
    job_title: str
    company: str
    url: str
    message: str
    timestamp: str
    automation: Optional[AutomationReport] = None
    # set on lenient fallbacks; internal only, never serialized
    fallback: bool = Field(default=False, exclude=True)


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
    timestamp: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
