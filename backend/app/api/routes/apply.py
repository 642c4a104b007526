import logging

from fastapi import APIRouter, Depends, Request

from backend.app.config import Settings, get_settings
from backend.app.core.application_handler import ApplicationHandler
from backend.app.core.exceptions import JobApplierError
from backend.app.models.schemas import ApplicationResult
from backend.app.services.form_automation import AutomationBackend, get_automation_backend
from backend.app.services.llm_client import TextCompletionClient, get_llm_client
from backend.app.utils.prometheus_metrics import record_apply_request, track_apply_latency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["apply"])


def get_application_handler(
    settings: Settings = Depends(get_settings),
    llm_client: TextCompletionClient = Depends(get_llm_client),
    automation: AutomationBackend = Depends(get_automation_backend),
) -> ApplicationHandler:
    return ApplicationHandler(settings=settings, llm_client=llm_client, automation=automation)


async def _read_body(request: Request):
    if request.method != "POST":
        return None
    try:
        return await request.json()
    except ValueError:
        # empty or non-JSON body; validation reports it as a missing URL
        return None


@router.api_route(
    "/apply",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    response_model=ApplicationResult,
    response_model_exclude_none=True,
)
@track_apply_latency
async def apply(request: Request, handler: ApplicationHandler = Depends(get_application_handler)):
    body = await _read_body(request)
    try:
        result = await handler.handle(request.method, body)
    except JobApplierError as e:
        logger.info(f"Apply rejected: {e.status_code} {e.error}")
        record_apply_request("client_error" if e.status_code < 500 else "server_error")
        raise

    record_apply_request("fallback" if result.fallback else "success")
    return result
