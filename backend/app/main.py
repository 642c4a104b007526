import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.apply import router as apply_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.config import get_settings
from backend.app.core.exceptions import JobApplierError
from backend.app.models.schemas import ErrorResponse
from backend.app.utils.preflight import preflight_middleware
from backend.app.utils.prometheus_metrics import application_info

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


async def job_applier_error_handler(request: Request, exc: JobApplierError) -> JSONResponse:
    body = ErrorResponse(error=exc.error, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name, version=VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # added last so it runs first
    app.middleware("http")(preflight_middleware)

    app.add_exception_handler(JobApplierError, job_applier_error_handler)

    app.include_router(health_router)
    app.include_router(apply_router)
    app.include_router(metrics_router)

    application_info.info({
        "version": VERSION,
        "failure_policy": settings.failure_policy.value,
        "automation_enabled": str(settings.automation_enabled).lower(),
        "submit_mode": settings.submit_mode.value,
    })
    logger.info(
        f"{settings.app_name} ready: policy={settings.failure_policy.value} "
        f"automation={settings.automation_enabled} submit_mode={settings.submit_mode.value}"
    )
    return app

app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("backend.app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
