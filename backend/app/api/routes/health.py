from fastapi import APIRouter

from backend.app.models.schemas import HealthResponse
from backend.app.utils.timestamps import now_iso

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="OK", message="Job Applier API is running", timestamp=now_iso())


@router.get("/api/hello")
def hello():
    return {
        "status": "working",
        "message": "Hello from Job Applier API!",
        "timestamp": now_iso(),
        "endpoints": {
            "health": "GET /health",
            "hello": "GET /api/hello",
            "apply": "POST /api/apply",
        },
    }
