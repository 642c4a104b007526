from fastapi import APIRouter
from fastapi.responses import Response

from backend.app.utils.prometheus_metrics import get_metrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def prometheus_metrics():
    data, content_type = get_metrics()
    return Response(content=data, media_type=content_type)
