from fastapi import APIRouter
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from modgraph.core.observability.metrics import snapshot_named

router = APIRouter()


def _render():
    body = snapshot_named()
    body.setdefault("resolutions_total", 0)
    body.setdefault("requests_total", 0)
    return body


@router.get("/metrics/snapshot")
def metrics_snapshot():
    return _render()


@router.get("/api/v1/metrics/snapshot")
def metrics_snapshot_v1():
    return _render()


@router.get("/metrics")
def metrics_prometheus():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
