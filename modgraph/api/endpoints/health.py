from __future__ import annotations

from fastapi import APIRouter

from modgraph.core.observability.metrics import inc_named
from modgraph.core.resolver.config import ResolverConfig

router = APIRouter()


@router.get("/health/live")
def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive"}


@router.get("/api/v1/health/ready")
def readiness():
    """
    Ready once the resolver configuration can be read from the environment.
    """
    inc_named("health_ready")
    cfg = ResolverConfig.from_env()
    return {
        "status": "ready",
        "strict_visibility": cfg.strict_visibility,
        "loader_workers": cfg.max_workers,
    }
