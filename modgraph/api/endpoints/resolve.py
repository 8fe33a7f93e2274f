from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from modgraph.api.schemas.resolve import ResolveErrorResponse, ResolveRequest, ResolveResponse
from modgraph.core.loaders.manifest_loader import manifest_from_dict
from modgraph.core.resolver.config import ResolverConfig
from modgraph.core.resolver.errors import ResolutionError
from modgraph.core.resolver.registry import ModuleRegistry
from modgraph.core.resolver.resolver import resolve

router = APIRouter(tags=["resolve"])

log = logging.getLogger("modgraph.api.resolve")


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    responses={422: {"model": ResolveErrorResponse, "description": "Resolution failed"}},
)
def resolve_modules(req: ResolveRequest, request: Request):
    cfg = ResolverConfig.from_payload({"strict": req.strict} if req.strict is not None else None)
    request.state.module_count = len(req.modules)
    request.state.external_count = len(req.externals)
    request.state.strict = cfg.strict_visibility

    try:
        registry = ModuleRegistry(externals=req.externals)
        with registry.loading():
            for entry in req.modules:
                registry.register(manifest_from_dict(entry.model_dump(), source="request"))
        plan = resolve(registry, cfg)
    except ResolutionError as e:
        log.info("resolve rejected code=%s", e.code)
        request.state.error_code = e.code
        body = ResolveErrorResponse(error=e.to_dict(), request_id=getattr(request.state, "request_id", None))
        return JSONResponse(status_code=422, content=body.model_dump())

    payload = plan.to_dict()
    request.state.plan_id = payload["plan_id"]
    return payload
