from __future__ import annotations

import os

from fastapi import FastAPI

from modgraph.api.endpoints import health
from modgraph.api.endpoints import metrics as metrics_ep
from modgraph.api.endpoints import resolve as resolve_ep
from modgraph.api.middleware.error_shaping import SafeErrorMiddleware
from modgraph.api.middleware.request_context import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)

app = FastAPI(
    title="Module Dependency Graph Resolver API",
    version="0.1.0",
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call = OUTERMOST wrapper.
# Runtime order (outermost -> innermost):
#   SafeErrorMiddleware -> SecurityHeaders -> RequestContext -> handler
# ------------------------------------------------------------

env = (os.getenv("MODGRAPH_ENV") or "dev").strip().lower()

app.add_middleware(RequestContextMiddleware)

sec_enabled = (os.getenv("MODGRAPH_SECURITY_HEADERS_ENABLED") or ("true" if env == "prod" else "false")).strip().lower() in (
    "1",
    "true",
    "yes",
)
app.add_middleware(SecurityHeadersMiddleware, enabled=sec_enabled)

app.add_middleware(SafeErrorMiddleware)


# Unversioned aliases
app.include_router(resolve_ep.router)
app.include_router(health.router)
app.include_router(metrics_ep.router)

# Versioned (authoritative)
app.include_router(resolve_ep.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "healthy"}
