from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from modgraph.core.observability.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    inc_named,
    normalize_path,
)

log = logging.getLogger("modgraph.request")

# set by the resolve endpoint on request.state; absent for other routes
RESOLVE_STATE_FIELDS = ("module_count", "external_count", "strict", "plan_id", "error_code")


def _json_log(event: str, **fields):
    # Structured log in a single line
    msg = {"event": event, **fields}
    log.info("%s", msg)


def _is_resolve_path(path: str) -> bool:
    return path == "/resolve" or path.endswith("/resolve")


def _resolve_context(request: Request) -> Dict[str, Any]:
    return {k: getattr(request.state, k, None) for k in RESOLVE_STATE_FIELDS}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request id, HTTP metrics and one structured log line per resolve call.

    The log line carries what the resolve endpoint recorded on
    request.state: how many modules and externals were submitted, whether
    strict visibility was on, and either the plan_id or the error code.
    Other /api/ calls get the plain request fields.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid

        started = time.perf_counter()
        resp = await call_next(request)
        elapsed = time.perf_counter() - started

        resp.headers["X-Request-Id"] = rid

        path = request.url.path
        route = normalize_path(path)
        method = request.method.upper()
        HTTP_REQUESTS_TOTAL.labels(method=method, path=route, status=str(resp.status_code)).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=route).observe(elapsed)
        inc_named("requests_total")

        if _is_resolve_path(path):
            _json_log(
                "resolve",
                request_id=rid,
                path=path,
                status_code=resp.status_code,
                duration_ms=int(elapsed * 1000),
                **_resolve_context(request),
            )
        elif path.startswith("/api/"):
            _json_log(
                "request",
                request_id=rid,
                method=method,
                path=path,
                status_code=resp.status_code,
                duration_ms=int(elapsed * 1000),
            )
        return resp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Security headers (enabled in prod by default).
    """

    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        resp = await call_next(request)
        if not self.enabled:
            return resp

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        return resp
