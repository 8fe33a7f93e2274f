from __future__ import annotations

import logging
import traceback
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from modgraph.core.resolver.errors import ResolutionError

log = logging.getLogger("modgraph.errors")


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Outermost error boundary.

    - ResolutionError escaping a handler becomes 422 with its structured body
    - anything else becomes a bare 500; the traceback stays in the server log
    - request_id is echoed back when known
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except ResolutionError as e:
            rid = getattr(request.state, "request_id", None)
            log.info("Resolution error code=%s rid=%s path=%s", e.code, rid, request.url.path)
            payload = {"error": e.to_dict()}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=422, content=payload)
        except Exception as e:
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            payload = {"detail": "Internal Server Error"}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)
