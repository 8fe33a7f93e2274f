from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Optional

from prometheus_client import Counter as PromCounter
from prometheus_client import Histogram

# Named counters (in-process snapshot)
_NAMED = Counter()

RESOLUTIONS_TOTAL = PromCounter(
    "modgraph_resolutions_total",
    "Resolution runs by outcome",
    ["outcome"],
)

RESOLUTION_DURATION_SECONDS = Histogram(
    "modgraph_resolution_duration_seconds",
    "Wall time of one resolution run",
)

HTTP_REQUESTS_TOTAL = PromCounter(
    "modgraph_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "modgraph_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def normalize_path(path: str) -> str:
    """Reduce high-cardinality paths for metrics labels."""
    p = path or "/"
    p = re.sub(r"/[0-9a-fA-F]{16,}", "/:hex", p)
    p = re.sub(r"/\d+", "/:id", p)
    return p


def reset_metrics() -> None:
    """
    Test helper: clears named counters to avoid cross-test leakage.
    Prometheus collectors are process-global and are left alone.
    """
    _NAMED.clear()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_resolution(outcome: str, duration_s: float, *, error_code: Optional[str] = None) -> None:
    RESOLUTIONS_TOTAL.labels(outcome=outcome).inc()
    RESOLUTION_DURATION_SECONDS.observe(duration_s)
    inc_named("resolutions_total")
    inc_named(f"resolutions_{outcome}")
    if error_code:
        inc_named(f"errors_{error_code}")


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
