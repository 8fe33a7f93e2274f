from __future__ import annotations

import logging
import time
from typing import Optional

from modgraph.core.observability.metrics import record_resolution
from modgraph.core.resolver import graph as graph_builder
from modgraph.core.resolver.config import ResolverConfig
from modgraph.core.resolver.errors import ResolutionError
from modgraph.core.resolver.ordering import topological_order
from modgraph.core.resolver.plan import BuildPlan, emit
from modgraph.core.resolver.registry import ModuleRegistry
from modgraph.core.resolver.visibility import propagate

log = logging.getLogger("modgraph.resolver")


def _ms(t0: float, t1: float) -> int:
    return int(round((t1 - t0) * 1000))


def resolve(registry: ModuleRegistry, config: Optional[ResolverConfig] = None) -> BuildPlan:
    """
    Turn a fully loaded registry into a BuildPlan.

    Stages: finalize -> validate -> graph -> order -> visibility -> emit.
    Either the complete plan is returned or a ResolutionError is raised;
    nothing partial escapes.
    """
    if config is None:
        config = ResolverConfig.from_env()

    t0_total = time.perf_counter()
    try:
        registry.finalize()

        t0 = time.perf_counter()
        registry.validate()
        t1 = time.perf_counter()
        validate_ms = _ms(t0, t1)

        g = graph_builder.build(registry)
        t2 = time.perf_counter()
        graph_ms = _ms(t1, t2)

        order = topological_order(g)
        t3 = time.perf_counter()
        order_ms = _ms(t2, t3)

        vis = propagate(g, order, strict=config.strict_visibility)
        t4 = time.perf_counter()
        visibility_ms = _ms(t3, t4)

        plan = emit(g, order, vis, strict=config.strict_visibility)
        t5 = time.perf_counter()

    except ResolutionError as e:
        record_resolution("error", time.perf_counter() - t0_total, error_code=e.code)
        log.info("resolve failed code=%s modules=%s: %s", e.code, len(registry), e.message)
        raise

    record_resolution("ok", t5 - t0_total)
    log.debug(
        "resolve ok modules=%s validate_ms=%s graph_ms=%s order_ms=%s visibility_ms=%s emit_ms=%s total_ms=%s",
        len(order),
        validate_ms,
        graph_ms,
        order_ms,
        visibility_ms,
        _ms(t4, t5),
        _ms(t0_total, t5),
    )
    return plan
