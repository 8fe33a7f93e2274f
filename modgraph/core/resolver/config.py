from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any


_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class ResolverConfig:
    # IMPORTANT: keep these names; the API payload uses them
    strict_visibility: bool = False
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> "ResolverConfig":
        """
        MODGRAPH_STRICT_VISIBILITY=1|true|yes
        MODGRAPH_LOADER_WORKERS=<int>
        """
        return cls(
            strict_visibility=_env_flag("MODGRAPH_STRICT_VISIBILITY"),
            max_workers=max(1, _env_int("MODGRAPH_LOADER_WORKERS", 4)),
        )

    @classmethod
    def from_payload(cls, payload: Any, *, base: "ResolverConfig | None" = None) -> "ResolverConfig":
        """
        Accepts:
          - None                      -> base (or env defaults)
          - {"strict": true}
          - {"strict_visibility": true, "max_workers": 8}
        Unknown keys and wrongly typed values are ignored.
        """
        base = base or cls.from_env()
        if not isinstance(payload, dict):
            return base

        strict = payload.get("strict_visibility", payload.get("strict", base.strict_visibility))
        workers = payload.get("max_workers", base.max_workers)
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            workers = base.max_workers

        return cls(
            strict_visibility=bool(strict) if isinstance(strict, (bool, int)) else base.strict_visibility,
            max_workers=workers,
        )
