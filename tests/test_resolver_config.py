from modgraph.core.resolver.config import ResolverConfig


def test_defaults():
    cfg = ResolverConfig.from_env()
    assert cfg.strict_visibility is False
    assert cfg.max_workers == 4


def test_from_env(monkeypatch):
    monkeypatch.setenv("MODGRAPH_STRICT_VISIBILITY", "YES")
    monkeypatch.setenv("MODGRAPH_LOADER_WORKERS", "8")
    cfg = ResolverConfig.from_env()
    assert cfg.strict_visibility is True
    assert cfg.max_workers == 8


def test_from_env_ignores_garbage_worker_count(monkeypatch):
    monkeypatch.setenv("MODGRAPH_LOADER_WORKERS", "many")
    assert ResolverConfig.from_env().max_workers == 4


def test_from_payload_accepts_both_spellings():
    assert ResolverConfig.from_payload({"strict": True}).strict_visibility is True
    assert ResolverConfig.from_payload({"strict_visibility": True}).strict_visibility is True


def test_from_payload_tolerates_bad_input():
    base = ResolverConfig(strict_visibility=True, max_workers=2)
    assert ResolverConfig.from_payload(None, base=base) == base
    assert ResolverConfig.from_payload(["strict"], base=base) == base
    assert ResolverConfig.from_payload({"max_workers": 0}, base=base).max_workers == 2
    assert ResolverConfig.from_payload({"strict": "nope"}, base=base).strict_visibility is True
