"""
Tests for environment-driven configuration and service wiring.
"""

from socialgraph.api import config
from socialgraph.services import build_services


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "ADJACENCY_CACHE_ENABLED", "STORE_RETRY_ATTEMPTS", "DECAY_FACTOR"):
        monkeypatch.delenv(name, raising=False)

    assert config.get_database_path().endswith("socialgraph.db")
    assert config.get_cache_enabled() is True
    assert config.get_store_retry_attempts() == 3
    assert config.get_decay_factor() == 0.99


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp/graph.db")
    monkeypatch.setenv("ADJACENCY_CACHE_ENABLED", "false")
    monkeypatch.setenv("ADJACENCY_CACHE_TTL_SECONDS", "30")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert config.get_database_path() == "tmp/graph.db"
    assert config.get_cache_enabled() is False
    assert config.get_cache_ttl() == 30.0
    assert config.get_log_level() == "DEBUG"


def test_build_services_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", str(tmp_path / "env.db"))
    monkeypatch.setenv("ADJACENCY_CACHE_ENABLED", "0")
    monkeypatch.setenv("SUGGESTION_TIMEOUT_SECONDS", "0.5")

    services = build_services()
    try:
        assert services.cache is None
        assert services.graph.cache is None
        assert services.suggestions.timeout == 0.5
        assert (tmp_path / "env.db").exists()
    finally:
        services.close()


def test_build_services_with_cache():
    services = build_services(db_path=":memory:", cache_enabled=True, cache_ttl=5)
    try:
        assert services.cache.stats().ttl == 5
        assert services.edge_store.count_all() == 0
    finally:
        services.close()


def test_importing_main_opens_no_database(monkeypatch, tmp_path):
    import importlib

    import socialgraph.api.main as main_module

    monkeypatch.setenv("DATABASE_URL", str(tmp_path / "import.db"))
    module = importlib.reload(main_module)

    assert not hasattr(module, "app")
    assert not (tmp_path / "import.db").exists()
