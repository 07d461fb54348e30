"""
Shared test fixtures for kvctl tests.
Patches config module to avoid loading real .env/kvctl.toml and making API calls.
"""

import pytest

from kvctl import config
from kvctl.models import NamespaceBinding, Target

PROJECT_TOML = """\
name = "test-target"
account_id = "fake-account"

[[kv_namespaces]]
binding = "KV"
id = "fake"

[[kv_namespaces]]
binding = "CACHE"
id = "cache-id"
bucket = "./public"

[env.staging]
name = "test-target-staging"
kv_namespaces = [{ binding = "KV", id = "staging-id" }]
"""


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Ensure every test starts with a clean config state.
    Prevents tests from reading the real .env or project file."""
    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "API_TOKEN", "fake-token")
    monkeypatch.setattr(config, "API_KEY", "")
    monkeypatch.setattr(config, "EMAIL", "")
    monkeypatch.setattr(config, "ACCOUNT_ID_OVERRIDE", "")
    monkeypatch.setattr(config, "BASE_URL", "https://api.test/client/v4")
    monkeypatch.setattr(config, "PROJECT_FILE", str(tmp_path / "missing-kvctl.toml"))
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 1.0)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    monkeypatch.setattr(config, "RUNTIME_VERBOSE", False)


@pytest.fixture
def project_file(tmp_path, monkeypatch):
    """Write a kvctl.toml with two bindings and point config at it."""
    path = tmp_path / "kvctl.toml"
    path.write_text(PROJECT_TOML, encoding="utf-8")
    monkeypatch.setattr(config, "PROJECT_FILE", str(path))
    return path


@pytest.fixture
def target():
    return Target(
        name="test-target",
        account_id="fake-account",
        kv_namespaces=(NamespaceBinding(binding="KV", id="fake"),),
    )
