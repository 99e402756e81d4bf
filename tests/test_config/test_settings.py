"""Tests for environment-driven settings and logging setup."""

import logging
from pathlib import Path

from erp_nav.logging_config import configure_app_logging
from erp_nav.settings import Settings


def test_defaults_resolve_relative_to_repo(monkeypatch):
    for name in ("NAV_DB_URL", "NAV_REGISTRY_PATH", "NAV_REMOTE_MODULES_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    repo_root = Path(__file__).resolve().parents[2]

    assert settings.resolved_db_url() == f"sqlite:///{repo_root / 'app.db'}"
    assert settings.resolved_registry_path() == repo_root / "config" / "module_registry.yaml"
    assert settings.remote_modules_url is None
    assert settings.strict_department_scope is False
    assert settings.remote_timeout_seconds == 10
    assert settings.max_sessions == 1000


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("NAV_DB_URL", "sqlite:///:memory:")
    monkeypatch.setenv("NAV_REGISTRY_PATH", str(tmp_path / "r.yaml"))
    monkeypatch.setenv("NAV_REMOTE_MODULES_URL", "https://erp.example.com/api/auth/user-modules")
    monkeypatch.setenv("NAV_STRICT_DEPARTMENT_SCOPE", "true")
    monkeypatch.setenv("NAV_DIAGNOSTICS_CAPACITY", "5")
    monkeypatch.setenv("NAV_MAX_SESSIONS", "50")

    settings = Settings()
    assert settings.resolved_db_url() == "sqlite:///:memory:"
    assert settings.resolved_registry_path() == tmp_path / "r.yaml"
    assert settings.remote_modules_url.endswith("/user-modules")
    assert settings.strict_department_scope is True
    assert settings.diagnostics_capacity == 5
    assert settings.max_sessions == 50


def test_configure_app_logging_sets_package_level():
    configure_app_logging("debug")
    assert logging.getLogger("erp_nav").level == logging.DEBUG
    configure_app_logging("INFO")
    assert logging.getLogger("erp_nav").level == logging.INFO
