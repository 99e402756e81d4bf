from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service settings.

    Notes:
    - Defaults are local and deterministic (SQLite file, registry YAML in ``config/``).
    - Every field can be overridden with a ``NAV_`` environment variable.
    - Leaving ``remote_modules_url`` unset disables the remote module provider; the
      static registry is then the only navigation source.
    """

    model_config = SettingsConfigDict(env_prefix="NAV_", extra="ignore")

    db_url: str | None = None
    registry_path: str | None = None
    remote_modules_url: str | None = None
    remote_timeout_seconds: float = 10.0
    strict_department_scope: bool = False
    log_level: str = "INFO"
    diagnostics_capacity: int = 200
    max_sessions: int = 1000

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "app.db"
        return f"sqlite:///{db_path}"

    def resolved_registry_path(self) -> Path:
        if self.registry_path:
            return Path(self.registry_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "module_registry.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
