from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from erp_nav.db.init_db import init_db
from erp_nav.errors import Diagnostics
from erp_nav.logging_config import configure_app_logging
from erp_nav.navigation.composer import NavigationComposer
from erp_nav.navigation.remote import RemoteModuleProvider
from erp_nav.navigation.session import NavigationSessionStore
from erp_nav.registry.loader import load_module_registry
from erp_nav.routers import diagnostics, health, navigation, profile
from erp_nav.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_session_store(settings: Settings, app: FastAPI) -> NavigationSessionStore:
    """Load the registry and wire the shared engine objects onto ``app.state``."""

    registry = load_module_registry(settings.resolved_registry_path())
    logger.info(
        "Loaded module registry: %s (%d modules)",
        settings.resolved_registry_path(),
        len(registry.modules),
    )

    diagnostics = Diagnostics(capacity=settings.diagnostics_capacity)
    composer = NavigationComposer(
        registry,
        strict_department=settings.strict_department_scope,
        diagnostics=diagnostics,
    )

    provider = None
    if settings.remote_modules_url:
        provider = RemoteModuleProvider(settings.remote_modules_url, timeout_seconds=settings.remote_timeout_seconds)
        logger.info("Remote module provider enabled url=%s", settings.remote_modules_url)
    else:
        logger.info("Remote module provider disabled; registry is the only navigation source")

    store = NavigationSessionStore(composer, provider, max_sessions=settings.max_sessions)
    app.state.diagnostics = diagnostics
    app.state.session_store = store
    return store


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        build_session_store(settings, app)
        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    app = FastAPI(title="ERP Navigation", lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(profile.router)
    app.include_router(navigation.router)
    app.include_router(diagnostics.router)

    return app


app = create_app()
