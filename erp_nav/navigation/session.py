"""
Per-user navigation session.

Ties the pieces together for one signed-in user: route change -> view-mode state
machine -> composer (using the cached remote module list) -> grouped sections.
The HTTP layer keeps one session per user in a ``NavigationSessionStore``.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
import logging
import threading

from erp_nav.navigation.access import is_visible
from erp_nav.navigation.composer import NavigationComposer, ResolvedSection
from erp_nav.navigation.presentation import SectionCollapseStore
from erp_nav.navigation.remote import RemoteModuleCache, RemoteModuleProvider
from erp_nav.navigation.routes import most_specific_path
from erp_nav.navigation.view_state import ViewModeStateMachine, ViewState
from erp_nav.registry.model import ModuleDescriptor
from erp_nav.user import User

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    UNOWNED = "unowned"


@dataclass(frozen=True)
class NavigationSnapshot:
    """Everything the rendering layer needs after a navigation event."""

    view: ViewState
    sections: tuple[ResolvedSection, ...]
    module: ModuleDescriptor | None
    remote_source: bool


class NavigationSession:
    def __init__(
        self,
        user: User,
        composer: NavigationComposer,
        *,
        provider: RemoteModuleProvider | None = None,
        token: str | None = None,
    ) -> None:
        self._user = user
        self._composer = composer
        self._provider = provider
        self._token = token
        self._lock = threading.RLock()

        self.remote_cache = RemoteModuleCache(composer.diagnostics)
        self.presentation = SectionCollapseStore()
        self.view = ViewModeStateMachine(
            composer.registry,
            strict_department=composer.strict_department,
            diagnostics=composer.diagnostics,
        )
        self.view.add_listener(self.presentation.on_module_change)

    @property
    def user(self) -> User:
        return self._user

    # ---- Remote modules -------------------------------------------------------------

    def refresh_modules(self) -> bool:
        """Explicit refresh; True when navigation now uses the remote list."""
        if self._provider is None:
            return False
        self.remote_cache.refresh(self._provider, self._token)
        return self.uses_remote_source()

    def ensure_modules_loaded(self) -> None:
        """First fetch of the session; later fetches only on explicit refresh."""
        if self._provider is not None and not self.remote_cache.has_completed:
            self.remote_cache.refresh(self._provider, self._token)

    def uses_remote_source(self) -> bool:
        return bool(self.remote_cache.records)

    # ---- Resolution -----------------------------------------------------------------

    def sections(self) -> tuple[ResolvedSection, ...]:
        return self._composer.resolve(self._user, self.remote_cache.records)

    def snapshot(self) -> NavigationSnapshot:
        with self._lock:
            view = self.view.state
            module = None
            if view.current_module_key is not None:
                module = self._composer.module_descriptor(self._user, view.current_module_key)
            return NavigationSnapshot(
                view=view,
                sections=self.sections(),
                module=module,
                remote_source=self.uses_remote_source(),
            )

    def navigate(self, path: str) -> NavigationSnapshot:
        with self._lock:
            self.view.on_route_change(path, self._user)
            return self.snapshot()

    def update_user(self, user: User, token: str | None = None) -> None:
        """Profile change or re-login: drop cached modules and re-derive the view."""
        with self._lock:
            if user == self._user and token in (None, self._token):
                return
            logger.info("Navigation session user snapshot changed user_id=%s", user.user_id)
            self._user = user
            if token is not None:
                self._token = token
            self.remote_cache.invalidate()
            self.view.refresh(user)

    # ---- Access ---------------------------------------------------------------------

    def check_access(self, path: str) -> AccessDecision:
        """
        Outcome for a manually entered path.

        The owners are the registry items and module launchers registered at the
        most specific path that contains ``path``. Denied only when owners exist
        and none is visible.
        """

        registry = self._composer.registry
        items = registry.all_items()
        launchers = {module.base_path: module for module in registry.modules.values()}
        candidates = [item.path for item in items]
        candidates.extend(launchers)
        owner_path = most_specific_path(path, candidates)
        if owner_path is None:
            return AccessDecision.UNOWNED

        module = launchers.get(owner_path)
        if module is not None and self._composer.launcher_visible(module, self._user):
            return AccessDecision.ALLOWED

        owners = [item for item in items if item.path == owner_path]
        for item in owners:
            if is_visible(
                item,
                self._user,
                strict_department=self._composer.strict_department,
                diagnostics=self._composer.diagnostics,
            ):
                return AccessDecision.ALLOWED
        logger.info("Access denied path=%s owner=%s user_id=%s", path, owner_path, self._user.user_id)
        return AccessDecision.DENIED


class NavigationSessionStore:
    """
    One ``NavigationSession`` per user id.

    Holds at most ``max_sessions``; the least recently used session is evicted
    first. ``drop`` removes a session on logout.
    """

    def __init__(
        self,
        composer: NavigationComposer,
        provider: RemoteModuleProvider | None = None,
        *,
        max_sessions: int = 1000,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._composer = composer
        self._provider = provider
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[object, NavigationSession] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def composer(self) -> NavigationComposer:
        return self._composer

    def get(self, user: User, token: str | None = None) -> NavigationSession:
        key = user.user_id
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                session = NavigationSession(user, self._composer, provider=self._provider, token=token)
                self._sessions[key] = session
                while len(self._sessions) > self._max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.debug("Evicted navigation session user_id=%s", evicted)
                return session
            self._sessions.move_to_end(key)
        session.update_user(user, token)
        return session

    def drop(self, user_id: object) -> bool:
        """Forget the session of ``user_id``; False when there was none."""
        with self._lock:
            return self._sessions.pop(user_id, None) is not None

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
