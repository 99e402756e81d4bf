"""
View-Mode State Machine.

The UI is either on the global dashboard or inside one module's contextual
sidebar. Each route change re-derives the state from the path; nothing is kept
across a reload except what the URL says.

    GlobalDashboard --route into /modules/<key>--> ModuleView(key)
    ModuleView(a)   --route into /modules/<b>-->   ModuleView(b)   (sections replaced)
    ModuleView(a)   --any other route-->           GlobalDashboard (sections cleared)

Entering a module may involve loading that module's own data. ``begin_module_load``
hands out a token; ``finish_module_load`` only clears the loading flag when no
route change happened in between, so a late completion cannot touch a view the
user has already left.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Callable

from erp_nav.errors import Diagnostics, UnknownModuleError
from erp_nav.navigation.access import module_navigation_for_role
from erp_nav.navigation.routes import detect_module, module_segment
from erp_nav.registry.model import ModuleRegistry, ModuleSection
from erp_nav.user import User

logger = logging.getLogger(__name__)

ModuleChangeListener = Callable[[str | None, str | None], None]


@dataclass(frozen=True)
class ViewState:
    current_module_key: str | None = None
    active_sections: tuple[ModuleSection, ...] = ()
    is_loading: bool = False
    previous_module_key: str | None = None

    @property
    def is_module_view(self) -> bool:
        return self.current_module_key is not None


GLOBAL_DASHBOARD = ViewState()


class ViewModeStateMachine:
    def __init__(
        self,
        registry: ModuleRegistry,
        *,
        strict_department: bool = False,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self._registry = registry
        self._strict_department = strict_department
        self._diagnostics = diagnostics
        self._state = GLOBAL_DASHBOARD
        self._generation = 0
        self._pending_load: int | None = None
        self._listeners: list[ModuleChangeListener] = []

    @property
    def state(self) -> ViewState:
        return self._state

    def add_listener(self, listener: ModuleChangeListener) -> None:
        """``listener(old_key, new_key)`` runs whenever the current module changes."""
        self._listeners.append(listener)

    # ---- Transitions ----------------------------------------------------------------

    def on_route_change(self, path: str, user: User) -> ViewState:
        key = detect_module(path, self._registry)
        if key is None:
            segment = module_segment(path)
            if segment is not None and self._diagnostics is not None:
                self._diagnostics.report(UnknownModuleError(f"unknown module segment {segment!r}"), path=path)
            return self._enter_dashboard()
        return self._enter_module(key, user)

    def switch_to_module(self, key: str, user: User) -> ViewState:
        """Enter a module directly; an unknown key leaves the state untouched."""
        if not self._registry.module_exists(key):
            logger.debug("switch_to_module ignored unknown key=%s", key)
            return self._state
        return self._enter_module(key, user)

    def return_to_dashboard(self) -> ViewState:
        return self._enter_dashboard()

    def refresh(self, user: User) -> ViewState:
        """Recompute the active module's sections for a changed user snapshot."""
        key = self._state.current_module_key
        if key is None:
            return self._state
        self._state = replace(self._state, active_sections=self._sections_for(key, user))
        return self._state

    def _enter_dashboard(self) -> ViewState:
        old_key = self._state.current_module_key
        if old_key is None:
            return self._state
        return self._transition(old_key, ViewState(previous_module_key=old_key))

    def _enter_module(self, key: str, user: User) -> ViewState:
        old_key = self._state.current_module_key
        if key == old_key:
            return self._state
        new_state = ViewState(
            current_module_key=key,
            active_sections=self._sections_for(key, user),
            previous_module_key=old_key,
        )
        return self._transition(old_key, new_state)

    def _transition(self, old_key: str | None, new_state: ViewState) -> ViewState:
        self._generation += 1
        self._pending_load = None
        self._state = new_state
        logger.debug("View mode changed from=%s to=%s", old_key, new_state.current_module_key)

        for listener in list(self._listeners):
            listener(old_key, new_state.current_module_key)
        return self._state

    def _sections_for(self, key: str, user: User) -> tuple[ModuleSection, ...]:
        return module_navigation_for_role(
            self._registry,
            key,
            user,
            strict_department=self._strict_department,
            diagnostics=self._diagnostics,
        )

    # ---- Module loading sub-state ---------------------------------------------------

    def begin_module_load(self) -> int:
        self._pending_load = self._generation
        self._set_loading(True)
        return self._generation

    def finish_module_load(self, token: int) -> bool:
        """Clear the loading flag; False when the token predates a route change."""
        if token != self._generation or self._pending_load != token:
            logger.debug("Discarding stale module load token=%s generation=%s", token, self._generation)
            return False
        self._pending_load = None
        self._set_loading(False)
        return True

    @property
    def is_transition_in_flight(self) -> bool:
        return self._state.is_loading

    def _set_loading(self, loading: bool) -> None:
        self._state = replace(self._state, is_loading=loading)
