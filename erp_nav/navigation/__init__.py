"""
Navigation & access resolution engine.

Pure Python: no FastAPI or database dependency. ``requests`` is only used by the
remote module provider.
"""

from .access import filter_visible, is_visible, module_navigation_for_role
from .composer import DASHBOARD_ITEM, NavigationComposer, ResolvedSection, merge_sources
from .remote import RemoteModuleCache, RemoteModuleProvider, RemoteModuleRecord
from .routes import detect_module, is_path_active, most_specific_path, normalize_module_code
from .session import AccessDecision, NavigationSession, NavigationSessionStore, NavigationSnapshot
from .view_state import ViewModeStateMachine, ViewState

__all__ = [
    "DASHBOARD_ITEM",
    "AccessDecision",
    "NavigationComposer",
    "NavigationSession",
    "NavigationSessionStore",
    "NavigationSnapshot",
    "RemoteModuleCache",
    "RemoteModuleProvider",
    "RemoteModuleRecord",
    "ResolvedSection",
    "ViewModeStateMachine",
    "ViewState",
    "detect_module",
    "filter_visible",
    "is_path_active",
    "is_visible",
    "merge_sources",
    "module_navigation_for_role",
    "most_specific_path",
    "normalize_module_code",
]
