"""
Access Predicate Evaluator.

Decides whether a navigation item is presented to a user. Checks run in a fixed
order and the first failure hides the item:

1. Super sentinel level -> visible, nothing else is evaluated.
2. ``role_level`` below ``required.min_level`` -> hidden.
3. ``required.permission`` not granted -> hidden.
4. ``required.department`` differs from a known user department -> hidden.
   A user without a department skips this check unless ``strict_department``.
5. ``required.module`` not in the user's module access -> hidden.
6. ``hidden(user)`` returns True, or raises -> hidden.

This controls presentation only; the server enforces every permission itself.
"""

from __future__ import annotations

import logging
from typing import Iterable

from erp_nav.errors import Diagnostics, PredicateError
from erp_nav.navigation.routes import normalize_module_code
from erp_nav.registry.model import ModuleRegistry, ModuleSection, NavigationItem
from erp_nav.user import User

logger = logging.getLogger(__name__)


def is_visible(
    item: NavigationItem,
    user: User,
    *,
    strict_department: bool = False,
    diagnostics: Diagnostics | None = None,
) -> bool:
    if user.is_super:
        return True

    required = item.required
    if user.role_level < required.min_level:
        return False

    if required.permission and required.permission not in user.permissions:
        return False

    if required.department:
        if user.department is None:
            if strict_department:
                return False
        elif user.department != required.department:
            return False

    if required.module:
        granted = {normalize_module_code(code) for code in user.module_access}
        if normalize_module_code(required.module) not in granted:
            return False

    if item.hidden is not None:
        try:
            if item.hidden(user):
                return False
        except Exception as exc:
            logger.warning(
                "Hidden predicate failed; hiding item path=%s error=%s",
                item.path,
                type(exc).__name__,
            )
            if diagnostics is not None:
                diagnostics.report(
                    PredicateError(f"hidden predicate raised {type(exc).__name__}"),
                    path=item.path,
                    user_id=user.user_id,
                )
            return False

    return True


def filter_visible(
    items: Iterable[NavigationItem],
    user: User,
    *,
    strict_department: bool = False,
    diagnostics: Diagnostics | None = None,
) -> list[NavigationItem]:
    return [
        item
        for item in items
        if is_visible(item, user, strict_department=strict_department, diagnostics=diagnostics)
    ]


def visible_sections(
    sections: Iterable[ModuleSection],
    user: User,
    *,
    strict_department: bool = False,
    diagnostics: Diagnostics | None = None,
) -> tuple[ModuleSection, ...]:
    """Filter each section's items; sections left empty are dropped, order is kept."""

    result: list[ModuleSection] = []
    for section in sections:
        items = filter_visible(section.items, user, strict_department=strict_department, diagnostics=diagnostics)
        if items:
            result.append(
                ModuleSection(
                    title=section.title,
                    items=tuple(items),
                    collapsible=section.collapsible,
                    default_expanded=section.default_expanded,
                )
            )
    return tuple(result)


def module_navigation_for_role(
    registry: ModuleRegistry,
    module_key: str,
    user: User,
    *,
    strict_department: bool = False,
    diagnostics: Diagnostics | None = None,
) -> tuple[ModuleSection, ...]:
    """Visible sections of one module for ``user``; empty for an unknown module."""

    module = registry.get_module(module_key)
    if module is None:
        return ()
    return visible_sections(module.sections, user, strict_department=strict_department, diagnostics=diagnostics)
