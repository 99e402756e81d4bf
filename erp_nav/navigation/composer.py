"""
Navigation Composer.

Builds the grouped sidebar for a user from one of two sources:

* the remote module list, when it is present and has at least one valid record;
* otherwise the static registry (main navigation plus one launcher per module).

The precedence lives in ``merge_sources`` and nowhere else. Whatever the source,
the fixed Dashboard entry comes first, every candidate goes through the Access
Predicate Evaluator, and the result is grouped into ``SECTION_ORDER`` with empty
sections left out.

``resolve`` never raises: failures shrink the result and are reported to the
diagnostics sink.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Any, Iterable, Sequence

from erp_nav.errors import DataQualityError, DiagnosticKind, Diagnostics
from erp_nav.navigation.access import filter_visible, is_visible, visible_sections
from erp_nav.navigation.remote import RemoteModuleRecord, coerce_remote_record
from erp_nav.navigation.routes import normalize_module_code
from erp_nav.registry.model import (
    MODULES_ROOT,
    SECTION_ORDER,
    AccessRequirement,
    ModuleDescriptor,
    ModuleRegistry,
    NavigationItem,
    SectionName,
)
from erp_nav.user import User

logger = logging.getLogger(__name__)

DASHBOARD_ITEM = NavigationItem(
    label="Dashboard",
    icon="home",
    path="/dashboard",
    section="main",
    required=AccessRequirement(min_level=0),
)

DEFAULT_MODULE_ICON = "cube"


@dataclass(frozen=True)
class ResolvedSection:
    name: SectionName
    items: tuple[NavigationItem, ...]


def remote_module_path(code: str) -> str:
    """``"SELF_SERVICE"`` -> ``"/dashboard/modules/self-service"``."""
    return f"{MODULES_ROOT}/{normalize_module_code(code)}"


def remote_record_item(record: RemoteModuleRecord) -> NavigationItem:
    return NavigationItem(
        label=record.name,
        icon=record.icon or DEFAULT_MODULE_ICON,
        path=remote_module_path(record.code),
        section="modules",
        required=AccessRequirement(min_level=record.required_role_level),
        description=record.description,
    )


def module_launcher_item(module: ModuleDescriptor) -> NavigationItem:
    """Entry in the ``modules`` section that opens a registered module."""
    return NavigationItem(
        label=module.label,
        icon=module.icon,
        path=module.base_path,
        section="modules",
        required=replace(module.required, module=module.key),
        description=module.description,
    )


def merge_sources(
    remote_items: Sequence[NavigationItem] | None,
    fallback_items: Sequence[NavigationItem],
) -> tuple[NavigationItem, ...]:
    """Remote wins when present and non-empty; the static registry is fallback only."""

    if remote_items:
        return tuple(remote_items)
    return tuple(fallback_items)


def group_sections(items: Iterable[NavigationItem]) -> tuple[ResolvedSection, ...]:
    buckets: dict[SectionName, list[NavigationItem]] = {name: [] for name in SECTION_ORDER}
    for item in items:
        buckets[item.section].append(item)
    return tuple(ResolvedSection(name=name, items=tuple(buckets[name])) for name in SECTION_ORDER if buckets[name])


class NavigationComposer:
    """
    Resolves the visible, grouped navigation for a user.

    Holds only read-only state (the registry and options), so one instance can be
    shared by every session.
    """

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

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def strict_department(self) -> bool:
        return self._strict_department

    @property
    def diagnostics(self) -> Diagnostics | None:
        return self._diagnostics

    # ---- Sources --------------------------------------------------------------------

    def remote_items(self, remote_modules: Iterable[RemoteModuleRecord | Any] | None) -> list[NavigationItem]:
        """Synthesized items for valid records, ordered by ``order`` then input position."""

        if remote_modules is None:
            return []

        records: list[RemoteModuleRecord] = []
        for raw in remote_modules:
            record = coerce_remote_record(raw, self._diagnostics)
            if record is not None:
                records.append(record)

        indexed = list(enumerate(records))
        indexed.sort(key=lambda pair: (pair[1].order is None, pair[1].order or 0, pair[0]))

        items: list[NavigationItem] = []
        seen: set[str] = set()
        for _, record in indexed:
            item = remote_record_item(record)
            if item.path in seen:
                logger.warning("Duplicate remote module path=%s code=%s; keeping first", item.path, record.code)
                if self._diagnostics is not None:
                    self._diagnostics.report(
                        DataQualityError(f"duplicate remote module path {item.path}"), code=record.code
                    )
                continue
            seen.add(item.path)
            items.append(item)
        return items

    def fallback_items(self, user: User) -> list[NavigationItem]:
        """Main registry navigation plus launchers for modules the user can use."""

        items: list[NavigationItem] = [
            item for item in self._registry.navigation_items() if not _is_dashboard(item)
        ]
        for module in self._registry.modules.values():
            if self._has_visible_items(module, user):
                items.append(module_launcher_item(module))
        return items

    def launcher_visible(self, module: ModuleDescriptor, user: User) -> bool:
        """Whether the fallback sidebar would offer ``user`` a launcher for ``module``."""
        return self._has_visible_items(module, user) and is_visible(
            module_launcher_item(module),
            user,
            strict_department=self._strict_department,
            diagnostics=self._diagnostics,
        )

    def _has_visible_items(self, module: ModuleDescriptor, user: User) -> bool:
        return any(
            is_visible(item, user, strict_department=self._strict_department, diagnostics=self._diagnostics)
            for item in module.items()
        )

    # ---- Resolution -----------------------------------------------------------------

    def resolve(
        self,
        user: User,
        remote_modules: Iterable[RemoteModuleRecord | Any] | None,
    ) -> tuple[ResolvedSection, ...]:
        """Visible navigation grouped by section; always contains the Dashboard entry."""

        try:
            remote = self.remote_items(remote_modules)
        except Exception as exc:
            logger.warning("Remote module synthesis failed; using registry error=%s", type(exc).__name__)
            self._report("resolution_error", f"remote synthesis failed: {type(exc).__name__}", user)
            remote = []

        try:
            fallback = [] if remote else self.fallback_items(user)
            candidates = (DASHBOARD_ITEM,) + merge_sources(remote, fallback)
            visible = filter_visible(
                candidates,
                user,
                strict_department=self._strict_department,
                diagnostics=self._diagnostics,
            )
        except Exception as exc:
            logger.warning("Navigation resolution failed; dashboard only error=%s", type(exc).__name__)
            self._report("resolution_error", f"resolution failed: {type(exc).__name__}", user)
            visible = [DASHBOARD_ITEM]

        logger.debug(
            "Navigation resolved user_id=%s source=%s items=%d",
            user.user_id,
            "remote" if remote else "registry",
            len(visible),
        )
        return group_sections(visible)

    def module_descriptor(self, user: User, key: str) -> ModuleDescriptor | None:
        """
        The registered module with only the sections and items ``user`` can see.

        Returns None for an unknown key. Feature screens render their own sidebar
        from this.
        """

        module = self._registry.get_module(key)
        if module is None:
            return None
        sections = visible_sections(
            module.sections,
            user,
            strict_department=self._strict_department,
            diagnostics=self._diagnostics,
        )
        return replace(module, sections=sections)

    def _report(self, kind: DiagnosticKind, message: str, user: User) -> None:
        if self._diagnostics is not None:
            self._diagnostics.report(kind, message, user_id=user.user_id)


def _is_dashboard(item: NavigationItem) -> bool:
    return item.section == "main" and item.path == DASHBOARD_ITEM.path
