"""
Runtime data structures of the module registry.

Everything here is frozen: the registry is loaded once and shared read-only by
every resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Literal, Mapping

from erp_nav.user import User

SectionName = Literal["main", "modules", "system", "documents", "communication", "reports"]

SECTION_ORDER: tuple[SectionName, ...] = ("main", "modules", "system", "documents", "communication", "reports")

MODULES_SEGMENT = "modules"
MODULES_ROOT = "/dashboard/modules"

HiddenPredicate = Callable[[User], bool]


@dataclass(frozen=True)
class AccessRequirement:
    """All present fields must hold (logical AND)."""

    min_level: int = 0
    permission: str | None = None
    department: str | None = None
    module: str | None = None


@dataclass(frozen=True)
class NavigationItem:
    label: str
    icon: str
    path: str
    section: SectionName
    required: AccessRequirement = field(default_factory=AccessRequirement)
    hidden: HiddenPredicate | None = field(default=None, compare=False)
    description: str | None = None


@dataclass(frozen=True)
class ModuleSection:
    title: str
    items: tuple[NavigationItem, ...]
    collapsible: bool = True
    default_expanded: bool = False


@dataclass(frozen=True)
class ModuleDescriptor:
    key: str
    label: str
    icon: str
    base_path: str
    sections: tuple[ModuleSection, ...]
    required: AccessRequirement = field(default_factory=AccessRequirement)
    description: str | None = None

    def items(self) -> tuple[NavigationItem, ...]:
        return tuple(item for section in self.sections for item in section.items)


@dataclass(frozen=True)
class ModuleRegistry:
    """Fully-loaded registry: main navigation plus the module descriptors."""

    navigation: tuple[NavigationItem, ...]
    modules: Mapping[str, ModuleDescriptor]

    def __post_init__(self) -> None:
        if not isinstance(self.modules, MappingProxyType):
            object.__setattr__(self, "modules", MappingProxyType(dict(self.modules)))

    def module_exists(self, key: str | None) -> bool:
        return bool(key) and key in self.modules

    def get_module(self, key: str | None) -> ModuleDescriptor | None:
        if not key:
            return None
        return self.modules.get(key)

    # Name kept from the front-end helper that feature screens call.
    get_module_sidebar_config = get_module

    def module_keys(self) -> tuple[str, ...]:
        return tuple(self.modules.keys())

    def navigation_items(self) -> tuple[NavigationItem, ...]:
        return self.navigation

    def all_items(self) -> tuple[NavigationItem, ...]:
        """Main navigation items followed by every module item, in declaration order."""
        module_items = tuple(item for module in self.modules.values() for item in module.items())
        return self.navigation + module_items
