"""
Module registry YAML loader.

Expected shape (simplified):

    navigation:
      - label: Documents
        icon: DocumentIcon
        path: /dashboard/documents
        section: documents
        required: {min_level: 300, permission: document.view}

    modules:
      hr:
        label: HR Management
        icon: UsersIcon
        base_path: /dashboard/modules/hr
        required: {min_level: 300}
        sections:
          - title: Employee Lifecycle
            default_expanded: true
            items:
              - label: Onboarding Management
                icon: UserPlusIcon
                path: /dashboard/modules/hr/onboarding
                required: {min_level: 700, department: Human Resources}
                hidden: {named: some_predicate}

The raw document is validated with pydantic, then converted to the frozen
structures in ``registry.model``. Structural problems raise RegistryConfigError.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from erp_nav.errors import RegistryConfigError
from erp_nav.registry.model import (
    MODULES_ROOT,
    SECTION_ORDER,
    AccessRequirement,
    ModuleDescriptor,
    ModuleRegistry,
    ModuleSection,
    NavigationItem,
    SectionName,
)
from erp_nav.registry.predicates import compile_predicate

logger = logging.getLogger(__name__)

_MODULE_KEY_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


# ---- Raw (YAML) schema -----------------------------------------------------------------


class RequirementModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_level: int = Field(default=0, ge=0)
    permission: str | None = None
    department: str | None = None
    module: str | None = None


class ItemModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str = Field(min_length=1)
    icon: str = "home"
    path: str = Field(min_length=1)
    section: SectionName | None = None
    required: RequirementModel = Field(default_factory=RequirementModel)
    hidden: dict[str, Any] | None = None
    description: str | None = None


class SectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    collapsible: bool = True
    default_expanded: bool = False
    items: list[ItemModel] = Field(default_factory=list)


class ModuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str = Field(min_length=1)
    icon: str = "cube"
    base_path: str | None = None
    description: str | None = None
    required: RequirementModel = Field(default_factory=RequirementModel)
    sections: list[SectionModel] = Field(default_factory=list)


class RegistryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    navigation: list[ItemModel] = Field(default_factory=list)
    modules: dict[str, ModuleModel] = Field(default_factory=dict)


# ---- Conversion ------------------------------------------------------------------------


def _requirement(raw: RequirementModel) -> AccessRequirement:
    return AccessRequirement(
        min_level=raw.min_level,
        permission=raw.permission or None,
        department=raw.department or None,
        module=raw.module or None,
    )


def _item(raw: ItemModel, section: SectionName, where: str) -> NavigationItem:
    hidden = compile_predicate(raw.hidden, f"{where}.hidden") if raw.hidden is not None else None
    return NavigationItem(
        label=raw.label,
        icon=raw.icon,
        path=_normalize_path(raw.path),
        section=section,
        required=_requirement(raw.required),
        hidden=hidden,
        description=raw.description,
    )


def _normalize_path(path: str) -> str:
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _is_under(path: str, base: str) -> bool:
    return path == base or path.startswith(base + "/")


def build_registry(raw: dict[str, Any]) -> ModuleRegistry:
    """Validate an already-parsed registry document and build the runtime registry."""

    try:
        model = RegistryModel.model_validate(raw)
    except ValidationError as exc:
        raise RegistryConfigError(f"invalid module registry: {exc}") from exc

    navigation: list[NavigationItem] = []
    seen_paths: dict[str, set[str]] = {name: set() for name in SECTION_ORDER}
    for index, raw_item in enumerate(model.navigation):
        where = f"navigation[{index}]"
        if raw_item.section is None:
            raise RegistryConfigError(f"{where} ({raw_item.label!r}) requires a section")
        item = _item(raw_item, raw_item.section, where)
        if item.path in seen_paths[item.section]:
            raise RegistryConfigError(f"{where}: duplicate path {item.path!r} in section {item.section!r}")
        seen_paths[item.section].add(item.path)
        navigation.append(item)

    modules: dict[str, ModuleDescriptor] = {}
    for key, raw_module in model.modules.items():
        if not _MODULE_KEY_RE.match(key):
            raise RegistryConfigError(f"module key {key!r} must be lower-case words separated by hyphens")
        expected_base = f"{MODULES_ROOT}/{key}"
        base_path = _normalize_path(raw_module.base_path) if raw_module.base_path else expected_base
        if base_path != expected_base:
            raise RegistryConfigError(f"module {key!r} base_path must be {expected_base!r}, got {base_path!r}")

        sections: list[ModuleSection] = []
        for s_index, raw_section in enumerate(raw_module.sections):
            section_paths: set[str] = set()
            items: list[NavigationItem] = []
            for i_index, raw_item in enumerate(raw_section.items):
                where = f"modules.{key}.sections[{s_index}].items[{i_index}]"
                if raw_item.section not in (None, "modules"):
                    raise RegistryConfigError(f"{where}: module items always belong to the 'modules' section")
                item = _item(raw_item, "modules", where)
                if not _is_under(item.path, base_path):
                    raise RegistryConfigError(f"{where}: path {item.path!r} is outside module base path {base_path!r}")
                if item.path in section_paths:
                    raise RegistryConfigError(f"{where}: duplicate path {item.path!r} in section {raw_section.title!r}")
                section_paths.add(item.path)
                items.append(item)
            sections.append(
                ModuleSection(
                    title=raw_section.title,
                    items=tuple(items),
                    collapsible=raw_section.collapsible,
                    default_expanded=raw_section.default_expanded,
                )
            )

        modules[key] = ModuleDescriptor(
            key=key,
            label=raw_module.label,
            icon=raw_module.icon,
            base_path=base_path,
            sections=tuple(sections),
            required=_requirement(raw_module.required),
            description=raw_module.description,
        )

    logger.debug("Module registry built: %d navigation items, %d modules", len(navigation), len(modules))
    return ModuleRegistry(navigation=tuple(navigation), modules=modules)


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        seen: set[Any] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise RegistryConfigError(f"duplicate key {key!r} at line {key_node.start_mark.line + 1}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_module_registry(path: Path) -> ModuleRegistry:
    """Load and validate the module registry YAML from disk."""

    raw_text = path.read_text(encoding="utf-8")
    raw = yaml.load(raw_text, Loader=_UniqueKeyLoader) or {}
    if not isinstance(raw, dict):
        raise RegistryConfigError(f"module registry must be a mapping: {path}")
    return build_registry(raw)
