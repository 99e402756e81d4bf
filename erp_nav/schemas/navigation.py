from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from erp_nav.icons import IconRef, resolve_icon
from erp_nav.navigation.composer import ResolvedSection
from erp_nav.navigation.presentation import SectionCollapseStore
from erp_nav.navigation.routes import most_specific_path
from erp_nav.navigation.session import AccessDecision, NavigationSnapshot
from erp_nav.registry.model import ModuleDescriptor, ModuleSection, NavigationItem, SectionName


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    icon: IconRef
    path: str
    description: str | None = None
    active: bool = False

    @field_validator("icon", mode="before")
    @classmethod
    def _icon(cls, value: object) -> IconRef:
        return value if isinstance(value, IconRef) else resolve_icon(str(value) if value else None)


class SectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: SectionName
    items: list[ItemOut]


class ModuleSectionOut(BaseModel):
    title: str
    collapsible: bool
    default_expanded: bool
    collapsed: bool
    items: list[ItemOut]


class ModuleOut(BaseModel):
    key: str
    label: str
    icon: IconRef
    base_path: str
    description: str | None = None
    sections: list[ModuleSectionOut]

    @field_validator("icon", mode="before")
    @classmethod
    def _icon(cls, value: object) -> IconRef:
        return value if isinstance(value, IconRef) else resolve_icon(str(value) if value else None)


class ViewOut(BaseModel):
    current_module_key: str | None
    previous_module_key: str | None
    is_module_view: bool
    is_loading: bool


class NavigationOut(BaseModel):
    sections: list[SectionOut]
    remote_source: bool


class NavigateIn(BaseModel):
    path: str = Field(min_length=1)


class NavigateOut(BaseModel):
    path: str
    view: ViewOut
    sections: list[SectionOut]
    module: ModuleOut | None
    remote_source: bool


class AccessOut(BaseModel):
    path: str
    decision: AccessDecision


# ---- Builders --------------------------------------------------------------------------
#
# Only the most specific item owning the current path is marked active, so the
# Dashboard entry is not highlighted on every page underneath it.


def _item_out(item: NavigationItem, active_path: str | None) -> ItemOut:
    out = ItemOut.model_validate(item)
    out.active = active_path is not None and item.path == active_path
    return out


def section_out(section: ResolvedSection, active_path: str | None = None) -> SectionOut:
    return SectionOut(name=section.name, items=[_item_out(item, active_path) for item in section.items])


def module_out(
    module: ModuleDescriptor,
    collapse: SectionCollapseStore | None = None,
    active_path: str | None = None,
) -> ModuleOut:
    return ModuleOut(
        key=module.key,
        label=module.label,
        icon=module.icon,
        base_path=module.base_path,
        description=module.description,
        sections=[_module_section_out(section, collapse, active_path) for section in module.sections],
    )


def _module_section_out(
    section: ModuleSection,
    collapse: SectionCollapseStore | None,
    active_path: str | None,
) -> ModuleSectionOut:
    if collapse is not None:
        collapsed = collapse.is_collapsed(section.title, section.default_expanded)
    else:
        collapsed = not section.default_expanded
    return ModuleSectionOut(
        title=section.title,
        collapsible=section.collapsible,
        default_expanded=section.default_expanded,
        collapsed=collapsed,
        items=[_item_out(item, active_path) for item in section.items],
    )


def navigation_out(sections: Iterable[ResolvedSection], remote_source: bool) -> NavigationOut:
    return NavigationOut(sections=[section_out(s) for s in sections], remote_source=remote_source)


def navigate_out(
    path: str,
    snapshot: NavigationSnapshot,
    collapse: SectionCollapseStore | None = None,
) -> NavigateOut:
    candidates = [item.path for s in snapshot.sections for item in s.items]
    if snapshot.module is not None:
        candidates.extend(item.path for item in snapshot.module.items())
    active_path = most_specific_path(path, candidates)

    view = snapshot.view
    return NavigateOut(
        path=path,
        view=ViewOut(
            current_module_key=view.current_module_key,
            previous_module_key=view.previous_module_key,
            is_module_view=view.is_module_view,
            is_loading=view.is_loading,
        ),
        sections=[section_out(s, active_path) for s in snapshot.sections],
        module=module_out(snapshot.module, collapse, active_path) if snapshot.module is not None else None,
        remote_source=snapshot.remote_source,
    )
