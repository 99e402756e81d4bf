"""
Declarative module registry: schema, loader and predicate language.

This package has no dependency on the HTTP or database layers.
"""

from .loader import build_registry, load_module_registry
from .model import (
    SECTION_ORDER,
    AccessRequirement,
    ModuleDescriptor,
    ModuleRegistry,
    ModuleSection,
    NavigationItem,
    SectionName,
)
from .predicates import NAMED_PREDICATES, compile_predicate, register_predicate

__all__ = [
    "SECTION_ORDER",
    "AccessRequirement",
    "ModuleDescriptor",
    "ModuleRegistry",
    "ModuleSection",
    "NavigationItem",
    "SectionName",
    "NAMED_PREDICATES",
    "build_registry",
    "compile_predicate",
    "load_module_registry",
    "register_predicate",
]
