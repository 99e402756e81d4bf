"""
Route-to-module detection and active-path matching.

Paths are compared as segment sequences, so ``/dashboard/modules/sales`` never
matches ``/dashboard/modules/sales-reports`` and trailing slashes are irrelevant.
"""

from __future__ import annotations

import logging
from typing import Iterable

from erp_nav.registry.model import MODULES_SEGMENT, ModuleRegistry

logger = logging.getLogger(__name__)


def split_path(path: str | None) -> tuple[str, ...]:
    """``"/dashboard//modules/hr/?tab=1"`` -> ``("dashboard", "modules", "hr")``."""

    if not path:
        return ()
    for sep in ("?", "#"):
        path = path.split(sep, 1)[0]
    return tuple(segment for segment in path.split("/") if segment)


def normalize_module_code(code: str) -> str:
    """Backend module codes (``SELF_SERVICE``) -> registry keys (``self-service``)."""
    return code.strip().lower().replace("_", "-")


def module_segment(path: str | None) -> str | None:
    """The normalized segment following the first ``modules`` segment, if any."""

    segments = split_path(path)
    try:
        index = segments.index(MODULES_SEGMENT)
    except ValueError:
        return None
    if index + 1 >= len(segments):
        return None
    return normalize_module_code(segments[index + 1])


def detect_module(path: str | None, registry: ModuleRegistry) -> str | None:
    """
    Return the registered module key a path belongs to, or None.

    A segment that does not name a registered module is treated exactly like no
    module at all.
    """

    key = module_segment(path)
    if key is None:
        return None
    if not registry.module_exists(key):
        logger.debug("Route names unknown module segment=%s path=%s", key, path)
        return None
    return key


def _is_prefix(prefix: tuple[str, ...], segments: tuple[str, ...]) -> bool:
    return len(prefix) <= len(segments) and segments[: len(prefix)] == prefix


def is_path_active(item_path: str, current_path: str) -> bool:
    """True when ``current_path`` is ``item_path`` or lies underneath it."""
    return _is_prefix(split_path(item_path), split_path(current_path))


def most_specific_path(current_path: str, candidates: Iterable[str]) -> str | None:
    """
    Pick the candidate that owns ``current_path``.

    An exact match wins; otherwise the longest candidate that is a whole-segment
    prefix of the current path. Returns the candidate as given.
    """

    current = split_path(current_path)
    best: str | None = None
    best_len = -1
    for candidate in candidates:
        segments = split_path(candidate)
        if segments == current:
            return candidate
        if _is_prefix(segments, current) and len(segments) > best_len:
            best = candidate
            best_len = len(segments)
    return best
