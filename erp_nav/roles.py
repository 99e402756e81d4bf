"""
Role Level Table.

A fixed, ordered scale of named roles. Levels are compared numerically; the top
of the table is the super sentinel, which bypasses every visibility check.
"""

from __future__ import annotations

from typing import Mapping

VIEWER = 100
STAFF = 300
MANAGER = 600
HOD = 700
SUPER_ADMIN = 1000

ROLE_LEVELS: Mapping[str, int] = {
    "VIEWER": VIEWER,
    "STAFF": STAFF,
    "MANAGER": MANAGER,
    "HOD": HOD,
    "SUPER_ADMIN": SUPER_ADMIN,
}

SUPER_ADMIN_LEVEL = max(ROLE_LEVELS.values())
DEFAULT_ROLE_LEVEL = STAFF

ROLE_TITLES: Mapping[int, str] = {
    SUPER_ADMIN: "Super Administrator",
    HOD: "Head of Department",
    MANAGER: "Manager",
    STAFF: "Staff",
    VIEWER: "Viewer",
}

ROLE_DESCRIPTIONS: Mapping[int, str] = {
    SUPER_ADMIN: "Full access to all ERP modules and system administration features",
    HOD: "Head of Department with HR management, limited procurement approval, and communication tools",
    MANAGER: "Department manager with approval workflows and department-specific module access",
    STAFF: "Staff member with basic module access and self-service features",
    VIEWER: "Read-only access to reports and announcements",
}


def is_super_level(level: int) -> bool:
    return level >= SUPER_ADMIN_LEVEL


def resolve_role_level(role_name: str | None = None, level: int | None = None) -> int:
    """
    Reconcile a role name and a numeric level into one level.

    Profiles arrive with either a role name (``"SUPER_ADMIN"``), a numeric level
    (``1000``) or both. A known role name wins so that ``"SUPER_ADMIN"`` always maps
    to the super sentinel; otherwise the numeric level is kept; with neither, the
    user is treated as staff.
    """

    if role_name:
        known = ROLE_LEVELS.get(role_name.strip().upper())
        if known is not None:
            return known
    if level is not None:
        return int(level)
    return DEFAULT_ROLE_LEVEL


def role_title(level: int) -> str:
    """Title of the highest table entry at or below ``level``."""
    for table_level in sorted(ROLE_TITLES, reverse=True):
        if level >= table_level:
            return ROLE_TITLES[table_level]
    return "User"
