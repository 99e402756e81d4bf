"""Immutable user snapshot consumed by the navigation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from erp_nav.roles import is_super_level, resolve_role_level


def _string_set(values: Iterable[Any] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(str(v).strip() for v in values if v is not None and str(v).strip())


@dataclass(frozen=True)
class User:
    """
    What the session collaborator knows about the authenticated user.

    The engine never mutates it; a new snapshot is built on login or profile change.
    """

    role_level: int
    department: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    module_access: frozenset[str] = field(default_factory=frozenset)

    user_id: int | str | None = None
    """Identifier of the account; used for diagnostics and session keys only."""

    username: str | None = None
    role_name: str | None = None

    @property
    def is_super(self) -> bool:
        return is_super_level(self.role_level)

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> User:
        """
        Build a snapshot from a loosely-shaped profile payload.

        Accepts the nested shape the ERP backend returns
        (``{"role": {"name": ..., "level": ...}, "department": {"name": ...}}``)
        as well as flat keys (``role_level``, ``department``).
        """

        role = profile.get("role")
        role_name: str | None = None
        level: int | None = None
        if isinstance(role, Mapping):
            role_name = role.get("name")
            level = role.get("level")
            permissions = role.get("permissions") or profile.get("permissions")
        else:
            role_name = role if isinstance(role, str) else None
            permissions = profile.get("permissions")
        if level is None:
            level = profile.get("role_level", profile.get("roleLevel"))

        department = profile.get("department")
        if isinstance(department, Mapping):
            department = department.get("name") or department.get("departmentName")
        department = str(department).strip() if department else None

        module_access = profile.get("module_access", profile.get("moduleAccess"))

        return cls(
            role_level=resolve_role_level(role_name, level),
            department=department or None,
            permissions=_string_set(permissions),
            module_access=_string_set(module_access),
            user_id=profile.get("id", profile.get("user_id")),
            username=profile.get("username"),
            role_name=role_name,
        )

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "role_name": self.role_name,
            "role_level": self.role_level,
            "department": self.department,
            "permissions": sorted(self.permissions),
            "module_access": sorted(self.module_access),
        }
