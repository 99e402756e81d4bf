"""Tests for icon name resolution."""

import pytest

from erp_nav.icons import IconRef, resolve_icon


@pytest.mark.parametrize(
    "name,expected",
    [
        ("home", IconRef.HOME),
        ("user-plus", IconRef.USER_PLUS),
        ("UserPlusIcon", IconRef.USER_PLUS),
        ("HiOutlineUsers", IconRef.USERS),
        ("Cog6ToothIcon", IconRef.COG),
        ("no-such-icon", IconRef.HOME),
        ("", IconRef.HOME),
        (None, IconRef.HOME),
    ],
)
def test_resolve_icon(name, expected):
    assert resolve_icon(name) is expected


def test_shipped_registry_icons_are_known(registry):
    """Every icon in the shipped registry maps to a real icon, not the fallback."""
    names = {item.icon for item in registry.all_items()} | {m.icon for m in registry.modules.values()}
    unknown = sorted(n for n in names if resolve_icon(n) is IconRef.HOME and "home" not in n.lower())
    assert unknown == []
