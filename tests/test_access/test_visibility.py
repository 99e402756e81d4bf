"""Tests for the access predicate evaluator."""

import pytest

from erp_nav.errors import Diagnostics, PredicateError
from erp_nav.navigation.access import filter_visible, is_visible, module_navigation_for_role
from erp_nav.registry.model import AccessRequirement, NavigationItem
from erp_nav.roles import HOD, MANAGER, STAFF, SUPER_ADMIN, VIEWER


def _item(path="/dashboard/x", hidden=None, **required) -> NavigationItem:
    return NavigationItem(
        label="X",
        icon="home",
        path=path,
        section="system",
        required=AccessRequirement(**required),
        hidden=hidden,
    )


def _boom(user):
    raise RuntimeError("broken rule")


@pytest.mark.parametrize("min_level", [VIEWER, STAFF, MANAGER, HOD])
def test_levels_below_min_level_are_hidden(make_user, min_level):
    item = _item(min_level=min_level)
    for level in (0, VIEWER, STAFF, MANAGER, HOD):
        assert is_visible(item, make_user(level)) is (level >= min_level)


def test_visible_users_shrink_as_min_level_grows(make_user):
    """The users who see an item at level L+1 are a subset of those who see it at L."""
    users = [make_user(level) for level in range(0, 1000, 50)]
    for min_level in (100, 300, 600, 700):
        lower = {u.role_level for u in users if is_visible(_item(min_level=min_level), u)}
        higher = {u.role_level for u in users if is_visible(_item(min_level=min_level + 1), u)}
        assert higher <= lower


def test_super_sees_everything_even_when_hidden(make_user):
    super_user = make_user(SUPER_ADMIN)
    item = _item(min_level=5000, permission="x", department="Finance & Accounting", module="finance",
                 hidden=lambda user: True)
    assert is_visible(item, super_user) is True


def test_hidden_predicate_raising_hides_item_and_reports(make_user):
    diagnostics = Diagnostics()
    item = _item(min_level=0, hidden=_boom)
    assert is_visible(item, make_user(HOD), diagnostics=diagnostics) is False

    entries = diagnostics.entries("predicate_error")
    assert len(entries) == 1
    assert entries[0].kind == PredicateError.kind
    assert dict(entries[0].context)["path"] == "/dashboard/x"


def test_hidden_predicate_true_hides_item(make_user):
    assert is_visible(_item(hidden=lambda user: True), make_user(HOD)) is False
    assert is_visible(_item(hidden=lambda user: False), make_user(HOD)) is True


def test_department_match_and_mismatch(make_user):
    hr_hod = make_user(HOD, "Human Resources", permissions=["document.edit"])
    assert is_visible(_item(min_level=700, department="Human Resources"), hr_hod) is True
    assert is_visible(_item(min_level=700, department="Finance & Accounting"), hr_hod) is False


def test_unknown_department_skips_check_unless_strict(make_user):
    user = make_user(HOD, None)
    item = _item(min_level=700, department="Finance & Accounting")
    assert is_visible(item, user) is True
    assert is_visible(item, user, strict_department=True) is False


def test_permission_requirement(make_user):
    item = _item(min_level=300, permission="document.upload")
    assert is_visible(item, make_user(STAFF, permissions=["document.upload"])) is True
    assert is_visible(item, make_user(STAFF)) is False


def test_module_requirement_normalizes_backend_codes(make_user):
    item = _item(module="self-service")
    assert is_visible(item, make_user(STAFF, modules=["SELF_SERVICE"])) is True
    assert is_visible(item, make_user(STAFF, modules=["HR"])) is False


def test_filter_visible_keeps_order(make_user):
    items = [_item(path=f"/p/{n}", min_level=level) for n, level in enumerate([100, 700, 300, 600])]
    visible = filter_visible(items, make_user(MANAGER))
    assert [i.path for i in visible] == ["/p/0", "/p/2", "/p/3"]


def test_module_navigation_drops_empty_sections(registry, make_user):
    staff = make_user(STAFF, "Sales & Marketing")
    sections = module_navigation_for_role(registry, "self-service", staff)
    titles = [s.title for s in sections]
    assert titles == ["Personal", "Support & Requests"]
    assert all(s.items for s in sections)


def test_module_navigation_unknown_module_is_empty(registry, make_user):
    assert module_navigation_for_role(registry, "nope", make_user(SUPER_ADMIN)) == ()


def test_diagnostics_capacity_is_bounded():
    diagnostics = Diagnostics(capacity=2)
    for n in range(5):
        diagnostics.report("data_quality", f"bad {n}")
    assert len(diagnostics) == 2
    assert [d.message for d in diagnostics.entries()] == ["bad 3", "bad 4"]
    diagnostics.clear()
    assert len(diagnostics) == 0
