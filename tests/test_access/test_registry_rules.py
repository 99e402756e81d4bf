"""Visibility rules of the shipped registry (scenarios from the ERP sidebars)."""

from erp_nav.navigation.access import is_visible, module_navigation_for_role
from erp_nav.roles import HOD, MANAGER, STAFF, SUPER_ADMIN


def _paths(sections):
    return {item.path for section in sections for item in section.items}


def test_super_sees_every_registered_item(registry, make_user):
    super_user = make_user(SUPER_ADMIN, None)
    for item in registry.all_items():
        assert is_visible(item, super_user), item.path


def test_finance_items_only_for_finance_and_executive_heads(registry, make_user):
    fin_hod = make_user(HOD, "Finance & Accounting")
    exec_hod = make_user(HOD, "Executive Office")
    hr_hod = make_user(HOD, "Human Resources")

    wallet = "/dashboard/modules/finance/wallet"
    assert wallet in _paths(module_navigation_for_role(registry, "finance", fin_hod))
    assert wallet in _paths(module_navigation_for_role(registry, "finance", exec_hod))
    assert module_navigation_for_role(registry, "finance", hr_hod) == ()


def test_leave_approvals_hidden_for_hr_head(registry, make_user):
    approvals = "/dashboard/modules/self-service/department-approvals"
    assert approvals not in _paths(module_navigation_for_role(registry, "self-service", make_user(HOD, "Human Resources")))
    assert approvals in _paths(module_navigation_for_role(registry, "self-service", make_user(HOD, "Operations")))


def test_hr_admin_items_need_hr_department(registry, make_user):
    hr_paths = _paths(module_navigation_for_role(registry, "hr", make_user(HOD, "Human Resources")))
    ops_paths = _paths(module_navigation_for_role(registry, "hr", make_user(HOD, "Operations")))
    assert "/dashboard/modules/hr/onboarding" in hr_paths
    assert "/dashboard/modules/hr/onboarding" not in ops_paths
    assert "/dashboard/modules/hr/leave/calendar" in ops_paths


def test_inventory_is_operations_only(registry, make_user):
    assert module_navigation_for_role(registry, "inventory", make_user(HOD, "Operations"))
    assert module_navigation_for_role(registry, "inventory", make_user(HOD, "Sales & Marketing")) == ()
    assert module_navigation_for_role(registry, "inventory", make_user(MANAGER, "Operations")) == ()
    assert module_navigation_for_role(registry, "inventory", make_user(HOD, None)) == ()
    assert module_navigation_for_role(registry, "inventory", make_user(800, "Operations")) == ()


def test_sales_transactions_for_sales_staff_only(registry, make_user):
    sales_staff = _paths(module_navigation_for_role(registry, "sales", make_user(STAFF, "Sales & Marketing")))
    assert "/dashboard/modules/sales/transactions" in sales_staff
    assert "/dashboard/modules/sales/approvals" not in sales_staff

    ops_staff = module_navigation_for_role(registry, "sales", make_user(STAFF, "Operations"))
    assert ops_staff == ()


def test_department_scoped_items_hidden_from_user_without_department(registry, composer, make_user):
    hod = make_user(HOD, None, modules=list(registry.modules))

    for key in registry.modules:
        for section in module_navigation_for_role(registry, key, hod):
            for item in section.items:
                assert item.required.department is None, item.path
    assert module_navigation_for_role(registry, "inventory", hod) == ()
    assert module_navigation_for_role(registry, "finance", hod) == ()

    paths = {item.path for section in composer.resolve(hod, None) for item in section.items}
    assert "/dashboard/reports/finance" not in paths
    assert "/dashboard/modules/inventory" not in paths
    assert "/dashboard/modules/finance" not in paths
    assert "/dashboard/modules/hr" in paths
    for item in registry.navigation_items():
        if item.required.department is not None:
            assert item.path not in paths
