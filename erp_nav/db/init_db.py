from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from erp_nav.db.base import Base
from erp_nav.db.session import get_engine, get_sessionmaker
from erp_nav.models.security import AppModule, Department, Permission, Role, User
from erp_nav.roles import ROLE_DESCRIPTIONS, ROLE_LEVELS


def init_db() -> None:
    """
    Create tables + seed demo data.

    The dataset is small and deterministic: one user per role / department
    combination that matters to navigation, so every sidebar variant can be tried
    with a bearer token equal to the user id.
    """

    Base.metadata.create_all(bind=get_engine())

    with get_sessionmaker()() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Department.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    # Departments
    hr = Department(name="Human Resources", code="HR", description="HR Department")
    fin = Department(name="Finance & Accounting", code="FIN", description="Finance Department")
    ops = Department(name="Operations", code="OPS", description="Operations Department")
    sales = Department(name="Sales & Marketing", code="SAM", description="Sales and Marketing Department")
    exe = Department(name="Executive Office", code="EXE", description="Executive Office")
    db.add_all([hr, fin, ops, sales, exe])
    db.flush()

    # Roles (levels from the role table)
    roles = {
        name: Role(name=name, level=level, description=ROLE_DESCRIPTIONS.get(level))
        for name, level in ROLE_LEVELS.items()
    }
    db.add_all(roles.values())
    db.flush()

    # Permissions
    user_manage = Permission(name="user.manage", description="Manage user accounts")
    doc_upload = Permission(name="document.upload", description="Upload documents")
    db.add_all([user_manage, doc_upload])
    db.flush()

    # Modules (codes as the backend reports them)
    codes = [
        ("DEPARTMENT_MANAGEMENT", "Department Management"),
        ("SELF_SERVICE", "Self-Service"),
        ("HR", "HR Management"),
        ("PAYROLL", "Payroll Management"),
        ("PROJECTS", "Project Management"),
        ("TASKS", "Task Management"),
        ("INVENTORY", "Inventory Management"),
        ("PROCUREMENT", "Procurement"),
        ("FINANCE", "Finance Management"),
        ("SALES", "Sales & Marketing"),
        ("COMMUNICATION", "Communication"),
        ("LEGAL", "Legal & Compliance"),
    ]
    modules = {code: AppModule(code=code, name=name) for code, name in codes}
    db.add_all(modules.values())
    db.flush()

    def grant(*module_codes: str) -> list[AppModule]:
        return [modules[code] for code in module_codes]

    # Users
    u1 = User(username="sam_super", email="sam.super@example.com", role=roles["SUPER_ADMIN"], department=exe)
    u1.modules.extend(modules.values())
    u1.permissions.extend([user_manage, doc_upload])

    u2 = User(username="hana_hr_hod", email="hana.hr@example.com", role=roles["HOD"], department=hr)
    u2.modules.extend(grant("DEPARTMENT_MANAGEMENT", "SELF_SERVICE", "HR", "PAYROLL", "PROJECTS", "COMMUNICATION"))
    u2.permissions.extend([user_manage, doc_upload])

    u3 = User(username="fiona_fin_hod", email="fiona.fin@example.com", role=roles["HOD"], department=fin)
    u3.modules.extend(grant("DEPARTMENT_MANAGEMENT", "SELF_SERVICE", "FINANCE", "PAYROLL", "SALES", "COMMUNICATION"))
    u3.permissions.append(doc_upload)

    u4 = User(username="omar_ops_mgr", email="omar.ops@example.com", role=roles["MANAGER"], department=ops)
    u4.modules.extend(grant("SELF_SERVICE", "INVENTORY", "PROCUREMENT", "TASKS", "COMMUNICATION"))

    u5 = User(username="sara_sales", email="sara.sales@example.com", role=roles["STAFF"], department=sales)
    u5.modules.extend(grant("SELF_SERVICE", "SALES", "PROJECTS", "COMMUNICATION"))
    u5.permissions.append(doc_upload)

    u6 = User(username="vic_viewer", email="vic.viewer@example.com", role=roles["VIEWER"], department=None)
    u6.modules.extend(grant("COMMUNICATION"))

    u7 = User(username="ivan_inactive", email="ivan.inactive@example.com", role=roles["STAFF"], department=ops, is_active=False)

    db.add_all([u1, u2, u3, u4, u5, u6, u7])
    db.commit()
