"""
Declarative ``hidden`` predicates.

Registry items may hide themselves for particular users. Instead of arbitrary code
in configuration, the YAML uses a small predicate language:

    hidden:
      not:
        all_of:
          - {field: role_level, equals: 700}
          - {field: department, in: ["Finance & Accounting", "Executive Office"]}

Leaves compare one user field with an operator; ``all_of`` / ``any_of`` / ``not``
combine them. Rules that do not fit are registered in Python under a name and
referenced as ``{named: <name>}``.

A predicate returning True hides the item.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from erp_nav.errors import RegistryConfigError
from erp_nav.roles import HOD
from erp_nav.user import User

Predicate = Callable[[User], bool]

FIELDS = frozenset({"role_level", "department", "permissions", "module_access"})
OPERATORS = frozenset({"equals", "not_equals", "in", "not_in", "contains", "at_least"})
FORMS = ("named", "all_of", "any_of", "not", "field")

NAMED_PREDICATES: dict[str, Predicate] = {}


def register_predicate(name: str) -> Callable[[Predicate], Predicate]:
    """Register a bespoke predicate so registry entries can use ``{named: name}``."""

    def decorator(fn: Predicate) -> Predicate:
        if name in NAMED_PREDICATES:
            raise ValueError(f"predicate {name!r} already registered")
        NAMED_PREDICATES[name] = fn
        return fn

    return decorator


@register_predicate("hr_head_of_department")
def _hr_head_of_department(user: User) -> bool:
    # HR heads approve leave in the HR module, not through self-service.
    if user.department is None:
        return False
    return user.role_level == HOD and user.department == "Human Resources"


# ---- Compiled predicate nodes ----------------------------------------------------------


@dataclass(frozen=True)
class FieldCondition:
    field: str
    operator: str
    value: Any

    def __call__(self, user: User) -> bool:
        actual = getattr(user, self.field)
        op = self.operator
        if op == "equals":
            return actual == self.value
        if op == "not_equals":
            return actual != self.value
        if op == "in":
            return actual in self.value
        if op == "not_in":
            return actual not in self.value
        if op == "contains":
            return self.value in actual
        if op == "at_least":
            return actual >= self.value
        raise ValueError(f"unknown operator {op!r}")


@dataclass(frozen=True)
class AllOf:
    predicates: tuple[Predicate, ...]

    def __call__(self, user: User) -> bool:
        return all(p(user) for p in self.predicates)


@dataclass(frozen=True)
class AnyOf:
    predicates: tuple[Predicate, ...]

    def __call__(self, user: User) -> bool:
        return any(p(user) for p in self.predicates)


@dataclass(frozen=True)
class Not:
    predicate: Predicate

    def __call__(self, user: User) -> bool:
        return not self.predicate(user)


@dataclass(frozen=True)
class Named:
    name: str
    fn: Predicate

    def __call__(self, user: User) -> bool:
        return bool(self.fn(user))


# ---- Compiler --------------------------------------------------------------------------


def compile_predicate(raw: Any, where: str = "hidden") -> Predicate:
    """
    Turn the YAML form of a predicate into a callable.

    Each mapping holds exactly one form: a field condition, a combinator or a
    named reference. Anything else raises RegistryConfigError.
    """

    if not isinstance(raw, dict) or not raw:
        raise RegistryConfigError(f"{where} must be a non-empty mapping")

    forms = [key for key in FORMS if key in raw]
    if len(forms) != 1:
        raise RegistryConfigError(f"{where} must use exactly one of {list(FORMS)}, got {sorted(raw)}")
    form = forms[0]
    if form != "field" and len(raw) != 1:
        extra = sorted(k for k in raw if k != form)
        raise RegistryConfigError(f"{where}: unexpected keys {extra} next to {form!r}")

    if form == "named":
        name = str(raw["named"])
        fn = NAMED_PREDICATES.get(name)
        if fn is None:
            raise RegistryConfigError(f"{where} references unknown named predicate {name!r}")
        return Named(name=name, fn=fn)

    if form in ("all_of", "any_of"):
        children_raw = raw[form]
        if not isinstance(children_raw, list) or not children_raw:
            raise RegistryConfigError(f"{where}.{form} must be a non-empty list")
        children = tuple(compile_predicate(c, f"{where}.{form}[{i}]") for i, c in enumerate(children_raw))
        return AllOf(children) if form == "all_of" else AnyOf(children)

    if form == "not":
        return Not(compile_predicate(raw["not"], f"{where}.not"))

    field_name = raw.get("field")
    if field_name not in FIELDS:
        raise RegistryConfigError(f"{where} has unknown field {field_name!r}; expected one of {sorted(FIELDS)}")

    ops = [k for k in raw if k != "field"]
    if len(ops) != 1 or ops[0] not in OPERATORS:
        raise RegistryConfigError(f"{where} must have exactly one operator from {sorted(OPERATORS)}, got {ops}")
    op = ops[0]
    value = raw[op]

    if op in ("in", "not_in"):
        if not isinstance(value, list):
            raise RegistryConfigError(f"{where}.{op} must be a list")
        value = frozenset(value)
    if op == "contains" and field_name not in ("permissions", "module_access"):
        raise RegistryConfigError(f"{where}: 'contains' only applies to permissions or module_access")
    if op == "at_least" and field_name != "role_level":
        raise RegistryConfigError(f"{where}: 'at_least' only applies to role_level")

    return FieldCondition(field=field_name, operator=op, value=value)
