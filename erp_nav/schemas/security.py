from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from erp_nav.roles import role_title
from erp_nav.user import User


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int | str | None
    username: str | None
    role_name: str | None
    role_level: int
    role_title: str
    is_super: bool
    department: str | None
    permissions: list[str]
    module_access: list[str]

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            role_title=role_title(user.role_level),
            is_super=user.is_super,
            **user.to_dict(),
        )
