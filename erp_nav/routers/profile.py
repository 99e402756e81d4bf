from __future__ import annotations

from fastapi import APIRouter, Depends

from erp_nav.schemas.security import UserOut
from erp_nav.security.dependencies import get_current_user
from erp_nav.user import User

router = APIRouter(tags=["profile"])


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.from_user(user)
