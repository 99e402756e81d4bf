from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from erp_nav.models.security import User as UserRecord
from erp_nav.roles import resolve_role_level
from erp_nav.user import User

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request) -> str | None:
    """
    Return the bearer token, or None when the header is absent.

    - Input: `Authorization: Bearer <token>`
    - A malformed header is a 400, not an anonymous request.
    """

    raw = request.headers.get(AUTHORIZATION_HEADER)
    if not raw:
        logger.info("Missing Authorization header path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{BEARER_PREFIX} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Expected '{BEARER_PREFIX} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {AUTHORIZATION_HEADER}. Missing token after '{BEARER_PREFIX}'.",
        )
    return token


def user_id_from_token(token: str) -> int:
    """Demo auth: the bearer token is the user id."""
    try:
        return int(token)
    except ValueError as exc:
        logger.warning("Bearer token not an int (demo expects user_id)")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid bearer token for demo (expected integer user id).",
        ) from exc


def load_user(db: Session, user_id: int) -> UserRecord:
    user = db.execute(
        select(UserRecord)
        .where(UserRecord.id == user_id)
        .options(
            selectinload(UserRecord.department),
            selectinload(UserRecord.role),
            selectinload(UserRecord.permissions),
            selectinload(UserRecord.modules),
        )
    ).scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return user


def to_user_snapshot(record: UserRecord) -> User:
    """Immutable engine view of a stored user."""

    role_name = record.role.name if record.role is not None else None
    role_level = record.role.level if record.role is not None else None
    return User(
        role_level=resolve_role_level(role_name, role_level),
        department=record.department.name if record.department is not None else None,
        permissions=frozenset(p.name for p in record.permissions),
        module_access=frozenset(m.code for m in record.modules),
        user_id=record.id,
        username=record.username,
        role_name=role_name,
    )
