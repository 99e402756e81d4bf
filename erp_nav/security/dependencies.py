from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from erp_nav.db.session import get_db
from erp_nav.errors import Diagnostics
from erp_nav.navigation.session import NavigationSession, NavigationSessionStore
from erp_nav.security.auth import extract_bearer_token, load_user, to_user_snapshot, user_id_from_token
from erp_nav.user import User


def _app_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Did app startup run?")
    return value


def get_session_store(request: Request) -> NavigationSessionStore:
    return _app_state(request, "session_store")


def get_diagnostics(request: Request) -> Diagnostics:
    return _app_state(request, "diagnostics")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Authenticate the request and return the user snapshot.

    The raw token is kept on ``request.state.token`` so it can be forwarded to the
    remote module provider.
    """

    token = extract_bearer_token(request)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = to_user_snapshot(load_user(db, user_id_from_token(token)))
    request.state.token = token
    request.state.user = user
    return user


def get_navigation_session(
    request: Request,
    user: User = Depends(get_current_user),
    store: NavigationSessionStore = Depends(get_session_store),
) -> NavigationSession:
    return store.get(user, getattr(request.state, "token", None))
