from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from erp_nav.navigation.routes import normalize_module_code
from erp_nav.navigation.session import AccessDecision, NavigationSession, NavigationSessionStore
from erp_nav.schemas.navigation import (
    AccessOut,
    ModuleOut,
    NavigateIn,
    NavigateOut,
    NavigationOut,
    module_out,
    navigate_out,
    navigation_out,
)
from erp_nav.security.dependencies import get_current_user, get_navigation_session, get_session_store
from erp_nav.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("", response_model=NavigationOut)
def get_navigation(session: NavigationSession = Depends(get_navigation_session)) -> NavigationOut:
    session.ensure_modules_loaded()
    return navigation_out(session.sections(), session.uses_remote_source())


@router.post("/navigate", response_model=NavigateOut)
def navigate(body: NavigateIn, session: NavigationSession = Depends(get_navigation_session)) -> NavigateOut:
    session.ensure_modules_loaded()
    snapshot = session.navigate(body.path)
    return navigate_out(body.path, snapshot, session.presentation)


@router.post("/refresh", response_model=NavigationOut)
def refresh(session: NavigationSession = Depends(get_navigation_session)) -> NavigationOut:
    remote_source = session.refresh_modules()
    logger.info("Remote modules refreshed user_id=%s remote_source=%s", session.user.user_id, remote_source)
    return navigation_out(session.sections(), remote_source)


@router.get("/access", response_model=AccessOut)
def check_access(
    path: str = Query(min_length=1),
    session: NavigationSession = Depends(get_navigation_session),
) -> AccessOut:
    decision = session.check_access(path)
    if decision is AccessDecision.DENIED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access Denied")
    return AccessOut(path=path, decision=decision)


@router.get("/modules/{key}", response_model=ModuleOut)
def get_module(
    key: str,
    session: NavigationSession = Depends(get_navigation_session),
    store: NavigationSessionStore = Depends(get_session_store),
) -> ModuleOut:
    module = store.composer.module_descriptor(session.user, normalize_module_code(key))
    if module is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    return module_out(module, session.presentation)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    user: User = Depends(get_current_user),
    store: NavigationSessionStore = Depends(get_session_store),
) -> None:
    """Forget the cached navigation session; the next request starts a fresh one."""
    if store.drop(user.user_id):
        logger.info("Navigation session dropped user_id=%s", user.user_id)
