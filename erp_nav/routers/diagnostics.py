from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from erp_nav.errors import DiagnosticKind, Diagnostics
from erp_nav.schemas.diagnostics import DiagnosticOut
from erp_nav.security.dependencies import get_current_user, get_diagnostics
from erp_nav.user import User

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.get("", response_model=list[DiagnosticOut])
def list_diagnostics(
    kind: DiagnosticKind | None = Query(default=None),
    user: User = Depends(get_current_user),
    diagnostics: Diagnostics = Depends(get_diagnostics),
) -> list[DiagnosticOut]:
    """Recent degraded-resolution reports, newest last. Super administrators only."""
    if not user.is_super:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return [DiagnosticOut.from_diagnostic(d) for d in diagnostics.entries(kind)]
