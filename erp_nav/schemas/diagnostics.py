from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from erp_nav.errors import Diagnostic, DiagnosticKind


class DiagnosticOut(BaseModel):
    kind: DiagnosticKind
    message: str
    context: dict[str, Any]

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> DiagnosticOut:
        return cls(kind=diagnostic.kind, message=diagnostic.message, context=dict(diagnostic.context))
