"""
Error taxonomy and the diagnostics side channel.

Runtime failures inside the engine never propagate to callers: they degrade to a
more restrictive result and are reported here. Only ``RegistryConfigError`` is
raised, at load time.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import threading
from typing import Any, Literal


DiagnosticKind = Literal["data_quality", "fetch_failure", "unknown_module", "predicate_error", "resolution_error"]


class NavigationError(Exception):
    """Base class for navigation engine failures."""

    kind: DiagnosticKind = "resolution_error"


class DataQualityError(NavigationError):
    """A remote module record is missing required fields."""

    kind = "data_quality"


class FetchFailure(NavigationError):
    """The remote module provider could not produce a usable response."""

    kind = "fetch_failure"


class UnknownModuleError(NavigationError):
    """A route names a module segment that is not registered."""

    kind = "unknown_module"


class PredicateError(NavigationError):
    """A ``hidden`` predicate raised while being evaluated."""

    kind = "predicate_error"


class RegistryConfigError(ValueError):
    """Raised when the module registry YAML is invalid."""


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    context: tuple[tuple[str, Any], ...] = field(default_factory=tuple)


class Diagnostics:
    """
    Bounded, thread-safe record of non-fatal failures.

    Shared by the composer, the remote cache and the evaluator so that degraded
    results can be inspected without ever surfacing an error to the UI.
    """

    def __init__(self, capacity: int = 200) -> None:
        self._entries: deque[Diagnostic] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def report(self, error: NavigationError | DiagnosticKind, message: str | None = None, **context: Any) -> Diagnostic:
        if isinstance(error, NavigationError):
            kind = error.kind
            text = message or str(error)
        else:
            kind = error
            text = message or kind
        entry = Diagnostic(kind=kind, message=text, context=tuple(sorted(context.items())))
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self, kind: DiagnosticKind | None = None) -> list[Diagnostic]:
        with self._lock:
            items = list(self._entries)
        if kind is None:
            return items
        return [d for d in items if d.kind == kind]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
