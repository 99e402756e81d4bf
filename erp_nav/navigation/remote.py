"""
Remote Module Provider and its sequenced cache.

The backend knows which modules were actually provisioned for a user. It is asked
with ``GET <user-modules url>`` using the user's bearer token and answers:

    {"success": true, "data": [{"code": "HR", "name": "HR Management",
                                "requiredRoleLevel": 300, "permissions": [...]}]}

The answer is a cache, not an authority: it may be stale, empty, or missing.
Any failure makes navigation fall back to the static registry; nothing is retried
automatically.

Fetches can overlap (rapid navigation, manual refresh). Each fetch takes a
sequence number and a completion is applied only when it is newer than the last
applied one, so a slow, older response never overwrites a newer one.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import requests

from erp_nav.errors import DataQualityError, Diagnostics, FetchFailure

logger = logging.getLogger(__name__)


class RemoteModuleRecord(BaseModel):
    """One module provisioned for the user, as reported by the backend."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    code: str
    name: str
    required_role_level: int = Field(default=0, alias="requiredRoleLevel", ge=0)
    permissions: tuple[str, ...] = ()
    icon: str | None = None
    description: str | None = None
    order: int | None = None

    @field_validator("code", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("permissions", mode="before")
    @classmethod
    def _permissions_list(cls, value: Any) -> Any:
        if value is None:
            return ()
        return value


def coerce_remote_record(
    raw: RemoteModuleRecord | Mapping[str, Any] | Any,
    diagnostics: Diagnostics | None = None,
) -> RemoteModuleRecord | None:
    """Return a validated record, or None (reported as a data-quality problem)."""

    if isinstance(raw, RemoteModuleRecord):
        return raw
    if not isinstance(raw, Mapping):
        _report_bad_record(f"record is not a mapping ({type(raw).__name__})", None, diagnostics)
        return None
    try:
        return RemoteModuleRecord.model_validate(dict(raw))
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        _report_bad_record(f"invalid fields {fields}", raw.get("code"), diagnostics)
        return None


def _report_bad_record(reason: str, code: Any, diagnostics: Diagnostics | None) -> None:
    logger.warning("Skipping remote module record: %s code=%r", reason, code)
    if diagnostics is not None:
        diagnostics.report(DataQualityError(f"remote module record skipped: {reason}"), code=code)


def parse_remote_records(
    raw_records: Iterable[Any],
    diagnostics: Diagnostics | None = None,
) -> list[RemoteModuleRecord]:
    records: list[RemoteModuleRecord] = []
    for raw in raw_records:
        record = coerce_remote_record(raw, diagnostics)
        if record is not None:
            records.append(record)
    return records


class RemoteModuleProvider:
    """HTTP client for the backend's "user modules" endpoint."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout_seconds
        self._http = session or requests

    @property
    def url(self) -> str:
        return self._url

    def fetch_user_modules(self, token: str | None) -> list[Any]:
        """
        Return the raw ``data`` list for the authenticated user.

        Raises FetchFailure on network errors, non-2xx responses, bodies that are
        not JSON, ``success`` not true, or ``data`` not being a list. Records are
        returned unvalidated; see ``parse_remote_records``.
        """

        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = self._http.get(self._url, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise FetchFailure(f"user modules request failed: {type(e).__name__}") from e

        if not 200 <= resp.status_code < 300:
            raise FetchFailure(f"user modules returned status={resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise FetchFailure("user modules response is not JSON") from e

        if not isinstance(body, dict) or body.get("success") is not True:
            raise FetchFailure("user modules response not successful")

        data = body.get("data")
        if not isinstance(data, list):
            raise FetchFailure("user modules response has no data list")
        return data


class RemoteModuleCache:
    """
    Most recently completed remote module list for one user session.

    ``records`` is None while nothing usable is known (never fetched, or the latest
    applied fetch failed); the composer then uses the static registry.
    """

    def __init__(self, diagnostics: Diagnostics | None = None) -> None:
        self._diagnostics = diagnostics
        self._lock = threading.Lock()
        self._next_seq = 0
        self._applied_seq = 0
        self._records: tuple[RemoteModuleRecord, ...] | None = None
        self._fetched = False

    @property
    def records(self) -> tuple[RemoteModuleRecord, ...] | None:
        return self._records

    @property
    def has_completed(self) -> bool:
        """True once any fetch has been applied (success or failure)."""
        return self._fetched

    @property
    def applied_sequence(self) -> int:
        return self._applied_seq

    def begin_fetch(self) -> int:
        with self._lock:
            self._next_seq += 1
            return self._next_seq

    def complete(self, seq: int, raw_records: Iterable[Any]) -> bool:
        """Apply a successful response unless a newer one was already applied."""

        records = tuple(parse_remote_records(raw_records, self._diagnostics))
        with self._lock:
            if seq <= self._applied_seq:
                logger.debug("Discarding stale user modules response seq=%s applied=%s", seq, self._applied_seq)
                return False
            self._applied_seq = seq
            self._records = records
            self._fetched = True
        logger.debug("User modules cache updated seq=%s count=%s", seq, len(records))
        return True

    def fail(self, seq: int, error: Exception) -> bool:
        """Record a failed fetch; a newer failure drops the cached list (static fallback)."""

        logger.warning("User modules fetch failed seq=%s error=%s", seq, error)
        if self._diagnostics is not None:
            failure = error if isinstance(error, FetchFailure) else FetchFailure(type(error).__name__)
            self._diagnostics.report(failure, seq=seq)
        with self._lock:
            if seq <= self._applied_seq:
                return False
            self._applied_seq = seq
            self._records = None
            self._fetched = True
        return True

    def invalidate(self) -> None:
        """Forget cached records; outstanding fetches become stale."""
        with self._lock:
            self._applied_seq = self._next_seq
            self._records = None
            self._fetched = False

    def refresh(self, provider: RemoteModuleProvider, token: str | None) -> bool:
        """
        Run one sequenced fetch. Never raises.

        Returns True when the cache now holds the remote list from this fetch.
        """

        seq = self.begin_fetch()
        try:
            raw = provider.fetch_user_modules(token)
        except FetchFailure as e:
            self.fail(seq, e)
            return False
        return self.complete(seq, raw)
