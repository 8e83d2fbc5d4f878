from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, Mapping, Optional

from .models import Record
from .settings import get_settings

QueryParams = Dict[str, Any]


# PUBLIC_INTERFACE
class Source(ABC):
    """Abstract contract for whatever produces raw upstream payloads."""

    kind: str = "abstract"

    @abstractmethod
    def fetch_list(self, path: str, params: Optional[QueryParams] = None) -> Any:
        """
        Return the raw list payload for `path`.

        The payload is passed through untouched: a bare array, a
        `{data, total, limit, offset}` envelope, or anything else the
        backend happened to send.
        """

    @abstractmethod
    def fetch_one(self, path: str, record_id: int, id_field: str) -> Optional[Record]:
        """Return a single record, or None if the backend does not know it."""


class InMemorySource(Source):
    """
    Thread-safe in-memory source suitable for testing and default runtime.

    Payloads are registered per upstream path and returned as given, so
    tests can reproduce any shape the real backend produces. Query
    parameters are recorded but not applied.
    """

    kind = "memory"

    def __init__(self, payloads: Optional[Mapping[str, Any]] = None) -> None:
        self._lock = RLock()
        self._payloads: Dict[str, Any] = dict(payloads or {})
        self.calls: list[tuple[str, QueryParams]] = []

    def set_payload(self, path: str, payload: Any) -> None:
        with self._lock:
            self._payloads[path] = payload

    def fetch_list(self, path: str, params: Optional[QueryParams] = None) -> Any:
        with self._lock:
            self.calls.append((path, dict(params or {})))
            # Return copies to avoid external mutation
            return copy.deepcopy(self._payloads.get(path, []))

    def fetch_one(self, path: str, record_id: int, id_field: str) -> Optional[Record]:
        with self._lock:
            self.calls.append((f"{path}/{record_id}", {}))
            payload = self._payloads.get(path, [])
            records = payload.get("data", []) if isinstance(payload, Mapping) else payload
            if not isinstance(records, list):
                return None
            for record in records:
                if isinstance(record, Mapping) and record.get(id_field) == record_id:
                    return copy.deepcopy(dict(record))
            return None


# PUBLIC_INTERFACE
def get_source() -> Source:
    """
    Factory to return the configured source based on settings.
    - memory: InMemorySource (empty unless populated)
    - http: HttpSource against UPSTREAM_BASE_URL
    """
    settings = get_settings()
    if settings.upstream_backend == "http":
        from .http_source import HttpSource

        return HttpSource(settings.upstream_base_url, timeout=settings.upstream_timeout)
    return InMemorySource()
