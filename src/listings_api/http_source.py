from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .models import Record
from .sources import QueryParams, Source

logger = logging.getLogger(__name__)


class HttpSource(Source):
    """
    Source that reads raw payloads from the upstream REST backend over HTTP.

    A fresh httpx.Client is opened per call. Transport errors and non-2xx
    statuses (other than 404 on single-record lookups) propagate as
    httpx.HTTPError.
    """

    kind = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self._base_url, timeout=self._timeout, transport=self._transport)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            logger.warning(
                "Upstream %s returned a non-JSON body (%d bytes)",
                response.request.url, len(response.content),
            )
            return None

    def fetch_list(self, path: str, params: Optional[QueryParams] = None) -> Any:
        with self._client() as client:
            response = client.get(path, params=params or None)
        response.raise_for_status()
        logger.debug("GET %s -> %d", response.request.url, response.status_code)
        return self._json(response)

    def fetch_one(self, path: str, record_id: int, id_field: str) -> Optional[Record]:
        with self._client() as client:
            response = client.get(f"{path.rstrip('/')}/{record_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        body = self._json(response)
        return body if isinstance(body, dict) else None
