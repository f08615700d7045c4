"""Abstract adapter interface for the external content catalogs.

Each catalog (OMDb, Google Books, RAWG, iTunes) gets its own adapter
subclass. An adapter queries its upstream API and maps the native payload
into the common ``CatalogItem`` shape, so the ranking engine never sees a
catalog-specific structure.

Adapters fail fast: any upstream problem surfaces as ``AdapterError`` rather
than an empty list, so the orchestrator can record the failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
from loguru import logger

from unified_search.schemas import CatalogItem, CatalogTag


class AdapterError(Exception):
    """Upstream non-2xx reply, network failure, malformed payload or missing credentials."""


class AdapterTimeout(AdapterError):
    """The adapter did not answer within its catalog deadline."""


class CatalogAdapter(ABC):
    """Base class for all catalog adapters."""

    catalog: CatalogTag

    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this catalog source."""
        ...

    @abstractmethod
    async def search(self, query: str, max_results: int) -> list[CatalogItem]:
        """Return up to *max_results* items for *query*.

        Raises ``AdapterError`` when the upstream cannot be queried.
        """
        ...


class HttpCatalogAdapter(CatalogAdapter):
    """Shared httpx plumbing for the JSON search APIs."""

    USER_AGENT = "unified-search/0.1"

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self.last_error: str = ""
        self.last_status: int | None = None
        self.last_url: str = ""

    async def _get_json(self, client: httpx.AsyncClient, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await client.get(url, params=params)
            self.last_status = response.status_code
            self.last_url = str(response.request.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            body = (exc.response.text or "")[:120].replace("\n", " ")
            self.last_error = f"{self.name()} HTTP {exc.response.status_code}: {body}"
            raise AdapterError(self.last_error) from exc
        except httpx.TimeoutException as exc:
            self.last_error = f"{self.name()} network error: {exc.__class__.__name__}"
            raise AdapterTimeout(self.last_error) from exc
        except httpx.HTTPError as exc:
            self.last_error = f"{self.name()} network error: {exc.__class__.__name__}"
            raise AdapterError(self.last_error) from exc
        except ValueError as exc:
            self.last_error = f"{self.name()} returned a non-JSON payload"
            raise AdapterError(self.last_error) from exc

        if not isinstance(payload, dict):
            self.last_error = f"{self.name()} returned an unexpected payload type"
            raise AdapterError(self.last_error)
        safe_url = _redact_query_params(self.last_url, {"apikey", "key"})
        logger.debug(f"[{self.name()}] status={self.last_status} url={safe_url}")
        return payload

    def _client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": self.USER_AGENT, "Accept": "application/json"}
        return httpx.AsyncClient(timeout=self.timeout, headers=headers)


def year_from_date(value: Any) -> int | None:
    """First four digits of a date-ish string such as ``2019-05-01`` or ``2011–2019``."""
    text = str(value or "").strip()
    if len(text) >= 4 and text[:4].isdigit():
        return int(text[:4])
    return None


def to_float(value: Any) -> float | None:
    try:
        if value is None or value == "":
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _redact_query_params(url: str, keys: set[str]) -> str:
    split = urlsplit(url)
    pairs = parse_qsl(split.query, keep_blank_values=True)
    safe_pairs = [(k, "***" if k in keys else v) for k, v in pairs]
    return urlunsplit((split.scheme, split.netloc, split.path, urlencode(safe_pairs), split.fragment))
