"""
Base client for all external data source clients.

Provides: session lifecycle, query-parameter normalization, structured
logging, and fail-fast error reporting. Every request is a single attempt;
there is no retry, rate limiting or caching.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from pydantic import BaseModel

from trial_scout.config import get_settings

logger = logging.getLogger("trial_scout.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """HTTP settings shared by every client."""

    timeout_seconds: float | None = None  # None → wait indefinitely

    @classmethod
    def from_settings(cls) -> "ClientConfig":
        return cls(timeout_seconds=get_settings().request_timeout)


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "clinical_trials", "openfda"
    method: str  # e.g. "studies", "drug_labeling"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        self.source = source
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{source}] {message}")


# ---------------------------------------------------------------------------
# Parameter normalization
# ---------------------------------------------------------------------------


def normalize_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Flatten query parameters into the strings a query string can carry.

    Lists are comma-joined (``["A", "B"]`` → ``"A,B"``), booleans become
    ``"true"``/``"false"`` and ``None`` values are dropped.
    """
    normalized: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized[key] = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            normalized[key] = "true" if value else "false"
        else:
            normalized[key] = str(value)
    return normalized


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for the ClinicalTrials.gov, openFDA and similarity clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `_rest_get()` or `_post_json()`.
    """

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig.from_settings()
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'clinical_trials'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request --------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Any:
        """
        Make a single HTTP request and return the decoded JSON body.

        Parameters
        ----------
        method : str
            HTTP method, "GET" or "POST".
        url : str
            Full URL.
        params : dict, optional
            Query string parameters, normalized with `normalize_params`.
        json_body : dict, optional
            JSON body (for POST).
        headers : dict, optional
            Additional HTTP headers.
        context : RequestContext, optional
            Logging context.

        Raises
        ------
        DataSourceError
            On any non-2xx status (message carries the code and body text)
            or on a connection failure.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        query = normalize_params(params)
        start = time.monotonic()

        session = await self._get_session()
        logger.info("Request [%s.%s] url=%s", ctx.source, ctx.method, url)

        try:
            if method.upper() == "GET":
                resp = await session.get(url, params=query, headers=headers)
            else:
                resp = await session.post(
                    url, json=json_body, params=query, headers=headers
                )

            if not 200 <= resp.status < 300:
                body = await resp.text()
                logger.warning(
                    "HTTP %d from %s.%s: %s",
                    resp.status,
                    ctx.source,
                    ctx.method,
                    body[:200],
                )
                raise DataSourceError(
                    ctx.source,
                    f"HTTP {resp.status}: {body}",
                    status_code=resp.status,
                    body=body,
                )

            data = await resp.json()

        except aiohttp.ClientError as e:
            logger.warning(
                "Connection error [%s.%s]: %s", ctx.source, ctx.method, e
            )
            raise DataSourceError(ctx.source, f"Connection error: {e}") from e
        except asyncio.TimeoutError as e:
            elapsed = time.monotonic() - start
            logger.warning(
                "Timeout [%s.%s] after %.1fs", ctx.source, ctx.method, elapsed
            )
            raise DataSourceError(
                ctx.source, f"Request timed out after {elapsed:.1f}s"
            ) from e

        logger.info(
            "Success [%s.%s] elapsed=%.2fs",
            ctx.source,
            ctx.method,
            time.monotonic() - start,
        )
        return data

    # -- Convenience methods for subclasses ----------------------------------

    async def _rest_get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        """Convenience wrapper for REST GET requests."""
        return await self._request("GET", url, params=params, context=context)

    async def _post_json(
        self,
        url: str,
        body: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Any:
        """Convenience wrapper for JSON POST requests."""
        return await self._request(
            "POST",
            url,
            json_body=body,
            headers={"Content-Type": "application/json", **(headers or {})},
            context=context,
        )
