"""cms_client.client module.

This module defines the `CMSClient` class, the asynchronous networking
boundary for every read from the Strapi CMS. Its focus is narrow: perform a
GET against ``<base_url>/api<path>``, attach the bearer token when one is
configured, bound the request by a timeout, and hand back the parsed JSON.

The client never raises for transport problems inside :meth:`CMSClient.fetch`:
network failures, timeouts, HTTP error statuses and undecodable bodies all
come back as a :class:`~schoolsite.pipeline.cms_client.result.FetchResult`
carrying a :class:`~schoolsite.exceptions.CMSFetchError`. :meth:`CMSClient.get`
then applies the configured :class:`FetchPolicy`, which in production
substitutes the ``{"data": None}`` sentinel (a static build must survive a
cold-starting CMS) and in development re-raises the error.

Successful responses are cached per URL for the revalidation window in
production; development builds always fetch fresh. Every caller receives its
own copy of a cached payload. There are no retries.

Examples
--------
>>> import asyncio
>>> from schoolsite.pipeline.cms_client import CMSClient, CMSConfig
>>> cfg = CMSConfig("http://localhost:1337", mode="production")
>>> async def main():
...     async with CMSClient(cfg) as client:
...         payload = await client.get("/announcements", {"populate": "*"})
...         print(payload.get("data") is None or isinstance(payload["data"], list))
>>> # asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp
from aiolimiter import AsyncLimiter

from schoolsite.exceptions import CMSFetchError

from .config import CMSConfig
from .query import with_query
from .result import FetchPolicy, FetchResult

logger = logging.getLogger(__name__)


class CMSClient:
    r"""Asynchronous read-only client for the Strapi REST API.

    Parameters
    ----------
    config : CMSConfig
        Connection settings (base URL, token, timeout, mode, cache window).
    session : aiohttp.ClientSession | None, optional
        Session to reuse. When omitted one is opened by ``async with`` and
        closed on exit. Sessions passed in are never closed by the client.
    policy : FetchPolicy | None, optional
        Error policy; defaults to ``FetchPolicy.for_mode(config.is_production)``.
    rate_limiter : AsyncLimiter | None, optional
        Optional request-rate throttle shared by all fetches.
    semaphore : asyncio.Semaphore | None, optional
        Optional bound on in-flight requests.
    clock : Callable[[], float], optional
        Monotonic clock used for cache expiry.

    Notes
    -----
    The cache is a plain dict owned by one event loop; no locking is needed.
    """

    def __init__(
        self,
        config: CMSConfig,
        session: aiohttp.ClientSession | None = None,
        *,
        policy: FetchPolicy | None = None,
        rate_limiter: AsyncLimiter | None = None,
        semaphore: asyncio.Semaphore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.session = session
        self.policy = policy or FetchPolicy.for_mode(config.is_production)
        self.rate_limiter = rate_limiter
        self.semaphore = semaphore
        self._clock = clock
        self._owns_session = False
        self._cache: dict[str, tuple[float, dict[str, Any]]] = {}

    async def __aenter__(self) -> CMSClient:
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this client opened it."""
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None
            self._owns_session = False

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    def _cached(self, url: str) -> dict[str, Any] | None:
        entry = self._cache.get(url)
        if entry is None:
            return None
        expires_at, payload = entry
        if self._clock() >= expires_at:
            del self._cache[url]
            return None
        return copy.deepcopy(payload)

    def _store(self, url: str, payload: dict[str, Any]) -> None:
        ttl = self.config.cache_ttl
        if ttl > 0:
            self._cache[url] = (self._clock() + ttl, copy.deepcopy(payload))

    def _failure(
        self, endpoint: str, kind: str, message: str, status: int | None = None
    ) -> FetchResult:
        error = CMSFetchError(
            kind,
            message,
            endpoint=endpoint,
            status=status,
            context={"has_token": bool(self.config.api_token)},
        )
        logger.warning(
            "CMS fetch failed: %s %s (kind=%s status=%s token=%s)",
            endpoint,
            message,
            kind,
            status,
            "set" if self.config.api_token else "unset",
        )
        return FetchResult.failure(endpoint, error)

    async def fetch(
        self, path: str, params: str | Mapping[str, Any] | None = None
    ) -> FetchResult:
        r"""Perform one GET request and describe its outcome.

        Parameters
        ----------
        path : str
            API path relative to ``/api``, e.g. ``"/announcements"``.
        params : str | Mapping[str, Any] | None, optional
            Query string, or keyword arguments for
            :func:`~schoolsite.pipeline.cms_client.query.build_query`.

        Returns
        -------
        FetchResult
            Parsed payload on success; otherwise a result carrying a
            ``CMSFetchError`` of kind ``network``, ``timeout``, ``http`` or
            ``decode``.

        Raises
        ------
        RuntimeError
            If no session is available (use ``async with`` or inject one).
        """
        endpoint = with_query(path, params)
        url = self.config.api_url(endpoint)
        cached = self._cached(url)
        if cached is not None:
            logger.debug("CMS cache hit: %s", endpoint)
            return FetchResult.success(endpoint, cached, from_cache=True)
        session = self.session
        if session is None:
            raise RuntimeError("CMSClient has no session; use 'async with CMSClient(...)'")

        try:
            if self.rate_limiter is not None:
                await self.rate_limiter.acquire()
            if self.semaphore is not None:
                async with self.semaphore:
                    status, body = await self._get(session, url)
            else:
                status, body = await self._get(session, url)
        except asyncio.TimeoutError:
            return self._failure(
                endpoint,
                "timeout",
                f"no response within {self.config.request_timeout:g}s",
            )
        except aiohttp.ClientError as err:
            return self._failure(endpoint, "network", str(err) or type(err).__name__)
        except OSError as err:
            return self._failure(endpoint, "network", str(err) or type(err).__name__)

        if status >= 400:
            return self._failure(endpoint, "http", f"HTTP {status}", status=status)
        try:
            text = body.decode("utf-8")
            data = json.loads(text) if text.strip() else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            return self._failure(
                endpoint, "decode", "response body is not valid JSON", status=status
            )
        payload = data if isinstance(data, dict) else {"data": data}
        self._store(url, payload)
        return FetchResult.success(endpoint, payload)

    async def _get(
        self, session: aiohttp.ClientSession, url: str
    ) -> tuple[int, bytes]:
        async with session.get(
            url,
            headers=self._headers(),
            timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
        ) as response:
            return response.status, await response.read()

    async def get(
        self, path: str, params: str | Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Fetch and apply the error policy.

        Returns the payload, or ``{"data": None}`` when the policy substitutes
        the error. Raises ``CMSFetchError`` when the policy propagates it.
        """
        result = await self.fetch(path, params)
        payload = self.policy.resolve(result)
        if not result.ok:
            logger.info("Substituted empty payload for %s", result.endpoint)
        return payload
