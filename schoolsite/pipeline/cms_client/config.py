"""Configuration and environment loader for the CMS client.

This module provides CMSConfig, the explicit configuration struct for all
CMS access in the site build pipeline. It is constructed once at process
start and passed to :class:`~schoolsite.pipeline.cms_client.client.CMSClient`;
no other module reads the process environment.

Role in Architecture
--------------------
- Forms the boundary between the process environment (or a project ``.env``)
  and the pipeline's typed runtime config.
- Provides a single source of truth for the CMS base URL, bearer token,
  request timeout, revalidation window, site mode and fetch throttling.
- No client or rendering logic: only loading, structuring and validation.

Examples
--------
>>> from schoolsite.pipeline.cms_client.config import CMSConfig
>>> cfg = CMSConfig(base_url="https://cms.example.org", api_token="t")
>>> cfg.is_production
True
>>> cfg.api_url("/announcements")
'https://cms.example.org/api/announcements'
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv

import schoolsite.config as _project_config
from schoolsite.config import (
    CMS_API_PREFIX,
    DEFAULT_CMS_URL,
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_REVALIDATE_SECONDS,
    DEFAULT_TARGET_RPM,
    SITE_MODE_PRODUCTION,
    SITE_MODES,
)
from schoolsite.exceptions import ConfigurationError


class CMSConfig:
    r"""Validated connection settings for the Strapi CMS.

    Attributes
    ----------
    base_url : str
        Base URL of the CMS without a trailing slash; also the prefix for
        relative media paths.
    api_token : str | None
        Optional bearer token sent as ``Authorization: Bearer <token>``.
    mode : str
        ``"production"`` or ``"development"``. Production substitutes the
        ``{"data": None}`` sentinel for failed fetches and caches successful
        responses; development propagates failures and never caches.
    request_timeout : float
        Total timeout (seconds) for a single request.
    revalidate_seconds : float
        Cache freshness window for successful responses in production.
    max_concurrent_requests : int
        Upper bound on in-flight CMS requests during a build.
    target_rpm : int
        Request-per-minute ceiling applied by the build runner.

    Notes
    -----
    Instantiate once at process start. No runtime mutation is intended.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_CMS_URL,
        api_token: str | None = None,
        *,
        mode: str = SITE_MODE_PRODUCTION,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        revalidate_seconds: float = DEFAULT_REVALIDATE_SECONDS,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
        target_rpm: int = DEFAULT_TARGET_RPM,
    ) -> None:
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "CMS base URL must start with http:// or https://",
                context={"base_url": base_url},
            )
        mode = (mode or "").strip().lower()
        if mode not in SITE_MODES:
            raise ConfigurationError(
                f"Unknown site mode '{mode}'", context={"allowed": list(SITE_MODES)}
            )
        if request_timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                context={"request_timeout": request_timeout},
            )
        if revalidate_seconds < 0:
            raise ConfigurationError(
                "Revalidation window cannot be negative",
                context={"revalidate_seconds": revalidate_seconds},
            )
        if max_concurrent_requests < 1 or target_rpm < 1:
            raise ConfigurationError(
                "Concurrency and rate limits must be at least 1",
                context={
                    "max_concurrent_requests": max_concurrent_requests,
                    "target_rpm": target_rpm,
                },
            )
        self.base_url: str = base_url
        self.api_token: str | None = api_token or None
        self.mode: str = mode
        self.request_timeout: float = float(request_timeout)
        self.revalidate_seconds: float = float(revalidate_seconds)
        self.max_concurrent_requests: int = int(max_concurrent_requests)
        self.target_rpm: int = int(target_rpm)

    @property
    def is_production(self) -> bool:
        """Return True when running as a production build."""
        return self.mode == SITE_MODE_PRODUCTION

    @property
    def cache_ttl(self) -> float:
        """Return the effective cache TTL (zero disables caching)."""
        return self.revalidate_seconds if self.is_production else 0.0

    def api_url(self, path: str) -> str:
        """Return the absolute REST URL for an API path such as ``/announcements``."""
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{CMS_API_PREFIX}{path}"

    def __repr__(self) -> str:
        token = "set" if self.api_token else "unset"
        return (
            f"CMSConfig(base_url={self.base_url!r}, mode={self.mode!r}, "
            f"token={token}, timeout={self.request_timeout})"
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        mode: str | None = None,
    ) -> CMSConfig:
        r"""Build a CMSConfig from environment variables and the project ``.env``.

        Parameters
        ----------
        environ : Mapping[str, str] | None, optional
            Mapping to read instead of ``os.environ``. When omitted the
            project ``.env`` (if present) is loaded first.
        mode : str | None, optional
            Overrides ``SITE_ENV`` (used by the CLI ``--mode`` flag).

        Returns
        -------
        CMSConfig
            The validated configuration.

        Raises
        ------
        ConfigurationError
            If any value is missing, malformed or out of range.

        Examples
        --------
        >>> cfg = CMSConfig.from_env({"STRAPI_URL": "http://cms:1337", "SITE_ENV": "development"})
        >>> cfg.is_production
        False
        """
        if environ is None:
            env_path = Path(_project_config.PROJECT_ROOT) / ".env"
            if env_path.exists():
                # The project file is authoritative during startup so local
                # builds and CI see the same settings.
                load_dotenv(env_path, override=True)
            environ = os.environ
        base_url = (
            environ.get("STRAPI_URL")
            or environ.get("NEXT_PUBLIC_STRAPI_URL")
            or DEFAULT_CMS_URL
        )
        try:
            return cls(
                base_url,
                environ.get("STRAPI_API_TOKEN"),
                mode=mode or environ.get("SITE_ENV", SITE_MODE_PRODUCTION),
                request_timeout=float(
                    environ.get("CMS_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
                ),
                revalidate_seconds=float(
                    environ.get("CMS_REVALIDATE_SECONDS", DEFAULT_REVALIDATE_SECONDS)
                ),
                max_concurrent_requests=int(
                    environ.get(
                        "MAX_CONCURRENT_REQUESTS", DEFAULT_MAX_CONCURRENT_REQUESTS
                    )
                ),
                target_rpm=int(environ.get("TARGET_RPM", DEFAULT_TARGET_RPM)),
            )
        except ValueError as err:
            raise ConfigurationError(
                f"Invalid numeric CMS setting: {err}"
            ) from err
