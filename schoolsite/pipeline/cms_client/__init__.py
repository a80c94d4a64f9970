"""The cms_client package is the only code that talks to the Strapi CMS.

It bundles the explicit connection configuration, the asynchronous
read-only client, the Strapi query-string encoder, and the result/policy
types that decide whether a failed fetch degrades to ``{"data": None}`` or
propagates.

Modules exported
----------------
CMSClient
    aiohttp-based GET client with timeout, bearer auth and response cache.
CMSConfig
    Validated settings built once from the environment or keyword arguments.
FetchResult, FetchPolicy
    Result type and per-error-kind policy.
build_query
    Strapi bracket-notation encoder.
"""

from __future__ import annotations

from .client import CMSClient
from .config import CMSConfig
from .query import build_query, with_query
from .result import FetchPolicy, FetchResult, empty_payload

__all__ = [
    "CMSClient",
    "CMSConfig",
    "FetchPolicy",
    "FetchResult",
    "build_query",
    "empty_payload",
    "with_query",
]
