"""Build the static school website from CMS content.

This module provides a headless runner that fetches every page's content
from the CMS, renders all listing and detail pages concurrently over one
shared client (announcement details straight from the loaded listing), and writes them as ``<route>/index.html`` files plus a
``404.html``. It is intended for programmatic invocation and for the CLI.

Usage Examples
--------------
Typical programmatic usage with environment configuration::

    from schoolsite.pipeline.site_builder.runner import run_from_config
    result = run_from_config()
    assert result is True

Explicit configuration::

    from pathlib import Path
    from schoolsite.pipeline.cms_client import CMSConfig
    from schoolsite.pipeline.site_builder.runner import run_from_config

    run_from_config(
        CMSConfig("https://cms.example.org", mode="production"),
        output_dir=Path("public"),
    )

"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from pathlib import Path

import aiohttp
from aiolimiter import AsyncLimiter

from schoolsite.config import DEFAULT_OUTPUT_DIR, NOT_FOUND_HTML
from schoolsite.exceptions import AppError, PageNotFoundError
from schoolsite.pipeline.cms_client import CMSClient, CMSConfig

from .pages import (
    STATIC_PAGES,
    Page,
    build_album_page,
    load_announcements,
    load_gallery_albums,
    render_announcement_page,
)
from .renderer import render_page, write_html_output

logger = logging.getLogger(__name__)


def route_to_path(route: str, output_dir: Path) -> Path:
    """Map a route such as ``/about/`` to ``<output_dir>/about/index.html``.

    Raises
    ------
    ValueError
        If the route would resolve outside ``output_dir``.
    """
    relative = route.strip("/")
    target = (output_dir / relative / "index.html") if relative else output_dir / "index.html"
    root = output_dir.resolve()
    resolved = target.resolve()
    if resolved != root and root not in resolved.parents:
        raise ValueError(f"Route {route!r} escapes the output directory")
    return target


def _build_stats(written: int, not_found: int, failed: int) -> dict[str, int]:
    return {
        "pages_written": written,
        "pages_not_found": not_found,
        "pages_failed": failed,
    }


async def build_site(
    config: CMSConfig,
    output_dir: Path,
    *,
    session: aiohttp.ClientSession | None = None,
) -> dict[str, int]:
    r"""Fetch, render and write every page of the site.

    Parameters
    ----------
    config : CMSConfig
        CMS settings; ``config.mode`` decides whether fetch errors degrade
        to placeholders (production) or propagate (development).
    output_dir : Path
        Directory that receives the generated HTML tree.
    session : aiohttp.ClientSession | None, optional
        Session to reuse; one is opened for the build when omitted.

    Returns
    -------
    dict[str, int]
        ``pages_written``, ``pages_not_found`` and ``pages_failed`` counts.

    Raises
    ------
    CMSFetchError
        In development mode, when the announcement or album listing needed
        to enumerate detail pages cannot be fetched.
    """
    rate_limiter = AsyncLimiter(config.target_rpm, 60)
    semaphore = asyncio.Semaphore(config.max_concurrent_requests)
    written = not_found = failed = 0
    async with CMSClient(
        config, session, rate_limiter=rate_limiter, semaphore=semaphore
    ) as client:
        announcements, albums = await asyncio.gather(
            load_announcements(client), load_gallery_albums(client)
        )
        jobs: list[tuple[str, Awaitable[Page]]] = [
            (builder.__name__, builder(client)) for builder in STATIC_PAGES
        ]
        jobs.extend(
            (f"album:{album.id}", build_album_page(client, album.id))
            for album in albums
            if album.id is not None
        )
        logger.info(
            "Rendering %d pages into %s", len(jobs) + len(announcements), output_dir
        )
        results = await asyncio.gather(
            *(job for _, job in jobs), return_exceptions=True
        )

    outcomes: list[tuple[str, Page | BaseException]] = [
        (label, result) for (label, _), result in zip(jobs, results)
    ]
    outcomes.extend(
        (f"announcement:{a.slug}", render_announcement_page(a)) for a in announcements
    )
    for label, result in outcomes:
        if isinstance(result, PageNotFoundError):
            logger.warning("Skipped %s: %s", label, result)
            not_found += 1
            continue
        if isinstance(result, BaseException):
            logger.error("Failed to build %s", label, exc_info=result)
            failed += 1
            continue
        try:
            target = route_to_path(result.route, output_dir)
        except ValueError:
            logger.error("Refusing to write %s: unsafe route %r", label, result.route)
            failed += 1
            continue
        html = render_page(result.title, result.body, description=result.description)
        if write_html_output(html, target):
            written += 1
        else:
            failed += 1

    write_html_output(render_page("Page not found", NOT_FOUND_HTML), output_dir / "404.html")
    return _build_stats(written, not_found, failed)


def run_from_config(
    config: CMSConfig | None = None,
    output_dir: Path | None = None,
) -> bool:
    """Build the site, returning ``True`` on success and ``False`` on error.

    If ``config`` is ``None`` it is loaded with ``CMSConfig.from_env()``;
    if ``output_dir`` is ``None`` ``DEFAULT_OUTPUT_DIR`` is used. Errors are
    logged, never raised. A build where individual pages failed counts as
    unsuccessful; pages that are simply not found do not.
    """
    output_dir = Path(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR
    try:
        config = config if config is not None else CMSConfig.from_env()
        stats = asyncio.run(build_site(config, output_dir))
    except AppError as err:
        logger.error("Site build aborted: %s", err, extra={"error": err.to_dict()})
        return False
    except Exception:
        logger.exception("Failed to build website")
        return False
    logger.info(
        "Build finished: written=%d not_found=%d failed=%d",
        stats["pages_written"],
        stats["pages_not_found"],
        stats["pages_failed"],
    )
    return stats["pages_failed"] == 0


__all__ = ["build_site", "route_to_path", "run_from_config"]
