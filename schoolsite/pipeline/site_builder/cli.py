"""CLI entrypoint and logging utilities for the site builder.

This module implements the command-line interface for building the static
school website. It is a thin orchestration layer: argument parsing, logging
setup, construction of the one :class:`CMSConfig` for the process, and
dispatch to :func:`~schoolsite.pipeline.site_builder.runner.build_site` or
the announcement search.

Examples
--------
>>> # In shell
>>> python -m schoolsite build --output public --mode production
>>> python -m schoolsite search "open day"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from schoolsite.config import (
    DEFAULT_OUTPUT_DIR,
    LOG_DIR,
    LOG_FILENAME_SITE_BUILDER,
    LOG_FORMAT,
    NO_SEARCH_RESULTS_FORMAT,
    SITE_MODES,
)
from schoolsite.exceptions import AppError
from schoolsite.pipeline.cms_client import CMSClient, CMSConfig

from .pages import announcement_route, load_announcements, search_announcements
from .runner import build_site

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", enable_file: bool = True) -> None:
    r"""Configure logging output for the site builder CLI.

    Sets up a console handler and, optionally, a file handler at
    ``LOG_DIR / LOG_FILENAME_SITE_BUILDER`` using ``LOG_FORMAT``. All existing
    root handlers are replaced. Failure to create the log file (read-only
    checkout, missing permissions) is suppressed so the build still runs.

    Parameters
    ----------
    level : str, optional
        Logging level name, e.g. "DEBUG" or "INFO". Defaults to "INFO".
    enable_file : bool, optional
        Whether to also log to the builder log file. Defaults to True.
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0, logging.FileHandler(LOG_DIR / LOG_FILENAME_SITE_BUILDER, mode="a")
            )
        except OSError:
            pass
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def log_build_summary(stats: dict[str, int], output_dir: Path) -> None:
    """Log page counts for a finished build and the number of files on disk."""
    logger.info(
        "Build summary: written=%d not_found=%d failed=%d",
        int(stats.get("pages_written", 0)),
        int(stats.get("pages_not_found", 0)),
        int(stats.get("pages_failed", 0)),
    )
    if output_dir.exists():
        html_files = list(output_dir.rglob("*.html"))
        logger.info("Site output: %d HTML files in %s", len(html_files), output_dir)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns
    -------
    argparse.Namespace
        ``command`` plus ``output``/``mode`` for ``build`` or ``query`` for
        ``search``; ``log_level`` for both.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level", type=str, default=os.environ.get("LOG_LEVEL", "INFO")
    )
    common.add_argument("--mode", choices=SITE_MODES, default=None)
    parser = argparse.ArgumentParser(
        prog="schoolsite", description="Build the school website from CMS content."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    build = sub.add_parser(
        "build", parents=[common], help="Render every page to static HTML."
    )
    build.add_argument("-o", "--output", type=Path, default=DEFAULT_OUTPUT_DIR)
    search = sub.add_parser(
        "search", parents=[common], help="Search published announcements."
    )
    search.add_argument("query", type=str)
    return parser.parse_args(argv)


async def _search(config: CMSConfig, query: str) -> list[str]:
    async with CMSClient(config) as client:
        announcements = await load_announcements(client)
    return [
        f"{a.title or a.slug}  {announcement_route(a)}"
        for a in search_announcements(announcements, query)
    ]


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI; returns a process exit code."""
    args = parse_arguments(argv)
    configure_logging(args.log_level, enable_file=not os.environ.get("DISABLE_FILE_LOGS"))
    try:
        config = CMSConfig.from_env(mode=args.mode)
    except AppError:
        logger.exception("Configuration error while loading CMS settings")
        return 2
    logger.info("Using %r", config)

    try:
        if args.command == "build":
            stats = asyncio.run(build_site(config, args.output))
            log_build_summary(stats, args.output)
            return 0 if stats["pages_failed"] == 0 else 1
        lines = asyncio.run(_search(config, args.query))
    except AppError:
        logger.exception("Command %s failed", args.command)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    if not lines:
        print(NO_SEARCH_RESULTS_FORMAT.format(query=args.query))
    for line in lines:
        print(line)
    return 0


__all__ = ["configure_logging", "log_build_summary", "main", "parse_arguments"]
