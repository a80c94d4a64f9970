"""Site builder pipeline package.

Exposes the page components, HTML rendering helpers, hero slideshow state
and the build runner that together turn CMS content into a static website.
All concrete logic lives in the submodules:

- ``pages``: one ``build_*`` coroutine per route.
- ``renderer``: escaping, rich text, dates, page template, file output.
- ``slideshow``: hero slideshow index/timer state.
- ``runner``: concurrent whole-site build and ``run_from_config``.
- ``cli``: argument parsing and logging setup.
"""

from .pages import (
    Page,
    build_album_page,
    build_announcement_page,
    build_search_page,
    search_announcements,
)
from .renderer import clean_html_output, render_page, rich_text_html, write_html_output
from .runner import build_site, run_from_config
from .slideshow import Slideshow

__all__ = [
    "Page",
    "Slideshow",
    "build_album_page",
    "build_announcement_page",
    "build_search_page",
    "build_site",
    "clean_html_output",
    "render_page",
    "rich_text_html",
    "run_from_config",
    "search_announcements",
    "write_html_output",
]
