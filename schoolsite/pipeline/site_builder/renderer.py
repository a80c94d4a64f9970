"""HTML rendering utilities for the static school site.

This module holds the low-level helpers every page shares: escaping and
small element builders, rich-text rendering (Strapi block lists through
:mod:`schoolsite.pipeline.content.blocks`, markdown strings through
``markdown2``), date formatting, HTML cleanup, wrapping a page body in the
site template, and writing pages to disk.

System Boundaries
-----------------
- Accepts only already normalized entities and strings; knows nothing about
  the CMS or its response shapes.
- The page shell comes from ``PAGE_TEMPLATE_PATH`` in ``schoolsite.config``.
- Rendering helpers never raise on missing data; they return ``""``.

Example
-------
>>> from schoolsite.pipeline.site_builder import renderer
>>> renderer.rich_text_html("**Hi**")
'<p><strong>Hi</strong></p>'
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from html import escape
from pathlib import Path
from typing import Any

import markdown2

from schoolsite.config import PAGE_TEMPLATE_PATH, SITE_NAME
from schoolsite.pipeline.content.blocks import render_blocks

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

NAV_LINKS: list[tuple[str, str]] = [
    ("/about/", "About"),
    ("/admissions/", "Admissions"),
    ("/academics/", "Academics"),
    ("/departments/", "Departments"),
    ("/staff/", "Staff"),
    ("/clubs/", "Clubs"),
    ("/gallery/", "Gallery"),
    ("/announcements/", "Announcements"),
    ("/downloads/", "Downloads"),
    ("/search/", "Search"),
]


def text(value: Any) -> str:
    """Escape a scalar for HTML; None renders as ''."""
    return "" if value is None else escape(str(value))


def attr(value: Any) -> str:
    return "" if value is None else escape(str(value), quote=True)


def placeholder(message: str) -> str:
    """Render the 'no content' notice shown instead of an empty section."""
    return f'<p class="placeholder">{text(message)}</p>'


def image(url: str | None, alt: str | None) -> str:
    if not url:
        return ""
    return f'<img src="{attr(url)}" alt="{attr(alt or "")}">'


def link(href: str, label: Any) -> str:
    return f'<a href="{attr(href)}">{text(label)}</a>'


def rich_text_html(value: Any) -> str:
    r"""Render a rich-text field to HTML.

    Parameters
    ----------
    value : Any
        A Strapi block list, a markdown string, or anything else.

    Returns
    -------
    str
        Rendered HTML; ``""`` for empty or unsupported values.

    Notes
    -----
    Markdown is converted with ``markdown2`` (``tables`` and
    ``fenced-code-blocks`` extras) and then passed through
    :func:`clean_html_output`.
    """
    if isinstance(value, list):
        return render_blocks(value)
    if isinstance(value, str) and value.strip():
        html = markdown2.markdown(value, extras=["tables", "fenced-code-blocks"])
        return clean_html_output(str(html))
    return ""


def format_date(value: str | None) -> str:
    """Format an ISO date as 'Month D, YYYY'; unparsable values pass through.

    >>> format_date("2024-03-05")
    'March 5, 2024'
    >>> format_date("2024-03-05T10:00:00.000Z")
    'March 5, 2024'
    """
    if not value:
        return ""
    raw = value.strip()
    parsed: date | None = None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        try:
            parsed = date.fromisoformat(raw[:10])
        except ValueError:
            return raw
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def clean_html_output(html_content: str) -> str:
    r"""Perform lightweight normalization and cleaning of generated HTML strings.

    Removes empty paragraphs, redundant breaks and whitespace between tags.

    Raises
    ------
    TypeError
        If input is not str.

    Examples
    --------
    >>> clean_html_output("<p></p><h1>Hi</h1><p>&nbsp;</p><br><br>")
    '<h1>Hi</h1><br>'
    """
    if not isinstance(html_content, str):
        raise TypeError("Input must be a string.")
    html_content = re.sub(r"<p>\s*</p>", "", html_content)
    html_content = re.sub(r"<p>&nbsp;</p>", "", html_content)
    html_content = re.sub(r"<p><br\s*/?>\s*</p>", "", html_content)
    html_content = re.sub(r"(<br\s*/?>\s*){2,}", "<br>", html_content)
    html_content = re.sub(r">\s+<", "><", html_content)
    return html_content.strip()


def render_nav() -> str:
    return "".join(link(href, label) for href, label in NAV_LINKS)


def render_page(
    title: str,
    body: str,
    *,
    description: str = "",
    template_path: Path = PAGE_TEMPLATE_PATH,
) -> str:
    """Wrap a page body in the site template.

    Raises
    ------
    OSError
        If the template file cannot be read.
    """
    with template_path.open("r", encoding="utf-8") as fh:
        tpl = fh.read()
    replacements = {
        "page_title": text(title),
        "page_description": attr(description or title),
        "site_name": text(SITE_NAME),
        "nav": render_nav(),
        "body": body,
    }
    return _PLACEHOLDER_RE.sub(
        lambda m: replacements.get(m.group(1), m.group(0)), tpl
    )


def write_html_output(html_content: str, output_file: Path) -> bool:
    """Write HTML to disk, creating parent directories; False on failure."""
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(html_content, encoding="utf-8")
    except OSError:
        logger.exception("Failed to write HTML output to %s", output_file)
        return False
    return True
