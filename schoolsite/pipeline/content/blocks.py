"""Renderer for Strapi "blocks" rich-text content.

Strapi stores rich text as an ordered list of block nodes::

    [{"type": "heading", "level": 2, "children": [{"type": "text", "text": "Hi"}]},
     {"type": "paragraph", "children": [{"type": "text", "text": "Bold", "bold": True}]},
     {"type": "list", "format": "ordered", "children": [
         {"type": "list-item", "children": [{"type": "text", "text": "One"}]}]}]

:func:`iter_blocks` yields one HTML element per block, lazily and in order.
Unknown block types are rendered inside a ``<div>`` so content is never
dropped; ``None`` or non-list input yields nothing.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from html import escape
from typing import Any

# Applied innermost first, so bold+italic+underline renders as
# <u><em><strong>text</strong></em></u>.
_MARKS: tuple[tuple[str, str], ...] = (
    ("bold", "strong"),
    ("italic", "em"),
    ("underline", "u"),
    ("strikethrough", "s"),
    ("code", "code"),
)


def _render_text(node: Mapping[str, Any]) -> str:
    content = escape(str(node.get("text") or ""))
    for flag, tag in _MARKS:
        if node.get(flag):
            content = f"<{tag}>{content}</{tag}>"
    return f"<span>{content}</span>"


def render_inline(children: Any) -> str:
    """Render a list of inline nodes to HTML; non-lists render as ''."""
    if not isinstance(children, list):
        return ""
    parts: list[str] = []
    for child in children:
        if not isinstance(child, Mapping):
            continue
        if child.get("type") == "text":
            parts.append(_render_text(child))
        elif child.get("type") == "link":
            href = escape(str(child.get("url") or "#"), quote=True)
            parts.append(f'<a href="{href}">{render_inline(child.get("children"))}</a>')
        elif isinstance(child.get("children"), list):
            parts.append(f"<span>{render_inline(child['children'])}</span>")
    return "".join(parts)


def _heading_level(block: Mapping[str, Any]) -> int:
    level = block.get("level")
    if isinstance(level, int) and not isinstance(level, bool) and 1 <= level <= 6:
        return level
    return 2


def render_block(block: Mapping[str, Any]) -> str:
    """Render a single block node."""
    block_type = block.get("type")
    children = block.get("children")
    if block_type == "paragraph":
        return f"<p>{render_inline(children)}</p>"
    if block_type == "heading":
        level = _heading_level(block)
        return f"<h{level}>{render_inline(children)}</h{level}>"
    if block_type == "list":
        tag = "ol" if block.get("format") == "ordered" else "ul"
        items = children if isinstance(children, list) else []
        rendered = "".join(
            f"<li>{render_inline(item.get('children'))}</li>"
            for item in items
            if isinstance(item, Mapping)
        )
        return f"<{tag}>{rendered}</{tag}>"
    if block_type == "quote":
        return f"<blockquote>{render_inline(children)}</blockquote>"
    return f"<div>{render_inline(children)}</div>"


def iter_blocks(blocks: Any) -> Iterator[str]:
    """Yield rendered blocks one at a time, preserving order.

    >>> list(iter_blocks([{"type": "paragraph", "children": [{"type": "text", "text": "Hi", "bold": True}]}]))
    ['<p><span><strong>Hi</strong></span></p>']
    >>> list(iter_blocks(None))
    []
    """
    if not isinstance(blocks, list):
        return
    for block in blocks:
        if isinstance(block, Mapping):
            yield render_block(block)


def render_blocks(blocks: Any) -> str:
    """Render a whole block list to one HTML string."""
    return "".join(iter_blocks(blocks))
