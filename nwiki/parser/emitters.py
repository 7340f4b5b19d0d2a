#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
HTML emission helpers.

Pure functions building elements from already-processed content.  When a
``protect`` callable is passed, every attribute value is escaped and then
swapped for a placeholder, so no later rule pass can see it.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Callable, Iterable, Mapping, Optional


Protector = Callable[[str], str]

_VOID_TAGS = {"img", "hr", "br"}

_BARE_AMPERSAND_RE = re.compile(
    r"""
    &
    (?!
        (?:
            [a-zA-Z]{1,31}
                |
            \# (?: [0-9]{1,7} | [xX] [0-9a-fA-F]{1,6} )
        )
        ;
    )
    """,
    re.VERBOSE,
)


# -----------------------------------------------------------------------------
# Escaping
# -----------------------------------------------------------------------------

def escape(text: str) -> str:
    """Escape ``&`` (unless it starts a reference), ``<``, ``>`` and ``"``.

    Apostrophes are left alone: they are bold/italic markup.  Existing entity
    references survive, so escaping twice changes nothing.
    """
    text = _BARE_AMPERSAND_RE.sub("&amp;", text)
    text = text.replace("<", "&lt;")
    text = text.replace(">", "&gt;")
    text = text.replace('"', "&quot;")
    return text


# -----------------------------------------------------------------------------
# Elements
# -----------------------------------------------------------------------------

def _attrs(attributes: Optional[Mapping[str, Optional[str]]], protect: Optional[Protector]) -> str:
    out = ""
    for name, value in (attributes or {}).items():
        if value is None:
            continue
        value = escape(str(value))
        if protect is not None:
            value = protect(value)
        out += f' {name}="{value}"'
    return out


def h(
    tag: str,
    content: str = "",
    attributes: Optional[Mapping[str, Optional[str]]] = None,
    protect: Optional[Protector] = None,
) -> str:
    """Build ``<tag attrs>content</tag>`` (or ``<tag attrs />`` for void tags)."""
    attrs = _attrs(attributes, protect)
    if tag in _VOID_TAGS:
        return f"<{tag}{attrs} />"
    return f"<{tag}{attrs}>{content}</{tag}>"


# -----------------------------------------------------------------------------

def header(text: str, level: int, anchor: Optional[str] = None, protect: Optional[Protector] = None) -> str:
    level = max(1, min(level, 6))
    if anchor:
        text = h("a", "", {"name": anchor}, protect) + text
    return h(f"h{level}", text)


# -----------------------------------------------------------------------------

def table(rows: list[list[tuple[str, str]]], protect: Optional[Protector] = None) -> str:
    """
    Build a table from a row-major grid of ``(cell_type, cell_html)`` pairs.

    The first row becomes ``<thead>`` when it holds at least one header cell.
    Its width fixes the column count: shorter rows are padded with empty
    cells, longer rows are cut.
    """
    def _cell(cell_type: str, text: str) -> str:
        return h("th" if cell_type == "header" else "td", text.strip())

    first = rows[0]
    columns = len(first)
    head_row = h("tr", "".join(_cell(t, c) for t, c in first))

    body_rows: list[str] = []
    has_headers = any(t == "header" for t, _ in first)
    if not has_headers:
        body_rows.append(head_row)

    for row in rows[1:]:
        cells = [_cell(t, c) for t, c in row[:columns]]
        cells += [h("td")] * (columns - len(cells))
        body_rows.append(h("tr", "".join(cells)))

    parts = []
    if has_headers:
        parts.append(h("thead", head_row))
    parts.append(h("tbody", "\n".join(body_rows)))
    return h("table", "\n".join(parts), {"class": "wiki-table"}, protect)


# -----------------------------------------------------------------------------

def image(
    src: str,
    alt: str,
    caption: str = "",
    align: str = "left",
    protect: Optional[Protector] = None,
) -> str:
    img = h("img", attributes={"src": src, "alt": alt}, protect=protect)
    cap = h("p", caption, {"class": "wiki-image-caption"}, protect) if caption else ""
    return h("div", cap + img, {"class": f"wiki-image wiki-image-{align}"}, protect)


# -----------------------------------------------------------------------------

def anchor(
    url: str,
    text: Optional[str] = None,
    css_class: Optional[str] = None,
    protect: Optional[Protector] = None,
) -> str:
    """Link to *url*; the visible text falls back to the target itself."""
    if not text:
        text = protect(escape(url)) if protect is not None else escape(url)
    return h("a", text, {"href": url, "class": css_class}, protect)


# -----------------------------------------------------------------------------

def nested_list(items: Iterable[tuple[int, str, str]]) -> str:
    """
    Build nested ``<ul>``/``<ol>`` markup from ``(depth, html, list_type)``.

    A list's type is taken from its first item.  Going deeper than one level
    at a time is clamped to one level.
    """
    html: list[str] = []
    stack: list[str] = []

    for depth, text, list_type in items:
        depth = max(1, min(depth, len(stack) + 1))
        if len(stack) < depth:
            html.append(f"<{list_type}>")
            stack.append(list_type)
        else:
            while len(stack) > depth:
                html.append("</li>")
                html.append(f"</{stack.pop()}>")
            html.append("</li>")
        html.append(f"<li>{text}")

    while stack:
        html.append("</li>")
        html.append(f"</{stack.pop()}>")

    return "".join(html)


# -----------------------------------------------------------------------------
