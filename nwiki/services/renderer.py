#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Markup renderer
===============
Renders nwiki page content to HTML.

This is the boundary the host wiki calls: raw page text in, HTML fragment
out.  Link and attachment URLs are produced by the resolvers in
``nwiki.services.links`` unless the caller supplies its own.

Supported syntax
----------------
= H1 =  /  == H2 ==  / ... / ====== H6 ======
''bold''  /  '''italic'''  /  '''''bold italic'''''
[[Page]]  /  [[Page|Text]]  /  [[Page#section]]  /  [[#section]]
[[image:url|alt]]  /  [[attach:file|label]]  /  [[attach:file.png|right|caption]]
[url text]  /  [url|text]  /  [url]  /  bare http:// https:// ftp:// URLs
{| ... |}                                         — tables (!, !!, |, ||, |-)
* item  /  # item  (up to five levels)            — lists
term:description;                                 — description lists
:text                                             — indented paragraph
---- / ---                                        — <hr />
<nowiki>...</nowiki>                              — literal text / <pre> block
{{toc}} / __TOC__                                 — numbered table of contents
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Iterable, Optional

from nwiki.core.config import Settings, get_settings
from nwiki.parser.nwiki import NWikiParser
from nwiki.schemas import ParseResult
from nwiki.services.links import (
    AttachmentResolver,
    LinkResolver,
    PathResolver,
    WikiLinkResolver,
)


# Bump this whenever the render pipeline changes so hosts can discard
# HTML they cached from an older parser.
RENDERER_VERSION = 1


# -----------------------------------------------------------------------------

def make_parser(
    namespace: Optional[str] = None,
    base_url: Optional[str] = None,
    existing_pages: Optional[Iterable[str]] = None,
    attachments: Optional[dict[str, str]] = None,
    link_resolver: Optional[LinkResolver] = None,
    path_resolver: Optional[PathResolver] = None,
    settings: Optional[Settings] = None,
) -> NWikiParser:
    """Build a parser wired to the default resolvers unless others are given."""
    settings = settings or get_settings()
    namespace = namespace or settings.default_namespace
    base_url = settings.base_url if base_url is None else base_url

    if link_resolver is None:
        link_resolver = WikiLinkResolver(base_url, namespace, existing_pages)
    if path_resolver is None:
        path_resolver = AttachmentResolver(base_url, namespace, attachments)

    return NWikiParser(settings, link_resolver, path_resolver)


# -----------------------------------------------------------------------------

def parse(content: str, **options) -> ParseResult:
    """
    Render *content* and return the HTML with its side products.

    Parameters (all optional, see ``make_parser``)
    ----------
    namespace      : wiki namespace used for page and attachment URLs
    base_url       : site base URL prefix
    existing_pages : titles that exist; others render as "new page" links
    attachments    : mapping of attachment filename → URL
    link_resolver  : replaces the default ``WikiLinkResolver``
    path_resolver  : replaces the default ``AttachmentResolver``
    settings       : replaces ``get_settings()``
    """
    parser = make_parser(**options)
    html = parser.parse(content)
    return ParseResult(
        html=html,
        toc=parser.toc_html(),
        toc_entries=parser.toc,
        links=parser.links,
        renderer_version=RENDERER_VERSION,
    )


# -----------------------------------------------------------------------------

def render(content: str, **options) -> str:
    """Render *content* to an HTML fragment.  Takes the same options as ``parse``."""
    return make_parser(**options).parse(content)


# -----------------------------------------------------------------------------
