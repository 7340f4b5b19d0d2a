#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Link and attachment resolution — the host services the parser calls out to.

The parser only knows the two protocols below.  The default
implementations build URLs the way the wiki lays them out:

    /wiki/<namespace>/<slug>                   existing page
    /special/create?namespace=..&title=..      page not created yet
    /attachments/<namespace>/<path>            page attachment
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import posixpath
import re
from typing import Iterable, Optional, Protocol
from urllib.parse import quote, urlencode

from nwiki.schemas import ResolvedLink


_ABSOLUTE_URL_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|/)", re.IGNORECASE)


# -----------------------------------------------------------------------------
# Protocols
# -----------------------------------------------------------------------------

class LinkResolver(Protocol):
    def resolve(self, page: str) -> Optional[ResolvedLink]:
        """Return the URL for *page*, or None when it cannot be resolved."""
        ...


class PathResolver(Protocol):
    def real_path(self, path: str) -> Optional[str]:
        """Return the canonical URL for an attachment path, or None."""
        ...


# -----------------------------------------------------------------------------
# Slug helper
# -----------------------------------------------------------------------------

def slugify(text: str) -> str:
    """Convert a page title to a URL slug."""
    text = text.strip().lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


# -----------------------------------------------------------------------------
# Default resolvers
# -----------------------------------------------------------------------------

class WikiLinkResolver:
    """
    Resolve ``[[Page]]`` targets to wiki URLs.

    When *existing_pages* is given, titles not in it (compared by slug) are
    reported as missing and point at the page-creation screen.  Without it
    every page is assumed to exist.
    """

    def __init__(
        self,
        base_url: str = "",
        namespace: str = "Main",
        existing_pages: Optional[Iterable[str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace
        self._existing = None if existing_pages is None else {slugify(p) for p in existing_pages}

    def resolve(self, page: str) -> ResolvedLink:
        slug = slugify(page)
        if self._existing is None or slug in self._existing:
            return ResolvedLink(url=f"{self.base_url}/wiki/{quote(self.namespace)}/{slug}", exists=True)
        query = urlencode({"namespace": self.namespace, "title": page.strip()})
        return ResolvedLink(url=f"{self.base_url}/special/create?{query}", exists=False)


# -----------------------------------------------------------------------------

class AttachmentResolver:
    """
    Resolve attachment paths to URLs.

    Lookup order: the *attachments* map (filename → URL), then absolute URLs
    and site-absolute paths unchanged, then a normalised path under the
    namespace attachment root.  ``..`` segments never climb out of it.
    """

    def __init__(
        self,
        base_url: str = "",
        namespace: str = "Main",
        attachments: Optional[dict[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace
        self.attachments = attachments or {}

    def real_path(self, path: str) -> str:
        path = path.strip()
        if path in self.attachments:
            return self.attachments[path]
        if _ABSOLUTE_URL_RE.match(path):
            return path
        clean = posixpath.normpath("/" + path.replace("\\", "/")).lstrip("/")
        return f"{self.base_url}/attachments/{quote(self.namespace)}/{quote(clean)}"


# -----------------------------------------------------------------------------
