#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pytest fixtures for NWiki tests.
Settings are built without reading .env so the host environment cannot leak in.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import pytest

from nwiki.core.config import Settings
from nwiki.parser.nwiki import NWikiParser
from nwiki.schemas import ResolvedLink


# -----------------------------------------------------------------------------

@pytest.fixture
def settings(monkeypatch) -> Settings:
    for name in ("NWIKI_BASE_URL", "NWIKI_DEFAULT_NAMESPACE", "NWIKI_TOC_TITLE"):
        monkeypatch.delenv(name, raising=False)
    return Settings(_env_file=None)


@pytest.fixture
def parser(settings) -> NWikiParser:
    return NWikiParser(settings)


# -----------------------------------------------------------------------------
# Collaborator doubles
# -----------------------------------------------------------------------------

class RecordingResolver:
    """Link resolver that remembers every page it was asked about."""

    def __init__(self, missing: tuple[str, ...] = ()) -> None:
        self.missing = set(missing)
        self.calls: list[str] = []

    def resolve(self, page: str) -> ResolvedLink:
        self.calls.append(page)
        return ResolvedLink(url=f"/p/{page}", exists=page not in self.missing)


class FailingResolver:
    """Raises from both resolver hooks."""

    def resolve(self, page: str) -> ResolvedLink:
        raise RuntimeError("page index unavailable")

    def real_path(self, path: str) -> str:
        raise RuntimeError("file store unavailable")


class NullResolver:
    """Resolves nothing."""

    def resolve(self, page: str):
        return None

    def real_path(self, path: str):
        return None


@pytest.fixture
def recording_resolver() -> RecordingResolver:
    return RecordingResolver(missing=("Missing Page",))


@pytest.fixture
def failing_resolver() -> FailingResolver:
    return FailingResolver()


@pytest.fixture
def null_resolver() -> NullResolver:
    return NullResolver()
