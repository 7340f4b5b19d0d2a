#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pydantic v2 models for parser results and collaborator responses.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from pydantic import BaseModel, Field


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Collaborators
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResolvedLink(BaseModel):
    """What a link resolver reports for a wiki page target."""
    url: str
    exists: bool = True


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Parse results
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class LinkRecord(BaseModel):
    page: str
    url: str
    exists: bool


# -----------------------------------------------------------------------------

class TocEntry(BaseModel):
    level: int = Field(..., ge=1, le=6)
    number: str          # "1", "1.2", "1.2.1"
    anchor: str          # "toc-3"
    text: str


# -----------------------------------------------------------------------------

class ParseResult(BaseModel):
    html: str
    toc: str = ""
    toc_entries: list[TocEntry] = []
    links: list[LinkRecord] = []
    renderer_version: int
