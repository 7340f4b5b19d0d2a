#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Parser configuration.

All values can be overridden via NWIKI_* environment variables or a .env file.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="NWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Link / attachment URLs ─────────────────────────────────────────────

    base_url: str = ""
    default_namespace: str = "Main"

    # ── Limits ─────────────────────────────────────────────────────────────

    max_input_chars: int = Field(default=1_000_000, gt=0)
    max_inline_depth: int = Field(default=8, ge=1)

    # ── Rendering ──────────────────────────────────────────────────────────

    toc_max_depth: int = Field(default=3, ge=1, le=6)
    toc_title: str = "Table of contents"
    image_extensions: list[str] = ["jpg", "jpeg", "png", "bmp", "gif", "tif"]

    def is_image(self, path: str) -> bool:
        """True when *path* ends in one of the configured image extensions."""
        _, dot, ext = path.rpartition(".")
        return bool(dot) and ext.strip().lower() in {e.lower() for e in self.image_extensions}


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------
