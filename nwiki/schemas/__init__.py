from nwiki.schemas.schemas import (
    ResolvedLink,
    LinkRecord, TocEntry, ParseResult,
)

__all__ = [
    "ResolvedLink",
    "LinkRecord", "TocEntry", "ParseResult",
]
