#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Placeholder protection
======================
Literal strings (attribute values, link labels, nowiki content, finished
block HTML) are swapped for opaque tokens while the rule passes run, then
restored in one final pass.

A token has the form ``«marker»«digits»«marker»`` where «marker» is U+F8FF
and each digit of the span index is written as a code point in
U+E000..U+E009 (both in the Private Use Area).  Occurrences of «marker» in
the source are themselves protected before parsing starts, so a token can
never be forged by page text.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re


MARKER = "\uF8FF"
_DIGIT_BASE = 0xE000

PLACEHOLDER_RE = re.compile(f"{MARKER}([\uE000-\uE009]+){MARKER}")


# -----------------------------------------------------------------------------

def _encode_index(index: int) -> str:
    return "".join(chr(_DIGIT_BASE + int(d)) for d in str(index))


def _decode_index(run: str) -> int:
    return int("".join(str(ord(c) - _DIGIT_BASE) for c in run))


# -----------------------------------------------------------------------------

class ProtectedSpans:
    """Arena of protected literals, scoped to one render call."""

    def __init__(self) -> None:
        self._spans: list[str] = []

    def __len__(self) -> int:
        return len(self._spans)

    def protect(self, text: str) -> str:
        """Record *text* and return the placeholder standing in for it."""
        # Stored literals never contain tokens, so restore() needs one pass.
        text = self.restore(text)
        self._spans.append(text)
        return f"{MARKER}{_encode_index(len(self._spans) - 1)}{MARKER}"

    def neutralise_markers(self, text: str) -> str:
        """Protect stray «marker» characters so they cannot pose as tokens."""
        if MARKER not in text:
            return text
        return text.replace(MARKER, self.protect(MARKER))

    def restore(self, text: str) -> str:
        """Substitute every known placeholder in *text* with its literal."""
        def _sub(m: re.Match) -> str:
            index = _decode_index(m.group(1))
            if index >= len(self._spans):
                return m.group(0)
            return self._spans[index]

        return PLACEHOLDER_RE.sub(_sub, text)


# -----------------------------------------------------------------------------
