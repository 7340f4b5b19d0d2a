#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""Tests for escaping, placeholder protection and output determinism."""
# -----------------------------------------------------------------------------

from __future__ import annotations

import pytest

from nwiki.parser.emitters import escape
from nwiki.parser.protection import MARKER, PLACEHOLDER_RE, ProtectedSpans
from nwiki.services.renderer import render


# =============================================================================
# Escaping
# =============================================================================

@pytest.mark.parametrize("raw, escaped", [
    ("a < b", "a &lt; b"),
    ("a > b", "a &gt; b"),
    ('say "hi"', "say &quot;hi&quot;"),
    ("fish & chips", "fish &amp; chips"),
    ("it's", "it's"),
    ("&amp; &#169; &#x263A;", "&amp; &#169; &#x263A;"),
])
def test_escape(raw, escaped):
    assert escape(raw) == escaped


def test_escape_is_idempotent():
    text = '<a href="x">&</a>'
    assert escape(escape(text)) == escape(text)


def test_markup_free_text_renders_escaped(settings):
    text = 'x < y && "z"'
    assert render(text, settings=settings) == escape(text)


def test_script_tags_are_escaped(settings):
    html = render("<script>alert(1)</script>", settings=settings)
    assert html == "&lt;script&gt;alert(1)&lt;/script&gt;"


def test_existing_entities_survive(settings):
    assert render("&copy; 2024", settings=settings) == "&copy; 2024"


def test_link_label_cannot_inject_markup(settings):
    html = render("[[Home|<b>x</b>]]", settings=settings)
    assert html == '<a href="/wiki/Main/home">&lt;b&gt;x&lt;/b&gt;</a>'


def test_image_alt_cannot_break_attribute(settings):
    html = render('[[image:a.png|x" onerror="y]]', settings=settings)
    assert 'onerror="' not in html
    assert 'alt="x&quot; onerror=&quot;y"' in html


# =============================================================================
# Protected spans
# =============================================================================

def test_protect_returns_placeholder():
    spans = ProtectedSpans()
    token = spans.protect("<b>")
    assert PLACEHOLDER_RE.fullmatch(token)
    assert len(spans) == 1


def test_restore_substitutes_literal():
    spans = ProtectedSpans()
    token = spans.protect("<b>")
    assert spans.restore(f"x{token}y") == "x<b>y"


def test_placeholders_are_distinct():
    spans = ProtectedSpans()
    tokens = {spans.protect(str(i)) for i in range(25)}
    assert len(tokens) == 25
    assert spans.restore("".join(spans.protect(str(i)) for i in (3, 14, 15))) == "31415"


def test_nested_placeholders_restore_in_one_pass():
    spans = ProtectedSpans()
    inner = spans.protect("inner")
    outer = spans.protect(f"[{inner}]")
    assert spans.restore(outer) == "[inner]"


def test_unknown_placeholder_is_left_alone():
    other = ProtectedSpans()
    other.protect("a")
    foreign = other.protect("b")
    spans = ProtectedSpans()
    spans.protect("only one")
    assert spans.restore(foreign) == foreign


def test_stray_markers_are_neutralised():
    spans = ProtectedSpans()
    text = spans.neutralise_markers(f"a{MARKER}b")
    assert PLACEHOLDER_RE.fullmatch(text[1:-1])
    assert spans.restore(text) == f"a{MARKER}b"


def test_forged_placeholder_in_source_is_literal(settings):
    forged = f"{MARKER}{MARKER}"
    assert render(forged, settings=settings) == forged


def test_forged_placeholder_next_to_markup(settings):
    forged = f"''{MARKER}{MARKER}''"
    assert render(forged, settings=settings) == f"<strong>{MARKER}{MARKER}</strong>"


# =============================================================================
# Determinism / no cross-construct leakage
# =============================================================================

@pytest.mark.parametrize("source", [
    "= A =\n''b'' [[C|d]]\n\n{|\n! x !! y\n|-\n| 1 || 2\n|}\n* i\n** j",
    "'''''",
    "[[[[x]]]]",
    "{|\n|}",
    "== unbalanced",
    "''a\n\n''b",
])
def test_render_is_deterministic(settings, source):
    assert render(source, settings=settings) == render(source, settings=settings)


def test_bold_does_not_cross_block_boundary(settings):
    html = render("''a\n= H =\nb''", settings=settings)
    assert "<strong>" not in html


def test_empty_table_stays_literal(settings):
    assert render("{|\n|}", settings=settings) == "{|\n|}"
