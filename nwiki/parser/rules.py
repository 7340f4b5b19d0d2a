#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
NWiki rule tables
=================
Ordered, immutable declarations of the block rules and the inline ("tag")
rules.  Order is significant: an earlier rule shadows a later one
(``nowiki`` before ``link``, ``table`` before ``paragraph``, ``italic``
before ``bold``).

Patterns run against source text that has already been HTML-escaped, which
is why the ``<nowiki>`` rules look for ``&lt;nowiki&gt;``.  Every capture
is a named group.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple, Optional

from nwiki.parser.protection import PLACEHOLDER_RE


# -----------------------------------------------------------------------------
# Rule selection
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RuleSelection:
    """Which tag rules an inline pass may apply.

    ``RuleSelection.ALL`` is the unrestricted pass; ``RuleSelection.only(...)``
    is an explicit allow-list (``RuleSelection.only()`` allows nothing).
    """
    names: frozenset[str] = frozenset()
    unrestricted: bool = False

    @classmethod
    def only(cls, *names: str) -> "RuleSelection":
        unknown = set(names) - set(TAG_RULE_NAMES)
        if unknown:
            raise ValueError(f"Unknown tag rule(s): {', '.join(sorted(unknown))}")
        return cls(names=frozenset(names))

    def allows(self, name: str) -> bool:
        return self.unrestricted or name in self.names


RuleSelection.ALL = RuleSelection(unrestricted=True)
RuleSelection.NONE = RuleSelection()


# -----------------------------------------------------------------------------
# Rule
# -----------------------------------------------------------------------------

class Rule(NamedTuple):
    name: str
    pattern: re.Pattern
    tag: Optional[str] = None                      # wrap tag when the handler returns (text, attrs)
    tokens: Optional[tuple[str, str]] = None       # source syntax around the content
    selection: RuleSelection = RuleSelection.NONE  # inline rules run over a block's (text, attrs) output


# Construct bodies never run past the next opener, so an unclosed opener
# costs at most the distance to the next one.
_NOWIKI_BODY = r"(?:(?!&lt;nowiki&gt;).)*?"
_BRACKET_BODY = r"[^\[\]]"

# One "character" of a description: an entity, a non-& char, or a bare &.
_DESC_UNIT = r"(?:&\#?\w+;|[^\n&]|&(?!\#?\w+;))"

_DESC_LINE = rf"""
    ^ (?P<term> [^\n:]+? )
    : (?! // )
    (?P<description> {_DESC_UNIT}+? )
    ; [ \t]* $
"""


# -----------------------------------------------------------------------------
# Block rules
# -----------------------------------------------------------------------------

BLOCK_RULES: tuple[Rule, ...] = (
    Rule(
        "nowiki",
        re.compile(rf"^&lt;nowiki&gt;(?P<content>{_NOWIKI_BODY})&lt;/nowiki&gt;", re.I | re.M | re.S),
        tokens=("<nowiki>", "</nowiki>"),
    ),
    Rule(
        "header",
        re.compile(r"^[ ]*(?P<open>={1,6})[ ]*(?P<title>[^\n]+?)(?P<close>={1,6})[ ]*$", re.M),
        tokens=("=", "="),
    ),
    Rule(
        "line_break",
        re.compile(r"^-{3,4}[ \t]*$", re.M),
        tokens=("---", ""),
    ),
    Rule(
        "desc_list",
        re.compile(rf"(?:{_DESC_LINE}\n)+", re.M | re.X),
        tag="dl",
        tokens=(":", ";"),
    ),
    Rule(
        "table",
        re.compile(r"\{\|(?P<content>(?:(?!\{\|).)*?)\|\}", re.S),
        tokens=("{|", "|}"),
    ),
    Rule(
        "tab_paragraph",
        re.compile(r"^(?P<indent>:+)(?P<content>[^\n]+)$", re.M),
        tag="p",
        tokens=(":", ""),
        selection=RuleSelection.ALL,
    ),
    Rule(
        "list",
        re.compile(r"^(?P<items>[ ]*[*#]{1,5}.*?)(?=\n[ \t]*\n|\n?\Z)", re.M | re.S),
        tokens=("*", "#"),
    ),
    Rule(
        "paragraph",
        re.compile(
            rf"""
            ^ [ ]*
            (?P<content>
                (?! {PLACEHOLDER_RE.pattern} [ \t]* $ )     # a finished block
                \S (?: [^\n] | \n (?! [ \t]* \n ) )*
            )
            (?P<blank> \n [ \t]* \n )?
            """,
            re.M | re.S | re.X,
        ),
        tag="p",
        selection=RuleSelection.ALL,
    ),
)


# Item extraction inside a matched list / description list block.
LIST_ITEM_RE = re.compile(r"^[ ]*(?P<marker>[*#]{1,5})[ ]*(?P<text>(?:[^\n]|\n(?![ ]*[*#]))+)", re.M)
DESC_ITEM_RE = re.compile(_DESC_LINE, re.M | re.X)

# Table row separator: a "|-" line, whatever follows it on that line.
TABLE_ROW_RE = re.compile(r"\n\|-[^\n]*")


# -----------------------------------------------------------------------------
# Tag (inline) rules
# -----------------------------------------------------------------------------

_URL_CHAR = r"(?:(?!&(?:quot|lt|gt);)[^\s<\uF8FF])"

TAG_RULES: tuple[Rule, ...] = (
    Rule(
        "nowiki",
        re.compile(rf"&lt;nowiki&gt;(?P<content>{_NOWIKI_BODY})&lt;/nowiki&gt;", re.I | re.S),
        tokens=("<nowiki>", "</nowiki>"),
    ),
    Rule(
        "image",
        re.compile(r"\[\[image:(?P<src>[^\[\]|]+)\|(?P<alt>[^\[\]]+?)\]\]", re.I),
        tokens=("[[image:", "|alt]]"),
    ),
    Rule(
        "attach",
        re.compile(rf"\[\[attach:(?P<target>{_BRACKET_BODY}+?)\]\]", re.I),
        tokens=("[[attach:", "|name]]"),
    ),
    Rule(
        "link",
        re.compile(rf"\[\[(?P<target>{_BRACKET_BODY}+?)\]\]"),
        tag="a",
        tokens=("[[", "]]"),
    ),
    Rule(
        "url_tag",
        re.compile(rf"\[(?P<target>{_BRACKET_BODY}+)\]"),
        tag="a",
        tokens=("[", "]"),
    ),
    Rule(
        "url",
        re.compile(rf"(?P<url>(?:https?|ftp)://{_URL_CHAR}+(?<![,.?!:;']))", re.I),
        tag="a",
        tokens=("http://", ""),
    ),
    Rule(
        "italic",
        re.compile(r"'''(?P<text>.+?)(?P<close>'''(?:'')?)", re.S),
        tag="em",
        tokens=("'''", "'''"),
    ),
    Rule(
        "bold",
        re.compile(r"''(?P<text>.+?)''", re.S),
        tag="strong",
        tokens=("''", "''"),
    ),
)

BLOCK_RULE_NAMES: tuple[str, ...] = tuple(r.name for r in BLOCK_RULES)
TAG_RULE_NAMES: tuple[str, ...] = tuple(r.name for r in TAG_RULES)


# -----------------------------------------------------------------------------
