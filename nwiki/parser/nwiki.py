#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
NWiki parser
============
Converts nwiki markup to an HTML fragment.

Pipeline for one call of ``NWikiParser.parse``:

  1. normalise line endings, protect stray placeholder markers, escape
     ``& < > "`` once for the whole source, swap TOC macros for a sentinel
  2. block pass: every block rule in order, each finished block protected as
     a whole and surrounded by blank lines
  3. inline pass over whatever text is left outside blocks
  4. collapse blank lines, restore placeholders, inject the TOC

Block handlers are ``_<name>_block_rule`` methods and tag handlers are
``_<name>_tag_rule`` methods.  A handler returns finished HTML, a
``(text, attributes)`` pair to be wrapped in the rule's tag, or None to
leave the matched source as literal text.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import html as _html
import logging
import re
from functools import partial
from typing import Optional, Union

from nwiki.core.config import Settings, get_settings
from nwiki.parser import emitters
from nwiki.parser.emitters import escape
from nwiki.parser.protection import ProtectedSpans
from nwiki.parser.rules import (
    BLOCK_RULES,
    DESC_ITEM_RE,
    LIST_ITEM_RE,
    TABLE_ROW_RE,
    TAG_RULES,
    Rule,
    RuleSelection,
)
from nwiki.schemas import LinkRecord, ResolvedLink, TocEntry
from nwiki.services.links import AttachmentResolver, LinkResolver, PathResolver, WikiLinkResolver


log = logging.getLogger(__name__)

Fragment = Union[str, tuple[str, dict], None]

# Matches {{toc}}, {{TOC}}, {{ toc }} and the __TOC__ magic word.
TOC_MACRO_RE = re.compile(r"\{\{\s*toc\s*\}\}|__TOC__", re.IGNORECASE)
_TOC_SENTINEL = "<!--nwiki-toc-->"

_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n)+")
_ALIGNMENTS = ("left", "right", "center")

_TAG = {rule.name: rule for rule in TAG_RULES}


# -----------------------------------------------------------------------------

class NWikiParser:

    def __init__(
        self,
        settings: Optional[Settings] = None,
        link_resolver: Optional[LinkResolver] = None,
        path_resolver: Optional[PathResolver] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.link_resolver = link_resolver or WikiLinkResolver(
            self.settings.base_url, self.settings.default_namespace,
        )
        self.path_resolver = path_resolver or AttachmentResolver(
            self.settings.base_url, self.settings.default_namespace,
        )
        self._reset()

    def _reset(self) -> None:
        self._spans = ProtectedSpans()
        self._depth = 0
        self._toc_counters = [0] * self.settings.toc_max_depth
        self.toc: list[TocEntry] = []
        self.links: list[LinkRecord] = []

    # ── Entry point ─────────────────────────────────────────────────────────

    def parse(self, source: str) -> str:
        """Render *source* to HTML.  Never raises on malformed markup."""
        self._reset()
        text = source.replace("\r\n", "\n").replace("\r", "\n")

        if len(text) > self.settings.max_input_chars:
            log.warning(
                "Input of %d chars exceeds max_input_chars=%d; returning it as literal text",
                len(text), self.settings.max_input_chars,
            )
            return escape(text).strip()

        text = self._before_parsing(text)
        text = self._process_block_rules(text)
        text = self.rules(text)
        html = self._after_parsing(text)

        log.debug(
            "Parsed %d chars: %d protected spans, %d headers, %d links",
            len(source), len(self._spans), len(self.toc), len(self.links),
        )
        return html

    def protect(self, text: str) -> str:
        return self._spans.protect(text)

    def _before_parsing(self, text: str) -> str:
        text = self._spans.neutralise_markers(text)
        text = escape(text)
        text = TOC_MACRO_RE.sub(lambda m: self.protect(_TOC_SENTINEL), text)
        return text + "\n"

    def _after_parsing(self, text: str) -> str:
        text = _BLANK_LINES_RE.sub("\n", text).strip()
        html = self._spans.restore(text)
        if _TOC_SENTINEL in html:
            html = html.replace(_TOC_SENTINEL, self.toc_html())
        return html

    # ── Block pass ──────────────────────────────────────────────────────────

    def _process_block_rules(self, text: str) -> str:
        for rule in BLOCK_RULES:
            text = rule.pattern.sub(partial(self._block_callback, rule), text)
        return text

    def _block_callback(self, rule: Rule, match: re.Match) -> str:
        fragment: Fragment = getattr(self, f"_{rule.name}_block_rule")(match)
        if fragment is None:
            return match.group(0)
        if isinstance(fragment, tuple):
            text, attributes = fragment
            fragment = emitters.h(rule.tag, self.rules(text, rule.selection), attributes, self.protect)
        # A finished block is opaque to every later pass and ends any paragraph before it.
        return f"\n\n{self.protect(fragment)}\n\n"

    # ── Inline pass ─────────────────────────────────────────────────────────

    def rules(self, text: str, selection: RuleSelection = RuleSelection.ALL) -> str:
        """Apply the tag rules allowed by *selection*, in table order."""
        if self._depth >= self.settings.max_inline_depth:
            log.warning(
                "Inline rules nested deeper than %d levels; fragment left unprocessed",
                self.settings.max_inline_depth,
            )
            return text

        self._depth += 1
        try:
            for rule in TAG_RULES:
                if selection.allows(rule.name):
                    text = rule.pattern.sub(partial(self._tag_callback, rule), text)
        finally:
            self._depth -= 1
        return text

    def _tag_callback(self, rule: Rule, match: re.Match) -> str:
        handler = getattr(self, f"_{rule.name}_tag_rule", None)
        if handler is None:
            return emitters.h(rule.tag, match["text"])

        fragment: Fragment = handler(match)
        if fragment is None:
            return self.protect(match.group(0))
        if isinstance(fragment, tuple):
            text, attributes = fragment
            return emitters.h(rule.tag, text, attributes, self.protect)
        return fragment

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Block handlers
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _nowiki_block_rule(self, match: re.Match) -> Fragment:
        return emitters.h("pre", self.protect(match["content"]))

    def _header_block_rule(self, match: re.Match) -> Fragment:
        if match["open"] != match["close"]:
            return None
        return self._generate_header(match["title"], len(match["open"]))

    def _line_break_block_rule(self, match: re.Match) -> Fragment:
        return emitters.h("hr")

    def _desc_list_block_rule(self, match: re.Match) -> Fragment:
        items = []
        for item in DESC_ITEM_RE.finditer(match.group(0)):
            term = self.rules(item["term"].strip())
            description = self.rules(item["description"].strip())
            items.append(emitters.h("dt", term) + emitters.h("dd", description))
        return "".join(items), {}

    def _table_block_rule(self, match: re.Match) -> Fragment:
        table = []
        for row in TABLE_ROW_RE.split(match["content"]):
            cells = []
            for line in row.split("\n"):
                cells.extend(self._table_cells(line))
            if cells:
                table.append(cells)
        if not table:
            return None
        return emitters.table(table, self.protect)

    def _table_cells(self, line: str) -> list[tuple[str, str]]:
        """
        Split one table line into ``(cell_type, html)`` cells.

        ``!`` starts header cells, ``||`` separates cells and every cell after
        a ``!!`` is a header cell; the type drops back to normal after each
        ``||``-separated run.
        """
        line = line.lstrip()
        if not line:
            return []
        cell_type = "header" if line[0] == "!" else "normal"
        if line[0] in "|!":
            line = line[1:]
        if not line:
            return []

        cells = []
        for run in line.split("||"):
            for text in run.split("!!"):
                cells.append((cell_type, self.rules(text.strip())))
                cell_type = "header"
            cell_type = "normal"
        return cells

    def _tab_paragraph_block_rule(self, match: re.Match) -> Fragment:
        # However long the colon run, only a single wrap is ever visible.
        return match["content"].strip(), {"class": "wiki-tab-paragraph"}

    def _list_block_rule(self, match: re.Match) -> Fragment:
        items = []
        for item in LIST_ITEM_RE.finditer(match["items"]):
            marker = item["marker"]
            text = self.rules(item["text"].replace("\n", " ").strip())
            items.append((len(marker), text, "ul" if marker[-1] == "*" else "ol"))
        if not items:
            return None
        return emitters.nested_list(items)

    def _paragraph_block_rule(self, match: re.Match) -> Fragment:
        # A page that is one run of text gets the inline pass only.
        if not match["blank"] and not match.string[:match.start()].strip():
            return None
        return match["content"].rstrip(), {}

    # ── Headers / table of contents ─────────────────────────────────────────

    def _generate_header(self, title: str, level: int) -> str:
        title = title.strip()
        anchor = None
        if level <= self.settings.toc_max_depth:
            anchor = f"toc-{len(self.toc) + 1}"
            self._add_toc_entry(title, level, anchor)
        return emitters.header(self.rules(title), level, anchor, self.protect)

    def _add_toc_entry(self, title: str, level: int, anchor: str) -> None:
        counters = self._toc_counters
        counters[level - 1] += 1
        for i in range(level, len(counters)):
            counters[i] = 0
        for i in range(level - 1):
            if counters[i] == 0:
                counters[i] = 1
        number = ".".join(str(c) for c in counters[:level])

        link_open, link_close = _TAG["link"].tokens
        text = self._spans.restore(title).replace(link_open, "").replace(link_close, "")
        self.toc.append(TocEntry(level=level, number=number, anchor=anchor, text=_html.unescape(text)))

    def toc_html(self) -> str:
        """Numbered table of contents for the headers seen by the last parse."""
        if not self.toc:
            return ""
        sections = "".join(
            emitters.h(
                "p",
                f"{entry.number}. " + emitters.h("a", escape(entry.text), {"href": f"#{entry.anchor}"}),
                {"class": f"wiki-toc-section-{entry.level} wiki-toc-section"},
            )
            for entry in self.toc
        )
        title = emitters.h("p", escape(self.settings.toc_title), {"class": "wiki-toc-title"})
        return emitters.h("div", title + sections, {"class": "wiki-toc"})

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Tag handlers
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _nowiki_tag_rule(self, match: re.Match) -> Fragment:
        return self.protect(match["content"])

    def _image_tag_rule(self, match: re.Match) -> Fragment:
        return self._format_image(match["src"], match["alt"])

    def _attach_tag_rule(self, match: re.Match) -> Fragment:
        parts = match["target"].split("|")
        path = parts.pop(0).strip()
        text = parts.pop(0).strip() if parts else ""
        text = text or path

        if self.settings.is_image(path):
            align = "left"
            if parts:
                align = text.lower() if text.lower() in _ALIGNMENTS else "left"
                text = parts[0].strip()
            return self._format_image(path, text, text, align)

        url = self._real_path(path)
        if url is None:
            return None
        return emitters.anchor(url, self.protect(text), "wiki-attachment", self.protect)

    def _link_tag_rule(self, match: re.Match) -> Fragment:
        target = match["target"]
        if "|" in target:
            page, text = target.split("|", 1)
        else:
            page, text = target, target
        text = text.strip()

        if "#" in page:
            page, _, fragment = page.rpartition("#")
        else:
            fragment = ""
        page = page.strip()

        css_class = None
        if page:
            resolved = self._resolve_link(page)
            if resolved is None:
                return None
            url = resolved.url + (f"#{fragment}" if fragment else "")
            if not resolved.exists:
                css_class = "wiki-newentry"
        elif fragment:
            url = f"#{fragment}"
        else:
            return None

        return self.protect(text or page), {"href": url, "class": css_class}

    def _url_tag_tag_rule(self, match: re.Match) -> Fragment:
        target = match["target"].strip()
        if "|" in target:
            link, text = target.split("|", 1)
        elif " " in target:
            link, text = target.split(" ", 1)
        else:
            link, text = target, target
        link = link.strip()
        if not link:
            return None
        return self.protect(text.strip() or link), {"href": link}

    def _url_tag_rule(self, match: re.Match) -> Fragment:
        url = match["url"]
        return self.protect(url), {"href": url}

    def _italic_tag_rule(self, match: re.Match) -> Fragment:
        text = match["text"]
        bold_open, bold_close = _TAG["bold"].tokens
        if len(match["close"]) == 5:
            text += bold_close

        text = self.rules(text, RuleSelection.only("bold"))
        # Leftover quote pairs must not pair up with bold markers outside.
        if bold_open in text:
            text = text.replace(bold_open, self.protect(bold_open))
        return text, {}

    # ── Emission with collaborators ─────────────────────────────────────────

    def _format_image(self, src: str, alt: str, caption: str = "", align: str = "left") -> Optional[str]:
        url = self._real_path(src)
        if url is None:
            return None
        caption = self.protect(caption) if caption else ""
        return emitters.image(url, alt.strip(), caption, align, self.protect)

    def _resolve_link(self, page: str) -> Optional[ResolvedLink]:
        page = _html.unescape(page)
        try:
            resolved = self.link_resolver.resolve(page)
        except Exception:
            log.warning("Link resolver failed for %r; leaving the link as text", page, exc_info=True)
            return None
        if resolved is None:
            return None
        self.links.append(LinkRecord(page=page, url=resolved.url, exists=resolved.exists))
        return resolved

    def _real_path(self, path: str) -> Optional[str]:
        path = _html.unescape(path.strip())
        try:
            return self.path_resolver.real_path(path)
        except Exception:
            log.warning("Path resolver failed for %r; leaving the attachment as text", path, exc_info=True)
            return None


# -----------------------------------------------------------------------------
