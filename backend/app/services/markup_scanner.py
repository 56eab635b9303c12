"""
Bounded markup scanning helpers (no parse tree, no backtracking patterns).

The accessibility rules work directly on source text so they tolerate partial
or malformed JSX/HTML fragments. A rule pass over a document stays linear in
its length even on adversarial input:

- tag and attribute names are located with anchored, non-nested regexes;
- tag ends are found with a forward scan whose cost is capped per tag and,
  through `ScanBudget`, per document;
- searches that successive tags would repeat (closing tags, blank content
  runs, element pairs) are memoized for the pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterator, Optional, Pattern, Tuple

# Upper bound on how far the quote/brace-aware scan follows a single tag.
# Past this the scan falls back to the first '>' after the tag name.
MAX_TAG_LENGTH = 8192

_WHITESPACE_RE = re.compile(r"\s*")
# Whitespace and tags; a tag token never contains '<' so runs stop at tag boundaries
_BLANK_RUN_RE = re.compile(r"\s*(?:<[^<>]*>\s*)*")
_LABEL_FOR_RE = re.compile(r"(?<![\w-])for\s*=\s*[\"'][^\"']*[\"']")


@dataclass(frozen=True)
class Tag:
    """An opening (or self-closing) tag located in a piece of text."""

    name: str
    start: int  # offset of '<'
    name_end: int  # offset just after the tag name
    end: int  # offset just after the closing '>'
    raw: str

    @property
    def attrs(self) -> str:
        """Attribute text between the tag name and the final '>'."""
        return self.raw[self.name_end - self.start:-1]

    @property
    def self_closing(self) -> bool:
        return self.attrs.rstrip().endswith("/")

    def with_leading_attribute(self, attribute: str) -> str:
        """Return the tag text with `attribute` inserted right after the name."""
        cut = self.name_end - self.start
        return f"{self.raw[:cut]} {attribute}{self.raw[cut:]}"

    def with_trailing_attribute(self, attribute: str) -> str:
        """
        Return the tag text with `attribute` appended after the last attribute.

        Whitespace before `>` or `/>` is kept as written, so multi-line tags
        keep their line count.
        """
        terminator = len(self.raw) - 1
        if self.self_closing:
            terminator = len(self.raw[:-1].rstrip()) - 1
        cut = len(self.raw[:terminator].rstrip())
        gap = self.raw[cut:terminator]
        if self.self_closing and not gap:
            gap = " "
        return f"{self.raw[:cut]} {attribute}{gap}{self.raw[terminator:]}"


class ScanBudget:
    """Characters the brace/quote-aware scan may still inspect in one pass."""

    def __init__(self, remaining: int):
        self.remaining = max(0, remaining)

    @classmethod
    def for_text(cls, text: str) -> "ScanBudget":
        # Non-overlapping tags need at most len(text); the rest absorbs fallbacks
        return cls(2 * len(text) + MAX_TAG_LENGTH)


@lru_cache(maxsize=64)
def _open_tag_pattern(name: str) -> Pattern[str]:
    return re.compile(rf"<{re.escape(name)}(?=[\s/>])", re.IGNORECASE)


@lru_cache(maxsize=64)
def _close_tag_pattern(name: str) -> Pattern[str]:
    return re.compile(rf"</{re.escape(name)}\s*>", re.IGNORECASE)


@lru_cache(maxsize=64)
def _tag_event_pattern(name: str) -> Pattern[str]:
    escaped = re.escape(name)
    return re.compile(rf"</{escaped}\s*>|<{escaped}(?=[\s/>])", re.IGNORECASE)


@lru_cache(maxsize=64)
def _immediate_close_pattern(name: str) -> Pattern[str]:
    return re.compile(rf"\s*</{re.escape(name)}\s*>", re.IGNORECASE)


@lru_cache(maxsize=128)
def _attribute_pattern(names: Tuple[str, ...]) -> Pattern[str]:
    alternatives = "|".join(re.escape(n) for n in names)
    return re.compile(rf"(?<![\w-])(?:{alternatives})\s*=", re.IGNORECASE)


def find_tag_end(text: str, pos: int, budget: Optional[ScanBudget] = None) -> int:
    """
    Find the offset just after the '>' that closes the tag whose body starts at `pos`.

    Quoted strings and JSX expression braces are skipped so that handlers like
    `onClick={() => go()}` do not end the tag early. Returns -1 when the tag is
    unterminated.

    The scan stops after MAX_TAG_LENGTH characters, or when `budget` runs out,
    and then falls back to the first '>'.
    """
    naive = text.find(">", pos)
    if naive == -1:
        return -1

    limit = min(len(text), pos + MAX_TAG_LENGTH)
    if budget is not None:
        limit = min(limit, pos + budget.remaining)
    quote = ""
    depth = 0
    prev = ""
    i = pos
    end = -1
    while i < limit:
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"', "`") and (depth or prev == "="):
            # Only attribute values and JSX expressions open strings
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(0, depth - 1)
        elif ch == ">" and depth == 0:
            end = i + 1
            break
        if not ch.isspace():
            prev = ch
        i += 1

    if budget is not None:
        budget.remaining -= i - pos
    if end != -1:
        return end
    # Unbalanced quote or brace: behave like a plain `[^>]*>` match.
    return naive + 1


def find_open_tag(text: str, name: str, pos: int = 0, budget: Optional[ScanBudget] = None) -> Optional[Tag]:
    """Find the next `<name ...>` tag at or after `pos`, skipping unterminated ones."""
    match = _open_tag_pattern(name).search(text, pos)
    if match is None:
        return None
    end = find_tag_end(text, match.end(), budget)
    if end == -1:
        return None
    return Tag(
        name=name,
        start=match.start(),
        name_end=match.end(),
        end=end,
        raw=text[match.start():end],
    )


def iter_open_tags(text: str, name: str, pos: int = 0) -> Iterator[Tag]:
    """Yield every `<name ...>` tag in document order."""
    budget = ScanBudget.for_text(text)
    while True:
        tag = find_open_tag(text, name, pos, budget)
        if tag is None:
            return
        yield tag
        pos = tag.end


def closes_immediately(text: str, name: str, pos: int) -> Optional[int]:
    """Return the end of `</name>` when only whitespace separates it from `pos`."""
    match = _immediate_close_pattern(name).match(text, pos)
    return match.end() if match else None


class ClosingTagFinder:
    """
    Forward search for `</name>` memoized across one left-to-right pass.

    Successive lookups from increasing offsets reuse the previous hit, so a
    pass over many unclosed elements stays linear instead of rescanning the
    rest of the text for each one.
    """

    def __init__(self, text: str, name: str):
        self.text = text
        self._pattern = _close_tag_pattern(name)
        self._hit: Optional[re.Match] = None
        self._exhausted = False

    def find(self, pos: int) -> Optional[Tuple[int, int]]:
        if self._exhausted:
            return None
        if self._hit is None or self._hit.start() < pos:
            self._hit = self._pattern.search(self.text, pos)
            if self._hit is None:
                self._exhausted = True
                return None
        return self._hit.start(), self._hit.end()


class BlankRunFinder:
    """
    End of the whitespace-and-tags run starting at an offset.

    Nested openers inside one run share its end, so the last run is reused
    for any later offset it covers.
    """

    def __init__(self, text: str):
        self.text = text
        self._start = -1
        self._end = -1

    def run_end(self, pos: int) -> int:
        if not self._start <= pos <= self._end:
            self._start = pos
            self._end = _BLANK_RUN_RE.match(self.text, pos).end()
        return self._end

    def is_blank(self, start: int, end: int) -> bool:
        """True when text[start:end] holds nothing but whitespace and tags."""
        return self.run_end(start) >= end


class ElementMatcher:
    """
    Pairs every `<name>` with its `</name>` in one pass over the text.

    Pairing runs lazily on first use; self-closing elements pair with
    themselves and unmatched openers stay unpaired.
    """

    def __init__(self, text: str, name: str):
        self.text = text
        self.name = name
        self._open = _open_tag_pattern(name)
        self._ends: Optional[Dict[int, int]] = None

    def element_end(self, start: int) -> Optional[int]:
        """End offset of the element whose opening tag starts at `start`."""
        if self._ends is None:
            self._ends = self._pair()
        return self._ends.get(start)

    def is_single_element(self, start: int, end: int) -> bool:
        """True when text[start:end], ignoring surrounding whitespace, is exactly one element."""
        first = _WHITESPACE_RE.match(self.text, start, end).end()
        if not self._open.match(self.text, first):
            return False
        element_end = self.element_end(first)
        if element_end is None or element_end > end:
            return False
        return _WHITESPACE_RE.match(self.text, element_end, end).end() == end

    def _pair(self) -> Dict[int, int]:
        ends: Dict[int, int] = {}
        stack = []
        events = _tag_event_pattern(self.name)
        budget = ScanBudget.for_text(self.text)
        pos = 0
        while True:
            match = events.search(self.text, pos)
            if match is None:
                break
            if match.group(0).startswith("</"):
                if stack:
                    ends[stack.pop()] = match.end()
                pos = match.end()
                continue
            tag_end = find_tag_end(self.text, match.end(), budget)
            if tag_end == -1:
                break
            if self.text[match.end():tag_end - 1].rstrip().endswith("/"):
                ends[match.start()] = tag_end
            else:
                stack.append(match.start())
            pos = tag_end
        return ends


class LineCounter:
    """1-based line numbers for offsets queried in increasing order."""

    def __init__(self, text: str):
        self.text = text
        self._offset = 0
        self._line = 1

    def line_at(self, offset: int) -> int:
        if offset < self._offset:
            return line_number(self.text, offset)
        self._line += self.text.count("\n", self._offset, offset)
        self._offset = offset
        return self._line


def has_attribute(attrs: str, *names: str) -> bool:
    """True when any of `names` appears as an attribute assignment (case-insensitive)."""
    return _attribute_pattern(tuple(names)).search(attrs) is not None


def has_label_for(source: str) -> bool:
    """True when the source contains any `<label ... for="...">`."""
    return any(_LABEL_FOR_RE.search(tag.attrs) for tag in iter_open_tags(source, "label"))


def line_number(text: str, offset: int) -> int:
    """1-based line number of `offset` in `text`."""
    return text.count("\n", 0, offset) + 1
