"""
Accessibility fixer (deterministic, offline markup rewrites).

The engine runs a fixed, ordered list of independent rules over raw JSX/HTML
text. Each rule does one left-to-right pass: it detects a defect pattern,
rewrites the offending tag, and records a fix. Later rules see the edits of
earlier ones, so the order of `AccessibilityFixer.rules` is part of the
contract.

Every rule only fires when some attribute is *absent*, and every rewrite adds
that attribute. Running the engine on its own output therefore finds nothing
new for the elements it already fixed. Rewrites never add or remove line
breaks, so line numbers seen by later rules are those of the submitted text.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models.accessibility import AccessibilityFix, FixCategory, FixResult
from .markup_scanner import (
    BlankRunFinder,
    ClosingTagFinder,
    ElementMatcher,
    LineCounter,
    ScanBudget,
    Tag,
    closes_immediately,
    find_open_tag,
    has_attribute,
    has_label_for,
)

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDERS: Dict[str, str] = {
    "image_alt": "Descriptive text for image",
    "button_label": "Button action",
    "link_label": "Link destination",
    "input_label": "Input field",
}

ENTER_KEY_HANDLER = 'onKeyDown={(e) => e.key === "Enter" && e.currentTarget.click()}'

_DECORATIVE_RE = re.compile(r"decorative|background|spacer|divider", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\s*[\r\n]+\s*")


def attribute_text(value: str) -> str:
    """Make a configured text safe inside a double-quoted attribute on a single line."""
    return _LINE_BREAK_RE.sub(" ", value).replace('"', "&quot;")


@dataclass(frozen=True)
class _Rewrite:
    end: int  # offset where the replaced span stops
    replacement: str
    fix: AccessibilityFix


class _Pass:
    """Scanning state shared by the tags of one rule pass over one text."""

    def __init__(self, text: str, closing_tag: Optional[str]):
        self.text = text
        self.budget = ScanBudget.for_text(text)
        self.closers = ClosingTagFinder(text, closing_tag) if closing_tag else None
        self.blank_runs = BlankRunFinder(text)
        self.lines = LineCounter(text)
        self._elements: Dict[str, ElementMatcher] = {}

    def elements(self, name: str) -> ElementMatcher:
        if name not in self._elements:
            self._elements[name] = ElementMatcher(self.text, name)
        return self._elements[name]


class AccessibilityRule(ABC):
    """One detector + rewriter for a single defect pattern."""

    tag: str
    category: FixCategory
    # Element whose close tag bounds the inner content the rule inspects
    closing_tag: Optional[str] = None

    def rewrite(self, text: str, source: str) -> Tuple[str, List[AccessibilityFix]]:
        """
        Rewrite every matching `<tag>` in one pass over `text`.

        Args:
            text: current markup (possibly edited by earlier rules)
            source: the markup originally submitted to the engine

        Returns:
            (rewritten text, fixes in document order)
        """
        pieces: List[str] = []
        fixes: List[AccessibilityFix] = []
        scan = _Pass(text, self.closing_tag)
        cursor = 0
        pos = 0
        while True:
            tag = find_open_tag(text, self.tag, pos, scan.budget)
            if tag is None:
                break
            outcome = self.fix_tag(scan, tag)
            if outcome is None:
                pos = tag.end
                continue
            pieces.append(text[cursor:tag.start])
            pieces.append(outcome.replacement)
            fixes.append(outcome.fix)
            cursor = pos = outcome.end

        if not fixes:
            return text, []
        pieces.append(text[cursor:])
        return "".join(pieces), fixes

    @abstractmethod
    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        """Return the rewrite for `tag`, or None when it is not a defect."""

    def _record(self, scan: _Pass, tag: Tag, action: str, selector: str, summary: str) -> AccessibilityFix:
        return AccessibilityFix(
            category=self.category,
            action=action,
            selector=selector,
            summary=summary,
            line=scan.lines.line_at(tag.start),
        )


class ImageAltRule(AccessibilityRule):
    """`<img>` without `alt`: empty alt when decorative, placeholder text otherwise."""

    tag = "img"
    category = FixCategory.IMAGES

    def __init__(self, placeholder: str):
        self.placeholder = placeholder

    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        attrs = tag.attrs
        if has_attribute(attrs, "alt"):
            return None

        decorative = _DECORATIVE_RE.search(attrs) is not None
        alt = "" if decorative else self.placeholder
        fix = self._record(
            scan,
            tag,
            action="Added alt attribute",
            selector="img[src]" if "src" in attrs else "img",
            summary=(
                "Added empty alt attribute for decorative image"
                if decorative
                else "Added descriptive alt attribute for meaningful image"
            ),
        )
        return _Rewrite(end=tag.end, replacement=tag.with_trailing_attribute(f'alt="{alt}"'), fix=fix)


class IconButtonRule(AccessibilityRule):
    """`<button>` whose only content is a single `<svg>`: add `aria-label`."""

    tag = "button"
    category = FixCategory.INTERACTIVE_ELEMENTS
    closing_tag = "button"

    def __init__(self, placeholder: str):
        self.placeholder = placeholder

    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        if tag.self_closing or has_attribute(tag.attrs, "aria-label", "aria-labelledby"):
            return None
        closing = scan.closers.find(tag.end)
        if closing is None:
            return None
        close_start, close_end = closing
        if not scan.elements("svg").is_single_element(tag.end, close_start):
            return None

        fix = self._record(
            scan,
            tag,
            action="Added aria-label",
            selector="button > svg",
            summary="Added aria-label for button with only SVG content",
        )
        replacement = tag.with_leading_attribute(f'aria-label="{self.placeholder}"') + scan.text[tag.end:close_end]
        return _Rewrite(end=close_end, replacement=replacement, fix=fix)


class EmptyLinkRule(AccessibilityRule):
    """`<a>` with no text content once nested tags are ignored: add `aria-label`."""

    tag = "a"
    category = FixCategory.NAVIGATION
    closing_tag = "a"

    def __init__(self, placeholder: str):
        self.placeholder = placeholder

    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        if tag.self_closing or has_attribute(tag.attrs, "aria-label", "aria-labelledby"):
            return None
        closing = scan.closers.find(tag.end)
        if closing is None:
            return None
        close_start, close_end = closing
        if not scan.blank_runs.is_blank(tag.end, close_start):
            return None

        fix = self._record(
            scan,
            tag,
            action="Added aria-label",
            selector="a[href]" if has_attribute(tag.attrs, "href") else "a",
            summary="Added aria-label for link without text content",
        )
        replacement = tag.with_leading_attribute(f'aria-label="{self.placeholder}"') + scan.text[tag.end:close_end]
        return _Rewrite(end=close_end, replacement=replacement, fix=fix)


class ClickableDivRule(AccessibilityRule):
    """`<div onClick=...>` without `role`: make it a focusable, Enter-activated button."""

    tag = "div"
    category = FixCategory.INTERACTIVE_ELEMENTS

    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        attrs = tag.attrs
        if not has_attribute(attrs, "onClick") or has_attribute(attrs, "role"):
            return None

        added = ['role="button"']
        if not has_attribute(attrs, "tabIndex"):
            added.append("tabIndex={0}")
        if not has_attribute(attrs, "onKeyDown"):
            added.append(ENTER_KEY_HANDLER)

        fix = self._record(
            scan,
            tag,
            action="Added role, tabIndex and keyboard handler",
            selector="div[onClick]",
            summary="Made clickable div keyboard accessible",
        )
        return _Rewrite(end=tag.end, replacement=tag.with_leading_attribute(" ".join(added)), fix=fix)


class UnlabeledInputRule(AccessibilityRule):
    """Closed `<input>` without `aria-label`, `id` or `aria-labelledby`: add `aria-label`."""

    tag = "input"
    category = FixCategory.FORMS

    def __init__(self, placeholder: str):
        self.placeholder = placeholder

    def rewrite(self, text: str, source: str) -> Tuple[str, List[AccessibilityFix]]:
        # A `<label for=...>` anywhere may point at one of these inputs by id.
        if has_label_for(source):
            logger.debug("Skipping input labelling: document contains <label for=...>")
            return text, []
        return super().rewrite(text, source)

    def fix_tag(self, scan: _Pass, tag: Tag) -> Optional[_Rewrite]:
        if has_attribute(tag.attrs, "aria-label", "id", "aria-labelledby"):
            return None

        end = tag.end
        if not tag.self_closing:
            end = closes_immediately(scan.text, "input", tag.end)
            if end is None:
                return None

        fix = self._record(
            scan,
            tag,
            action="Added aria-label",
            selector="input",
            summary="Added aria-label for input without associated label",
        )
        replacement = tag.with_trailing_attribute(f'aria-label="{self.placeholder}"') + scan.text[tag.end:end]
        return _Rewrite(end=end, replacement=replacement, fix=fix)


class AccessibilityFixer:
    """Apply the ordered accessibility rules to a piece of markup."""

    def __init__(self, placeholders: Optional[Dict[str, str]] = None):
        """
        Args:
            placeholders: texts inserted by the rules (`image_alt`, `button_label`,
                `link_label`, `input_label`). Loaded from project config when omitted.
        """
        if placeholders is None:
            from ..config import config
            placeholders = config.get_placeholders()
        texts = {key: attribute_text(value) for key, value in {**DEFAULT_PLACEHOLDERS, **placeholders}.items()}

        self.rules: Tuple[AccessibilityRule, ...] = (
            ImageAltRule(texts["image_alt"]),
            IconButtonRule(texts["button_label"]),
            EmptyLinkRule(texts["link_label"]),
            ClickableDivRule(),
            UnlabeledInputRule(texts["input_label"]),
        )

    def apply(self, source: str) -> Tuple[str, List[AccessibilityFix]]:
        """Run every rule in order; return (trimmed rewritten code, fixes)."""
        code = source
        fixes: List[AccessibilityFix] = []
        for rule in self.rules:
            code, rule_fixes = rule.rewrite(code, source)
            if rule_fixes:
                logger.debug(f"{type(rule).__name__}: {len(rule_fixes)} fix(es)")
            fixes.extend(rule_fixes)
        return code.strip(), fixes

    def fix(self, source: str) -> FixResult:
        """Analyze markup and return the rewritten code with its fix log."""
        code, fixes = self.apply(source)
        logger.info(f"Accessibility fixer applied {len(fixes)} fix(es)")
        return FixResult(code=code, fixes=fixes)
