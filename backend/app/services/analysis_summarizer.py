"""
Analysis summarizer (narrative, suggestions, advisory findings).

Works on the fix list produced by the rule engine. Nothing here touches the
rewritten code: advisory detectors only add fix records that describe issues
a pattern rewrite cannot safely correct (structure, contrast, keyboard
handling).
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..models.accessibility import AccessibilityFix, FixCategory, SourceLanguage

logger = logging.getLogger(__name__)

CRITICAL_THRESHOLD = 0.9
MODERATE_THRESHOLD = 0.7

NO_ISSUES_ANALYSIS = (
    "Excellent! Your code demonstrates strong accessibility practices. "
    "No critical accessibility issues were detected. The code follows WCAG 2.1 guidelines "
    "and provides a good foundation for inclusive user experiences."
)

REACT_REMARK = (
    "As React/JSX code, consider using accessibility-focused libraries like @radix-ui/react-* "
    "components which provide built-in accessibility features."
)

CATEGORY_SUGGESTIONS: Tuple[Tuple[FixCategory, str], ...] = (
    (
        FixCategory.IMAGES,
        "Use descriptive alt text for images that convey information, and empty alt attributes for decorative images",
    ),
    (
        FixCategory.INTERACTIVE_ELEMENTS,
        "Ensure all interactive elements are keyboard accessible and have proper ARIA labels",
    ),
    (
        FixCategory.FORMS,
        "Associate form labels with inputs using the 'for' attribute or wrap inputs in label elements",
    ),
    (
        FixCategory.SEMANTICS,
        "Use semantic HTML elements to provide meaningful structure and improve screen reader navigation",
    ),
)

REACT_SUGGESTIONS = (
    "Consider using React Testing Library's accessibility queries to test your components",
    "Implement focus management for dynamic content and modal dialogs",
)

AUTOMATED_TESTING_SUGGESTION = (
    "Run automated accessibility testing tools like axe-core or Lighthouse to catch additional issues"
)

# (confidence, explanation) per core rule, keyed by the selector each rule reports
_RULE_ANNOTATIONS: Dict[str, Tuple[float, str]] = {
    "button > svg": (0.9, "Buttons with only SVG content need aria-label for screen reader accessibility"),
    "a[href]": (0.9, "Links without text content need aria-label for screen reader users"),
    "a": (0.9, "Links without text content need aria-label for screen reader users"),
    "div[onClick]": (0.85, "Clickable divs need proper ARIA roles and keyboard navigation support"),
    "input": (0.9, "Form inputs need labels or aria-label for screen reader accessibility"),
}
_IMAGE_CONFIDENCE = 0.95
_DECORATIVE_IMAGE_EXPLANATION = "Decorative images should have empty alt attributes to be ignored by screen readers"
_MEANINGFUL_IMAGE_EXPLANATION = "Images should have descriptive alt text for screen reader users"

_DIV_RE = re.compile(r"<div[\s>/]", re.IGNORECASE)
_COLOR_RE = re.compile(r"color\s*:", re.IGNORECASE)
_HEADING_RE = re.compile(r"<h([1-6])(?=[\s/>])", re.IGNORECASE)


class AnalysisSummarizer:
    """Derive narrative analysis, suggestions and confidence from a fix list."""

    def annotate(self, fixes: List[AccessibilityFix]) -> List[AccessibilityFix]:
        """Attach rule confidence and explanation to core fixes (copies; inputs untouched)."""
        annotated: List[AccessibilityFix] = []
        for fix in fixes:
            if fix.confidence is not None:
                annotated.append(fix)
                continue
            annotation = self._annotation_for(fix)
            if annotation is None:
                annotated.append(fix)
                continue
            confidence, explanation = annotation
            annotated.append(fix.model_copy(update={"confidence": confidence, "explanation": explanation}))
        return annotated

    @staticmethod
    def _annotation_for(fix: AccessibilityFix) -> Optional[Tuple[float, str]]:
        if fix.category == FixCategory.IMAGES:
            decorative = "decorative" in fix.summary.lower()
            return _IMAGE_CONFIDENCE, (
                _DECORATIVE_IMAGE_EXPLANATION if decorative else _MEANINGFUL_IMAGE_EXPLANATION
            )
        return _RULE_ANNOTATIONS.get(fix.selector)

    def detect_advisories(self, source: str) -> List[AccessibilityFix]:
        """
        Heuristic findings the rule engine does not rewrite.

        Checks whole-document signals: generic container overuse, inline color
        declarations, skipped heading levels, and click handlers without any
        keyboard handler.
        """
        advisories: List[AccessibilityFix] = []

        if "role=" not in source and "aria-label=" not in source:
            if len(_DIV_RE.findall(source)) > 3:
                advisories.append(
                    AccessibilityFix(
                        category=FixCategory.SEMANTICS,
                        action="Suggested semantic elements",
                        selector="div",
                        summary="Consider using semantic HTML elements (main, section, article, nav) instead of generic divs",
                        confidence=0.75,
                        explanation="Semantic HTML improves accessibility and SEO by providing meaningful structure",
                    )
                )

        if _COLOR_RE.search(source):
            advisories.append(
                AccessibilityFix(
                    category=FixCategory.ARIA,
                    action="Color contrast check",
                    selector="style",
                    summary="Verify color contrast ratios meet WCAG 2.1 AA standards (4.5:1 for normal text)",
                    confidence=0.7,
                    explanation="Insufficient color contrast makes text difficult to read for users with visual impairments",
                )
            )

        if self.has_skipped_heading_level(source):
            advisories.append(
                AccessibilityFix(
                    category=FixCategory.SEMANTICS,
                    action="Heading structure",
                    selector="h1-h6",
                    summary="Avoid skipping heading levels (e.g., h1 to h3) for proper document outline",
                    confidence=0.8,
                    explanation="Proper heading hierarchy helps screen reader users navigate content effectively",
                )
            )

        if "onClick" in source and "onKeyDown" not in source and "onKeyPress" not in source:
            advisories.append(
                AccessibilityFix(
                    category=FixCategory.KEYBOARD_NAVIGATION,
                    action="Keyboard event handling",
                    selector="interactive elements",
                    summary="Add keyboard event handlers (onKeyDown, onKeyPress) for interactive elements",
                    confidence=0.85,
                    explanation="Keyboard-only users need alternative ways to interact with clickable elements",
                )
            )

        if advisories:
            logger.debug(f"Advisory detectors raised {len(advisories)} finding(s)")
        return advisories

    @staticmethod
    def has_skipped_heading_level(source: str) -> bool:
        """True when a heading is more than one level deeper than the heading before it."""
        levels = [int(level) for level in _HEADING_RE.findall(source)]
        return any(current - previous > 1 for previous, current in zip(levels, levels[1:]))

    def summarize(self, fixes: List[AccessibilityFix], language: SourceLanguage) -> str:
        """Narrative paragraph describing the fixes."""
        total = len(fixes)
        if total == 0:
            return NO_ISSUES_ANALYSIS

        categories = _distinct_categories(fixes)
        critical = sum(1 for f in fixes if f.confidence is not None and f.confidence > CRITICAL_THRESHOLD)
        moderate = sum(
            1
            for f in fixes
            if f.confidence is not None and MODERATE_THRESHOLD < f.confidence <= CRITICAL_THRESHOLD
        )

        parts = [
            f"AI analysis found {total} accessibility {_plural(total, 'issue')} "
            f"across {len(categories)} categories."
        ]
        if critical:
            parts.append(f"{critical} critical {_plural(critical, 'issue')} require immediate attention.")
        if moderate:
            parts.append(
                f"{moderate} moderate {_plural(moderate, 'issue')} should be addressed for better accessibility."
            )
        parts.append(
            f"The most common issues relate to {' and '.join(c.value for c in categories[:2])}."
        )
        if language.is_react:
            parts.append(REACT_REMARK)
        return " ".join(parts)

    def suggest(self, fixes: List[AccessibilityFix], language: SourceLanguage) -> List[str]:
        """Improvement suggestions: one per relevant category present, plus context extras."""
        present = {f.category for f in fixes}
        suggestions = [text for category, text in CATEGORY_SUGGESTIONS if category in present]
        if language.is_react:
            suggestions.extend(REACT_SUGGESTIONS)
        if len(fixes) > 5:
            suggestions.append(AUTOMATED_TESTING_SUGGESTION)
        return suggestions

    @staticmethod
    def overall_confidence(fixes: List[AccessibilityFix]) -> float:
        """Mean confidence over fixes that carry one; 1.0 when none do."""
        scores = [f.confidence for f in fixes if f.confidence is not None]
        if not scores:
            return 1.0
        return round(sum(scores) / len(scores), 4)


def _distinct_categories(fixes: List[AccessibilityFix]) -> List[FixCategory]:
    seen: List[FixCategory] = []
    for fix in fixes:
        if fix.category not in seen:
            seen.append(fix.category)
    return seen


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"
