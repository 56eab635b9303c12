"""Data models for the Accessibility Fixer."""

from .accessibility import (
    AccessibilityFix,
    AnalysisRequest,
    AnalysisResponse,
    DiffLine,
    DiffLineType,
    FixCategory,
    FixResult,
    SourceLanguage,
)

__all__ = [
    "AccessibilityFix",
    "AnalysisRequest",
    "AnalysisResponse",
    "DiffLine",
    "DiffLineType",
    "FixCategory",
    "FixResult",
    "SourceLanguage",
]
