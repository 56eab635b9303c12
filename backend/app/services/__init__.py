"""Services for the Accessibility Fixer."""

from .accessibility_fixer import AccessibilityFixer
from .accessibility_analysis_service import AccessibilityAnalysisService
from .analysis_summarizer import AnalysisSummarizer
from .diff_service import DiffGenerator

__all__ = [
    "AccessibilityFixer",
    "AccessibilityAnalysisService",
    "AnalysisSummarizer",
    "DiffGenerator",
]
