"""
Shared service instances to ensure consistency across API endpoints.

The services only hold static configuration (placeholder texts, the selected
enrichment backend) and are never mutated per request.
"""

from ..config import config
from .accessibility_analysis_service import AccessibilityAnalysisService, build_backend
from .accessibility_fixer import AccessibilityFixer
from .diff_service import DiffGenerator

accessibility_fixer = AccessibilityFixer(placeholders=config.get_placeholders())
analysis_service = AccessibilityAnalysisService(fixer=accessibility_fixer, backend=build_backend(config))
diff_generator = DiffGenerator()

__all__ = ["accessibility_fixer", "analysis_service", "diff_generator"]
