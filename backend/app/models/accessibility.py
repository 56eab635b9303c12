"""
Accessibility fix models (deterministic markup rewrites and their report).

These models are the API surface between the rule engine and any presentation
layer (fix cards, diff view, raw fixed-code view). They are value objects:
built once per run and never mutated afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FixCategory(str, Enum):
    """Classification used to group fixes for display."""

    IMAGES = "Images"
    INTERACTIVE_ELEMENTS = "Interactive Elements"
    FORMS = "Forms"
    NAVIGATION = "Navigation"
    SEMANTICS = "Semantics"
    ARIA = "ARIA"
    KEYBOARD_NAVIGATION = "Keyboard Navigation"


class SourceLanguage(str, Enum):
    """Declared language of the submitted markup."""

    JSX = "jsx"
    HTML = "html"
    TSX = "tsx"

    @property
    def is_react(self) -> bool:
        return self in (SourceLanguage.JSX, SourceLanguage.TSX)


class _ApiModel(BaseModel):
    """Base for models serialized with camelCase keys (frontend contract)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AccessibilityFix(_ApiModel):
    """A single detected-and-corrected (or advisory) accessibility issue."""

    category: FixCategory
    action: str
    # Human-readable locator, not a guaranteed CSS selector
    selector: str
    summary: str

    # 1-based line of the match start in the submitted source
    line: Optional[int] = Field(default=None, ge=1)

    # Only set by the analysis layer (annotated core fixes and advisory findings)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    explanation: Optional[str] = None


class FixResult(_ApiModel):
    """Output of one full run over a piece of markup."""

    code: str
    fixes: List[AccessibilityFix] = Field(default_factory=list)
    has_changes: bool = False

    analysis: Optional[str] = None
    suggestions: Optional[List[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_has_changes(cls, data):
        # has_changes is a function of fixes; never trust a caller-provided value
        if isinstance(data, dict):
            data = dict(data)
            data.pop("hasChanges", None)
            data["has_changes"] = len(data.get("fixes") or []) > 0
        return data


class DiffLineType(str, Enum):
    """Row type in the aligned diff view."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class DiffLine(_ApiModel):
    """One row of aligned output, in display order."""

    type: DiffLineType
    content: str
    # 1-based, in whichever side the content came from
    line_number: Optional[int] = None


class AnalysisRequest(_ApiModel):
    """Input to an enrichment backend."""

    code: str
    language: SourceLanguage = SourceLanguage.JSX
    context: Optional[str] = None


class AnalysisResponse(_ApiModel):
    """Output of an enrichment backend."""

    fixed_code: str
    fixes: List[AccessibilityFix] = Field(default_factory=list)
    analysis: str
    suggestions: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
