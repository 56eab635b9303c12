"""
Accessibility analysis service (rule engine + pluggable enrichment).

The rule engine always runs first and owns the rewritten code. An enrichment
backend then adds narrative analysis, suggestions and confidence scores:

- HeuristicEnrichmentBackend: deterministic, offline (default).
- LLMEnrichmentBackend: asks a model through AbstractCore for a JSON review.

Enrichment is best-effort. Any failure is logged and downgraded to the
engine-only result with a fixed advisory message; callers never see it.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    OFFLINE_PROVIDERS,
    Config,
    build_accessibility_prompt,
)
from ..models.accessibility import (
    AccessibilityFix,
    AnalysisRequest,
    AnalysisResponse,
    FixResult,
    SourceLanguage,
)
from .accessibility_fixer import AccessibilityFixer
from .analysis_summarizer import AnalysisSummarizer

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = "AI analysis unavailable. Using basic accessibility checks."
FALLBACK_SUGGESTIONS = ["Enable AI analysis for more comprehensive accessibility insights"]

ANALYSIS_CONTEXT = "Accessibility analysis for web development"


class EnrichmentError(Exception):
    """Raised by an enrichment backend when it cannot produce a usable analysis."""
    pass


class EnrichmentBackend(ABC):
    """Adds narrative analysis on top of the rule engine's result."""

    name: str = "base"

    @abstractmethod
    def enrich(self, request: AnalysisRequest, result: FixResult) -> AnalysisResponse:
        """
        Enrich a rule-engine result.

        Args:
            request: the submitted code, its language and optional context
            result: what the rule engine produced for `request.code`

        Returns:
            AnalysisResponse whose `fixed_code` is the engine's rewritten code.
        """


class HeuristicEnrichmentBackend(EnrichmentBackend):
    """Offline enrichment: rule annotations, advisory detectors and summarizer text."""

    name = "heuristic"

    def __init__(self, summarizer: Optional[AnalysisSummarizer] = None, latency_seconds: float = 0.0):
        self.summarizer = summarizer or AnalysisSummarizer()
        # Optional artificial delay for demos that want to mimic a remote model
        self.latency_seconds = max(0.0, latency_seconds)

    def enrich(self, request: AnalysisRequest, result: FixResult) -> AnalysisResponse:
        if self.latency_seconds:
            time.sleep(self.latency_seconds)

        fixes = self.summarizer.annotate(result.fixes) + self.summarizer.detect_advisories(request.code)
        return AnalysisResponse(
            fixed_code=result.code,
            fixes=fixes,
            analysis=self.summarizer.summarize(fixes, request.language),
            suggestions=self.summarizer.suggest(fixes, request.language),
            confidence=self.summarizer.overall_confidence(fixes),
        )


class LLMEnrichmentBackend(EnrichmentBackend):
    """
    Enrichment through an LLM provider (AbstractCore).

    The model only contributes findings and prose. Code rewriting stays with
    the rule engine so the output remains deterministic.
    """

    name = "llm"

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        summarizer: Optional[AnalysisSummarizer] = None,
        llm: Any = None,
    ):
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.summarizer = summarizer or AnalysisSummarizer()
        self.llm = llm

    def _get_llm(self) -> Any:
        if self.llm is None:
            from abstractcore import create_llm

            kwargs: Dict[str, Any] = {}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url
            try:
                self.llm = create_llm(self.provider, model=self.model, **kwargs)
            except Exception as e:
                raise EnrichmentError(f"Could not initialize {self.provider}/{self.model}: {e}") from e
            logger.info(f"✅ Initialized enrichment LLM: {self.provider}/{self.model}")
        return self.llm

    def enrich(self, request: AnalysisRequest, result: FixResult) -> AnalysisResponse:
        prompt = build_accessibility_prompt(request.language.value, request.code)
        if request.context:
            prompt = f"{request.context}\n{prompt}"

        response = self._get_llm().generate(
            prompt,
            max_tokens=DEFAULT_MAX_TOKENS,
            temperature=DEFAULT_TEMPERATURE,
        )
        content = response.content if hasattr(response, "content") else str(response)
        payload = parse_llm_payload(content)

        fixes = self.summarizer.annotate(result.fixes) + self._issues_to_fixes(payload.get("issues"))
        analysis = payload.get("analysis")
        if not isinstance(analysis, str) or not analysis.strip():
            analysis = self.summarizer.summarize(fixes, request.language)
        suggestions = payload.get("suggestions")
        if not isinstance(suggestions, list):
            suggestions = self.summarizer.suggest(fixes, request.language)

        return AnalysisResponse(
            fixed_code=result.code,
            fixes=fixes,
            analysis=analysis.strip(),
            suggestions=[str(s) for s in suggestions if str(s).strip()],
            confidence=self.summarizer.overall_confidence(fixes),
        )

    @staticmethod
    def _issues_to_fixes(issues: Any) -> List[AccessibilityFix]:
        if not isinstance(issues, list):
            return []

        fixes: List[AccessibilityFix] = []
        for issue in issues:
            if not isinstance(issue, dict):
                continue
            data = dict(issue)
            confidence = data.get("confidence")
            if isinstance(confidence, (int, float)):
                data["confidence"] = min(1.0, max(0.0, float(confidence)))
            line = data.get("line")
            if not isinstance(line, int) or line < 1:
                data.pop("line", None)
            try:
                fixes.append(AccessibilityFix.model_validate(data))
            except ValidationError as e:
                logger.warning(f"Discarding malformed LLM issue: {e.errors()[0].get('msg', e)}")
        return fixes


_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def parse_llm_payload(content: str) -> Dict[str, Any]:
    """
    Extract the JSON object from an LLM answer.

    Accepts bare JSON, fenced ```json blocks, or JSON surrounded by prose.
    Raises EnrichmentError when no object can be decoded.
    """
    candidates = [content]
    fenced = _JSON_FENCE_RE.search(content)
    if fenced:
        candidates.insert(0, fenced.group(1))
    start, end = content.find("{"), content.rfind("}")
    if start != -1 and end > start:
        candidates.append(content[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise EnrichmentError("LLM response did not contain a JSON object")


def build_backend(settings: Optional[Config] = None) -> EnrichmentBackend:
    """Create the enrichment backend selected by configuration."""
    if settings is None:
        from ..config import config as settings

    provider = settings.get_enrichment_provider()
    if provider in OFFLINE_PROVIDERS:
        return HeuristicEnrichmentBackend()
    return LLMEnrichmentBackend(
        provider=provider,
        model=settings.get_enrichment_model(),
        api_key=settings.get_enrichment_api_key(),
        base_url=settings.get_enrichment_base_url(),
    )


class AccessibilityAnalysisService:
    """Rule engine plus enrichment, with an engine-only fallback."""

    def __init__(self, fixer: Optional[AccessibilityFixer] = None, backend: Optional[EnrichmentBackend] = None):
        self.fixer = fixer or AccessibilityFixer()
        self.backend = backend or build_backend()

    def analyze(self, code: str, language: Union[SourceLanguage, str] = SourceLanguage.JSX) -> FixResult:
        """
        Fix accessibility issues and attach narrative analysis.

        Never raises for string input: enrichment failures return the
        engine-only result with a fallback analysis.
        """
        base = self.fixer.fix(code)
        try:
            request = AnalysisRequest(code=code, language=SourceLanguage(language), context=ANALYSIS_CONTEXT)
            response = self.backend.enrich(request, base)
        except Exception as e:
            logger.error(f"❌ Accessibility enrichment ({self.backend.name}) failed: {e}")
            return self.fallback(base)

        logger.info(
            f"Accessibility analysis ({self.backend.name}): {len(response.fixes)} finding(s), "
            f"confidence {response.confidence:.2f}"
        )
        return FixResult(
            code=response.fixed_code,
            fixes=response.fixes,
            analysis=response.analysis,
            suggestions=response.suggestions,
        )

    @staticmethod
    def fallback(base: FixResult) -> FixResult:
        """Engine-only result with the fixed advisory narrative."""
        return FixResult(
            code=base.code,
            fixes=base.fixes,
            analysis=FALLBACK_ANALYSIS,
            suggestions=list(FALLBACK_SUGGESTIONS),
        )
