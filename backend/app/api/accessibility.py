"""
Accessibility API endpoints.

Thin HTTP surface over the rule engine, the analysis service and the diff
generator. The presentation layer renders fix cards, the diff view and the
raw fixed code from these responses.
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..config import config, get_provider_settings, validate_enrichment_config
from ..models.accessibility import DiffLine, FixResult, SourceLanguage
from ..services.shared import accessibility_fixer, analysis_service, diff_generator

logger = logging.getLogger(__name__)

router = APIRouter()


class FixRequest(BaseModel):
    """Request model for rule-engine fixing."""
    code: str


class AnalyzeRequest(BaseModel):
    """Request model for fixing plus narrative analysis."""
    code: str
    language: SourceLanguage = SourceLanguage.JSX


class DiffRequest(BaseModel):
    """Request model for the diff view."""
    original: str
    fixed: str


class DiffResponse(BaseModel):
    """Aligned rows for display plus a unified diff for export."""
    lines: List[DiffLine]
    unified: str


class EnrichmentConfigResponse(BaseModel):
    """Active enrichment configuration (no secrets)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: str
    model: str
    timeout_seconds: float
    errors: List[str]


@router.post("/fix", response_model=FixResult)
async def fix_code(request: FixRequest) -> FixResult:
    """
    Apply the deterministic accessibility rules.

    Returns:
        FixResult with rewritten code and the ordered fix log
    """
    return await run_in_threadpool(accessibility_fixer.fix, request.code)


@router.post("/analyze", response_model=FixResult)
async def analyze_code(request: AnalyzeRequest) -> FixResult:
    """
    Apply the rules and enrich the result with analysis and suggestions.

    The call is bounded by the configured enrichment timeout; on timeout the
    engine-only result is returned with the fallback analysis.
    """
    timeout = config.get_enrichment_timeout()
    loop = asyncio.get_running_loop()

    def _analyze():
        return analysis_service.analyze(request.code, request.language)

    # Executor futures can be abandoned on timeout; the worker thread finishes on its own
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, _analyze), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"⏱️ Accessibility analysis exceeded {timeout}s, returning rule-engine result")
        base = await run_in_threadpool(accessibility_fixer.fix, request.code)
        return analysis_service.fallback(base)


@router.post("/diff", response_model=DiffResponse)
async def diff_code(request: DiffRequest) -> DiffResponse:
    """Line-aligned diff between original and fixed code."""
    return DiffResponse(
        lines=diff_generator.generate(request.original, request.fixed),
        unified=diff_generator.unified(request.original, request.fixed),
    )


@router.get("/config", response_model=EnrichmentConfigResponse)
async def get_enrichment_config() -> EnrichmentConfigResponse:
    """Report the enrichment provider in use and any configuration problems."""
    provider = config.get_enrichment_provider()
    settings = get_provider_settings(provider, config.get_enrichment_model())
    return EnrichmentConfigResponse(
        provider=provider,
        model=settings["model"],
        timeout_seconds=config.get_enrichment_timeout(),
        errors=validate_enrichment_config(provider, config.get_enrichment_api_key()),
    )
