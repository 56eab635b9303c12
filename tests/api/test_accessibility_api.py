"""
HTTP tests for the accessibility endpoints.

Shared service instances are swapped for deterministic ones so the results do
not depend on a local config.json or on the environment.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend.app._version import __version__
from backend.app.api import accessibility as accessibility_api
from backend.app.config import Config
from backend.app.main import app
from backend.app.services.accessibility_analysis_service import (
    FALLBACK_ANALYSIS,
    AccessibilityAnalysisService,
    HeuristicEnrichmentBackend,
)
from backend.app.services.accessibility_fixer import AccessibilityFixer


@pytest.fixture
def client(clean_env, tmp_path):
    fixer = AccessibilityFixer(placeholders={})
    clean_env.setattr(accessibility_api, "accessibility_fixer", fixer)
    clean_env.setattr(
        accessibility_api,
        "analysis_service",
        AccessibilityAnalysisService(fixer=fixer, backend=HeuristicEnrichmentBackend()),
    )
    clean_env.setattr(accessibility_api, "config", Config(config_file=tmp_path / "config.json"))
    return TestClient(app)


class TestFixEndpoint:
    def test_fix_returns_camel_case_result(self, client):
        response = client.post("/api/accessibility/fix", json={"code": '<a href="#"></a>'})

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == '<a aria-label="Link destination" href="#"></a>'
        assert body["hasChanges"] is True
        assert body["fixes"][0]["category"] == "Navigation"
        assert body["fixes"][0]["line"] == 1

    def test_clean_code(self, client):
        body = client.post("/api/accessibility/fix", json={"code": "<p>ok</p>"}).json()

        assert body["hasChanges"] is False
        assert body["fixes"] == []

    def test_missing_code_is_rejected(self, client):
        assert client.post("/api/accessibility/fix", json={}).status_code == 422


class TestAnalyzeEndpoint:
    def test_analyze_html(self, client):
        response = client.post(
            "/api/accessibility/analyze",
            json={"code": '<img src="a.png">', "language": "html"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == '<img src="a.png" alt="Descriptive text for image">'
        assert body["fixes"][0]["confidence"] == 0.95
        assert body["analysis"].startswith("AI analysis found 1 accessibility issue")
        assert len(body["suggestions"]) == 1

    def test_language_defaults_to_jsx(self, client):
        body = client.post("/api/accessibility/analyze", json={"code": "<input />"}).json()

        assert any("React Testing Library" in s for s in body["suggestions"])

    def test_unknown_language_is_rejected(self, client):
        response = client.post("/api/accessibility/analyze", json={"code": "<img>", "language": "python"})

        assert response.status_code == 422

    def test_timeout_returns_rule_engine_result(self, client, clean_env, tmp_path):
        clean_env.setenv("ENRICHMENT_TIMEOUT", "0.05")
        slow = AccessibilityAnalysisService(
            fixer=AccessibilityFixer(placeholders={}),
            backend=HeuristicEnrichmentBackend(latency_seconds=1.0),
        )
        clean_env.setattr(accessibility_api, "analysis_service", slow)

        body = client.post("/api/accessibility/analyze", json={"code": "<img>"}).json()

        assert body["analysis"] == FALLBACK_ANALYSIS
        assert body["code"] == '<img alt="Descriptive text for image">'
        assert body["fixes"][0].get("confidence") is None


class TestDiffEndpoint:
    def test_diff_rows_and_unified_text(self, client):
        response = client.post(
            "/api/accessibility/diff",
            json={"original": "a\nb", "fixed": "a\nB"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["lines"] == [
            {"type": "unchanged", "content": "a", "lineNumber": 1},
            {"type": "removed", "content": "b", "lineNumber": 2},
            {"type": "added", "content": "B", "lineNumber": 2},
        ]
        assert "+B" in body["unified"].splitlines()


class TestConfigEndpoint:
    def test_default_configuration(self, client):
        body = client.get("/api/accessibility/config").json()

        assert body == {"provider": "heuristic", "model": "heuristic", "timeoutSeconds": 30.0, "errors": []}

    def test_reports_missing_key(self, client, clean_env):
        clean_env.setenv("ENRICHMENT_PROVIDER", "openai")

        body = client.get("/api/accessibility/config").json()

        assert body["provider"] == "openai"
        assert "API key is required for openai provider" in body["errors"]


class TestSystemEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "version": __version__}

    def test_version(self, client):
        body = client.get("/api/system/version").json()

        assert body["version"] == __version__
        assert body["release_date"]
