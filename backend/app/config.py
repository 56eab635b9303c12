"""
Configuration management for the Accessibility Fixer.

Handles loading project-level configuration: the enrichment backend used for
narrative analysis, and the placeholder texts inserted by the rule engine.

Configuration priority (highest to lowest):
1. Environment variables (for Docker/container deployments)
2. config.json file (for local development)
3. Built-in defaults
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

# Config file path at project root
CONFIG_FILE = Path(__file__).parent.parent.parent / "config.json"

# Default values (used when neither env var nor config.json specifies)
DEFAULT_ENRICHMENT_PROVIDER = "heuristic"
DEFAULT_ENRICHMENT_MODEL = "gpt-4"
DEFAULT_ENRICHMENT_TIMEOUT = 30.0
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.1  # Low temperature for consistent results

# Providers that never call out to a model
OFFLINE_PROVIDERS = ("heuristic", "mock")

PLACEHOLDER_KEYS = ("image_alt", "button_label", "link_label", "input_label")


class Config:
    """
    Project-level configuration manager.

    Priority: ENV > config.json > defaults

    Environment variables for Docker:
      - ENRICHMENT_PROVIDER: heuristic (default), mock, or an AbstractCore provider
        name (openai, anthropic, ollama, lmstudio, ...)
      - ENRICHMENT_MODEL: model name for the selected provider
      - ENRICHMENT_TIMEOUT: wall-clock limit in seconds for one analysis
      - ENRICHMENT_API_KEY: API key (falls back to OPENAI_API_KEY / ANTHROPIC_API_KEY)
      - ENRICHMENT_BASE_URL: custom endpoint for the provider
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or CONFIG_FILE
        self.data = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    return json.load(f)
            except Exception as e:
                logger.error(f"Failed to load config: {e}")
                return self._default_config()
        else:
            return self._default_config()

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "enrichment": {
                "provider": DEFAULT_ENRICHMENT_PROVIDER,
                "model": DEFAULT_ENRICHMENT_MODEL,
            }
        }

    def _enrichment(self) -> Dict[str, Any]:
        return self.data.get("enrichment", {})

    def get_enrichment_provider(self) -> str:
        """
        Get configured enrichment provider.

        Priority: ENRICHMENT_PROVIDER env var > config.json > default
        """
        env_provider = os.getenv('ENRICHMENT_PROVIDER')
        if env_provider:
            return env_provider.lower()
        return str(self._enrichment().get("provider", DEFAULT_ENRICHMENT_PROVIDER)).lower()

    def get_enrichment_model(self) -> str:
        """Get configured model (ENV > config.json > default)."""
        env_model = os.getenv('ENRICHMENT_MODEL')
        if env_model:
            return env_model
        return self._enrichment().get("model", DEFAULT_ENRICHMENT_MODEL)

    def get_enrichment_api_key(self) -> Optional[str]:
        """Get API key (ENV > config.json); provider-specific env vars are the last resort."""
        env_key = os.getenv('ENRICHMENT_API_KEY')
        if env_key:
            return env_key
        config_key = self._enrichment().get("api_key")
        if config_key:
            return config_key
        return os.getenv('OPENAI_API_KEY') or os.getenv('ANTHROPIC_API_KEY')

    def get_enrichment_base_url(self) -> Optional[str]:
        """Get custom provider endpoint (ENV > config.json), None for the provider default."""
        return os.getenv('ENRICHMENT_BASE_URL') or self._enrichment().get("base_url")

    def get_enrichment_timeout(self) -> float:
        """Get the analysis timeout in seconds (ENV > config.json > default)."""
        raw = os.getenv('ENRICHMENT_TIMEOUT') or self._enrichment().get("timeout")
        if raw is None:
            return DEFAULT_ENRICHMENT_TIMEOUT
        try:
            timeout = float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid enrichment timeout {raw!r}, using {DEFAULT_ENRICHMENT_TIMEOUT}s")
            return DEFAULT_ENRICHMENT_TIMEOUT
        return timeout if timeout > 0 else DEFAULT_ENRICHMENT_TIMEOUT

    def get_placeholders(self) -> Dict[str, str]:
        """
        Get placeholder texts for the rule engine from config.json.

        Only known keys are returned; missing keys fall back to the engine defaults.
        """
        configured = self.data.get("placeholders", {}) or {}
        return {key: str(configured[key]) for key in PLACEHOLDER_KEYS if key in configured}


def get_provider_settings(provider: str, model: Optional[str] = None) -> Dict[str, Any]:
    """Get endpoint and default model for a provider."""
    if provider == "openai":
        return {"base_url": "https://api.openai.com/v1", "model": model or "gpt-4"}
    if provider == "anthropic":
        return {"base_url": "https://api.anthropic.com/v1", "model": model or "claude-3-sonnet-20240229"}
    if provider in OFFLINE_PROVIDERS:
        return {"base_url": None, "model": "heuristic"}
    return {"base_url": None, "model": model or DEFAULT_ENRICHMENT_MODEL}


def validate_enrichment_config(provider: str, api_key: Optional[str]) -> List[str]:
    """Validate enrichment configuration; returns a list of human-readable errors."""
    errors: List[str] = []

    if provider not in OFFLINE_PROVIDERS and provider not in ("ollama", "lmstudio") and not api_key:
        errors.append(f"API key is required for {provider} provider")

    if provider == "openai" and not (api_key or "").startswith("sk-"):
        errors.append("Invalid OpenAI API key format")

    if provider == "anthropic" and not (api_key or "").startswith("sk-ant-"):
        errors.append("Invalid Anthropic API key format")

    return errors


def build_accessibility_prompt(language: str, code: str) -> str:
    """Prompt asking a model for an accessibility review in JSON form."""
    return f"""
You are an expert accessibility consultant analyzing web code for WCAG 2.1 compliance.

Analyze the following {language} code for accessibility issues:

```{language}
{code}
```

Please provide:
1. A list of accessibility issues found with their severity (critical/moderate/low)
2. An overall analysis summary
3. Recommendations for improvement

Focus on:
- ARIA attributes and roles
- Keyboard navigation
- Screen reader compatibility
- Color contrast
- Semantic HTML
- Form accessibility
- Image alt text
- Focus management

Return your response in JSON format:
{{
  "issues": [
    {{
      "category": "Images|Interactive Elements|Forms|Navigation|Semantics|ARIA|Keyboard Navigation",
      "action": "specific action to take",
      "selector": "CSS selector",
      "summary": "brief description",
      "line": line number,
      "confidence": 0.0-1.0,
      "explanation": "detailed explanation"
    }}
  ],
  "analysis": "overall analysis summary",
  "suggestions": ["array of improvement suggestions"]
}}
"""


# Global config instance
config = Config()
