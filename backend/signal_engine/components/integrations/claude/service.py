"""
Anthropic Claude service for report narrative and recommendation text.

Calls walk a deterministic model fallback chain so a retired Haiku alias does
not take report generation down with it.
"""

import logging

from anthropic import Anthropic
from ....platform.config import settings

logger = logging.getLogger(__name__)

PRIMARY_HAIKU_MODEL = "claude-3-5-haiku-latest"
SNAPSHOT_HAIKU_MODEL = "claude-3-5-haiku-20241022"
LEGACY_HAIKU_MODEL = "claude-3-haiku-20240307"
HAIKU_ALIASES = (PRIMARY_HAIKU_MODEL, SNAPSHOT_HAIKU_MODEL, LEGACY_HAIKU_MODEL)

JSON_SYSTEM_PROMPT = "You are an expert hiring assessor. Respond ONLY with valid JSON."


def candidate_models_for(model: str | None) -> list[str]:
    """Configured model first, then the Haiku chain when the model is a Haiku alias."""
    resolved = (model or "").strip() or PRIMARY_HAIKU_MODEL
    candidates = [resolved]
    if resolved.lower() in HAIKU_ALIASES:
        candidates.extend(m for m in HAIKU_ALIASES if m not in candidates)
    return candidates


def is_model_not_found_error(exc: Exception) -> bool:
    text = str(exc or "").lower()
    return bool(text) and (
        "not_found_error" in text
        or ("model" in text and "not found" in text)
        or ("error code: 404" in text and "model" in text)
    )


class ClaudeService:
    """Service for interacting with the Anthropic Claude API."""

    def __init__(self, api_key: str, client=None):
        """
        Initialise the Claude service.

        Args:
            api_key: Anthropic API key.
            client: Optional pre-built client (tests pass a fake).
        """
        self.client = client or Anthropic(api_key=api_key)
        self.model = settings.resolved_claude_model
        self.max_tokens_per_response = settings.MAX_TOKENS_PER_RESPONSE
        logger.info("ClaudeService initialised with model=%s", self.model)

    def generate_json(self, prompt: str, system: str = None) -> dict:
        """
        Send a single-turn prompt that expects a JSON answer.

        Returns:
            Dict with keys: success, content, model, error.
        """
        last_model_error = None
        for candidate_model in candidate_models_for(self.model):
            try:
                response = self.client.messages.create(
                    model=candidate_model,
                    max_tokens=self.max_tokens_per_response,
                    system=system or JSON_SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": prompt}],
                )
            except Exception as exc:
                if is_model_not_found_error(exc):
                    last_model_error = exc
                    logger.warning("Claude model unavailable (model=%s): %s", candidate_model, exc)
                    continue
                logger.error("Claude request failed (model=%s): %s", candidate_model, exc)
                return {"success": False, "content": "", "model": candidate_model, "error": str(exc)}

            if candidate_model != self.model:
                logger.warning(
                    "Fell back to Claude model=%s after primary model=%s was unavailable",
                    candidate_model,
                    self.model,
                )
            content = response.content[0].text if response.content else ""
            return {"success": True, "content": content, "model": candidate_model, "error": None}

        return {
            "success": False,
            "content": "",
            "model": None,
            "error": f"No Claude model available: {last_model_error}",
        }
