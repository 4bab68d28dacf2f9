"""Gemini clients: multimodal video evaluation and text embeddings.

The google-generativeai SDK is synchronous; calls run in a worker thread so
the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

import google.generativeai as genai

from ....platform.config import settings

logger = logging.getLogger(__name__)

_MODEL_CACHE: Dict[str, "genai.GenerativeModel"] = {}
_configured_key: str | None = None


def _configure(api_key: str) -> None:
    global _configured_key
    if not api_key:
        raise ValueError("GOOGLE_API_KEY is not configured")
    if api_key != _configured_key:
        genai.configure(api_key=api_key)
        _configured_key = api_key


def get_gemini_model(model_name: str) -> "genai.GenerativeModel":
    """Return a cached GenerativeModel instance for ``model_name``."""
    if model_name not in _MODEL_CACHE:
        logger.info("Creating Gemini model instance for %s", model_name)
        _MODEL_CACHE[model_name] = genai.GenerativeModel(
            model_name=model_name,
            generation_config={"temperature": 0.0},
        )
    return _MODEL_CACHE[model_name]


def _response_text(response) -> str:
    try:
        return response.text or ""
    except ValueError:
        # Raised by the SDK when the response has no text parts (blocked / empty)
        logger.warning("Gemini returned no text parts (prompt_feedback=%s)", getattr(response, "prompt_feedback", None))
        return ""


class GeminiVideoEvaluator:
    """Sends a video reference plus prompt to the multimodal model and returns raw text."""

    def __init__(self, api_key: str | None = None, model: str | None = None, mime_type: str | None = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.resolved_video_evaluation_model
        self.mime_type = mime_type or settings.VIDEO_EVALUATION_MIME_TYPE

    def _generate_sync(self, video_url: str, prompt: str) -> str:
        _configure(self.api_key)
        model = get_gemini_model(self.model)
        response = model.generate_content(
            [
                {"file_data": {"file_uri": video_url, "mime_type": self.mime_type}},
                prompt,
            ]
        )
        return _response_text(response)

    async def generate(self, video_url: str, prompt: str) -> str:
        return await asyncio.to_thread(self._generate_sync, video_url, prompt)


class GeminiEmbeddingClient:
    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.EMBEDDING_MODEL

    def _embed_sync(self, text: str) -> List[float]:
        _configure(self.api_key)
        result = genai.embed_content(model=self.model, content=text, task_type="retrieval_document")
        return list(result["embedding"])

    async def embed(self, text: str) -> List[float]:
        return await asyncio.to_thread(self._embed_sync, text)
