import asyncio
import logging
from functools import lru_cache
from typing import Optional, Protocol

from google import genai
from google.genai import types

from backend.app.config import get_settings
from backend.app.core.exceptions import UpstreamGenerationError
from backend.app.services.null_llm import NullLLMClient

logger = logging.getLogger(__name__)


class TextCompletionClient(Protocol):
    async def generate_text(self, prompt: str) -> str: ...


class GeminiClient:
    """
    Single-shot text completion against the Gemini API.

    One request per call, bounded by ``timeout_seconds``. Errors are raised as
    ``UpstreamGenerationError``; callers decide what to fall back to.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float,
        base_url: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.model = model
        self.timeout_seconds = timeout_seconds
        if client is None:
            http_options = types.HttpOptions(
                base_url=base_url,
                timeout=int(timeout_seconds * 1000),
            )
            client = genai.Client(api_key=api_key, http_options=http_options)
        self.client = client

    async def generate_text(self, prompt: str) -> str:
        logger.debug(f"Gemini request: model={self.model}")
        try:
            resp = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=types.GenerateContentConfig(temperature=0.7),
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamGenerationError(f"Gemini request timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise UpstreamGenerationError(f"Gemini request failed: {e}") from e

        try:
            text = resp.text
        except (AttributeError, ValueError, IndexError) as e:
            raise UpstreamGenerationError(f"Malformed Gemini response: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise UpstreamGenerationError("Empty response from Gemini API")
        return text.strip()


@lru_cache
def get_llm_client() -> TextCompletionClient:
    settings = get_settings()
    if settings.gemini_api_key is None:
        logger.warning("GEMINI_API_KEY not set - cover letters will use the fallback text")
        return NullLLMClient()
    return GeminiClient(
        api_key=settings.gemini_api_key.get_secret_value(),
        model=settings.gemini_model,
        timeout_seconds=settings.llm_timeout_seconds,
        base_url=settings.gemini_base_url,
    )
