from backend.app.core.exceptions import UpstreamGenerationError


class NullLLMClient:
    """Non-None default when no API key is configured. Fails only when called."""
    async def generate_text(self, prompt: str) -> str:
        raise UpstreamGenerationError("LLM not configured. Set GEMINI_API_KEY.")
