from __future__ import annotations

import logging

from backend.app.core.prompts import PromptVersion, Prompts
from backend.app.utils.prometheus_metrics import record_cover_letter

logger = logging.getLogger(__name__)


async def generate_cover_letter(llm_client, job_title: str, company: str) -> str:
    """
    Ask the text completion service for a short cover letter.

    Never raises and never returns empty text: any failure (transport, status,
    malformed or empty response, missing credentials) yields the fallback letter.
    """
    prompt = Prompts.get_cover_letter_prompt(PromptVersion.V1, job_title, company)

    try:
        text = await llm_client.generate_text(prompt)
        if isinstance(text, str) and text.strip():
            logger.info("✓ AI cover letter generated")
            record_cover_letter("generated")
            return text.strip()
        logger.warning("Empty response from text completion service, using fallback")
    except Exception as e:
        logger.warning(f"Cover letter generation failed: {e}")

    record_cover_letter("fallback")
    return Prompts.fallback_cover_letter(job_title, company)
