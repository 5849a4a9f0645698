"""
LLM service layer: chat completions through Groq.

The podcast pipeline talks to the completion API only through
LLMService.complete, so tests can substitute any object with the same method.
"""

import logging
from typing import Dict, List

from groq import AsyncGroq, GroqError

from app.config import get_settings
from app.errors import GenerationFailure

logger = logging.getLogger(__name__)


class LLMService:
    """Encapsulates all LLM calls. Requires GROQ_API_KEY."""

    async def complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the text of the first choice, or "" when the model sent none."""
        api_key = (get_settings().groq_api_key or "").strip()
        if not api_key:
            raise GenerationFailure("GROQ_API_KEY is not set; cannot call the completion service")

        client = AsyncGroq(api_key=api_key)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except GroqError as e:
            logger.exception("Groq API error: %s", e)
            raise GenerationFailure(f"Completion service error: {e}") from e

        if not response.choices:
            return ""
        content = response.choices[0].message.content or ""
        logger.info("Groq returned %d characters (model=%s)", len(content), model)
        return content


llm_service = LLMService()
