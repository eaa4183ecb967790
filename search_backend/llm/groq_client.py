from __future__ import annotations

import logging

from groq import AsyncGroq

from ..errors import CompletionError
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)


async def complete(prompt: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> str:
    """
    Send ``prompt`` as a single user message and return the response text.

    No output schema is enforced. Raises ``CompletionError`` on any API
    failure so callers can report it as retryable.
    """
    if not config.api_key:
        raise CompletionError("GROQ_API_KEY is not configured")

    try:
        async with AsyncGroq(api_key=config.api_key, timeout=config.timeout) as client:
            response = await client.chat.completions.create(
                model=config.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=config.max_tokens,
                temperature=config.temperature,
            )
    except Exception as exc:
        logger.warning("Groq completion call failed", exc_info=True)
        raise CompletionError(f"Completion service unavailable: {exc}") from exc

    if not response.choices:
        raise CompletionError("Completion service returned no choices")
    return response.choices[0].message.content or ""
