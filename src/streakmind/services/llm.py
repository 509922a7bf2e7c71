"""LLM service - generates conversational replies."""
from typing import List, Optional, Dict
from openai import OpenAI
from streakmind.core.config import settings
from streakmind.core.logging import logger


class GenerationError(Exception):
    """The text generation backend failed or timed out."""


class LLMService:
    """Service for LLM interactions."""

    def __init__(self, client: Optional[OpenAI] = None):
        """Initialize LLM client."""
        self.client = client or OpenAI(
            base_url=settings.llm_base_url,
            api_key=settings.llm.api_key,
            timeout=settings.llm.timeout_seconds,
            max_retries=0,
        )
        logger.info(f"LLM client initialized: {settings.llm_base_url}")

    def call(
        self,
        system_prompt: str,
        user_content: str,
        history: Optional[List[Dict]] = None,
    ) -> str:
        """Call LLM with optional conversation history."""
        messages = [{"role": "system", "content": system_prompt}]

        if history:
            messages.extend(history)

        messages.append({"role": "user", "content": user_content})

        try:
            resp = self.client.chat.completions.create(
                model=settings.llm_model_name,
                messages=messages,
                temperature=settings.llm_temperature,
            )
            content = resp.choices[0].message.content
        except Exception as e:
            logger.error(f"LLM call failed: {e}")
            raise GenerationError(str(e)) from e

        if not content or not content.strip():
            raise GenerationError("LLM returned an empty reply")
        return content.strip()

    def health_check(self) -> str:
        """Check LLM service health."""
        try:
            self.client.models.list()
            return "healthy"
        except Exception as e:
            logger.error(f"LLM health check failed: {e}")
            return f"unhealthy: {str(e)}"


_llm_service: Optional[LLMService] = None


def get_llm_service() -> LLMService:
    """Lazily create the shared LLM service."""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service
