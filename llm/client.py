"""
Reasoning Engine Client

Thin wrapper over the OpenAI SDK (pointed at an OpenAI-compatible endpoint)
exposing the single call the router needs: system + user prompt in,
text out.
"""

from typing import Any, Dict, Optional

from openai import OpenAI

from app.config import (
    BASE_URL,
    MODEL_NAME,
    CLASSIFIER_TEMPERATURE,
    CLASSIFIER_MAX_TOKENS,
    CLASSIFIER_TIMEOUT,
    LOG_LLM_CALLS,
)
from infra.env import get_llm_api_key
from infra.logger import logger_llm


class LLMClient:
    """
    Engine client with deterministic, token-bounded defaults.

    Retries are disabled at the SDK level; the request timeout bounds how
    long an abandoned call can stay in flight.
    """

    def __init__(
        self,
        model: str = MODEL_NAME,
        client: Optional[OpenAI] = None,
        timeout: float = CLASSIFIER_TIMEOUT
    ):
        self.model = model
        self.client = client or OpenAI(
            api_key=get_llm_api_key(),
            base_url=BASE_URL,
            max_retries=0,
            timeout=timeout,
        )

    def call(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = CLASSIFIER_TEMPERATURE,
        max_tokens: int = CLASSIFIER_MAX_TOKENS
    ) -> str:
        """
        Send one chat completion and return the raw text.

        Raises:
            openai.OpenAIError: If the API call fails
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        if LOG_LLM_CALLS:
            logger_llm.debug(
                f"LLM_REQUEST | model={self.model} | system_length={len(system_prompt)} | "
                f"user_length={len(user_prompt)}"
            )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger_llm.error(f"LLM_API_ERROR | model={self.model} | error={str(e)[:200]}")
            raise

        raw_output = response.choices[0].message.content or ""
        usage = _extract_usage(response.usage)

        logger_llm.debug(
            f"LLM_RESPONSE | model={self.model} | length={len(raw_output)} | "
            f"tokens={usage['total_tokens']}"
        )

        return raw_output


_default_client: Optional[LLMClient] = None


def get_default_client() -> LLMClient:
    """Build the shared engine client on first use."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client


def _extract_usage(usage_obj) -> Dict[str, Any]:
    """
    Extract usage information from API response.

    Args:
        usage_obj: Usage object from API response

    Returns:
        Dictionary with usage statistics
    """
    if not usage_obj:
        return {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0
        }

    return {
        "prompt_tokens": getattr(usage_obj, "prompt_tokens", 0),
        "completion_tokens": getattr(usage_obj, "completion_tokens", 0),
        "total_tokens": getattr(usage_obj, "total_tokens", 0)
    }
