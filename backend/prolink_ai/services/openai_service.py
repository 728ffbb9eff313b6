"""
Prolink AI - OpenAI Completion Provider
=========================================

What:  CompletionProvider backed by OpenAI chat completions (text + vision).
How:   AsyncOpenAI client with max_retries=0 so each call is exactly one
       network attempt; retries, if any, come from the gateway's policy.
       Vision requests send the image as an `image_url` content part.
Who:   Built by build_ai_service() when COMPLETION_PROVIDER=openai.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from prolink_ai.exceptions import ProviderError
from prolink_ai.schemas.messages import (
    ChatMessage,
    Completion,
    ImagePart,
    SamplingParams,
    TextPart,
    TokenUsage,
)
from prolink_ai.services.llm_base import CompletionProvider

logger = logging.getLogger(__name__)


def to_openai_message(message: ChatMessage) -> Dict[str, Any]:
    """Converts a ChatMessage into the OpenAI chat message dict."""
    if isinstance(message.content, str):
        return {"role": message.role, "content": message.content}

    parts: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, TextPart):
            parts.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            parts.append({"type": "image_url", "image_url": {"url": part.url}})
    return {"role": message.role, "content": parts}


class OpenAIService(CompletionProvider):
    """OpenAI chat completions for the chatbot, analysis and vision capabilities."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        if client is None and not api_key:
            logger.warning("OPENAI_API_KEY is not set; completion calls will be rejected upstream")
        # max_retries=0: single attempt per call
        self.client = client or AsyncOpenAI(
            api_key=api_key or "not-configured",
            base_url=base_url,
            max_retries=0,
        )
        logger.info("OpenAIService initialized (base_url=%s)", base_url or "default")

    async def complete(
        self,
        model: str,
        messages: List[ChatMessage],
        sampling: SamplingParams,
    ) -> Completion:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        params: Dict[str, Any] = {
            "model": model,
            "messages": [to_openai_message(m) for m in messages],
            "temperature": sampling.temperature,
            "max_tokens": sampling.max_tokens,
        }
        if sampling.presence_penalty is not None:
            params["presence_penalty"] = sampling.presence_penalty
        if sampling.frequency_penalty is not None:
            params["frequency_penalty"] = sampling.frequency_penalty

        try:
            response = await self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] OpenAI call failed after %.0fms (model=%s): %s",
                request_id,
                duration_ms,
                model,
                str(e),
            )
            raise ProviderError(
                message=f"OpenAI request failed: {e}",
                provider=self.name,
                cause=e,
                context={"request_id": request_id, "model": model},
            ) from e

        if not response.choices:
            raise ProviderError(
                message="OpenAI returned no choices",
                provider=self.name,
                context={"request_id": request_id, "model": model},
            )

        text = response.choices[0].message.content or ""
        usage = response.usage
        token_usage = TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )

        logger.info(
            "[%s] OpenAI completion in %.0fms (model=%s, tokens=%d)",
            request_id,
            (time.perf_counter() - start_time) * 1000,
            model,
            token_usage.total_tokens,
        )
        return Completion(text=text, token_usage=token_usage)

    async def health_check(self) -> bool:
        """Lists models: verifies key and connectivity without spending tokens."""
        try:
            await self.client.models.list()
            return True
        except Exception as e:
            logger.warning("OpenAI health check failed: %s", str(e))
            return False
