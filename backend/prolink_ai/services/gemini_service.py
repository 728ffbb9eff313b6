"""
Prolink AI - Google Gemini Completion Provider
================================================

What:  CompletionProvider backed by Google Gemini (google-generativeai SDK).
How:   System messages become the model's system_instruction; user messages
       become content parts. Image references are fetched over HTTP with
       httpx and sent inline as bytes, since Gemini does not accept arbitrary
       image URLs. Sampling parameters map onto GenerationConfig.
Who:   Built by build_ai_service() when COMPLETION_PROVIDER=gemini.

Model names:
    The per-capability model settings must name Gemini models
    (e.g. gemini-1.5-flash) when this provider is selected.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import google.generativeai as genai
import httpx

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

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


class GeminiService(CompletionProvider):
    """
    Google Gemini implementation of chat and vision completion.

    Error Handling:
        Any SDK error (API errors, blocked responses raising on `.text`) and
        any image download failure is wrapped in ProviderError. One attempt
        per call; retries belong to the gateway's policy.
    """

    name = "gemini"

    def __init__(self, api_key: str, http_client: Optional[httpx.AsyncClient] = None):
        # The SDK keeps auth in module-level state
        if api_key:
            genai.configure(api_key=api_key)
        else:
            logger.warning("GEMINI_API_KEY is not set; completion calls will be rejected upstream")
        self.http_client = http_client
        logger.info("GeminiService initialized")

    async def _fetch_image(self, url: str) -> Dict[str, Any]:
        """Downloads an image reference into a Gemini inline-data part."""
        if self.http_client is not None:
            response = await self.http_client.get(url)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(url)
        response.raise_for_status()
        mime_type = response.headers.get("content-type", DEFAULT_IMAGE_MIME_TYPE).split(";")[0]
        return {"mime_type": mime_type, "data": response.content}

    async def _build_contents(self, messages: List[ChatMessage]) -> List[Any]:
        contents: List[Any] = []
        for message in messages:
            if message.role == "system":
                continue
            if isinstance(message.content, str):
                contents.append(message.content)
                continue
            for part in message.content:
                if isinstance(part, TextPart):
                    contents.append(part.text)
                elif isinstance(part, ImagePart):
                    contents.append(await self._fetch_image(part.url))
        return contents

    async def complete(
        self,
        model: str,
        messages: List[ChatMessage],
        sampling: SamplingParams,
    ) -> Completion:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        system_text = "\n".join(m.text() for m in messages if m.role == "system")

        try:
            contents = await self._build_contents(messages)
            generative_model = genai.GenerativeModel(
                model,
                system_instruction=system_text or None,
            )
            response = await generative_model.generate_content_async(
                contents,
                generation_config=genai.GenerationConfig(
                    temperature=sampling.temperature,
                    max_output_tokens=sampling.max_tokens,
                    presence_penalty=sampling.presence_penalty,
                    frequency_penalty=sampling.frequency_penalty,
                ),
            )
            text = response.text.strip() if response.text else ""
        except Exception as e:
            # The SDK raises generic exceptions for API errors and blocked output
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] Gemini call failed after %.0fms (model=%s): %s",
                request_id,
                duration_ms,
                model,
                str(e),
            )
            raise ProviderError(
                message=f"Gemini request failed: {e}",
                provider=self.name,
                cause=e,
                context={"request_id": request_id, "model": model},
            ) from e

        usage = getattr(response, "usage_metadata", None)
        token_usage = TokenUsage(
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            total_tokens=getattr(usage, "total_token_count", 0) or 0,
        )

        logger.info(
            "[%s] Gemini completion in %.0fms (model=%s, %d chars)",
            request_id,
            (time.perf_counter() - start_time) * 1000,
            model,
            len(text),
        )
        return Completion(text=text, token_usage=token_usage)

    async def health_check(self) -> bool:
        """Lists models (no token cost) to verify key and connectivity."""
        try:
            models = genai.list_models()
            return any(True for _ in models)
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
