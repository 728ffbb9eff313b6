"""
Prolink AI - Provider Gateway
===============================

What:  Single entry point for every external provider call made by AIService.
How:   Builds provider-neutral messages (vision = one user message with a
       text part and an image part), runs the provider call under the
       configured RetryPolicy, and guarantees that whatever goes wrong
       surfaces as exactly one ProviderError.
Who:   AIService.

No caching, no client-side timeout, no state between calls.
"""

import logging
from typing import List, Optional

from prolink_ai.exceptions import ProviderError
from prolink_ai.schemas.messages import (
    ChatMessage,
    Completion,
    ImagePart,
    SamplingParams,
    TextPart,
    Translation,
)
from prolink_ai.services.llm_base import CompletionProvider, TranslationProvider
from prolink_ai.services.retry import RetryPolicy, SingleAttempt

logger = logging.getLogger(__name__)


class ProviderGateway:
    def __init__(
        self,
        completion_provider: CompletionProvider,
        translation_provider: TranslationProvider,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.completion_provider = completion_provider
        self.translation_provider = translation_provider
        self.retry_policy = retry_policy or SingleAttempt()

    @property
    def completion_provider_name(self) -> str:
        return self.completion_provider.name

    @property
    def translation_provider_name(self) -> str:
        return self.translation_provider.name

    async def complete_chat(
        self,
        model: str,
        messages: List[ChatMessage],
        sampling: SamplingParams,
    ) -> Completion:
        try:
            return await self.retry_policy.call(
                self.completion_provider.complete, model, messages, sampling
            )
        except ProviderError:
            raise
        except Exception as e:
            logger.error("Unexpected completion provider error: %s", str(e), exc_info=True)
            raise ProviderError(
                message=str(e) or type(e).__name__,
                provider=self.completion_provider_name,
                cause=e,
            ) from e

    async def complete_vision(
        self,
        model: str,
        prompt_text: str,
        image_ref: str,
        sampling: SamplingParams,
    ) -> Completion:
        message = ChatMessage(
            role="user",
            content=[TextPart(text=prompt_text), ImagePart(url=image_ref)],
        )
        return await self.complete_chat(model, [message], sampling)

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
    ) -> Translation:
        try:
            return await self.retry_policy.call(
                self.translation_provider.translate, text, target_language, source_language
            )
        except ProviderError:
            raise
        except Exception as e:
            logger.error("Unexpected translation provider error: %s", str(e), exc_info=True)
            raise ProviderError(
                message=str(e) or type(e).__name__,
                provider=self.translation_provider_name,
                cause=e,
            ) from e
