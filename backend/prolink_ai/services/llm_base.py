"""
Prolink AI - Abstract Provider Interfaces
===========================================

What:  Contracts for the two external capabilities this layer consumes:
       chat/vision completion and text translation.
How:   Concrete providers (OpenAIService, GeminiService,
       GoogleTranslateService) implement these; ProviderGateway only talks to
       the abstract types, so tests swap in fakes.
Who:   Called by ProviderGateway.

Contract for every implementation:
    - one network attempt per call (retries belong to the gateway's policy)
    - no caching
    - every failure is raised as ProviderError, with the SDK/transport
      exception attached as `cause`
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from prolink_ai.schemas.messages import ChatMessage, Completion, SamplingParams, Translation


class CompletionProvider(ABC):
    """
    Chat and vision completion.

    Implementations:
        - OpenAIService: OpenAI chat completions (default)
        - GeminiService: Google Gemini via google-generativeai
    """

    # Short label recorded in audit model metadata
    name: str = "unknown"

    @abstractmethod
    async def complete(
        self,
        model: str,
        messages: List[ChatMessage],
        sampling: SamplingParams,
    ) -> Completion:
        """
        Run one completion.

        Args:
            model:    Provider model name (e.g. "gpt-4")
            messages: Ordered system/user messages; user content may mix
                      text and image parts for vision requests
            sampling: Temperature, max tokens and optional penalties

        Returns:
            Completion with the generated text and token usage.

        Raises:
            ProviderError: transport, auth, quota or malformed-response failure
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability check. Never raises."""
        ...


class TranslationProvider(ABC):
    """Machine translation of plain text."""

    name: str = "unknown"

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
    ) -> Translation:
        """
        Translate `text` into `target_language`.

        source_language=None lets the provider auto-detect.

        Raises:
            ProviderError: on any upstream failure
        """
        ...
