"""
Prolink AI - Google Translate Provider
========================================

What:  TranslationProvider using the Google Cloud Translation v2 REST API.
How:   One POST per call through httpx. The source language is omitted when
       auto-detecting, in which case Google reports the detected language.
Who:   Built by build_ai_service(); called through ProviderGateway.translate().

Request:   POST {url}?key={api_key}
           {"q": text, "target": "es", "format": "text", "source": "en"?}
Response:  {"data": {"translations": [{"translatedText": "...",
                                       "detectedSourceLanguage": "en"?}]}}
"""

import logging
from typing import Any, Dict, Optional

import httpx

from prolink_ai.exceptions import ProviderError
from prolink_ai.schemas.messages import Translation
from prolink_ai.services.llm_base import TranslationProvider

logger = logging.getLogger(__name__)


class GoogleTranslateService(TranslationProvider):
    name = "google_translate"

    def __init__(
        self,
        api_key: str,
        url: str = "https://translation.googleapis.com/language/translate/v2",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.http_client = http_client

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        params = {"key": self.api_key} if self.api_key else None
        if self.http_client is not None:
            return await self.http_client.post(self.url, params=params, json=payload)
        async with httpx.AsyncClient() as client:
            return await client.post(self.url, params=params, json=payload)

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
    ) -> Translation:
        payload: Dict[str, Any] = {"q": text, "target": target_language, "format": "text"}
        if source_language:
            payload["source"] = source_language

        try:
            response = await self._post(payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Google Translate returned HTTP %d: %s",
                e.response.status_code,
                e.response.text[:200],
            )
            raise ProviderError(
                message=f"Translation request failed with HTTP {e.response.status_code}",
                provider=self.name,
                cause=e,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google Translate request failed: %s", str(e))
            raise ProviderError(
                message=f"Translation request failed: {e}",
                provider=self.name,
                cause=e,
            ) from e

        translations = (data.get("data") or {}).get("translations") or []
        if not translations:
            raise ProviderError(
                message="Translation response contained no translations",
                provider=self.name,
            )

        first = translations[0]
        return Translation(
            translated_text=first.get("translatedText", ""),
            detected_source_language=first.get("detectedSourceLanguage"),
        )
