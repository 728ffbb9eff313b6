"""
Prolink AI - Google Translate Provider Tests
==============================================

httpx.MockTransport stands in for the Translation API.
"""

import json

import httpx
import pytest

from prolink_ai.exceptions import ProviderError
from prolink_ai.services.translate_service import GoogleTranslateService

URL = "https://translation.example.com/v2"


def service_with(handler) -> GoogleTranslateService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleTranslateService(api_key="test-key", url=URL, http_client=client)


class TestGoogleTranslateService:
    @pytest.mark.asyncio
    async def test_auto_detect_omits_source(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "data": {"translations": [{"translatedText": "Hola", "detectedSourceLanguage": "en"}]}
            })

        translation = await service_with(handler).translate("Hello", "es")

        assert translation.translated_text == "Hola"
        assert translation.detected_source_language == "en"
        assert seen["params"] == {"key": "test-key"}
        assert seen["body"] == {"q": "Hello", "target": "es", "format": "text"}

    @pytest.mark.asyncio
    async def test_explicit_source_is_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hi"}]}})

        translation = await service_with(handler).translate("Olá", "en", "pt-BR")

        assert seen["body"]["source"] == "pt-BR"
        assert translation.detected_source_language is None

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        service = service_with(lambda request: httpx.Response(403, json={"error": "forbidden"}))

        with pytest.raises(ProviderError, match="HTTP 403") as exc_info:
            await service.translate("Hello", "es")
        assert exc_info.value.provider == "google_translate"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError):
            await service_with(handler).translate("Hello", "es")

    @pytest.mark.asyncio
    async def test_empty_translations(self):
        service = service_with(lambda request: httpx.Response(200, json={"data": {"translations": []}}))

        with pytest.raises(ProviderError, match="no translations"):
            await service.translate("Hello", "es")
