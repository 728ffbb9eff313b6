"""
Prolink AI - AIService Orchestrator Tests
===========================================

What:  Every capability's success and failure path on in-memory fakes.
How:   The ai_service fixture wires FakeCompletionProvider,
       FakeTranslationProvider, in-memory repositories and stores, and a
       fixed clock. Failure tests flip the fake provider into error mode.

What we test:
    ✅ success envelopes and their payloads
    ✅ failure envelopes (never raised) with the audit error block populated
    ✅ exactly one audit record per invocation
    ✅ sampling parameters and model names sent to the provider
    ✅ audit write failures do not change the envelope
"""

import logging
from unittest.mock import MagicMock

import pytest

from prolink_ai.exceptions import ProviderError
from prolink_ai.schemas.audit import InteractionType
from prolink_ai.schemas.domain import SubjectProperty
from prolink_ai.schemas.messages import ImagePart, TextPart
from prolink_ai.services.ai_service import CHAT_SAMPLING, AIService
from prolink_ai.services.gateway import ProviderGateway
from prolink_ai.services.interaction_logger import InteractionLogger

from fakes import (
    FIXED_NOW,
    FIXED_NOW_MS,
    InMemoryIntegrationLogStore,
    InMemoryInteractionStore,
)


@pytest.fixture
def failing_provider(completion_provider):
    completion_provider.error = ProviderError(message="upstream exploded", provider="fake-llm")
    return completion_provider


# ══════════════════════════════════════════════════════════════════════════
# Chatbot
# ══════════════════════════════════════════════════════════════════════════

class TestChatbot:
    @pytest.mark.asyncio
    async def test_success(self, ai_service, completion_provider, interaction_store):
        completion_provider.text = "Hello agent"

        result = await ai_service.chatbot("Find me leads", "user-1", "es")

        assert result.success is True
        assert result.response == "Hello agent"
        assert result.session_id == f"session-user-1-{FIXED_NOW_MS}"
        assert result.token_usage.total_tokens == 42
        assert result.processing_time >= 0

        call = completion_provider.calls[0]
        system, user = call["messages"]
        assert system.role == "system"
        assert "real estate agents" in system.content
        assert system.content.endswith(" Always respond in es.")
        assert user.content == "Find me leads"
        assert call["model"] == "gpt-4"
        assert call["sampling"].temperature == 0.7
        assert call["sampling"].max_tokens == 1500
        assert call["sampling"].presence_penalty == 0.6
        assert call["sampling"].frequency_penalty == 0.3

        (record,) = interaction_store.records
        assert record.interaction_type == InteractionType.CHATBOT
        assert record.user_id == "user-1"
        assert record.response.content == "Hello agent"
        assert record.error is None
        assert record.model_info.provider == "fake-llm"

    @pytest.mark.asyncio
    async def test_session_id_from_context(self, ai_service):
        result = await ai_service.chatbot("hi", "user-1", context={"session_id": "abc"})
        assert result.session_id == "abc"

    @pytest.mark.asyncio
    async def test_numeric_session_id_is_stringified(self, ai_service, interaction_store):
        result = await ai_service.chatbot("hi", "user-1", context={"session_id": 123})

        assert result.success is True
        assert result.session_id == "123"
        assert interaction_store.records[0].session_id == "123"

    @pytest.mark.asyncio
    async def test_unknown_user(self, ai_service, completion_provider, interaction_store):
        result = await ai_service.chatbot("hi", "ghost")

        assert result.success is False
        assert "ghost" in result.error
        assert result.response is None
        assert completion_provider.calls == []
        (record,) = interaction_store.records
        assert record.error.occurred is True
        assert record.response is None

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, failing_provider, interaction_store):
        result = await ai_service.chatbot("hi", "user-1")

        assert result.success is False
        assert result.error == "upstream exploded"
        assert result.processing_time >= 0
        (record,) = interaction_store.records
        assert record.error.message == "upstream exploded"
        assert "ProviderError" in record.error.stack


# ══════════════════════════════════════════════════════════════════════════
# Recommendations
# ══════════════════════════════════════════════════════════════════════════

class TestRecommendations:
    @pytest.mark.asyncio
    async def test_success(self, ai_service, property_repository, interaction_store):
        result = await ai_service.generate_property_recommendations(
            "user-1", {"bathrooms": 1}, "en"
        )

        assert result.success is True
        assert result.total_properties == 7
        assert [r.rank for r in result.recommendations] == [1, 2, 3, 4, 5]
        assert result.recommendations[0].property.id == "prop-1"

        call = property_repository.find_calls[0]
        assert call["limit"] == 20
        assert call["sort"] == [("analytics.total_views", -1), ("created_date", -1)]
        assert call["query"]["property_type"] == {"$in": ["apartment"]}
        assert call["query"]["pricing.total_price"] == {"$gte": 100000, "$lte": 500000}
        assert call["query"]["specifications.bedrooms"] == {"$gte": 2}
        assert call["query"]["specifications.bathrooms"] == {"$gte": 1}

        (record,) = interaction_store.records
        assert record.interaction_type == InteractionType.RECOMMENDATION
        assert record.session_id == f"recommendation-user-1-{FIXED_NOW_MS}"
        assert record.input["preferences"]["preferred_locations"] == ["Lisbon"]

    @pytest.mark.asyncio
    async def test_supplied_preferences_override_stored(self, ai_service, property_repository):
        await ai_service.generate_property_recommendations("user-1", {"bedrooms": 4})
        assert property_repository.find_calls[0]["query"]["specifications.bedrooms"] == {"$gte": 4}

    @pytest.mark.asyncio
    async def test_stored_budget_wins(self, ai_service, property_repository):
        await ai_service.generate_property_recommendations(
            "user-1", {"budget_range": {"min": 1, "max": 2}}
        )
        query = property_repository.find_calls[0]["query"]
        assert query["pricing.total_price"] == {"$gte": 100000, "$lte": 500000}

    @pytest.mark.asyncio
    async def test_sampling(self, ai_service, completion_provider):
        await ai_service.generate_property_recommendations("user-1")
        sampling = completion_provider.calls[0]["sampling"]
        assert (sampling.temperature, sampling.max_tokens) == (0.5, 2000)

    @pytest.mark.asyncio
    async def test_unknown_user(self, ai_service, property_repository, interaction_store):
        result = await ai_service.generate_property_recommendations("ghost")

        assert result.success is False
        assert result.recommendations is None
        assert property_repository.find_calls == []
        assert interaction_store.records[0].error.occurred is True

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, failing_provider, interaction_store):
        result = await ai_service.generate_property_recommendations("user-1")

        assert result.success is False
        assert result.error == "upstream exploded"
        assert interaction_store.records[0].error.message == "upstream exploded"


# ══════════════════════════════════════════════════════════════════════════
# Price prediction
# ══════════════════════════════════════════════════════════════════════════

class TestPricePrediction:
    @pytest.mark.asyncio
    async def test_success(self, ai_service, property_repository, interaction_store):
        subject = {
            "property_type": "apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "total_area": 100,
            "user_id": "user-1",
        }

        result = await ai_service.predict_property_price(subject, {"trend": "up"})

        assert result.success is True
        assert result.prediction.estimated_price == 350000
        assert result.prediction.price_range.min == 320000
        assert result.prediction.price_range.max == 380000
        assert result.confidence == 0.85

        call = property_repository.find_calls[0]
        assert call["limit"] == 10
        assert call["sort"] == [("sale_details.sold_date", -1)]
        assert call["query"]["specifications.total_area"] == {"$gte": 80.0, "$lte": 120.0}

        (record,) = interaction_store.records
        assert record.user_id == "user-1"
        assert record.session_id == f"price-prediction-{FIXED_NOW_MS}"
        assert record.input["market_data"] == {"trend": "up"}

    @pytest.mark.asyncio
    async def test_accepts_subject_model(self, ai_service, completion_provider):
        result = await ai_service.predict_property_price(
            SubjectProperty(property_type="house", bedrooms=3)
        )
        assert result.success is True
        sampling = completion_provider.calls[0]["sampling"]
        assert (sampling.temperature, sampling.max_tokens) == (0.3, 1000)

    @pytest.mark.asyncio
    async def test_unparseable_answer_gives_zero_estimate(self, ai_service, completion_provider):
        completion_provider.text = "Not enough information."
        result = await ai_service.predict_property_price({"property_type": "house"})

        assert result.success is True
        assert result.prediction.estimated_price == 0

    @pytest.mark.asyncio
    async def test_numeric_user_id_is_stringified(self, ai_service, interaction_store):
        result = await ai_service.predict_property_price({"property_type": "apartment", "user_id": 7})

        assert result.success is True
        assert interaction_store.records[0].user_id == "7"

    @pytest.mark.asyncio
    async def test_invalid_subject_is_failure_envelope(self, ai_service, interaction_store):
        result = await ai_service.predict_property_price({"bedrooms": 2})

        assert result.success is False
        assert result.error
        assert interaction_store.records[0].error.occurred is True

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, failing_provider, interaction_store):
        result = await ai_service.predict_property_price({"property_type": "house"})

        assert result.success is False
        assert result.prediction is None
        assert interaction_store.records[0].error.message == "upstream exploded"


# ══════════════════════════════════════════════════════════════════════════
# Market analysis
# ══════════════════════════════════════════════════════════════════════════

class TestMarketAnalysis:
    @pytest.mark.asyncio
    async def test_success(self, ai_service, property_repository, completion_provider, interaction_store):
        completion_provider.text = "Prices are rising steadily."

        result = await ai_service.generate_market_analysis("Lisbon", "apartment", "12months", "pt-BR")

        assert result.success is True
        assert result.data_points == 1
        assert result.analysis.summary == "Prices are rising steadily."

        match = property_repository.pipelines[0][0]["$match"]
        assert match["property_type"] == "apartment"
        assert (FIXED_NOW - match["sale_details.sold_date"]["$gte"]).days == 360

        prompt = completion_provider.calls[0]["messages"][1].content
        assert "apartment properties in Lisbon" in prompt
        assert '"total_sales": 14' in prompt

        (record,) = interaction_store.records
        assert record.user_id is None
        assert record.session_id == f"market-analysis-{FIXED_NOW_MS}"

    @pytest.mark.asyncio
    async def test_no_sales_still_analyses(self, ai_service, property_repository):
        property_repository.aggregates = []
        result = await ai_service.generate_market_analysis("Porto", "villa")

        assert result.success is True
        assert result.data_points == 0

    @pytest.mark.asyncio
    async def test_sampling(self, ai_service, completion_provider):
        await ai_service.generate_market_analysis("Porto", "villa")
        sampling = completion_provider.calls[0]["sampling"]
        assert (sampling.temperature, sampling.max_tokens) == (0.4, 2500)

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, failing_provider, interaction_store):
        result = await ai_service.generate_market_analysis("Porto", "villa")

        assert result.success is False
        assert interaction_store.records[0].interaction_type == InteractionType.MARKET_ANALYSIS
        assert interaction_store.records[0].error.occurred is True


# ══════════════════════════════════════════════════════════════════════════
# Translation
# ══════════════════════════════════════════════════════════════════════════

class TestTranslation:
    @pytest.mark.asyncio
    async def test_hello_to_spanish(
        self, ai_service, translation_provider, integration_store, interaction_store
    ):
        result = await ai_service.translate_text("Hello", "es")

        assert result.success is True
        assert result.translation == "Hola"
        assert result.source_language == "auto"
        assert result.target_language == "es"
        assert result.processing_time >= 0

        assert translation_provider.calls[0]["source_language"] is None

        (log,) = integration_store.records
        assert log.response_status == "success"
        assert log.service_name == "google_translate"
        assert log.action_type == "translate_text"
        assert log.service_method == "POST"
        assert log.request_payload == {
            "text": "Hello",
            "target_language": "es",
            "source_language": "auto",
        }
        assert log.response_data["translation"] == "Hola"
        assert interaction_store.records == []

    @pytest.mark.asyncio
    async def test_explicit_source_is_forwarded(self, ai_service, translation_provider):
        result = await ai_service.translate_text("Olá", "en", "pt-BR")

        assert result.source_language == "pt-BR"
        assert translation_provider.calls[0]["source_language"] == "pt-BR"

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, translation_provider, integration_store):
        translation_provider.error = ProviderError(message="quota exceeded", provider="fake")

        result = await ai_service.translate_text("Hello", "es")

        assert result.success is False
        assert result.error == "quota exceeded"
        assert result.translation is None
        (log,) = integration_store.records
        assert log.response_status == "error"
        assert log.error.message == "quota exceeded"


# ══════════════════════════════════════════════════════════════════════════
# Image analysis
# ══════════════════════════════════════════════════════════════════════════

class TestImageAnalysis:
    @pytest.mark.asyncio
    async def test_success(self, ai_service, completion_provider, interaction_store):
        completion_provider.text = "Modern kitchen with island."
        url = "https://cdn.example.com/kitchen.jpg"

        result = await ai_service.analyze_property_image(url, "features", "en")

        assert result.success is True
        assert result.image_url == url
        assert result.analysis.description == "Modern kitchen with island."
        assert result.analysis.score == 0.85

        call = completion_provider.calls[0]
        assert call["model"] == "gpt-4o"
        (message,) = call["messages"]
        assert message.role == "user"
        text_part, image_part = message.content
        assert isinstance(text_part, TextPart)
        assert "visible features" in text_part.text
        assert isinstance(image_part, ImagePart)
        assert image_part.url == url

        (record,) = interaction_store.records
        assert record.interaction_type == InteractionType.IMAGE_ANALYSIS
        assert record.session_id == f"image-analysis-{FIXED_NOW_MS}"

    @pytest.mark.asyncio
    async def test_provider_failure(self, ai_service, failing_provider, interaction_store):
        result = await ai_service.analyze_property_image("https://x/y.jpg")

        assert result.success is False
        assert result.analysis is None
        assert interaction_store.records[0].error.occurred is True


# ══════════════════════════════════════════════════════════════════════════
# Audit failures
# ══════════════════════════════════════════════════════════════════════════

class TestAuditFailures:
    @pytest.fixture
    def broken_audit_service(self, completion_provider, translation_provider, user_repository, property_repository):
        return AIService(
            gateway=ProviderGateway(completion_provider, translation_provider),
            users=user_repository,
            properties=property_repository,
            audit=InteractionLogger(
                InMemoryInteractionStore(fail=True),
                InMemoryIntegrationLogStore(fail=True),
            ),
            clock=lambda: FIXED_NOW,
        )

    @pytest.mark.asyncio
    async def test_chat_succeeds_when_audit_write_fails(self, broken_audit_service):
        result = await broken_audit_service.chatbot("hi", "user-1")
        assert result.success is True

    @pytest.mark.asyncio
    async def test_translation_succeeds_when_log_write_fails(self, broken_audit_service):
        result = await broken_audit_service.translate_text("Hello", "es")
        assert result.success is True
        assert result.translation == "Hola"


class TestUnexpectedErrors:
    @pytest.mark.asyncio
    async def test_repository_crash_becomes_failure_envelope(self, ai_service, user_repository, interaction_store):
        async def explode(user_id):
            raise RuntimeError("connection reset")

        user_repository.find_by_id = explode

        result = await ai_service.chatbot("hi", "user-1")

        assert result.success is False
        assert result.error == "connection reset"
        assert interaction_store.records[0].error.message == "connection reset"


def test_supported_languages(ai_service):
    assert ai_service.supported_languages() == ["en", "pt-BR", "es", "ru"]
    assert ai_service.default_language == "en"


class TestUnbuildableAuditRecord:
    @pytest.mark.asyncio
    async def test_record_build_failure_is_reported_not_raised(self, ai_service, interaction_store):
        diagnostics = MagicMock(spec=logging.Logger)
        ai_service.audit.diagnostics = diagnostics

        await ai_service._record(
            InteractionType.CHATBOT,
            None,
            "user-1",
            {"query": "hi"},
            ai_service._model_info("gpt-4", CHAT_SAMPLING),
            1.0,
            error=RuntimeError("boom"),
        )

        assert interaction_store.records == []
        diagnostics.error.assert_called_once()
        assert diagnostics.error.call_args.kwargs["exc_info"] is True
