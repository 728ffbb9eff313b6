"""
Prolink AI - Capability Orchestrators
=======================================

What:  The six AI capabilities: chatbot, property recommendations, price
       prediction, market analysis, translation, and image analysis.
How:   Every capability runs the same sequence:

           build context (lookups) -> build prompt -> call provider
           -> parse -> envelope -> audit write -> return

       Any exception after start is caught at the capability boundary and
       turned into a failure envelope `{success: False, error, processing_time}`.
       The audit record is written on both paths; its own failures are
       absorbed by InteractionLogger. Capabilities never raise.
Who:   HTTP routes (via app.state.ai_service), or any other caller holding an
       AIService instance.

Construction:
    AIService takes every dependency explicitly. build_ai_service() wires the
    production ones (SQL repositories and stores, configured providers).
"""

import logging
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prolink_ai.config import Settings
from prolink_ai.exceptions import ConfigurationError, NotFoundError, ProlinkAIError
from prolink_ai.schemas.audit import (
    ErrorBlock,
    IntegrationRecord,
    InteractionRecord,
    InteractionResponse,
    InteractionType,
    ModelInfo,
)
from prolink_ai.schemas.domain import SubjectProperty
from prolink_ai.schemas.messages import ChatMessage, Completion, SamplingParams
from prolink_ai.schemas.results import (
    ChatbotResult,
    ImageAnalysisResult,
    MarketAnalysisResult,
    PricePredictionResult,
    RecommendationResult,
    TranslationResult,
)
from prolink_ai.services import prompt_builder, property_queries, response_parser
from prolink_ai.services.gateway import ProviderGateway
from prolink_ai.services.interaction_logger import InteractionLogger
from prolink_ai.services.llm_base import CompletionProvider
from prolink_ai.services.repositories import (
    PropertyRepository,
    SqlPropertyRepository,
    SqlUserRepository,
    UserRepository,
)
from prolink_ai.services.retry import build_retry_policy
from prolink_ai.services.stores import SqlIntegrationLogStore, SqlInteractionStore

logger = logging.getLogger(__name__)

# ── Sampling per capability ──────────────────────────────────────────────
CHAT_SAMPLING = SamplingParams(
    temperature=0.7, max_tokens=1500, presence_penalty=0.6, frequency_penalty=0.3
)
RECOMMENDATION_SAMPLING = SamplingParams(temperature=0.5, max_tokens=2000)
PRICE_PREDICTION_SAMPLING = SamplingParams(temperature=0.3, max_tokens=1000)
MARKET_ANALYSIS_SAMPLING = SamplingParams(temperature=0.4, max_tokens=2500)
IMAGE_ANALYSIS_SAMPLING = SamplingParams(temperature=0.3, max_tokens=1000)

DEFAULT_PRICE_CONFIDENCE = 0.8
AUTO_DETECT = "auto"

TRANSLATE_SERVICE_NAME = "google_translate"
TRANSLATE_ACTION = "translate_text"


class ModelCatalog(BaseModel):
    """Model name used by each capability."""
    chatbot: str = "gpt-4"
    recommendation: str = "gpt-4"
    price_prediction: str = "gpt-4"
    market_analysis: str = "gpt-4"
    image_analysis: str = "gpt-4o"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelCatalog":
        return cls(
            chatbot=settings.chatbot_model,
            recommendation=settings.recommendation_model,
            price_prediction=settings.price_prediction_model,
            market_analysis=settings.market_analysis_model,
            image_analysis=settings.image_analysis_model,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _error_message(error: BaseException) -> str:
    if isinstance(error, ProlinkAIError):
        return error.message
    return str(error) or type(error).__name__


def _error_block(error: BaseException) -> ErrorBlock:
    return ErrorBlock(
        message=_error_message(error),
        stack="".join(traceback.format_exception(type(error), error, error.__traceback__)),
    )


def _as_dict(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    return dict(value)


class AIService:
    """
    Orchestrates provider calls, lookups and audit logging per capability.

    Dependencies:
        gateway:     ProviderGateway (completion + translation)
        users:       UserRepository
        properties:  PropertyRepository
        audit:       InteractionLogger
        models:      ModelCatalog
        clock:       returns "now" (tz-aware); drives session ids and
                     market-analysis windows
    """

    def __init__(
        self,
        gateway: ProviderGateway,
        users: UserRepository,
        properties: PropertyRepository,
        audit: InteractionLogger,
        models: Optional[ModelCatalog] = None,
        clock: Callable[[], datetime] = _utcnow,
        supported_languages: Optional[List[str]] = None,
        default_language: str = prompt_builder.DEFAULT_LANGUAGE,
    ):
        self.gateway = gateway
        self.users = users
        self.properties = properties
        self.audit = audit
        self.models = models or ModelCatalog()
        self.clock = clock
        self._supported_languages = list(supported_languages or ["en", "pt-BR", "es", "ru"])
        self.default_language = default_language

    # ── Helpers ──────────────────────────────────────────────────────────

    def supported_languages(self) -> List[str]:
        return list(self._supported_languages)

    def _epoch_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def _model_info(self, model: str, sampling: SamplingParams) -> ModelInfo:
        return ModelInfo(
            model_name=model,
            provider=self.gateway.completion_provider_name,
            temperature=sampling.temperature,
            max_tokens=sampling.max_tokens,
        )

    async def _record(
        self,
        interaction_type: InteractionType,
        session_id: str,
        user_id: Optional[str],
        input_data: Dict[str, Any],
        model_info: ModelInfo,
        processing_time: float,
        completion: Optional[Completion] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        try:
            record = InteractionRecord(
                user_id=user_id,
                session_id=session_id,
                interaction_type=interaction_type,
                input=input_data,
                model_info=model_info,
                response=(
                    InteractionResponse(
                        content=completion.text,
                        processing_time=processing_time,
                        token_usage=completion.token_usage,
                    )
                    if completion is not None
                    else None
                ),
                error=_error_block(error) if error is not None else None,
            )
        except Exception as e:
            self.audit.diagnostics.error(
                "Could not build AI interaction record (type=%s, session=%s): %s",
                interaction_type.value,
                session_id,
                str(e),
                exc_info=True,
            )
            return
        await self.audit.log_interaction(record)

    # ══════════════════════════════════════════════════════════════════════
    # Capabilities
    # ══════════════════════════════════════════════════════════════════════

    async def chatbot(
        self,
        query: str,
        user_id: str,
        language: str = "en",
        context: Optional[Mapping[str, Any]] = None,
    ) -> ChatbotResult:
        """
        Role-aware chat turn for a known user.

        The session id comes from context["session_id"] when supplied,
        otherwise `session-{user_id}-{epoch_ms}`.
        """
        start = time.perf_counter()
        context = dict(context or {})
        session_id = str(context.get("session_id") or f"session-{user_id}-{self._epoch_ms()}")
        model = self.models.chatbot
        input_data = {"query": query, "language": language, "context": context}

        try:
            user = await self.users.find_by_id(user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            messages = [
                ChatMessage(role="system", content=prompt_builder.system_prompt(user.role, language)),
                ChatMessage(role="user", content=query),
            ]
            completion = await self.gateway.complete_chat(model, messages, CHAT_SAMPLING)
            processing_time = _elapsed_ms(start)
            result = ChatbotResult(
                success=True,
                response=completion.text,
                processing_time=processing_time,
                session_id=session_id,
                token_usage=completion.token_usage,
            )
        except Exception as e:
            logger.error("Chatbot error for user %s: %s", user_id, _error_message(e), exc_info=True)
            processing_time = _elapsed_ms(start)
            await self._record(
                InteractionType.CHATBOT, session_id, user_id, input_data,
                self._model_info(model, CHAT_SAMPLING), processing_time, error=e,
            )
            return ChatbotResult(success=False, error=_error_message(e), processing_time=processing_time)

        await self._record(
            InteractionType.CHATBOT, session_id, user_id, input_data,
            self._model_info(model, CHAT_SAMPLING), processing_time, completion=completion,
        )
        return result

    async def generate_property_recommendations(
        self,
        user_id: str,
        preferences: Optional[Mapping[str, Any]] = None,
        language: str = "en",
    ) -> RecommendationResult:
        """
        Ranks up to 20 matching listings for a known user.

        Stored preferences are merged with the supplied ones (supplied win),
        except budget_range and preferred_locations, where the user's stored
        values take precedence.
        """
        start = time.perf_counter()
        session_id = f"recommendation-{user_id}-{self._epoch_ms()}"
        model = self.models.recommendation
        preferences = _as_dict(preferences)
        merged: Dict[str, Any] = dict(preferences)

        try:
            user = await self.users.find_by_id(user_id)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            merged = {**user.property_preferences, **preferences}
            merged["budget_range"] = (
                user.budget_range.model_dump() if user.budget_range is not None
                else preferences.get("budget_range")
            )
            merged["preferred_locations"] = (
                user.preferred_locations or preferences.get("preferred_locations")
            )

            candidates = await self.properties.find(
                property_queries.build_property_query(merged),
                sort=property_queries.RECOMMENDATION_SORT,
                limit=property_queries.RECOMMENDATION_CANDIDATE_LIMIT,
            )
            messages = [
                ChatMessage(role="system", content=prompt_builder.RECOMMENDATION_SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=prompt_builder.recommendation_prompt(candidates, merged, language),
                ),
            ]
            completion = await self.gateway.complete_chat(model, messages, RECOMMENDATION_SAMPLING)
            recommendations = response_parser.parse_recommendations(candidates)
            processing_time = _elapsed_ms(start)
            result = RecommendationResult(
                success=True,
                recommendations=recommendations,
                processing_time=processing_time,
                total_properties=len(candidates),
            )
        except Exception as e:
            logger.error("Recommendation error for user %s: %s", user_id, _error_message(e), exc_info=True)
            processing_time = _elapsed_ms(start)
            await self._record(
                InteractionType.RECOMMENDATION, session_id, user_id,
                {"preferences": merged, "language": language},
                self._model_info(model, RECOMMENDATION_SAMPLING), processing_time, error=e,
            )
            return RecommendationResult(
                success=False, error=_error_message(e), processing_time=processing_time
            )

        await self._record(
            InteractionType.RECOMMENDATION, session_id, user_id,
            {"preferences": merged, "language": language},
            self._model_info(model, RECOMMENDATION_SAMPLING), processing_time, completion=completion,
        )
        return result

    async def predict_property_price(
        self,
        property_data: Union[SubjectProperty, Mapping[str, Any]],
        market_data: Optional[Mapping[str, Any]] = None,
        language: str = "en",
    ) -> PricePredictionResult:
        start = time.perf_counter()
        session_id = f"price-prediction-{self._epoch_ms()}"
        model = self.models.price_prediction
        raw_subject = _as_dict(property_data)
        user_id = raw_subject.get("user_id")
        if user_id is not None:
            user_id = str(user_id)
        input_data = {
            "property_data": raw_subject,
            "market_data": _as_dict(market_data),
            "language": language,
        }

        try:
            subject = (
                property_data if isinstance(property_data, SubjectProperty)
                else SubjectProperty.model_validate(raw_subject)
            )
            comparables = await self.properties.find(
                property_queries.build_comparables_query(subject),
                sort=property_queries.COMPARABLES_SORT,
                limit=property_queries.COMPARABLES_LIMIT,
            )
            messages = [
                ChatMessage(role="system", content=prompt_builder.PRICE_PREDICTION_SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=prompt_builder.price_prediction_prompt(
                        subject, comparables, market_data, language
                    ),
                ),
            ]
            completion = await self.gateway.complete_chat(model, messages, PRICE_PREDICTION_SAMPLING)
            prediction = response_parser.parse_price_prediction(completion.text)
            processing_time = _elapsed_ms(start)
            result = PricePredictionResult(
                success=True,
                prediction=prediction,
                processing_time=processing_time,
                confidence=prediction.confidence or DEFAULT_PRICE_CONFIDENCE,
            )
        except Exception as e:
            logger.error("Price prediction error: %s", _error_message(e), exc_info=True)
            processing_time = _elapsed_ms(start)
            await self._record(
                InteractionType.PRICE_PREDICTION, session_id, user_id, input_data,
                self._model_info(model, PRICE_PREDICTION_SAMPLING), processing_time, error=e,
            )
            return PricePredictionResult(
                success=False, error=_error_message(e), processing_time=processing_time
            )

        await self._record(
            InteractionType.PRICE_PREDICTION, session_id, user_id, input_data,
            self._model_info(model, PRICE_PREDICTION_SAMPLING), processing_time, completion=completion,
        )
        return result

    async def generate_market_analysis(
        self,
        location: str,
        property_type: str,
        timeframe: str = "6months",
        language: str = "en",
    ) -> MarketAnalysisResult:
        """
        Market narrative for one property type over a trailing window.

        The aggregate covers sold listings of the type since
        now - months x 30 days; location only shapes the prompt.
        """
        start = time.perf_counter()
        now = self.clock()
        session_id = f"market-analysis-{int(now.timestamp() * 1000)}"
        model = self.models.market_analysis
        input_data = {
            "location": location,
            "property_type": property_type,
            "timeframe": timeframe,
            "language": language,
        }

        try:
            since = property_queries.market_start_date(timeframe, now)
            market_data = await self.properties.aggregate(
                property_queries.build_market_pipeline(property_type, since)
            )
            messages = [
                ChatMessage(role="system", content=prompt_builder.MARKET_ANALYSIS_SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=prompt_builder.market_analysis_prompt(
                        location, property_type, market_data, timeframe, language
                    ),
                ),
            ]
            completion = await self.gateway.complete_chat(model, messages, MARKET_ANALYSIS_SAMPLING)
            analysis = response_parser.parse_market_analysis(completion.text)
            processing_time = _elapsed_ms(start)
            result = MarketAnalysisResult(
                success=True,
                analysis=analysis,
                processing_time=processing_time,
                data_points=len(market_data),
            )
        except Exception as e:
            logger.error(
                "Market analysis error (%s, %s): %s", location, property_type,
                _error_message(e), exc_info=True,
            )
            processing_time = _elapsed_ms(start)
            await self._record(
                InteractionType.MARKET_ANALYSIS, session_id, None, input_data,
                self._model_info(model, MARKET_ANALYSIS_SAMPLING), processing_time, error=e,
            )
            return MarketAnalysisResult(
                success=False, error=_error_message(e), processing_time=processing_time
            )

        await self._record(
            InteractionType.MARKET_ANALYSIS, session_id, None, input_data,
            self._model_info(model, MARKET_ANALYSIS_SAMPLING), processing_time, completion=completion,
        )
        return result

    async def translate_text(
        self,
        text: str,
        target_language: str,
        source_language: str = AUTO_DETECT,
    ) -> TranslationResult:
        """
        Translates through the translation provider.

        "auto" leaves source detection to the provider. The envelope echoes
        source_language as given. One IntegrationLog row per call.
        """
        start = time.perf_counter()
        request_payload = {
            "text": text,
            "target_language": target_language,
            "source_language": source_language,
        }

        try:
            translation = await self.gateway.translate(
                text,
                target_language,
                None if source_language == AUTO_DETECT else source_language,
            )
            processing_time = _elapsed_ms(start)
        except Exception as e:
            logger.error("Translation error: %s", _error_message(e), exc_info=True)
            processing_time = _elapsed_ms(start)
            await self.audit.log_integration(
                IntegrationRecord(
                    service_name=TRANSLATE_SERVICE_NAME,
                    action_type=TRANSLATE_ACTION,
                    request_payload=request_payload,
                    response_status="error",
                    error=ErrorBlock(message=_error_message(e)),
                )
            )
            return TranslationResult(
                success=False, error=_error_message(e), processing_time=processing_time
            )

        await self.audit.log_integration(
            IntegrationRecord(
                service_name=TRANSLATE_SERVICE_NAME,
                action_type=TRANSLATE_ACTION,
                request_payload=request_payload,
                response_status="success",
                response_data={
                    "translation": translation.translated_text,
                    "processing_time": processing_time,
                },
            )
        )
        return TranslationResult(
            success=True,
            translation=translation.translated_text,
            source_language=source_language,
            target_language=target_language,
            processing_time=processing_time,
        )

    async def analyze_property_image(
        self,
        image_url: str,
        analysis_type: str = "general",
        language: str = "en",
    ) -> ImageAnalysisResult:
        start = time.perf_counter()
        session_id = f"image-analysis-{self._epoch_ms()}"
        model = self.models.image_analysis
        input_data = {"image_url": image_url, "analysis_type": analysis_type, "language": language}

        try:
            completion = await self.gateway.complete_vision(
                model,
                prompt_builder.image_analysis_prompt(analysis_type, language),
                image_url,
                IMAGE_ANALYSIS_SAMPLING,
            )
            analysis = response_parser.parse_image_analysis(completion.text)
            processing_time = _elapsed_ms(start)
            result = ImageAnalysisResult(
                success=True,
                analysis=analysis,
                processing_time=processing_time,
                image_url=image_url,
            )
        except Exception as e:
            logger.error("Image analysis error for %s: %s", image_url, _error_message(e), exc_info=True)
            processing_time = _elapsed_ms(start)
            await self._record(
                InteractionType.IMAGE_ANALYSIS, session_id, None, input_data,
                self._model_info(model, IMAGE_ANALYSIS_SAMPLING), processing_time, error=e,
            )
            return ImageAnalysisResult(
                success=False, error=_error_message(e), processing_time=processing_time
            )

        await self._record(
            InteractionType.IMAGE_ANALYSIS, session_id, None, input_data,
            self._model_info(model, IMAGE_ANALYSIS_SAMPLING), processing_time, completion=completion,
        )
        return result


# ══════════════════════════════════════════════════════════════════════════
# Wiring
# ══════════════════════════════════════════════════════════════════════════

def build_completion_provider(settings: Settings) -> CompletionProvider:
    """Provider selected by COMPLETION_PROVIDER."""
    if settings.completion_provider == "openai":
        from prolink_ai.services.openai_service import OpenAIService

        return OpenAIService(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
    if settings.completion_provider == "gemini":
        from prolink_ai.services.gemini_service import GeminiService

        return GeminiService(api_key=settings.gemini_api_key)
    raise ConfigurationError(
        message=f"Unknown completion provider '{settings.completion_provider}'",
        setting="completion_provider",
    )


def build_ai_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AIService:
    """AIService with SQL repositories/stores and the configured providers."""
    from prolink_ai.services.translate_service import GoogleTranslateService

    gateway = ProviderGateway(
        completion_provider=build_completion_provider(settings),
        translation_provider=GoogleTranslateService(
            api_key=settings.google_translate_api_key,
            url=settings.google_translate_url,
        ),
        retry_policy=build_retry_policy(
            settings.retry_max_attempts, settings.retry_min_wait, settings.retry_max_wait
        ),
    )
    audit = InteractionLogger(
        interaction_store=SqlInteractionStore(session_factory),
        integration_store=SqlIntegrationLogStore(session_factory),
    )
    service = AIService(
        gateway=gateway,
        users=SqlUserRepository(session_factory),
        properties=SqlPropertyRepository(session_factory),
        audit=audit,
        models=ModelCatalog.from_settings(settings),
        supported_languages=settings.supported_languages_list,
        default_language=settings.default_language,
    )
    logger.info(
        "AIService ready (completion=%s, translation=%s)",
        gateway.completion_provider_name,
        gateway.translation_provider_name,
    )
    return service
