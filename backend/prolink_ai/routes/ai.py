"""
Prolink AI - Capability Routes
================================

What:  HTTP entry points for the six AI capabilities plus the language list.
How:   Each handler passes the validated body to AIService and returns the
       envelope unchanged. Capability failures are still HTTP 200 with
       success=false; only malformed bodies (422) and errors outside the
       orchestrators produce error statuses.
Who:   Platform frontend and other platform services.
"""

import logging

from fastapi import APIRouter, Depends, Request

from prolink_ai.schemas.common import ErrorResponse, LanguagesResponse
from prolink_ai.schemas.requests import (
    ChatRequest,
    ImageAnalysisRequest,
    MarketAnalysisRequest,
    PricePredictionRequest,
    RecommendationRequest,
    TranslationRequest,
)
from prolink_ai.schemas.results import (
    ChatbotResult,
    ImageAnalysisResult,
    MarketAnalysisResult,
    PricePredictionResult,
    RecommendationResult,
    TranslationResult,
)
from prolink_ai.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["AI"],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
)


def get_ai_service(request: Request) -> AIService:
    """The AIService built during application startup."""
    return request.app.state.ai_service


@router.post(
    "/chat",
    response_model=ChatbotResult,
    summary="Role-aware chatbot turn",
)
async def chat(body: ChatRequest, service: AIService = Depends(get_ai_service)) -> ChatbotResult:
    return await service.chatbot(body.query, body.user_id, body.language, body.context)


@router.post(
    "/recommendations",
    response_model=RecommendationResult,
    summary="Ranked property recommendations for a user",
)
async def recommendations(
    body: RecommendationRequest, service: AIService = Depends(get_ai_service)
) -> RecommendationResult:
    return await service.generate_property_recommendations(
        body.user_id, body.preferences, body.language
    )


@router.post(
    "/price-prediction",
    response_model=PricePredictionResult,
    summary="Estimated market price from sold comparables",
)
async def price_prediction(
    body: PricePredictionRequest, service: AIService = Depends(get_ai_service)
) -> PricePredictionResult:
    return await service.predict_property_price(body.property_data, body.market_data, body.language)


@router.post(
    "/market-analysis",
    response_model=MarketAnalysisResult,
    summary="Market narrative for a property type and location",
)
async def market_analysis(
    body: MarketAnalysisRequest, service: AIService = Depends(get_ai_service)
) -> MarketAnalysisResult:
    return await service.generate_market_analysis(
        body.location, body.property_type, body.timeframe, body.language
    )


@router.post(
    "/translate",
    response_model=TranslationResult,
    summary="Translate text",
)
async def translate(
    body: TranslationRequest, service: AIService = Depends(get_ai_service)
) -> TranslationResult:
    return await service.translate_text(body.text, body.target_language, body.source_language)


@router.post(
    "/image-analysis",
    response_model=ImageAnalysisResult,
    summary="Describe a property photo",
)
async def image_analysis(
    body: ImageAnalysisRequest, service: AIService = Depends(get_ai_service)
) -> ImageAnalysisResult:
    return await service.analyze_property_image(body.image_url, body.analysis_type, body.language)


@router.get(
    "/languages",
    response_model=LanguagesResponse,
    summary="Languages the capabilities can answer in",
)
async def languages(service: AIService = Depends(get_ai_service)) -> LanguagesResponse:
    return LanguagesResponse(
        supported_languages=service.supported_languages(),
        default_language=service.default_language,
    )
