"""
Prolink AI - Request Body Schemas
===================================

What:  Bodies accepted by the /api/ai endpoints.
How:   camelCase on the wire (userId, targetLanguage, ...), snake_case also
       accepted. Defaults match the AIService signatures.
"""

from typing import Any, Dict, Optional

from pydantic import Field

from prolink_ai.schemas.domain import CamelModel, SubjectProperty


class ChatRequest(CamelModel):
    query: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    language: str = "en"
    context: Dict[str, Any] = Field(default_factory=dict)


class RecommendationRequest(CamelModel):
    user_id: str = Field(min_length=1)
    preferences: Dict[str, Any] = Field(default_factory=dict)
    language: str = "en"


class PricePredictionRequest(CamelModel):
    property_data: SubjectProperty
    market_data: Dict[str, Any] = Field(default_factory=dict)
    language: str = "en"


class MarketAnalysisRequest(CamelModel):
    location: str = Field(min_length=1)
    property_type: str = Field(min_length=1)
    timeframe: str = "6months"
    language: str = "en"


class TranslationRequest(CamelModel):
    text: str = Field(min_length=1)
    target_language: str = Field(min_length=1)
    source_language: str = "auto"


class ImageAnalysisRequest(CamelModel):
    image_url: str = Field(min_length=1)
    analysis_type: str = "general"
    language: str = "en"
