"""
Prolink AI - Result Envelopes
===============================

What:  The uniform `{success, ...}` envelopes returned by every capability,
       and the structured results the response parser produces.
How:   Every envelope extends CapabilityResult (success, error,
       processing_time). A success envelope fills its payload fields; a
       failure envelope leaves them at None and sets `error`.
Who:   Built by AIService; serialized by the HTTP layer.

Serialization:
    Field names are snake_case in Python and camelCase on the wire
    (`model_dump(by_alias=True)`, which FastAPI does for response models):
        processing_time -> processingTime, session_id -> sessionId, ...
"""

from typing import List, Optional

from pydantic import Field

from prolink_ai.schemas.domain import CamelModel, Property
from prolink_ai.schemas.messages import TokenUsage


# ══════════════════════════════════════════════════════════════════════════
# Parsed Results
# ══════════════════════════════════════════════════════════════════════════


class RankedRecommendation(CamelModel):
    property: Property
    rank: int
    match_score: float
    explanation: str


class PriceRange(CamelModel):
    min: float = 0
    max: float = 0


class PricePrediction(CamelModel):
    estimated_price: float = 0
    price_range: PriceRange = Field(default_factory=PriceRange)
    confidence: float
    explanation: str


class MarketAnalysis(CamelModel):
    summary: str
    trends: str
    price_analysis: str
    outlook: str
    full_analysis: str


class ImageAnalysis(CamelModel):
    description: str
    features: List[str] = Field(default_factory=list)
    condition: str
    score: float


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class CapabilityResult(CamelModel):
    """
    Common envelope fields.

    processing_time is in milliseconds, measured from invocation start to
    envelope construction.
    """
    success: bool
    error: Optional[str] = None
    processing_time: float


class ChatbotResult(CapabilityResult):
    response: Optional[str] = None
    session_id: Optional[str] = None
    token_usage: Optional[TokenUsage] = None


class RecommendationResult(CapabilityResult):
    recommendations: Optional[List[RankedRecommendation]] = None
    total_properties: Optional[int] = None


class PricePredictionResult(CapabilityResult):
    prediction: Optional[PricePrediction] = None
    confidence: Optional[float] = None


class MarketAnalysisResult(CapabilityResult):
    analysis: Optional[MarketAnalysis] = None
    data_points: Optional[int] = None


class TranslationResult(CapabilityResult):
    translation: Optional[str] = None
    source_language: Optional[str] = None
    target_language: Optional[str] = None


class ImageAnalysisResult(CapabilityResult):
    analysis: Optional[ImageAnalysis] = None
    image_url: Optional[str] = None
