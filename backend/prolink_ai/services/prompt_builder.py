"""
Prolink AI - Prompt Builder
=============================

What:  Pure functions rendering the capability-specific prompt text.
How:   Domain inputs in, strings out. No I/O, no provider calls, no clock.
       JSON embedded in prompts is rendered with sorted keys so identical
       inputs always produce identical prompts.
Who:   AIService, once per capability invocation.

Lookup tables are keyed by enums (UserRole, AnalysisType) and every lookup
has an explicit default arm: unknown roles read as BUYER, unknown analysis
types as GENERAL.
"""

import json
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from prolink_ai.schemas.domain import Property, SubjectProperty, UserRole

DEFAULT_LANGUAGE = "en"


class AnalysisType(str, Enum):
    GENERAL = "general"
    DAMAGE = "damage"
    FEATURES = "features"
    QUALITY = "quality"

    @classmethod
    def coerce(cls, value: Any) -> "AnalysisType":
        """Unknown or missing analysis types fall back to GENERAL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.GENERAL


# ── Role instructions (chatbot) ───────────────────────────────────────────
ROLE_PROMPTS: Dict[UserRole, str] = {
    UserRole.DEVELOPER: (
        "You are an AI assistant for real estate developers. Help with project "
        "management, sales optimization, and market insights."
    ),
    UserRole.AGENCY: (
        "You are an AI assistant for real estate agencies. Help with client "
        "management, property matching, and sales strategies."
    ),
    UserRole.AGENT: (
        "You are an AI assistant for real estate agents. Help with client "
        "communication, property recommendations, and closing deals."
    ),
    UserRole.BUYER: (
        "You are an AI assistant for property buyers. Help with property search, "
        "market analysis, and investment advice."
    ),
    UserRole.ADMIN: (
        "You are an AI assistant for system administrators. Help with platform "
        "management and analytics."
    ),
}

DATA_ACCESS_SENTENCE = (
    "You have access to comprehensive real estate data and can provide "
    "personalized recommendations."
)

# ── Image analysis templates ──────────────────────────────────────────────
IMAGE_ANALYSIS_PROMPTS: Dict[AnalysisType, str] = {
    AnalysisType.GENERAL: (
        "Analyze this property image and describe the features, condition, "
        "and overall appeal."
    ),
    AnalysisType.DAMAGE: (
        "Analyze this property image for any visible damage, maintenance "
        "issues, or repairs needed."
    ),
    AnalysisType.FEATURES: (
        "Identify and list all visible features and amenities in this property image."
    ),
    AnalysisType.QUALITY: (
        "Assess the quality and condition of this property based on the image."
    ),
}

# ── Fixed system instructions ─────────────────────────────────────────────
RECOMMENDATION_SYSTEM_PROMPT = (
    "You are a real estate AI assistant that provides personalized property "
    "recommendations."
)
PRICE_PREDICTION_SYSTEM_PROMPT = (
    "You are a real estate price prediction AI that provides accurate market valuations."
)
MARKET_ANALYSIS_SYSTEM_PROMPT = (
    "You are a real estate market analyst providing comprehensive market insights."
)


def _to_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str, ensure_ascii=False)


def language_directive(language: str) -> str:
    """Sentence asking the model to answer in `language`; empty for English."""
    if language == DEFAULT_LANGUAGE:
        return ""
    return f" Always respond in {language}."


def system_prompt(user_role: Any, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Role-aware system prompt for the chatbot.

    Args:
        user_role: UserRole or any stored role value (unknown -> BUYER)
        language:  Response language code; "en" adds no directive
    """
    base = ROLE_PROMPTS.get(UserRole.coerce(user_role), ROLE_PROMPTS[UserRole.BUYER])
    return f"{base} {DATA_ACCESS_SENTENCE}{language_directive(language)}"


def project_property(prop: Property) -> Dict[str, Any]:
    """Compact view of a listing: just what the model needs to rank it."""
    return {
        "id": prop.id,
        "type": prop.property_type,
        "price": prop.pricing.total_price,
        "area": prop.specifications.total_area,
        "bedrooms": prop.specifications.bedrooms,
        "bathrooms": prop.specifications.bathrooms,
        "location": prop.location,
        "features": prop.features,
    }


def project_comparable(prop: Property) -> Dict[str, Any]:
    """Listing projection plus sale facts, for price prediction."""
    data = project_property(prop)
    if prop.sale_details is not None:
        data["sale_price"] = prop.sale_details.sale_price
        data["sold_date"] = prop.sale_details.sold_date
    data["price_per_sqm"] = prop.pricing.price_per_sqm
    return data


def recommendation_prompt(
    candidates: Iterable[Property],
    preferences: Mapping[str, Any],
    language: str = DEFAULT_LANGUAGE,
) -> str:
    properties_data = [project_property(p) for p in candidates]
    return (
        f"Based on the following user preferences: {_to_json(dict(preferences))} "
        f"and available properties: {_to_json(properties_data)}, provide personalized "
        "property recommendations. Rank the top 5 properties and explain why each "
        f"is a good match. Respond in {language}."
    )


def price_prediction_prompt(
    subject: SubjectProperty,
    comparables: Iterable[Property],
    market_data: Optional[Mapping[str, Any]] = None,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    comparable_data: List[Dict[str, Any]] = [project_comparable(p) for p in comparables]
    return (
        f"Predict the market price for this property: "
        f"{_to_json(subject.model_dump(mode='json', exclude_none=True))}.\n"
        f"Similar properties: {_to_json(comparable_data)}.\n"
        f"Market data: {_to_json(dict(market_data or {}))}.\n"
        "Provide an estimated price, a price range, a confidence level, and an "
        f"explanation. Respond in {language}."
    )


def market_analysis_prompt(
    location: str,
    property_type: str,
    market_data: Any,
    timeframe: str,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    return (
        f"Analyze the real estate market for {property_type} properties in {location} "
        f"over the last {timeframe}.\n"
        f"Market data: {_to_json(market_data)}.\n"
        "Provide trends, price analysis, supply/demand insights, and future outlook. "
        f"Respond in {language}."
    )


def image_analysis_prompt(analysis_type: Any = AnalysisType.GENERAL, language: str = DEFAULT_LANGUAGE) -> str:
    template = IMAGE_ANALYSIS_PROMPTS.get(
        AnalysisType.coerce(analysis_type), IMAGE_ANALYSIS_PROMPTS[AnalysisType.GENERAL]
    )
    return f"{template} Provide a detailed analysis in {language}."
