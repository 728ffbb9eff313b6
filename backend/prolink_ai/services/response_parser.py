"""
Prolink AI - Response Parser
==============================

What:  Best-effort extraction of structured results from free provider text.
How:   Regex for prices; fixed placeholders elsewhere. Every parser accepts
       any string (including empty) and never raises.
Who:   AIService, between the provider call and the audit write.

Known simplifications (output is NOT ground truth):
    - Recommendations keep candidate order; scores and explanations are
      rank-based placeholders, not read from the model's ranking.
    - Price prediction takes the first number as the estimate and the
      min/max of all numbers as the range. Any number in the text counts,
      including percentages or bedroom counts.
    - Market analysis and image analysis return fixed descriptive fields
      alongside the raw text.
"""

import re
from typing import List, Sequence

from prolink_ai.schemas.domain import Property
from prolink_ai.schemas.results import (
    ImageAnalysis,
    MarketAnalysis,
    PricePrediction,
    PriceRange,
    RankedRecommendation,
)

TOP_RECOMMENDATIONS = 5
PRICE_CONFIDENCE = 0.85
SUMMARY_LENGTH = 200
IMAGE_CONDITION = "Good"
IMAGE_SCORE = 0.85

MARKET_TRENDS = "Positive growth trend observed"
MARKET_PRICE_ANALYSIS = "Prices have increased by 5-10% over the period"
MARKET_OUTLOOK = "Market shows strong fundamentals"

# Digit groups with optional thousands separators and optional cents,
# optionally preceded by a dollar sign: 350000, $350,000, 1,250.50
PRICE_PATTERN = re.compile(r"\$?(\d+(?:,\d{3})*(?:\.\d{2})?)")


def extract_prices(text: str) -> List[float]:
    """All currency-like numbers in `text`, in order of appearance."""
    return [float(match.group(1).replace(",", "")) for match in PRICE_PATTERN.finditer(text or "")]


def placeholder_match_score(rank: int) -> float:
    """Decreasing score by rank: 0.95, 0.90, ... Not derived from model output."""
    return round(0.95 - 0.05 * (rank - 1), 2)


def parse_recommendations(candidates: Sequence[Property]) -> List[RankedRecommendation]:
    recommendations = []
    for index, prop in enumerate(list(candidates)[:TOP_RECOMMENDATIONS]):
        rank = index + 1
        score = placeholder_match_score(rank)
        recommendations.append(
            RankedRecommendation(
                property=prop,
                rank=rank,
                match_score=score,
                explanation=(
                    f"Property matches your preferences with {round(score * 100)}% compatibility"
                ),
            )
        )
    return recommendations


def parse_price_prediction(text: str) -> PricePrediction:
    prices = extract_prices(text)
    if not prices:
        return PricePrediction(
            estimated_price=0,
            price_range=PriceRange(min=0, max=0),
            confidence=PRICE_CONFIDENCE,
            explanation=text or "",
        )
    return PricePrediction(
        estimated_price=prices[0],
        price_range=PriceRange(min=min(prices), max=max(prices)),
        confidence=PRICE_CONFIDENCE,
        explanation=text,
    )


def parse_market_analysis(text: str) -> MarketAnalysis:
    text = text or ""
    return MarketAnalysis(
        summary=text[:SUMMARY_LENGTH],
        trends=MARKET_TRENDS,
        price_analysis=MARKET_PRICE_ANALYSIS,
        outlook=MARKET_OUTLOOK,
        full_analysis=text,
    )


def parse_image_analysis(text: str) -> ImageAnalysis:
    return ImageAnalysis(
        description=text or "",
        features=[],
        condition=IMAGE_CONDITION,
        score=IMAGE_SCORE,
    )
