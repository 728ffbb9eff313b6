"""
Prolink AI - Property Query Builders
======================================

What:  Builds the filter documents and aggregation pipelines AIService sends
       to PropertyRepository.
How:   Plain dicts with dotted field paths and `$in` / `$gte` / `$lte`
       operators, so any repository backend (SQL, document store, fakes in
       tests) can interpret them.

    build_property_query()      recommendation candidates
    build_comparables_query()   sold comparables for price prediction
    build_market_pipeline()     sold-since aggregation for market analysis
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from prolink_ai.schemas.domain import SubjectProperty

RECOMMENDATION_CANDIDATE_LIMIT = 20
RECOMMENDATION_SORT = [("analytics.total_views", -1), ("created_date", -1)]

COMPARABLES_LIMIT = 10
COMPARABLES_SORT = [("sale_details.sold_date", -1)]
COMPARABLE_AREA_TOLERANCE = 0.2

TIMEFRAME_MONTHS = {
    "3months": 3,
    "6months": 6,
    "12months": 12,
    "24months": 24,
}
DEFAULT_TIMEFRAME_MONTHS = 6
DAYS_PER_MONTH = 30


def _get(preferences: Mapping[str, Any], key: str) -> Any:
    value = preferences.get(key)
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value


def build_property_query(preferences: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Filter for recommendation candidates.

    Always restricted to active, published, available listings. Optional
    preference keys: property_type (list), budget_range {min, max},
    bedrooms / bathrooms (minimums), min_area / max_area.
    """
    query: Dict[str, Any] = {
        "is_active": True,
        "is_published": True,
        "status": "available",
    }

    property_types = _get(preferences, "property_type")
    if property_types:
        if isinstance(property_types, str):
            property_types = [property_types]
        query["property_type"] = {"$in": list(property_types)}

    budget = _get(preferences, "budget_range")
    if budget:
        price_range: Dict[str, Any] = {"$gte": budget.get("min") or 0}
        if budget.get("max"):
            price_range["$lte"] = budget["max"]
        query["pricing.total_price"] = price_range

    if _get(preferences, "bedrooms"):
        query["specifications.bedrooms"] = {"$gte": preferences["bedrooms"]}

    if _get(preferences, "bathrooms"):
        query["specifications.bathrooms"] = {"$gte": preferences["bathrooms"]}

    area_range: Dict[str, Any] = {}
    if _get(preferences, "min_area"):
        area_range["$gte"] = preferences["min_area"]
    if _get(preferences, "max_area"):
        area_range["$lte"] = preferences["max_area"]
    if area_range:
        query["specifications.total_area"] = area_range

    return query


def build_comparables_query(subject: SubjectProperty) -> Dict[str, Any]:
    """Sold listings of the same type and layout with area within +/-20%."""
    query: Dict[str, Any] = {
        "is_active": True,
        "status": "sold",
        "property_type": subject.property_type,
        "specifications.bedrooms": subject.bedrooms,
        "specifications.bathrooms": subject.bathrooms,
    }
    if subject.total_area is not None:
        query["specifications.total_area"] = {
            "$gte": subject.total_area * (1 - COMPARABLE_AREA_TOLERANCE),
            "$lte": subject.total_area * (1 + COMPARABLE_AREA_TOLERANCE),
        }
    return query


def timeframe_to_months(timeframe: Optional[str]) -> int:
    return TIMEFRAME_MONTHS.get(timeframe or "", DEFAULT_TIMEFRAME_MONTHS)


def market_start_date(timeframe: Optional[str], now: datetime) -> datetime:
    """now minus (months x 30 days)."""
    return now - timedelta(days=timeframe_to_months(timeframe) * DAYS_PER_MONTH)


def build_market_pipeline(property_type: str, since: datetime) -> List[Dict[str, Any]]:
    """Sold listings of one type since `since`, reduced to one summary record."""
    return [
        {
            "$match": {
                "property_type": property_type,
                "status": "sold",
                "sale_details.sold_date": {"$gte": since},
            }
        },
        {
            "$group": {
                "_id": None,
                "avg_price": {"$avg": "$sale_details.sale_price"},
                "avg_price_per_sqm": {"$avg": "$pricing.price_per_sqm"},
                "total_sales": {"$sum": 1},
                "min_price": {"$min": "$sale_details.sale_price"},
                "max_price": {"$max": "$sale_details.sale_price"},
            }
        },
    ]
