"""
Prolink AI - Domain Schemas (Users & Properties)
==================================================

What:  Read-only views of the platform's users and property listings.
How:   Repositories map their storage rows into these models; the
       orchestrators and prompt builders only ever see these.
Who:   UserRepository / PropertyRepository implementations, AIService,
       prompt_builder.

The broader application owns these entities. Nothing in this package creates,
updates or deletes them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; either is accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRole(str, Enum):
    """Platform roles. Each one gets its own chatbot instruction."""

    DEVELOPER = "DEVELOPER"
    AGENCY = "AGENCY"
    AGENT = "AGENT"
    BUYER = "BUYER"
    ADMIN = "ADMIN"

    @classmethod
    def coerce(cls, value: Any) -> "UserRole":
        """Maps any stored role value onto a known role; unknown roles become BUYER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.BUYER


class BudgetRange(CamelModel):
    min: Optional[float] = None
    max: Optional[float] = None


class User(CamelModel):
    """
    What:  The parts of a platform user this layer reads.

    role is kept as the raw stored string; prompt building coerces it through
    UserRole so that legacy or unknown roles still work.
    """
    id: str
    role: str = UserRole.BUYER.value
    budget_range: Optional[BudgetRange] = None
    preferred_locations: Optional[List[str]] = None
    property_preferences: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class Pricing(CamelModel):
    total_price: Optional[float] = None
    price_per_sqm: Optional[float] = None
    currency: str = "USD"


class Specifications(CamelModel):
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    total_area: Optional[float] = None


class SaleDetails(CamelModel):
    sold_date: Optional[datetime] = None
    sale_price: Optional[float] = None


class Analytics(CamelModel):
    total_views: int = 0


class Property(CamelModel):
    """
    What:  A property listing as returned by PropertyRepository.find().

    Field groups mirror the dotted paths used in query documents:
    pricing.*, specifications.*, sale_details.*, analytics.*.
    """
    id: str
    property_type: str
    status: str = "available"
    is_active: bool = True
    is_published: bool = True
    pricing: Pricing = Field(default_factory=Pricing)
    specifications: Specifications = Field(default_factory=Specifications)
    location: Dict[str, Any] = Field(default_factory=dict)
    features: List[str] = Field(default_factory=list)
    analytics: Analytics = Field(default_factory=Analytics)
    sale_details: Optional[SaleDetails] = None
    created_date: Optional[datetime] = None


class SubjectProperty(CamelModel):
    """
    What:  The caller's description of a property to value.

    Only the fields used for comparable lookup are declared; any other
    attribute the caller sends (location, features, year built, ...) is kept
    and forwarded to the price-prediction prompt.
    """
    property_type: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    total_area: Optional[float] = None
    user_id: Optional[str] = None

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)
