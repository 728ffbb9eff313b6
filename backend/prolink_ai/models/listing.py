"""
Prolink AI - User & Property Table Mappings (read-only)
=========================================================

What:  ORM mappings of the platform's `users` and `properties` tables.
How:   SqlUserRepository and SqlPropertyRepository query these and convert
       rows into schemas.domain models. This service never writes to them and
       the Alembic migrations here do not create them; the main application
       owns their schema.

Flat columns map onto the nested domain paths used in query documents, e.g.
`pricing.total_price` -> Property.total_price (see repositories.PROPERTY_FIELDS).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from prolink_ai.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="BUYER")
    budget_min: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    budget_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    preferred_locations: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    property_preferences: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    total_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_per_sqm: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_area: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    location: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    features: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    sold_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sale_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
