"""
Prolink AI - Read-only Repositories
=====================================

What:  Lookup interfaces for users and properties, plus their async
       SQLAlchemy implementations.
How:   PropertyRepository accepts the query documents built in
       property_queries (dotted paths, `$in` / range operators) and a small
       aggregation pipeline (`$match` + `$group`). SqlPropertyRepository
       translates both into SQL against the `properties` table.
Who:   AIService (lookups), build_ai_service() (wiring).

Supported query document syntax:
    {"status": "sold"}                           equality
    {"property_type": {"$in": ["apartment"]}}    membership
    {"pricing.total_price": {"$gte": 1, "$lte": 2}}   ranges ($gt/$lt/$ne too)

Supported pipeline:
    [{"$match": {...}},
     {"$group": {"_id": None, "avg": {"$avg": "$path"}, "n": {"$sum": 1}, ...}}]
    Accumulators: $avg, $min, $max, $sum (1 or "$path"). Only `_id: None`
    (one summary record) is supported. An empty match yields [].
"""

import logging
import operator
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prolink_ai.exceptions import PersistenceError
from prolink_ai.models import listing
from prolink_ai.schemas.domain import (
    Analytics,
    BudgetRange,
    Pricing,
    Property,
    SaleDetails,
    Specifications,
    User,
)

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


# ══════════════════════════════════════════════════════════════════════════
# Interfaces
# ══════════════════════════════════════════════════════════════════════════

class UserRepository(ABC):
    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """The user, or None when absent."""
        ...


class PropertyRepository(ABC):
    @abstractmethod
    async def find(
        self,
        query: Mapping[str, Any],
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Property]:
        """Listings matching `query`, ordered by `sort` ((path, 1|-1) pairs)."""
        ...

    @abstractmethod
    async def aggregate(self, pipeline: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Summary records produced by a `$match` / `$group` pipeline."""
        ...


# ══════════════════════════════════════════════════════════════════════════
# SQLAlchemy implementations
# ══════════════════════════════════════════════════════════════════════════

PROPERTY_FIELDS = {
    "id": listing.Property.id,
    "property_type": listing.Property.property_type,
    "status": listing.Property.status,
    "is_active": listing.Property.is_active,
    "is_published": listing.Property.is_published,
    "pricing.total_price": listing.Property.total_price,
    "pricing.price_per_sqm": listing.Property.price_per_sqm,
    "pricing.currency": listing.Property.currency,
    "specifications.bedrooms": listing.Property.bedrooms,
    "specifications.bathrooms": listing.Property.bathrooms,
    "specifications.total_area": listing.Property.total_area,
    "analytics.total_views": listing.Property.total_views,
    "created_date": listing.Property.created_date,
    "sale_details.sold_date": listing.Property.sold_date,
    "sale_details.sale_price": listing.Property.sale_price,
}

COMPARISONS = {
    "$gte": operator.ge,
    "$gt": operator.gt,
    "$lte": operator.le,
    "$lt": operator.lt,
    "$ne": operator.ne,
}


def _column(path: str):
    try:
        return PROPERTY_FIELDS[path]
    except KeyError:
        raise ValueError(f"Unsupported property field '{path}'") from None


def _field_ref(ref: Any):
    """`"$sale_details.sale_price"` -> column."""
    if not isinstance(ref, str) or not ref.startswith("$"):
        raise ValueError(f"Expected a '$field.path' reference, got {ref!r}")
    return _column(ref[1:])


def build_conditions(query: Mapping[str, Any]) -> List[Any]:
    """Translates a query document into SQLAlchemy WHERE clauses."""
    conditions = []
    for path, condition in query.items():
        column = _column(path)
        if isinstance(condition, Mapping):
            for op, value in condition.items():
                if op == "$in":
                    conditions.append(column.in_(list(value)))
                elif op in COMPARISONS:
                    conditions.append(COMPARISONS[op](column, value))
                else:
                    raise ValueError(f"Unsupported operator '{op}' on '{path}'")
        elif condition is None:
            conditions.append(column.is_(None))
        else:
            conditions.append(column == condition)
    return conditions


def _accumulator(name: str, spec: Mapping[str, Any]):
    if len(spec) != 1:
        raise ValueError(f"Accumulator '{name}' must have exactly one operator")
    op, ref = next(iter(spec.items()))
    if op == "$avg":
        return func.avg(_field_ref(ref)).label(name)
    if op == "$min":
        return func.min(_field_ref(ref)).label(name)
    if op == "$max":
        return func.max(_field_ref(ref)).label(name)
    if op == "$sum":
        if ref == 1:
            return func.count().label(name)
        return func.sum(_field_ref(ref)).label(name)
    raise ValueError(f"Unsupported accumulator '{op}'")


def _to_domain_property(row: listing.Property) -> Property:
    sale_details = None
    if row.sold_date is not None or row.sale_price is not None:
        sale_details = SaleDetails(sold_date=row.sold_date, sale_price=row.sale_price)
    return Property(
        id=row.id,
        property_type=row.property_type,
        status=row.status,
        is_active=row.is_active,
        is_published=row.is_published,
        pricing=Pricing(
            total_price=row.total_price,
            price_per_sqm=row.price_per_sqm,
            currency=row.currency,
        ),
        specifications=Specifications(
            bedrooms=row.bedrooms,
            bathrooms=row.bathrooms,
            total_area=row.total_area,
        ),
        location=row.location or {},
        features=row.features or [],
        analytics=Analytics(total_views=row.total_views or 0),
        sale_details=sale_details,
        created_date=row.created_date,
    )


def _to_domain_user(row: listing.User) -> User:
    budget = None
    if row.budget_min is not None or row.budget_max is not None:
        budget = BudgetRange(min=row.budget_min, max=row.budget_max)
    return User(
        id=row.id,
        role=row.role,
        budget_range=budget,
        preferred_locations=row.preferred_locations,
        property_preferences=row.property_preferences or {},
    )


class SqlUserRepository(UserRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_id(self, user_id: str) -> Optional[User]:
        try:
            async with self.session_factory() as session:
                row = await session.get(listing.User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise PersistenceError(
                message="Could not load the user",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e
        return _to_domain_user(row) if row is not None else None


class SqlPropertyRepository(PropertyRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find(
        self,
        query: Mapping[str, Any],
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Property]:
        stmt = select(listing.Property).where(*build_conditions(query))
        for path, direction in sort or ():
            column = _column(path)
            stmt = stmt.order_by(column.desc().nulls_last() if direction < 0 else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error querying properties: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not query properties",
                context={"error_type": type(e).__name__},
            ) from e
        return [_to_domain_property(row) for row in rows]

    async def aggregate(self, pipeline: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        match: Dict[str, Any] = {}
        group: Optional[Mapping[str, Any]] = None
        for stage in pipeline:
            if "$match" in stage:
                match.update(stage["$match"])
            elif "$group" in stage:
                group = stage["$group"]
            else:
                raise ValueError(f"Unsupported pipeline stage {list(stage)}")
        if group is None:
            raise ValueError("Pipeline needs a $group stage")
        if group.get("_id") is not None:
            raise ValueError("Only '_id: None' grouping is supported")

        accumulators = [
            _accumulator(name, spec) for name, spec in group.items() if name != "_id"
        ]
        stmt = (
            select(func.count().label("_rows"), *accumulators)
            .select_from(listing.Property)
            .where(*build_conditions(match))
        )

        try:
            async with self.session_factory() as session:
                row = (await session.execute(stmt)).one()
        except SQLAlchemyError as e:
            logger.error("Database error aggregating properties: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not aggregate market data",
                context={"error_type": type(e).__name__},
            ) from e

        values = dict(row._mapping)
        if not values.pop("_rows"):
            return []
        return [values]
