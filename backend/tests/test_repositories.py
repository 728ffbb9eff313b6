"""
Prolink AI - SQL Repository Tests
===================================

What:  SqlUserRepository / SqlPropertyRepository against in-memory SQLite.
How:   Rows are seeded through the ORM; queries come from the same builders
       AIService uses, so the query-document translation is exercised end to end.
"""

from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from prolink_ai.exceptions import PersistenceError
from prolink_ai.models import listing
from prolink_ai.schemas.domain import SubjectProperty
from prolink_ai.services.property_queries import (
    COMPARABLES_SORT,
    RECOMMENDATION_SORT,
    build_comparables_query,
    build_market_pipeline,
    build_property_query,
)
from prolink_ai.services.repositories import SqlPropertyRepository, SqlUserRepository


def listing_row(id, **overrides):
    data = dict(
        id=id,
        property_type="apartment",
        status="available",
        is_active=True,
        is_published=True,
        total_price=250000.0,
        price_per_sqm=2500.0,
        bedrooms=2,
        bathrooms=1,
        total_area=100.0,
        location={"city": "Lisbon"},
        features=["lift"],
        total_views=10,
        created_date=datetime(2026, 1, 1),
    )
    data.update(overrides)
    return listing.Property(**data)


@pytest_asyncio.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        session.add_all([
            listing.User(
                id="user-1",
                role="AGENCY",
                budget_min=100000,
                budget_max=400000,
                preferred_locations=["Porto"],
                property_preferences={"bedrooms": 2},
            ),
            listing.User(id="user-2", role="BUYER"),
            listing_row("a", total_views=50),
            listing_row("b", total_views=90, total_price=390000.0),
            listing_row("c", total_views=90, created_date=datetime(2026, 3, 1)),
            listing_row("too-expensive", total_price=900000.0),
            listing_row("unpublished", is_published=False),
            listing_row("villa", property_type="villa"),
            listing_row(
                "sold-1", status="sold", sale_price=240000.0, price_per_sqm=2400.0,
                sold_date=datetime(2026, 9, 1),
            ),
            listing_row(
                "sold-2", status="sold", sale_price=260000.0, price_per_sqm=2600.0,
                sold_date=datetime(2026, 8, 1), total_area=115.0,
            ),
            listing_row(
                "sold-old", status="sold", sale_price=100000.0,
                sold_date=datetime(2024, 1, 1),
            ),
            listing_row(
                "sold-big", status="sold", sale_price=500000.0,
                sold_date=datetime(2026, 9, 15), total_area=200.0,
            ),
        ])
        await session.commit()
    return session_factory


class TestSqlUserRepository:
    @pytest.mark.asyncio
    async def test_maps_budget_and_preferences(self, seeded):
        user = await SqlUserRepository(seeded).find_by_id("user-1")

        assert user.role == "AGENCY"
        assert user.budget_range.min == 100000
        assert user.budget_range.max == 400000
        assert user.preferred_locations == ["Porto"]
        assert user.property_preferences == {"bedrooms": 2}

    @pytest.mark.asyncio
    async def test_user_without_budget(self, seeded):
        user = await SqlUserRepository(seeded).find_by_id("user-2")
        assert user.budget_range is None
        assert user.property_preferences == {}

    @pytest.mark.asyncio
    async def test_missing_user(self, seeded):
        assert await SqlUserRepository(seeded).find_by_id("nobody") is None


class TestSqlPropertyRepositoryFind:
    @pytest.mark.asyncio
    async def test_recommendation_query_filters_and_sorts(self, seeded):
        query = build_property_query({
            "property_type": ["apartment"],
            "budget_range": {"min": 100000, "max": 400000},
            "bedrooms": 2,
        })

        results = await SqlPropertyRepository(seeded).find(query, sort=RECOMMENDATION_SORT, limit=20)

        # c and b tie on views; c is newer
        assert [p.id for p in results] == ["c", "b", "a"]
        assert results[0].pricing.total_price == 250000
        assert results[0].location == {"city": "Lisbon"}
        assert results[0].sale_details is None

    @pytest.mark.asyncio
    async def test_limit(self, seeded):
        results = await SqlPropertyRepository(seeded).find(
            build_property_query({}), sort=RECOMMENDATION_SORT, limit=2
        )
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_comparables_query(self, seeded):
        subject = SubjectProperty(property_type="apartment", bedrooms=2, bathrooms=1, total_area=100)

        results = await SqlPropertyRepository(seeded).find(
            build_comparables_query(subject), sort=COMPARABLES_SORT, limit=10
        )

        assert [p.id for p in results] == ["sold-1", "sold-2", "sold-old"]
        assert results[0].sale_details.sale_price == 240000

    @pytest.mark.asyncio
    async def test_unknown_field_is_rejected(self, seeded):
        with pytest.raises(ValueError, match="Unsupported property field"):
            await SqlPropertyRepository(seeded).find({"owner.name": "x"})

    @pytest.mark.asyncio
    async def test_unknown_operator_is_rejected(self, seeded):
        with pytest.raises(ValueError, match="Unsupported operator"):
            await SqlPropertyRepository(seeded).find({"status": {"$regex": "sol"}})


class TestSqlPropertyRepositoryAggregate:
    @pytest.mark.asyncio
    async def test_market_pipeline(self, seeded):
        pipeline = build_market_pipeline("apartment", datetime(2026, 4, 1))

        (summary,) = await SqlPropertyRepository(seeded).aggregate(pipeline)

        assert summary["total_sales"] == 3
        assert summary["avg_price"] == pytest.approx(1000000 / 3)
        assert summary["min_price"] == 240000
        assert summary["max_price"] == 500000
        assert "_rows" not in summary

    @pytest.mark.asyncio
    async def test_no_matching_sales(self, seeded):
        pipeline = build_market_pipeline("castle", datetime(2026, 4, 1))
        assert await SqlPropertyRepository(seeded).aggregate(pipeline) == []

    @pytest.mark.asyncio
    async def test_grouping_by_field_is_rejected(self, seeded):
        pipeline = [{"$group": {"_id": "$property_type", "n": {"$sum": 1}}}]
        with pytest.raises(ValueError):
            await SqlPropertyRepository(seeded).aggregate(pipeline)


class TestDatabaseErrors:
    @pytest_asyncio.fixture
    async def empty_factory(self):
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        yield async_sessionmaker(engine, expire_on_commit=False)
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_missing_tables_raise_persistence_error(self, empty_factory):
        with pytest.raises(PersistenceError):
            await SqlPropertyRepository(empty_factory).find({"status": "sold"})

        with pytest.raises(PersistenceError):
            await SqlUserRepository(empty_factory).find_by_id("user-1")
