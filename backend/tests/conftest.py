"""
Prolink AI - Test Configuration (conftest.py)
===============================================

What:  Shared fixtures for the test suite.
How:   Environment variables are set before any prolink_ai import so the
       settings singleton and module-level engine point at in-memory SQLite.
       Providers, repositories and stores are the in-memory fakes from
       fakes.py.

Fixture Hierarchy (all function-scoped):
    ├── completion_provider / translation_provider   scripted providers
    ├── interaction_store / integration_store        in-memory audit stores
    ├── user_repository / property_repository        in-memory lookups
    ├── ai_service                                   AIService on the fakes
    ├── session_factory                              aiosqlite, tables created
    └── test_client                                  httpx client on the app
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = "test-key-not-real"
os.environ["GOOGLE_TRANSLATE_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import List  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from prolink_ai.database import Base  # noqa: E402
from prolink_ai.models import integration_log, interaction, listing  # noqa: E402,F401
from prolink_ai.schemas.domain import BudgetRange, Property, User  # noqa: E402
from prolink_ai.services.ai_service import AIService, ModelCatalog  # noqa: E402
from prolink_ai.services.gateway import ProviderGateway  # noqa: E402
from prolink_ai.services.interaction_logger import InteractionLogger  # noqa: E402

from fakes import (  # noqa: E402
    FIXED_NOW,
    FakeCompletionProvider,
    FakeTranslationProvider,
    InMemoryIntegrationLogStore,
    InMemoryInteractionStore,
    InMemoryPropertyRepository,
    InMemoryUserRepository,
    make_property,
)


# ══════════════════════════════════════════════════════════════════════════
# Sample data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_user() -> User:
    return User(
        id="user-1",
        role="AGENT",
        budget_range=BudgetRange(min=100000, max=500000),
        preferred_locations=["Lisbon"],
        property_preferences={"property_type": ["apartment"], "bedrooms": 2},
    )


@pytest.fixture
def sample_properties() -> List[Property]:
    return [make_property(i) for i in range(1, 8)]


# ══════════════════════════════════════════════════════════════════════════
# Service fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def completion_provider():
    return FakeCompletionProvider(
        text="The estimated price is $350,000, range $320,000 to $380,000."
    )


@pytest.fixture
def translation_provider():
    return FakeTranslationProvider(text="Hola")


@pytest.fixture
def interaction_store():
    return InMemoryInteractionStore()


@pytest.fixture
def integration_store():
    return InMemoryIntegrationLogStore()


@pytest.fixture
def user_repository(sample_user):
    return InMemoryUserRepository([sample_user])


@pytest.fixture
def property_repository(sample_properties):
    return InMemoryPropertyRepository(
        properties=sample_properties,
        aggregates=[
            {
                "avg_price": 300000.0,
                "avg_price_per_sqm": 2600.0,
                "total_sales": 14,
                "min_price": 180000.0,
                "max_price": 520000.0,
            }
        ],
    )


@pytest.fixture
def ai_service(
    completion_provider,
    translation_provider,
    interaction_store,
    integration_store,
    user_repository,
    property_repository,
) -> AIService:
    return AIService(
        gateway=ProviderGateway(completion_provider, translation_provider),
        users=user_repository,
        properties=property_repository,
        audit=InteractionLogger(interaction_store, integration_store),
        models=ModelCatalog(),
        clock=lambda: FIXED_NOW,
    )


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite with every table created; one connection shared."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(ai_service):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    The lifespan does not run under ASGITransport, so the AIService built on
    the fakes is placed on app.state directly.
    """
    from prolink_ai.main import create_app

    app = create_app()
    app.state.ai_service = ai_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
