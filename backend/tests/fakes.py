"""
Prolink AI - Test Fakes
=========================

In-memory implementations of the provider, repository and store interfaces,
plus small sample-data builders. Imported by conftest.py and by tests that
need to script a fake directly.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from prolink_ai.exceptions import PersistenceError
from prolink_ai.schemas.domain import Analytics, Pricing, Property, Specifications, User
from prolink_ai.schemas.messages import Completion, TokenUsage, Translation
from prolink_ai.services.llm_base import CompletionProvider, TranslationProvider
from prolink_ai.services.repositories import PropertyRepository, UserRepository
from prolink_ai.services.stores import IntegrationLogStore, InteractionStore

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
FIXED_NOW_MS = int(FIXED_NOW.timestamp() * 1000)


class FakeCompletionProvider(CompletionProvider):
    """Returns `text` (or raises `error`) and records every call."""

    name = "fake-llm"

    def __init__(self, text: str = "Model answer", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, model, messages, sampling) -> Completion:
        self.calls.append({"model": model, "messages": messages, "sampling": sampling})
        if self.error is not None:
            raise self.error
        return Completion(
            text=self.text,
            token_usage=TokenUsage(prompt_tokens=12, completion_tokens=30, total_tokens=42),
        )

    async def health_check(self) -> bool:
        return self.error is None


class FakeTranslationProvider(TranslationProvider):
    name = "fake-translate"

    def __init__(self, text: str = "Hola", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def translate(self, text, target_language, source_language=None) -> Translation:
        self.calls.append(
            {"text": text, "target_language": target_language, "source_language": source_language}
        )
        if self.error is not None:
            raise self.error
        return Translation(translated_text=self.text, detected_source_language="en")


class InMemoryInteractionStore(InteractionStore):
    def __init__(self, fail: bool = False):
        self.records = []
        self.fail = fail

    async def create(self, record) -> None:
        if self.fail:
            raise PersistenceError("Could not write ai_interactions record")
        self.records.append(record)


class InMemoryIntegrationLogStore(IntegrationLogStore):
    def __init__(self, fail: bool = False):
        self.records = []
        self.fail = fail

    async def create(self, record) -> None:
        if self.fail:
            raise PersistenceError("Could not write integration_logs record")
        self.records.append(record)


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: Optional[List[User]] = None):
        self.users = {u.id: u for u in users or []}

    async def find_by_id(self, user_id):
        return self.users.get(user_id)


class InMemoryPropertyRepository(PropertyRepository):
    """Returns its canned listings/aggregates and records what was asked."""

    def __init__(self, properties=None, aggregates=None):
        self.properties = list(properties or [])
        self.aggregates = list(aggregates or [])
        self.find_calls: List[Dict[str, Any]] = []
        self.pipelines: List[Any] = []

    async def find(self, query, sort=None, limit=None):
        self.find_calls.append({"query": query, "sort": sort, "limit": limit})
        if limit is None:
            return list(self.properties)
        return self.properties[:limit]

    async def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        return list(self.aggregates)


def make_property(index: int, **overrides) -> Property:
    data = dict(
        id=f"prop-{index}",
        property_type="apartment",
        pricing=Pricing(total_price=200000 + index * 10000, price_per_sqm=2500),
        specifications=Specifications(bedrooms=2, bathrooms=1, total_area=80 + index),
        location={"city": "Lisbon"},
        features=["balcony"],
        analytics=Analytics(total_views=100 - index),
    )
    data.update(overrides)
    return Property(**data)
