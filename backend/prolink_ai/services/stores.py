"""
Prolink AI - Audit Stores
===========================

What:  Write-only persistence for AiInteraction and IntegrationLog records.
How:   Each create() opens its own session, inserts one row and commits.
       Records are serialized in pydantic JSON mode first so datetimes,
       enums and nested models land in the JSON columns as plain values.
Who:   InteractionLogger.

Error Handling:
    SQLAlchemyError -> PersistenceError. The logger above catches it; a failed
    audit write never changes a capability's result.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prolink_ai.exceptions import PersistenceError
from prolink_ai.models.integration_log import IntegrationLog
from prolink_ai.models.interaction import AiInteraction
from prolink_ai.schemas.audit import IntegrationRecord, InteractionRecord

logger = logging.getLogger(__name__)


class InteractionStore(ABC):
    @abstractmethod
    async def create(self, record: InteractionRecord) -> None:
        ...


class IntegrationLogStore(ABC):
    @abstractmethod
    async def create(self, record: IntegrationRecord) -> None:
        ...


def interaction_row(record: InteractionRecord) -> AiInteraction:
    """Flattens an InteractionRecord onto the ai_interactions columns."""
    data = record.model_dump(mode="json")
    model_info = data.get("model_info") or {}
    response = data.get("response") or {}
    error = data.get("error") or {}
    return AiInteraction(
        user_id=data["user_id"],
        session_id=data["session_id"],
        interaction_type=data["interaction_type"],
        input=data["input"],
        model_name=model_info.get("model_name"),
        model_provider=model_info.get("provider"),
        temperature=model_info.get("temperature"),
        max_tokens=model_info.get("max_tokens"),
        response_content=response.get("content"),
        processing_time_ms=response.get("processing_time"),
        token_usage=response.get("token_usage"),
        error_occurred=bool(error.get("occurred", False)),
        error_message=error.get("message"),
        error_stack=error.get("stack"),
    )


def integration_row(record: IntegrationRecord) -> IntegrationLog:
    data = record.model_dump(mode="json")
    error = data.get("error") or {}
    return IntegrationLog(
        user_id=data["user_id"],
        service_name=data["service_name"],
        service_method=data["service_method"],
        action_type=data["action_type"],
        request_payload=data["request_payload"],
        response_status=data["response_status"],
        response_data=data["response_data"],
        error_occurred=bool(error.get("occurred", False)),
        error_message=error.get("message"),
    )


class _SqlStore:
    table = ""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _insert(self, row) -> None:
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to write %s row: %s", self.table, str(e))
            raise PersistenceError(
                message=f"Could not write {self.table} record",
                context={"table": self.table, "error_type": type(e).__name__},
            ) from e


class SqlInteractionStore(_SqlStore, InteractionStore):
    table = "ai_interactions"

    async def create(self, record: InteractionRecord) -> None:
        await self._insert(interaction_row(record))


class SqlIntegrationLogStore(_SqlStore, IntegrationLogStore):
    table = "integration_logs"

    async def create(self, record: IntegrationRecord) -> None:
        await self._insert(integration_row(record))
