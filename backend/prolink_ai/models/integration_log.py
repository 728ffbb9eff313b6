"""
Prolink AI - IntegrationLog SQLAlchemy Model
==============================================

What:  ORM model for the `integration_logs` audit table.
How:   SqlIntegrationLogStore inserts one row per third-party integration call
       (Google Translate today). Created by Alembic migration 001.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from prolink_ai.database import Base


class IntegrationLog(Base):
    """Audit row for a non-model third-party call."""

    __tablename__ = "integration_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    service_name: Mapped[str] = mapped_column(String(100), nullable=False)
    service_method: Mapped[str] = mapped_column(String(10), nullable=False, default="POST")
    action_type: Mapped[str] = mapped_column(String(100), nullable=False)

    request_payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # success | error
    response_status: Mapped[str] = mapped_column(String(20), nullable=False)
    response_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    error_occurred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_integration_logs_service_created", "service_name", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<IntegrationLog(id={self.id}, service='{self.service_name}', "
            f"status='{self.response_status}')>"
        )
