"""
Prolink AI - AiInteraction SQLAlchemy Model
=============================================

What:  ORM model for the `ai_interactions` audit table.
How:   SqlInteractionStore inserts one row per capability invocation;
       Alembic migration 001 creates the table.

Table Design:
    - UUID primary key generated client-side (works on PostgreSQL and SQLite)
    - user_id nullable: market analysis and image analysis are anonymous
    - input / token_usage as JSON: shape differs per capability
    - model_* columns: flattened model metadata
    - error_* columns: flattened error block; error_occurred is False on success
    - created_at index DESC for "latest interactions" queries

Lifecycle:
    Inserted once, never updated, never deleted by this service.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from prolink_ai.database import Base


class AiInteraction(Base):
    """Audit row for one chatbot / recommendation / prediction / analysis call."""

    __tablename__ = "ai_interactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    interaction_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="chatbot, recommendation, price_prediction, market_analysis, "
                "translation, image_analysis",
    )

    input: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # ── Model metadata ────────────────────────────────────────────────────
    model_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model_provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_tokens: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ── Response snapshot ─────────────────────────────────────────────────
    response_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processing_time_ms: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    token_usage: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ── Error block ───────────────────────────────────────────────────────
    error_occurred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_stack: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_ai_interactions_created_at", created_at.desc()),
        Index("idx_ai_interactions_user_type", "user_id", "interaction_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<AiInteraction(id={self.id}, type='{self.interaction_type}', "
            f"error={self.error_occurred})>"
        )
