"""Create ai_interactions and integration_logs tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the two write-once audit tables.
How:   UUID primary keys generated by PostgreSQL when the application does
       not supply one; JSON payloads stored as JSONB.

Rollback: downgrade() drops both tables (all audit history is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ai_interactions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column(
            "interaction_type",
            sa.String(50),
            nullable=False,
            comment="chatbot, recommendation, price_prediction, market_analysis, "
                    "translation, image_analysis",
        ),
        sa.Column(
            "input",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("model_name", sa.String(100), nullable=True),
        sa.Column("model_provider", sa.String(50), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("max_tokens", sa.Integer(), nullable=True),
        sa.Column("response_content", sa.Text(), nullable=True),
        sa.Column("processing_time_ms", sa.Float(), nullable=True),
        sa.Column("token_usage", postgresql.JSONB(), nullable=True),
        sa.Column(
            "error_occurred",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("error_stack", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ai_interactions"),
    )
    op.create_index(
        "idx_ai_interactions_created_at",
        "ai_interactions",
        [sa.text("created_at DESC")],
    )
    op.create_index(
        "idx_ai_interactions_user_type",
        "ai_interactions",
        ["user_id", "interaction_type"],
    )

    op.create_table(
        "integration_logs",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("service_name", sa.String(100), nullable=False),
        sa.Column(
            "service_method",
            sa.String(10),
            nullable=False,
            server_default=sa.text("'POST'"),
        ),
        sa.Column("action_type", sa.String(100), nullable=False),
        sa.Column(
            "request_payload",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "response_status",
            sa.String(20),
            nullable=False,
            comment="success or error",
        ),
        sa.Column("response_data", postgresql.JSONB(), nullable=True),
        sa.Column(
            "error_occurred",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_integration_logs"),
    )
    op.create_index(
        "idx_integration_logs_service_created",
        "integration_logs",
        ["service_name", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_integration_logs_service_created", table_name="integration_logs")
    op.drop_table("integration_logs")
    op.drop_index("idx_ai_interactions_user_type", table_name="ai_interactions")
    op.drop_index("idx_ai_interactions_created_at", table_name="ai_interactions")
    op.drop_table("ai_interactions")
