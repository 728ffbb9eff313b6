"""
Prolink AI - Interaction Logger
=================================

What:  Writes audit records for capability invocations and integration calls.
How:   Delegates to the injected stores. Any failure is reported to the
       diagnostic logger and swallowed, so callers can await it
       unconditionally after building their result envelope.
Who:   AIService, once per invocation.
"""

import logging
from typing import Optional

from prolink_ai.schemas.audit import IntegrationRecord, InteractionRecord
from prolink_ai.services.stores import IntegrationLogStore, InteractionStore


class InteractionLogger:
    def __init__(
        self,
        interaction_store: InteractionStore,
        integration_store: IntegrationLogStore,
        diagnostics: Optional[logging.Logger] = None,
    ):
        self.interaction_store = interaction_store
        self.integration_store = integration_store
        self.diagnostics = diagnostics or logging.getLogger("prolink_ai.audit")

    async def log_interaction(self, record: InteractionRecord) -> None:
        try:
            await self.interaction_store.create(record)
        except Exception as e:
            self.diagnostics.error(
                "Error logging AI interaction (type=%s, session=%s): %s",
                record.interaction_type.value,
                record.session_id,
                str(e),
                exc_info=True,
            )

    async def log_integration(self, record: IntegrationRecord) -> None:
        try:
            await self.integration_store.create(record)
        except Exception as e:
            self.diagnostics.error(
                "Error logging integration call (%s/%s): %s",
                record.service_name,
                record.action_type,
                str(e),
                exc_info=True,
            )
