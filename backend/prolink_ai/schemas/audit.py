"""
Prolink AI - Audit Record Schemas
===================================

What:  The records InteractionLogger hands to the audit stores.
How:   AIService fills one InteractionRecord per capability invocation (or one
       IntegrationRecord per translation call); SQL stores map them onto the
       ai_interactions / integration_logs tables.

Records are write-once. There is no update or delete path anywhere in the
package.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from prolink_ai.schemas.messages import TokenUsage


class InteractionType(str, Enum):
    CHATBOT = "chatbot"
    RECOMMENDATION = "recommendation"
    PRICE_PREDICTION = "price_prediction"
    MARKET_ANALYSIS = "market_analysis"
    TRANSLATION = "translation"
    IMAGE_ANALYSIS = "image_analysis"


class ModelInfo(BaseModel):
    model_name: str
    provider: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    model_config = {"protected_namespaces": ()}


class ErrorBlock(BaseModel):
    occurred: bool = True
    message: str
    stack: Optional[str] = None


class InteractionResponse(BaseModel):
    content: str
    processing_time: float
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class InteractionRecord(BaseModel):
    """
    One capability invocation.

    input holds whatever the caller passed (serialized in JSON mode by the
    store). Exactly one of response / error is set.
    """
    user_id: Optional[str] = None
    session_id: str
    interaction_type: InteractionType
    input: Dict[str, Any] = Field(default_factory=dict)
    model_info: Optional[ModelInfo] = None
    response: Optional[InteractionResponse] = None
    error: Optional[ErrorBlock] = None

    model_config = {"protected_namespaces": ()}


class IntegrationRecord(BaseModel):
    """One call to a non-model third-party service (translation today)."""
    user_id: Optional[str] = None
    service_name: str
    service_method: str = "POST"
    action_type: str
    request_payload: Dict[str, Any] = Field(default_factory=dict)
    response_status: str
    response_data: Optional[Dict[str, Any]] = None
    error: Optional[ErrorBlock] = None
