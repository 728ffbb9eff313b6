"""
Prolink AI - Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the AI orchestration layer.
How:   Each exception carries a human-readable message and an optional context
       dict. Orchestrators in AIService catch these at their boundary and turn
       them into failure envelopes; the HTTP layer only sees them when something
       outside an orchestrator fails (health checks, startup).
Who:   Raised by providers, repositories, stores and the orchestrators.

Exception Hierarchy:
    ProlinkAIError (base)
    ├── NotFoundError        referenced user (or other entity) is absent
    ├── ProviderError        model or translation call failed upstream
    ├── PersistenceError     audit write or repository query failed
    └── ConfigurationError   provider selection or required settings invalid
"""

from typing import Any, Dict, Optional


class ProlinkAIError(Exception):
    """
    Base exception for all Prolink AI errors.

    Attributes:
        message:  Error description, safe to return in a result envelope
        context:  Additional debug info (logged, never returned to callers)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(ProlinkAIError):
    """
    Raised when a referenced entity does not exist.

    When:    chatbot / recommendations called with an unknown user id.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ProviderError(ProlinkAIError):
    """
    Raised when an external inference or translation provider fails.

    What:    Transport failure, quota/auth rejection, or a response we could
             not read (no choices, no translations).
    When:    After the configured retry policy gave up (one attempt by default).

    Attributes:
        provider: Short provider label ("openai", "gemini", "google_translate")
        cause:    The underlying exception, when there is one
    """

    def __init__(
        self,
        message: str = "AI provider request failed",
        provider: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if provider:
            ctx["provider"] = provider
        if cause is not None:
            ctx["error_type"] = type(cause).__name__
        super().__init__(message=message, context=ctx)
        self.provider = provider
        self.cause = cause


class PersistenceError(ProlinkAIError):
    """
    Raised when a database read or an audit write fails.

    The message stays generic; SQL details only go into ``context`` so they
    end up in logs, not in result envelopes.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(ProlinkAIError):
    """Raised when settings cannot produce a working provider or service."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        setting: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if setting:
            ctx["setting"] = setting
        super().__init__(message=message, context=ctx)
        self.setting = setting
