"""
Error taxonomy for itinerary generation.

Every failure raised by the agents carries a ``user_message`` that is safe to
show in the client; routers turn these into HTTP errors.
"""

from __future__ import annotations

OVERLOADED = "overloaded"
RATE_LIMITED = "rate_limited"
FAILED = "failed"

OVERLOADED_MESSAGE = "The AI service is temporarily overloaded. Please try again in a few moments."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."


class GenerationError(Exception):
    """Base class for everything that can stop an itinerary from being produced."""

    status_code: int = 500

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class ValidationError(GenerationError):
    """The document is structurally unusable or a trip date cannot be parsed."""

    status_code = 400


class MalformedOutputError(GenerationError):
    """The provider answered, but not with a parseable JSON object."""

    status_code = 502


class ProviderError(GenerationError):
    """The generative model call itself failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        kind: str = FAILED,
        user_message: str | None = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message, user_message)
        self.kind = kind
        self.attempts = attempts


class TransientProviderError(ProviderError):
    """Rate limiting or overload; worth retrying."""

    def __init__(self, message: str, kind: str = OVERLOADED, attempts: int = 1) -> None:
        user_message = RATE_LIMITED_MESSAGE if kind == RATE_LIMITED else OVERLOADED_MESSAGE
        super().__init__(message, kind=kind, user_message=user_message, attempts=attempts)
        self.status_code = 429 if kind == RATE_LIMITED else 503


class PermanentProviderError(ProviderError):
    """Auth failures, bad requests and anything else a retry will not fix."""

    def __init__(self, message: str, operation: str = "generate itinerary", attempts: int = 1) -> None:
        super().__init__(
            message,
            kind=FAILED,
            user_message=f"Failed to {operation}: {message}",
            attempts=attempts,
        )


__all__ = [
    "OVERLOADED",
    "RATE_LIMITED",
    "FAILED",
    "OVERLOADED_MESSAGE",
    "RATE_LIMITED_MESSAGE",
    "GenerationError",
    "ValidationError",
    "MalformedOutputError",
    "ProviderError",
    "TransientProviderError",
    "PermanentProviderError",
]
