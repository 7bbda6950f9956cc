"""Exception hierarchy shared by the store, collaborators and HTTP layer."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a request is rejected before any store mutation."""


class NotFoundError(ValueError):
    """Raised when an id does not reference an existing record."""


class ConflictError(ValueError):
    """A write collided with a uniqueness constraint and was rolled back."""


class UpstreamError(RuntimeError):
    """An external collaborator (OCR, LLM, recipe directory) failed."""


class LLMUnavailableError(UpstreamError):
    """Text generation was requested but no provider is configured."""


class EmptyResponseError(UpstreamError):
    """The text generation provider answered without any content."""


class UnreadableImageError(UpstreamError):
    """The supplied image payload could not be decoded or recognised."""


__all__ = [
    "InvalidInputError",
    "NotFoundError",
    "ConflictError",
    "UpstreamError",
    "LLMUnavailableError",
    "EmptyResponseError",
    "UnreadableImageError",
]
