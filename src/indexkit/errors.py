"""Exceptions raised while resolving blueprints and building documents."""

from __future__ import annotations


class IndexingError(Exception):
    """Base class for every error raised by indexkit."""


class ConfigurationError(IndexingError):
    """Raised when a blueprint is missing or declares something the object cannot provide."""


class EvaluationError(IndexingError):
    """Raised when a computed accessor fails while building a document.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


class ValueEncodingError(IndexingError, ValueError):
    """Raised when a value cannot be encoded into (or decoded from) a value slot."""
