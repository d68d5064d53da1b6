"""Indexing configuration using Pydantic Settings.

``IndexingSettings`` is an immutable snapshot. ``IndexingConfig`` is the one
process-wide holder operators may update at runtime (for example to switch the
default language); the indexer reads a single snapshot per document.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from indexkit.search.stemmers import NO_LANGUAGE, get_stemmer_registry, normalize_language


logger = logging.getLogger(__name__)


class IndexingSettings(BaseSettings):
    """Strictly typed indexing configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="INDEXKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
        frozen=True,
    )

    language: str = Field(default=NO_LANGUAGE, description="Global stemming language ('none' disables stemming)")
    stopwords: str = Field(default="", description="Comma-separated words that never become terms")
    index_field_terms: bool = Field(default=True, description="Also emit field-prefixed terms (XTITLE...)")
    log_level: str = Field(default="info", description="Logging level")

    @field_validator("language", mode="before")
    @classmethod
    def _validate_language(cls, value: Any) -> str:
        language = normalize_language(value)
        if not get_stemmer_registry().supports(language):
            raise ValueError(f"Unsupported language '{language}'")
        return language

    def get_stopwords(self) -> frozenset[str]:
        """Get the configured stopwords as a normalized set."""
        if not self.stopwords:
            return frozenset()
        return frozenset(word.strip().casefold() for word in self.stopwords.split(",") if word.strip())


class IndexingConfig:
    """Synchronized holder for the process-wide ``IndexingSettings``.

    Reads return one consistent snapshot; updates validate before swapping.
    """

    def __init__(self, settings: IndexingSettings | None = None) -> None:
        self._settings = settings if settings is not None else IndexingSettings()
        self._lock = threading.Lock()

    @property
    def current(self) -> IndexingSettings:
        with self._lock:
            return self._settings

    def update(self, **changes: Any) -> IndexingSettings:
        """Replace the current snapshot with one carrying ``changes``.

        Raises:
            pydantic.ValidationError: If the new values are invalid; the
                current snapshot is left untouched.
        """
        with self._lock:
            merged = {**self._settings.model_dump(), **changes}
            self._settings = IndexingSettings(**merged)
            settings = self._settings
        logger.info("Indexing configuration updated: %s", sorted(changes))
        return settings

    def set_language(self, language: Any) -> IndexingSettings:
        return self.update(language=language)
