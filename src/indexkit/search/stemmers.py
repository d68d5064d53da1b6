"""Language-keyed stemmer registry backed by Whoosh's Snowball stemmers.

The registry hands out reusable stem functions per language id. The special
``none`` language is always supported and stems nothing, which is also the
default when no language has been configured.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging
import threading

from whoosh.lang import has_stemmer, stemmer_for_language


logger = logging.getLogger(__name__)

StemFunction = Callable[[str], str]

NO_LANGUAGE = "none"


def normalize_language(language: object) -> str:
    """Return the canonical lookup key for a language id.

    ``None`` and blank values collapse to ``"none"``; enum members use their value.
    """

    if language is None:
        return NO_LANGUAGE
    if isinstance(language, Enum):
        language = language.value
    normalized = str(language).strip().lower()
    return normalized or NO_LANGUAGE


def _identity(token: str) -> str:
    return token


class StemmerRegistry:
    """Map language ids to stem functions, building each one at most once."""

    def __init__(self) -> None:
        self._stemmers: dict[str, StemFunction] = {NO_LANGUAGE: _identity}
        self._lock = threading.Lock()

    def register(self, language: object, stem: StemFunction) -> None:
        """Register (or replace) the stemmer used for ``language``."""

        key = normalize_language(language)
        if key == NO_LANGUAGE:
            raise ValueError("The 'none' language is reserved for the identity stemmer")
        with self._lock:
            self._stemmers[key] = stem

    def supports(self, language: object) -> bool:
        key = normalize_language(language)
        if key in self._stemmers:
            return True
        return has_stemmer(key)

    def stemmer_for(self, language: object) -> StemFunction:
        """Return the stem function for ``language``.

        Unsupported ids get the identity stemmer; callers resolve a supported
        id before stemming so this only guards against misuse.
        """

        key = normalize_language(language)
        stem = self._stemmers.get(key)
        if stem is not None:
            return stem
        if not has_stemmer(key):
            logger.debug("No stemmer for language %r, leaving tokens unstemmed", key)
            return _identity
        with self._lock:
            stem = self._stemmers.get(key)
            if stem is None:
                stem = stemmer_for_language(key)
                self._stemmers[key] = stem
        return stem

    def stem(self, language: object, token: str) -> str:
        return self.stemmer_for(language)(token)


_default_registry = StemmerRegistry()


def get_stemmer_registry() -> StemmerRegistry:
    """Return the process-wide registry used when none is injected."""

    return _default_registry
