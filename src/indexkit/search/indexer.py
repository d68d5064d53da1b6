"""Document building: turn a domain object plus its blueprint into a ``Document``.

For each object the indexer

1. resolves the active stemming language (object resolver, then the global
   setting, never an error),
2. encodes the type name into slot 0 and each declared attribute into slots
   1..N in declaration order,
3. tokenizes every indexed field and adds plain, field-prefixed (``X<FIELD>``)
   and, with a stemming language, ``Z``-prefixed stemmed terms,
4. returns the finished document. Nothing is emitted if any step fails.

``DocumentBuilder`` is the entry point that looks up blueprints in a registry
and optionally hands finished documents to a storage sink.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import logging
from typing import Any

from indexkit.config import IndexingConfig, IndexingSettings
from indexkit.errors import ConfigurationError
from indexkit.observability.tracing import create_span
from indexkit.search.analyzers import TextAnalyzer
from indexkit.search.blueprint import Blueprint, BlueprintRegistry
from indexkit.search.codec import ValueCodec
from indexkit.search.models import Document, ValueSlot
from indexkit.search.stemmers import NO_LANGUAGE, StemmerRegistry, get_stemmer_registry, normalize_language
from indexkit.search.storage import DocumentSink


logger = logging.getLogger(__name__)

CLASS_TERM_PREFIX = "C"
STEMMED_TERM_PREFIX = "Z"


@dataclass(frozen=True)
class LanguageResolution:
    """Outcome of choosing the stemming language for one object."""

    language: str
    source: str  # "object", "global" or "fallback"


class Indexer:
    """Build documents for objects described by a single blueprint."""

    def __init__(
        self,
        blueprint: Blueprint,
        *,
        config: IndexingConfig | IndexingSettings | None = None,
        stemmers: StemmerRegistry | None = None,
        codec: ValueCodec | None = None,
    ) -> None:
        self.blueprint = blueprint
        self.config = config if isinstance(config, IndexingConfig) else IndexingConfig(config)
        self.stemmers = stemmers or get_stemmer_registry()
        self.codec = codec or ValueCodec()

    def build_document_for(self, obj: Any) -> Document:
        """Build the document for ``obj``.

        Raises:
            ConfigurationError: A declared accessor is missing on the object.
            EvaluationError: A computed accessor raised.
            ValueEncodingError: An attribute value cannot be stored.
        """

        settings = self.config.current
        type_name = type(obj).__name__
        with create_span("indexkit.build_document", attributes={"indexkit.type": type_name}) as span:
            document_id = self.blueprint.resolve_document_key(obj)
            resolution = self.resolve_language(obj, settings)
            span.set_attribute("indexkit.language", resolution.language)

            values = self._build_values(obj, type_name)
            term_weights = self._build_terms(obj, type_name, resolution.language, settings)

        logger.debug(
            "Built document %s: %d values, %d terms, language=%s (%s)",
            document_id,
            len(values),
            len(term_weights),
            resolution.language,
            resolution.source,
        )
        return Document(
            id=document_id,
            values=values,
            terms=frozenset(term_weights),
            term_weights=term_weights,
        )

    def resolve_language(self, obj: Any, settings: IndexingSettings | None = None) -> LanguageResolution:
        """Pick the language used to stem ``obj``'s terms."""

        settings = settings or self.config.current
        global_language = normalize_language(settings.language)
        if not self.stemmers.supports(global_language):
            logger.warning("Configured language %r has no stemmer, indexing unstemmed", global_language)
            global_language = NO_LANGUAGE

        requested = self.blueprint.resolve_language(obj)
        if requested is None or (isinstance(requested, str) and not requested.strip()):
            return LanguageResolution(global_language, "global")

        language = normalize_language(requested)
        if self.stemmers.supports(language):
            return LanguageResolution(language, "object")

        logger.warning(
            "Language %r of %s is not supported, falling back to %r",
            requested,
            type(obj).__name__,
            global_language,
        )
        return LanguageResolution(global_language, "fallback")

    def _build_values(self, obj: Any, type_name: str) -> tuple[ValueSlot, ...]:
        slots = [ValueSlot(0, type_name, self.codec.encode(type_name))]
        for position, (_name, value) in enumerate(self.blueprint.resolve_attributes(obj), start=1):
            slots.append(ValueSlot(position, value, self.codec.encode(value)))
        return tuple(slots)

    def _build_terms(
        self,
        obj: Any,
        type_name: str,
        language: str,
        settings: IndexingSettings,
    ) -> dict[str, int]:
        analyzer = TextAnalyzer(stopwords=settings.get_stopwords())
        stem = self.stemmers.stemmer_for(language) if language != NO_LANGUAGE else None

        weights: Counter[str] = Counter()
        weights[f"{CLASS_TERM_PREFIX}{type_name}"] += 1

        for declaration, value in self.blueprint.resolve_indexed_text(obj):
            for token in analyzer.tokenize_value(value):
                weights[token] += declaration.weight
                if settings.index_field_terms:
                    weights[f"{declaration.prefix}{token}"] += declaration.weight
                if stem is None:
                    continue
                stemmed = stem(token)
                weights[f"{STEMMED_TERM_PREFIX}{stemmed}"] += declaration.weight
                if settings.index_field_terms:
                    weights[f"{STEMMED_TERM_PREFIX}{declaration.prefix}{stemmed}"] += declaration.weight
        return dict(weights)


class DocumentBuilder:
    """Registry-backed entry point that builds and optionally stores documents."""

    def __init__(
        self,
        registry: BlueprintRegistry,
        *,
        config: IndexingConfig | IndexingSettings | None = None,
        stemmers: StemmerRegistry | None = None,
        codec: ValueCodec | None = None,
        sink: DocumentSink | None = None,
    ) -> None:
        self.registry = registry
        self.config = config if isinstance(config, IndexingConfig) else IndexingConfig(config)
        self.stemmers = stemmers or get_stemmer_registry()
        self.codec = codec or ValueCodec()
        self.sink = sink
        self._indexers: dict[type, Indexer] = {}

    def indexer_for(self, target: type) -> Indexer:
        blueprint = self.registry.blueprint_for(target)
        indexer = self._indexers.get(target)
        if indexer is None or indexer.blueprint is not blueprint:
            indexer = Indexer(blueprint, config=self.config, stemmers=self.stemmers, codec=self.codec)
            self._indexers[target] = indexer
        return indexer

    def build_document_for(self, obj: Any) -> Document:
        return self.indexer_for(type(obj)).build_document_for(obj)

    def index(self, obj: Any) -> Document:
        """Build the document for ``obj`` and hand it to the configured sink."""

        if self.sink is None:
            raise ConfigurationError("DocumentBuilder has no storage sink configured")
        document = self.build_document_for(obj)
        self.sink.store(document)
        return document
