"""Blueprint-driven document building for search indexing."""

from indexkit.bootstrap import configure
from indexkit.config import IndexingConfig, IndexingSettings
from indexkit.errors import ConfigurationError, EvaluationError, IndexingError, ValueEncodingError
from indexkit.search.blueprint import Blueprint, BlueprintRegistry, Computed, Direct
from indexkit.search.codec import ValueCodec
from indexkit.search.indexer import DocumentBuilder, Indexer
from indexkit.search.models import Document, ValueSlot
from indexkit.search.stemmers import StemmerRegistry
from indexkit.search.storage import DocumentSink, InMemoryDocumentStore


__all__ = [
    "Blueprint",
    "BlueprintRegistry",
    "Computed",
    "ConfigurationError",
    "Direct",
    "Document",
    "DocumentBuilder",
    "DocumentSink",
    "EvaluationError",
    "InMemoryDocumentStore",
    "Indexer",
    "IndexingConfig",
    "IndexingError",
    "IndexingSettings",
    "StemmerRegistry",
    "ValueCodec",
    "ValueEncodingError",
    "ValueSlot",
    "configure",
]
