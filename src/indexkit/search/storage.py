"""Storage sinks that receive finished documents.

Persistence and search belong to the search engine; the indexer only needs
something that accepts a finished ``Document``. ``InMemoryDocumentStore``
keeps the latest document per id and is what tests and dry runs use.
"""

from __future__ import annotations

from collections.abc import Iterator
import logging
import threading
from typing import TYPE_CHECKING, Protocol


if TYPE_CHECKING:
    from indexkit.search.models import Document


logger = logging.getLogger(__name__)


class StorageError(KeyError):
    """Raised when a document id is not present in a store."""


class DocumentSink(Protocol):
    """Protocol implemented by anything that accepts built documents."""

    def store(self, document: Document) -> None:  # pragma: no cover - interface definition
        ...


class InMemoryDocumentStore:
    """Thread-safe in-memory sink; re-storing an id replaces the document."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        with self._lock:
            return iter(list(self._documents.values()))

    def store(self, document: Document) -> None:
        with self._lock:
            replaced = document.id in self._documents
            self._documents[document.id] = document
        logger.debug("%s document %s", "Replaced" if replaced else "Stored", document.id)

    def get(self, document_id: str) -> Document:
        try:
            return self._documents[document_id]
        except KeyError:
            raise StorageError(document_id) from None

    def delete(self, document_id: str) -> None:
        with self._lock:
            if self._documents.pop(document_id, None) is None:
                raise StorageError(document_id)
