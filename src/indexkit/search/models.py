"""Document data models produced by the indexer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from indexkit.search.codec import ValueCodec


_codec = ValueCodec()


@dataclass(frozen=True)
class ValueSlot:
    """A stored value at a fixed position of a document."""

    position: int
    raw: Any = field(hash=False)
    encoded: str

    def decoded(self) -> Any:
        return _codec.decode(self.encoded)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"position": self.position, "value": self.encoded}


@dataclass(frozen=True)
class Document:
    """Indexable document: opaque id, ordered value slots and a term set.

    Position 0 always holds the object's type name; positions 1..N follow the
    blueprint's attribute declarations.
    """

    id: str
    values: tuple[ValueSlot, ...]
    terms: frozenset[str]
    term_weights: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "term_weights", MappingProxyType(dict(self.term_weights)))

    @property
    def type_name(self) -> str:
        return self.values[0].decoded()

    def value(self, position: int) -> Any:
        """Return the decoded value stored at ``position``."""
        return self.values[position].decoded()

    def decoded_values(self) -> list[Any]:
        return [slot.decoded() for slot in self.values]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "values": [slot.to_dict() for slot in self.values],
            "terms": sorted(self.terms),
            "term_weights": dict(self.term_weights),
        }
