"""YAML value codec for document value slots.

Every stored value is serialized with PyYAML's safe dumper so that scalars,
``None``, dates and nested collections come back with their original types:

    >>> codec = ValueCodec()
    >>> codec.decode(codec.encode([1, "two", None]))
    [1, 'two', None]

Tuples are written as YAML sequences and therefore decode as lists. Enum
members are stored as their value and subclasses of ``str``, ``int`` and
``float`` as the plain builtin, so they decode as the underlying value.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

import yaml

from indexkit.errors import ValueEncodingError


class ValueDumper(yaml.SafeDumper):
    """Safe dumper that also accepts enum members and builtin subclasses."""


def _represent_plain(dumper: ValueDumper, data: Any) -> yaml.Node:
    if isinstance(data, Enum):
        return dumper.represent_data(data.value)
    for base in (str, int, float):
        if isinstance(data, base):
            return dumper.represent_data(base(data))
    return dumper.represent_undefined(data)


for _type in (Enum, str, int, float):
    ValueDumper.add_multi_representer(_type, _represent_plain)


class ValueCodec:
    """Reversible encoder for value slot payloads."""

    def encode(self, value: Any) -> str:
        try:
            return yaml.dump(
                _to_yaml_safe(value),
                Dumper=ValueDumper,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
        except yaml.YAMLError as exc:
            raise ValueEncodingError(f"Cannot encode {type(value).__name__} value: {exc}") from exc

    def decode(self, encoded: str | bytes) -> Any:
        if isinstance(encoded, bytes):
            encoded = encoded.decode("utf-8")
        try:
            return yaml.safe_load(encoded)
        except yaml.YAMLError as exc:
            raise ValueEncodingError(f"Cannot decode value slot: {exc}") from exc


def _to_yaml_safe(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_to_yaml_safe(item) for item in value]
    if isinstance(value, list):
        return [_to_yaml_safe(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _to_yaml_safe(item) for key, item in value.items()}
    return value


NULL_ENCODING = ValueCodec().encode(None)
