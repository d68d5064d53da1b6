"""Tokenizer and filters that turn indexed field values into plain tokens.

The design mirrors Whoosh's composable tokenizer/filter chain: a tokenizer
yields ``Token`` objects and each filter transforms the stream. Stemming is
not part of the chain; the indexer applies the active language's stemmer to
the tokens produced here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
import re
from typing import Any, Protocol


@dataclass
class Token:
    """A word and its position in the filtered stream."""

    text: str
    position: int


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


# Word characters, optionally joined by inner apostrophes ("don't"); boundary
# punctuation never becomes part of a token.
WORD_PATTERN = r"\w+(?:['’]\w+)*"


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = WORD_PATTERN, flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(match.group(0), position)


class LowercaseFilter:
    """Filter that case-folds token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            folded = token.text.casefold()
            if folded == token.text:
                yield token
            else:
                yield replace(token, text=folded)


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str]) -> None:
        self.stopwords = frozenset(word.casefold() for word in stopwords)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.casefold() not in self.stopwords:
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class TextAnalyzer:
    """Default analyzer for indexed fields: split, case-fold, optionally drop stopwords."""

    def __init__(self, *, stopwords: Iterable[str] | None = None) -> None:
        filters: list[TokenFilter] = [LowercaseFilter()]
        if stopwords:
            filters.append(StopFilter(stopwords))
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)

    def tokenize(self, text: str) -> list[str]:
        return [token.text for token in self.pipeline(text)]

    def tokenize_value(self, value: Any) -> list[str]:
        """Tokenize an arbitrary field value.

        Collections are flattened element by element: each element is turned
        into its string form and tokenized on its own, and the tokens are
        concatenated in element order. ``None`` (at any level) yields nothing.
        """

        tokens: list[str] = []
        for text in iter_text_values(value):
            tokens.extend(self.tokenize(text))
        return tokens


def iter_text_values(value: Any) -> Iterator[str]:
    """Yield the string form of ``value`` or of each element of a collection."""

    if value is None:
        return
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (str, bytes)):
        yield value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
        return
    if isinstance(value, Mapping):
        for item in value.values():
            yield from iter_text_values(item)
        return
    if isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from iter_text_values(item)
        return
    yield str(value)


_default_analyzer = TextAnalyzer()


def tokenize(text: str) -> list[str]:
    """Split ``text`` into lower-cased word tokens."""

    return _default_analyzer.tokenize(text)
