"""Tokenizer shared by ingestion and querying.

Text is split on whitespace, each word is transliterated to ASCII, stripped of
punctuation and lowercased. Words that end up empty are dropped. Ingest and
search must use the same normalization or stored filters stop matching.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
import re

from unidecode import unidecode


FoldFunction = Callable[[str], str]

PUNCTUATION = ".!?,;:/&#*_()[]{}<>'`\""

_STRIP_TABLE = str.maketrans("", "", PUNCTUATION)

# Unicode White_Space. str.split() would also break on U+001C..U+001F.
_WHITESPACE = re.compile(r"[\t\n\x0b\x0c\r \x85\xa0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000]+")


def clean_word(word: str) -> str:
    """Remove every punctuation character from ``word``."""
    return word.translate(_STRIP_TABLE)


def normalize_word(word: str, fold: FoldFunction = unidecode) -> str:
    """Normalize a single whitespace-delimited word into a token (possibly empty)."""
    return clean_word(fold(word)).lower()


def tokenize(text: str, fold: FoldFunction = unidecode) -> Iterator[str]:
    """Yield tokens from ``text`` lazily."""
    for word in _WHITESPACE.split(text):
        token = normalize_word(word, fold)
        if token:
            yield token


def token_set(text: str, fold: FoldFunction = unidecode) -> set[str]:
    """Return the distinct tokens of ``text``."""
    return set(tokenize(text, fold))


class Tokens:
    """Restartable token sequence over a piece of text.

    Each iteration re-tokenizes the source, so the same instance can be walked
    any number of times and always yields the same tokens.
    """

    __slots__ = ("_fold", "text")

    def __init__(self, text: str, fold: FoldFunction = unidecode) -> None:
        self.text = text
        self._fold = fold

    def __iter__(self) -> Iterator[str]:
        return tokenize(self.text, self._fold)

    def __repr__(self) -> str:
        preview = self.text if len(self.text) <= 40 else self.text[:37] + "..."
        return f"Tokens({preview!r})"
