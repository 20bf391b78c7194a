"""index-bloom: a lightweight probabilistic full-text index.

Each ingested document is reduced to a Bloom filter over its normalized words.
Searches return the sorted identifiers of documents that may contain every
keyword, with a tunable false-positive rate. The original words are not kept,
so results cannot be ranked.

    >>> from index_bloom import DocumentIndex
    >>> index = DocumentIndex(0.00001)
    >>> _ = index.ingest("foo", "A very very long content...")
    >>> index.search("content")
    ['foo']

Ingesting the same identifier again replaces its previous filter.
"""

from index_bloom.exceptions import (
    ContentReadError,
    HashDerivationError,
    IndexBloomError,
    InvalidCapacityError,
    InvalidErrorRateError,
    MalformedPersistedStateError,
    SourceTypeError,
)
from index_bloom.search.bloom_filter import BloomFilter
from index_bloom.search.document_index import DocumentIndex
from index_bloom.search.tokens import Tokens, tokenize


__all__ = [
    "BloomFilter",
    "ContentReadError",
    "DocumentIndex",
    "HashDerivationError",
    "IndexBloomError",
    "InvalidCapacityError",
    "InvalidErrorRateError",
    "MalformedPersistedStateError",
    "SourceTypeError",
    "Tokens",
    "tokenize",
]

__version__ = "0.3.0"
