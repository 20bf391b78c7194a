"""
Probabilistic full-text search package.

- tokens: Whitespace tokenizer with ASCII folding and punctuation stripping
- bloom_filter: Fixed-capacity Bloom filter with progressive-concatenation probes
- document_index: One filter per document, multi-keyword AND search
- persistence: Versioned JSON wire format for document indexes
"""

from index_bloom.search.bloom_filter import BloomFilter
from index_bloom.search.document_index import DocumentIndex
from index_bloom.search.tokens import Tokens, tokenize


__all__ = ["BloomFilter", "DocumentIndex", "Tokens", "tokenize"]
