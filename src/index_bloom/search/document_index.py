"""Document index: one Bloom filter per ingested document.

Documents are ingested under an opaque identifier (a logical name or a path).
Each ingest tokenizes the content, sizes a fresh filter to its distinct-token
count and inserts every token. Searches return the sorted identifiers whose
filter may contain *all* query tokens, or ``None`` when nothing matches.

Instances carry no locking. Hosts sharing one index between threads must keep
``ingest``/``load`` exclusive; concurrent ``search`` calls against an index
that is not being mutated are fine.
"""

from __future__ import annotations

from collections.abc import Iterator
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from unidecode import unidecode

from index_bloom.exceptions import ContentReadError
from index_bloom.search.bloom_filter import BloomFilter, validate_error_rate
from index_bloom.search.persistence import decode_index, encode_index
from index_bloom.search.tokens import FoldFunction, token_set, tokenize


logger = logging.getLogger(__name__)

DEFAULT_ERROR_RATE = 0.0001


class DocumentIndex:
    """Mapping from document identifier to that document's Bloom filter."""

    def __init__(self, error_rate: float = DEFAULT_ERROR_RATE, *, fold: FoldFunction | None = None) -> None:
        self.error_rate = validate_error_rate(error_rate)
        self._filters: dict[str, BloomFilter] = {}
        self.fold: FoldFunction = fold or unidecode

    # --- ingestion --------------------------------------------------------

    def ingest(self, identifier: str, content: str) -> BloomFilter:
        """Index ``content`` under ``identifier``, replacing any previous filter.

        The new filter is built off to the side and only swapped in once every
        token is inserted, so a failure keeps the previous filter intact.
        Content without a single token raises ``InvalidCapacityError``.
        """
        tokens = token_set(content, self.fold)
        bloom_filter = BloomFilter(len(tokens), self.error_rate)
        for token in tokens:
            bloom_filter.insert(token)

        replaced = identifier in self._filters
        self._filters[identifier] = bloom_filter
        logger.debug(
            "Ingested %s: %d tokens, %d bits, %d hashes%s",
            identifier,
            len(tokens),
            bloom_filter.bit_size,
            bloom_filter.key_size,
            " (replaced)" if replaced else "",
        )
        return bloom_filter

    # --- querying ---------------------------------------------------------

    def search(self, query: str) -> list[str] | None:
        """Return identifiers whose filter holds every query token.

        A query without tokens matches nothing. The result is sorted
        lexicographically, or ``None`` when no document matched.
        """
        keywords = list(dict.fromkeys(tokenize(query, self.fold)))
        if not keywords:
            logger.debug("Query %r produced no tokens", query)
            return None

        hits = [
            identifier
            for identifier, bloom_filter in self._filters.items()
            if all(bloom_filter.contains(keyword) for keyword in keywords)
        ]
        if not hits:
            return None
        hits.sort()
        return hits

    # --- persistence ------------------------------------------------------

    def dump(self) -> bytes:
        """Serialize the index to its persisted form."""
        return encode_index(self.error_rate, self._filters)

    @classmethod
    def restore(cls, data: bytes | bytearray | memoryview | str, *, fold: FoldFunction | None = None) -> DocumentIndex:
        """Build a new index from a persisted form produced by ``dump``."""
        instance = cls.__new__(cls)
        instance.fold = fold or unidecode
        instance.error_rate, instance._filters = decode_index(data)
        return instance

    def load(self, data: bytes | bytearray | memoryview | str) -> None:
        """Replace this index's whole state with a persisted form."""
        error_rate, filters = decode_index(data)
        self.error_rate = error_rate
        self._filters = filters

    def save(self, path: Path | str) -> Path:
        """Write the persisted form to ``path`` atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = self.dump()
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved index with %d documents to %s (%d bytes)", len(self), target, len(payload))
        return target

    @classmethod
    def open(cls, path: Path | str, *, fold: FoldFunction | None = None) -> DocumentIndex:
        """Read an index previously written by ``save``."""
        source = Path(path)
        try:
            data = source.read_bytes()
        except OSError as exc:
            raise ContentReadError(source, exc.strerror or str(exc)) from exc
        index = cls.restore(data, fold=fold)
        logger.info("Loaded index with %d documents from %s", len(index), source)
        return index

    # --- introspection ----------------------------------------------------

    def identifiers(self) -> list[str]:
        return sorted(self._filters)

    def filter_for(self, identifier: str) -> BloomFilter | None:
        return self._filters.get(identifier)

    def get_stats(self) -> dict[str, Any]:
        """Get per-document filter statistics."""
        return {
            "error_rate": self.error_rate,
            "documents": len(self._filters),
            "memory_bytes": sum(len(bf.bitfield) for bf in self._filters.values()),
            "filters": {identifier: self._filters[identifier].get_stats() for identifier in self.identifiers()},
        }

    def __len__(self) -> int:
        return len(self._filters)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._filters

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __repr__(self) -> str:
        return f"DocumentIndex(error_rate={self.error_rate!r}, documents={len(self._filters)})"
