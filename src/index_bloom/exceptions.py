"""Error hierarchy for index-bloom.

Every failure the library can report derives from ``IndexBloomError`` so hosts
can catch the whole family with one clause, while the ``ValueError`` /
``OSError`` mixins keep the usual stdlib handling working.
"""

from __future__ import annotations

from pathlib import Path


class IndexBloomError(Exception):
    """Base error for index-bloom."""


class InvalidCapacityError(IndexBloomError, ValueError):
    """Raised when a Bloom filter is requested with a capacity of zero."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Invalid Bloom filter capacity: {capacity} (must be at least 1)")
        self.capacity = capacity


class InvalidErrorRateError(IndexBloomError, ValueError):
    """Raised when a false-positive rate falls outside the open interval (0, 1)."""

    def __init__(self, error_rate: float) -> None:
        super().__init__(f"Invalid error rate: {error_rate!r} (must be strictly between 0 and 1)")
        self.error_rate = error_rate


class HashDerivationError(IndexBloomError):
    """Raised when a digest cannot be turned into a bit position."""


class MalformedPersistedStateError(IndexBloomError, ValueError):
    """Raised when a persisted index cannot be parsed or fails validation."""


class ContentReadError(IndexBloomError, OSError):
    """Raised when document content cannot be read from its source."""

    def __init__(self, source: Path | str, reason: str) -> None:
        super().__init__(f"Unable to read {source}: {reason}")
        self.source = source
        self.reason = reason


class SourceTypeError(IndexBloomError, ValueError):
    """Raised when an ingest source is neither a regular file nor a directory."""

    def __init__(self, source: Path | str) -> None:
        super().__init__(f"source type must be file or directory: {source}")
        self.source = source
