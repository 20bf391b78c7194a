"""Fixed-capacity Bloom filter holding one document's vocabulary.

Bits are packed eight per byte (bit ``i`` lives in byte ``i // 8`` under mask
``1 << (i % 8)``). Probe positions come from a single BLAKE2b primitive applied
to progressively longer repetitions of the key, which keeps filters
bit-compatible with indexes written by earlier releases.
"""

from __future__ import annotations

from collections.abc import Iterator
import hashlib
import logging
import math
from typing import Any

from index_bloom.exceptions import (
    HashDerivationError,
    InvalidCapacityError,
    InvalidErrorRateError,
    MalformedPersistedStateError,
)


logger = logging.getLogger(__name__)

DIGEST_SIZE = 4

_LN2 = math.log(2)


def validate_error_rate(error_rate: float) -> float:
    """Return ``error_rate`` unchanged, or raise if it is not strictly inside (0, 1)."""
    if isinstance(error_rate, bool) or not isinstance(error_rate, (int, float)):
        raise InvalidErrorRateError(error_rate)
    if not 0.0 < error_rate < 1.0:
        raise InvalidErrorRateError(error_rate)
    return float(error_rate)


def calculate_bit_size(capacity: int, error_rate: float) -> int:
    """Optimal bit-field length ``m`` for ``capacity`` keys at ``error_rate``."""
    return math.ceil(-capacity * math.log(error_rate) / (_LN2**2))


def calculate_key_size(bit_size: int, capacity: int) -> int:
    """Optimal probe count ``k`` for a field of ``bit_size`` bits holding ``capacity`` keys."""
    return max(1, math.ceil((bit_size / capacity) * _LN2))


def byte_length(bit_size: int) -> int:
    """Number of storage bytes needed to pack ``bit_size`` bits."""
    return (bit_size + 7) // 8


def digest_to_position(digest: bytes, bit_size: int) -> int:
    """Reduce a digest to a bit index.

    Each byte is rendered as lowercase hex *without* zero padding before the
    pieces are joined and parsed. This mirrors the on-disk format produced by
    earlier releases; changing it would silently invalidate persisted filters.
    """
    numeral = "".join(format(byte, "x") for byte in digest)
    try:
        value = int(numeral, 16)
    except ValueError as exc:
        raise HashDerivationError(f"Error while hashing word: {exc}") from exc
    return value % bit_size


class BloomFilter:
    """Probabilistic set with false positives but no false negatives."""

    __slots__ = ("bit_size", "bitfield", "key_size")

    def __init__(self, capacity: int, error_rate: float) -> None:
        if capacity < 1:
            raise InvalidCapacityError(capacity)
        error_rate = validate_error_rate(error_rate)

        self.bit_size = calculate_bit_size(capacity, error_rate)
        self.key_size = calculate_key_size(self.bit_size, capacity)
        self.bitfield = bytearray(byte_length(self.bit_size))

        logger.debug("Bloom filter initialized: %d bits, %d hashes", self.bit_size, self.key_size)

    @classmethod
    def from_bitfield(cls, key_size: int, bit_size: int, bitfield: bytes | bytearray) -> BloomFilter:
        """Rebuild a filter from persisted parts.

        The bytes are copied, so the returned filter never aliases caller memory.
        """
        if key_size < 1:
            raise MalformedPersistedStateError(f"key_size must be at least 1, got {key_size}")
        if bit_size < 1:
            raise MalformedPersistedStateError(f"bit_size must be at least 1, got {bit_size}")
        expected = byte_length(bit_size)
        if len(bitfield) != expected:
            raise MalformedPersistedStateError(
                f"bitfield holds {len(bitfield)} bytes, expected {expected} for {bit_size} bits"
            )
        used_bits = bit_size % 8
        if used_bits and bitfield[-1] >> used_bits:
            raise MalformedPersistedStateError(f"bitfield sets padding bits past bit {bit_size - 1}")

        instance = cls.__new__(cls)
        instance.key_size = key_size
        instance.bit_size = bit_size
        instance.bitfield = bytearray(bitfield)
        return instance

    def hash_positions(self, key: str) -> list[int]:
        """Compute the ``key_size`` bit positions probed for ``key``.

        Probe ``i`` hashes ``key`` concatenated with itself ``i + 1`` times.
        """
        encoded = key.encode("utf-8")
        positions = []
        buffer = b""
        for _ in range(self.key_size):
            buffer += encoded
            digest = hashlib.blake2b(buffer, digest_size=DIGEST_SIZE).digest()
            positions.append(digest_to_position(digest, self.bit_size))
        return positions

    def insert(self, key: str) -> None:
        """Add ``key`` to the filter."""
        for position in self.hash_positions(key):
            self.bitfield[position >> 3] |= 1 << (position & 7)

    def contains(self, key: str) -> bool:
        """Check if ``key`` might be in the set."""
        bitfield = self.bitfield
        return all(bitfield[position >> 3] & (1 << (position & 7)) for position in self.hash_positions(key))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def is_set(self, position: int) -> bool:
        if not 0 <= position < self.bit_size:
            raise IndexError(f"bit position {position} out of range for {self.bit_size} bits")
        return bool(self.bitfield[position >> 3] & (1 << (position & 7)))

    def bits(self) -> Iterator[bool]:
        """Iterate over the logical bits, ignoring byte padding."""
        for position in range(self.bit_size):
            yield self.is_set(position)

    def bits_set(self) -> int:
        return sum(byte.bit_count() for byte in self.bitfield)

    def get_stats(self) -> dict[str, Any]:
        """Get bloom filter statistics."""
        bits_set = self.bits_set()
        return {
            "bit_size": self.bit_size,
            "key_size": self.key_size,
            "bits_set": bits_set,
            "memory_bytes": len(self.bitfield),
            "fill_ratio": bits_set / self.bit_size,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return (
            self.key_size == other.key_size and self.bit_size == other.bit_size and self.bitfield == other.bitfield
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BloomFilter(key_size={self.key_size}, bit_size={self.bit_size})"
