"""Persisted form of a document index.

The wire format is a compact JSON object with sorted keys:

* ``format_version`` - currently ``1``
* ``error_rate`` - the index's false-positive target
* ``bloom_filters`` - identifier -> ``{"key_size", "bit_size", "bitfield"}``
  where ``bitfield`` is the base64 encoding of the packed bit bytes

Validation is strict: unknown or missing fields, a different format version or
a bitfield whose length disagrees with ``bit_size`` are all rejected. Sorted
keys and canonical base64 make dump -> restore -> dump byte-for-byte stable.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

from index_bloom.exceptions import InvalidErrorRateError, MalformedPersistedStateError
from index_bloom.search.bloom_filter import BloomFilter, validate_error_rate


FORMAT_VERSION = 1

_DUMP_OPTIONS = orjson.OPT_SORT_KEYS


class FilterRecord(BaseModel):
    """Serialized Bloom filter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key_size: StrictInt = Field(ge=1)
    bit_size: StrictInt = Field(ge=1)
    bitfield: StrictStr

    @classmethod
    def from_filter(cls, bloom_filter: BloomFilter) -> FilterRecord:
        return cls(
            key_size=bloom_filter.key_size,
            bit_size=bloom_filter.bit_size,
            bitfield=base64.b64encode(bytes(bloom_filter.bitfield)).decode("ascii"),
        )

    def to_filter(self) -> BloomFilter:
        try:
            raw = base64.b64decode(self.bitfield, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise MalformedPersistedStateError(f"bitfield is not valid base64: {exc}") from exc
        return BloomFilter.from_bitfield(self.key_size, self.bit_size, raw)


class IndexRecord(BaseModel):
    """Serialized document index."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format_version: StrictInt
    error_rate: StrictFloat
    bloom_filters: dict[str, FilterRecord]

    @field_validator("format_version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != FORMAT_VERSION:
            raise ValueError(f"unsupported format_version {value} (expected {FORMAT_VERSION})")
        return value

    @field_validator("error_rate")
    @classmethod
    def _check_error_rate(cls, value: float) -> float:
        try:
            return validate_error_rate(value)
        except InvalidErrorRateError as exc:
            raise ValueError(str(exc)) from exc


def encode_index(error_rate: float, filters: Mapping[str, BloomFilter]) -> bytes:
    """Serialize index state into the persisted form."""
    record = IndexRecord(
        format_version=FORMAT_VERSION,
        error_rate=error_rate,
        bloom_filters={identifier: FilterRecord.from_filter(bf) for identifier, bf in filters.items()},
    )
    return orjson.dumps(record.model_dump(mode="json"), option=_DUMP_OPTIONS)


def decode_index(data: bytes | bytearray | memoryview | str) -> tuple[float, dict[str, BloomFilter]]:
    """Parse the persisted form into ``(error_rate, filters)``.

    Either the whole payload decodes or ``MalformedPersistedStateError`` is
    raised; no partial state escapes.
    """
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise MalformedPersistedStateError(f"persisted index is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedPersistedStateError(f"persisted index must be a JSON object, got {type(payload).__name__}")

    try:
        record = IndexRecord.model_validate(payload)
    except ValidationError as exc:
        raise MalformedPersistedStateError(f"persisted index failed validation: {exc}") from exc

    filters = {identifier: filter_record.to_filter() for identifier, filter_record in record.bloom_filters.items()}
    return record.error_rate, filters
