"""
Value codec — structural transforms for values crossing the store boundary.

Two jobs:

  1. Key normalization
     BSON requires string keys everywhere, including inside embedded
     documents. Callers hand us whatever mapping keys they like (enums,
     ints); stringify_deep() rewrites every key at every depth.

  2. Scalar substitution
     The application speaks in Instant timestamps and Decimal amounts.
     The store speaks datetime and Decimal128. transform_scalars() walks
     a whole payload (one document, or a list of them) and swaps leaf
     values through a closed converter table, one table per direction.

Both functions return new containers. Input structures are never mutated.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from bson.decimal128 import Decimal128

OUTBOUND = "outbound"   # application → store
INBOUND = "inbound"     # store → application


@dataclass(frozen=True, order=True)
class Instant:
    """
    A point in time, always UTC.

    This is the only timestamp type the application layer sees. The store
    gets a timezone-aware datetime on the way out and hands back naive
    UTC datetimes on the way in; both are folded back into an Instant.

    Note: MongoDB keeps millisecond precision. An Instant survives the
    codec round trip exactly, but sub-millisecond digits are lost once
    the value has actually been persisted.
    """

    moment: datetime

    def __post_init__(self):
        if not isinstance(self.moment, datetime):
            raise TypeError(f"Instant needs a datetime, got {type(self.moment).__name__}")
        object.__setattr__(self, "moment", _as_utc(self.moment))

    @classmethod
    def now(cls):
        return cls(datetime.now(timezone.utc))

    @classmethod
    def from_datetime(cls, value):
        """Naive datetimes are taken to be UTC (that is what pymongo returns)."""
        return cls(value)

    @classmethod
    def from_epoch(cls, seconds):
        return cls(datetime.fromtimestamp(seconds, timezone.utc))

    def to_datetime(self):
        return self.moment

    def isoformat(self):
        return self.moment.isoformat()

    def __str__(self):
        return self.isoformat()


def _as_utc(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Key normalization ─────────────────────────────────────────


def canonical_key(key) -> str:
    """String form of a mapping key. Enums contribute their value."""
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def stringify_keys(mapping) -> dict:
    """One level only. Values are left alone."""
    return {canonical_key(k): v for k, v in mapping.items()}


def stringify_deep(value):
    """
    Recursively convert every mapping key to a string.

    Descends into nested mappings and into lists/tuples so that documents
    embedded in arrays are covered too. Re-applying it is a no-op.

    Args:
        value: A document, or any value that may contain documents.

    Returns:
        A new structure with the same shape and string keys throughout.
    """
    if isinstance(value, Mapping):
        return {canonical_key(k): stringify_deep(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify_deep(v) for v in value]
    return value


# ── Scalar substitution ───────────────────────────────────────

# Order matters: first isinstance match wins.
_CONVERTERS = {
    OUTBOUND: (
        (Instant, Instant.to_datetime),
        (Decimal, Decimal128),
    ),
    INBOUND: (
        (datetime, Instant.from_datetime),
        (Decimal128, Decimal128.to_decimal),
    ),
}


def convert_scalar(value, direction):
    """Swap a single leaf value, or return it untouched."""
    for kind, convert in _converters(direction):
        if isinstance(value, kind):
            return convert(value)
    return value


def transform_scalars(value, direction):
    """
    Walk a whole payload and convert every matching leaf scalar.

    Mappings keep their keys; lists and tuples come back as lists. A
    structure with nothing to convert comes back equal to the input.

    Args:
        value:     A document, a list of documents, or a bare scalar.
        direction: OUTBOUND (before a write) or INBOUND (after a read).

    Returns:
        A new structure of the same shape.

    Raises:
        ValueError: For an unknown direction.
    """
    _converters(direction)
    return _walk(value, direction)


def _walk(value, direction):
    if isinstance(value, Mapping):
        return {k: _walk(v, direction) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_walk(v, direction) for v in value]
    return convert_scalar(value, direction)


def _converters(direction):
    try:
        return _CONVERTERS[direction]
    except KeyError:
        raise ValueError(
            f"Unknown direction {direction!r}. Use {OUTBOUND!r} or {INBOUND!r}"
        ) from None
