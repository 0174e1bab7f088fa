from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

import pytest
from bson.decimal128 import Decimal128

from adaptors.codec import (
    INBOUND, OUTBOUND, Instant, stringify_deep, stringify_keys, transform_scalars,
)


class Color(Enum):
    RED = "red"


def _all_keys_str(value):
    if isinstance(value, dict):
        return all(isinstance(k, str) and _all_keys_str(v) for k, v in value.items())
    if isinstance(value, list):
        return all(_all_keys_str(v) for v in value)
    return True


def test_stringify_deep_converts_keys_at_every_depth():
    doc = {1: "a", "nested": {2: {Color.RED: True}}, "items": [{3: "x"}, "plain"]}
    out = stringify_deep(doc)
    assert out == {"1": "a", "nested": {"2": {"red": True}}, "items": [{"3": "x"}, "plain"]}
    assert _all_keys_str(out)


def test_stringify_deep_is_idempotent_and_does_not_mutate():
    doc = {1: {2: [{3: 4}]}}
    once = stringify_deep(doc)
    assert stringify_deep(once) == once
    assert doc == {1: {2: [{3: 4}]}}


def test_stringify_keys_is_one_level():
    assert stringify_keys({1: {2: 3}}) == {"1": {2: 3}}


def test_instant_round_trip_through_codec_is_exact():
    t = Instant(datetime(2024, 2, 29, 12, 30, 45, 123456, tzinfo=timezone.utc))
    doc = {"created": t, "history": [{"at": t}], "meta": {"seen": (t, 5)}}
    stored = transform_scalars(doc, OUTBOUND)
    assert isinstance(stored["created"], datetime)
    assert stored["history"][0]["at"] == t.to_datetime()
    back = transform_scalars(stored, INBOUND)
    assert back["created"] == t
    assert back["history"][0]["at"] == t
    assert back["meta"]["seen"] == [t, 5]


def test_inbound_reads_naive_datetimes_as_utc():
    naive = datetime(2024, 1, 1, 8, 0, 0)
    out = transform_scalars([{"at": naive}], INBOUND)
    assert out == [{"at": Instant(naive.replace(tzinfo=timezone.utc))}]


def test_instant_normalizes_other_zones_to_utc():
    plus_two = timezone(timedelta(hours=2))
    t = Instant(datetime(2024, 1, 1, 10, 0, tzinfo=plus_two))
    assert t.to_datetime().tzinfo == timezone.utc
    assert t.to_datetime().hour == 8


def test_decimals_cross_as_decimal128():
    stored = transform_scalars({"price": Decimal("19.99")}, OUTBOUND)
    assert stored == {"price": Decimal128("19.99")}
    assert transform_scalars(stored, INBOUND) == {"price": Decimal("19.99")}


def test_transform_is_noop_without_matching_scalars():
    doc = {"a": 1, "b": ["x", {"c": None, "d": 2.5}], "e": True}
    assert transform_scalars(doc, OUTBOUND) == doc
    assert transform_scalars(doc, INBOUND) == doc


def test_unknown_direction_is_rejected():
    with pytest.raises(ValueError):
        transform_scalars({}, "sideways")


def test_instant_requires_datetime():
    with pytest.raises(TypeError):
        Instant("2024-01-01")
