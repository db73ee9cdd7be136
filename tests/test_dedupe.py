"""Tests for dedupe."""

from dedupe import dedupe
from models import PriceRecord


def _record(material, source, price=100.0):
    return PriceRecord(
        material=material,
        material_category="steel",
        price=price,
        unit="EGP/ton",
        source=source,
        url=f"https://{source}.example",
    )


def test_first_seen_wins():
    first = _record("Steel Rebar", "siteA", 38000)
    records = [first, _record("steel rebar", "SITEA", 39000), _record("Cement", "siteA")]

    result = dedupe(records)

    assert result == [first, records[2]]
    assert result[0].price == 38000


def test_same_material_different_source_kept():
    records = [_record("Steel Rebar", "siteA"), _record("Steel Rebar", "siteB")]
    assert dedupe(records) == records


def test_idempotent():
    records = [
        _record("Steel Rebar", "siteA"),
        _record("Steel Rebar", "siteA", 1),
        _record("Cement", "siteB"),
        _record("cement", "siteb", 2),
    ]
    once = dedupe(records)
    assert dedupe(once) == once


def test_empty():
    assert dedupe([]) == []
