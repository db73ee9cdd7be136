"""Collapse records for the same (material, source) pair."""

from models import PriceRecord


def dedupe_key(record: PriceRecord) -> str:
    return f"{(record.material or '').lower()}|{(record.source or '').lower()}"


def dedupe(records: list[PriceRecord]) -> list[PriceRecord]:
    """Keep the first record per key, in input order.

    Earlier records come from earlier queries and higher-ranked hits, so the
    first one seen wins.
    """
    seen: set[str] = set()
    result = []
    for record in records:
        key = dedupe_key(record)
        if key in seen:
            continue
        seen.add(key)
        result.append(record)
    return result
