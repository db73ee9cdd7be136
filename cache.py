"""In-memory price snapshot with stale and demo fallback."""

import logging
from dataclasses import replace

from models import PriceRecord, Snapshot, now_iso

logger = logging.getLogger(__name__)

# Shown only until the first real prices arrive
DEMO_RECORDS = (
    PriceRecord(
        material="Steel Rebar 10mm",
        material_category="steel",
        price=38500,
        unit="EGP/ton",
        source="demo",
        url="",
        price_text="38,500 EGP/ton",
    ),
    PriceRecord(
        material="Ordinary Portland Cement",
        material_category="cement",
        price=3800,
        unit="EGP/ton",
        source="demo",
        url="",
        price_text="3,800 EGP/ton",
    ),
    PriceRecord(
        material="Ready Mix Concrete 350",
        material_category="concrete",
        price=2900,
        unit="EGP/m3",
        source="demo",
        url="",
        price_text="2,900 EGP/m3",
    ),
)


class PriceCache:
    """Holds the current Snapshot.

    Only commit() writes, and it swaps the whole Snapshot in one assignment,
    so readers never see a partial update.
    """

    def __init__(self):
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def items(self) -> tuple[PriceRecord, ...]:
        return self._snapshot.items

    def to_dicts(self) -> list[dict]:
        return [r.to_dict() for r in self._snapshot.items]

    def commit(self, records: list[PriceRecord]) -> Snapshot:
        """Publish a cycle's records, falling back to stale or demo data."""
        now = now_iso()
        current = self._snapshot

        if records:
            items = tuple(records)
            logger.info(f"Committed {len(items)} fresh prices")
        elif current.items:
            items = tuple(replace(r, stale=True, timestamp=now) for r in current.items)
            logger.warning(f"No fresh prices; serving {len(items)} stale prices")
        else:
            items = tuple(replace(r, demo=True, timestamp=now) for r in DEMO_RECORDS)
            logger.warning("No prices ever fetched; serving demo data")

        self._snapshot = Snapshot(updated_at=now, items=items)
        return self._snapshot
