"""Data models for the price aggregator."""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional

CATEGORIES = ("steel", "cement", "concrete", "other")


def now_iso() -> str:
    """Return current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class MissingCredentialsError(RuntimeError):
    """Raised when a collaborator is called without its API credentials."""


@dataclass
class SearchHit:
    title: str
    link: str
    snippet: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PriceRecord:
    material: str
    material_category: str  # 'steel' | 'cement' | 'concrete' | 'other'
    price: float
    unit: str
    source: str
    url: str
    currency: str = "EGP"
    price_text: Optional[str] = None
    timestamp: str = field(default_factory=now_iso)
    stale: Optional[bool] = None
    demo: Optional[bool] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        # Provenance flags are only present on the wire when set
        for flag in ("stale", "demo"):
            if data[flag] is None:
                del data[flag]
        return data


@dataclass(frozen=True)
class Snapshot:
    """The published set of prices. Replaced wholesale, never mutated."""

    updated_at: Optional[str] = None
    items: tuple[PriceRecord, ...] = ()
