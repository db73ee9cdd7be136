"""Keyword rules for categories, units and price strings."""

import math
import re
from typing import Optional

from config import CURRENCY
from models import CATEGORIES

# --- Category keywords (order matters: first match wins) ---
_CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("cement", ("cement", "اسمنت", "أسمنت", "إسمنت")),
    ("steel", ("steel", "rebar", "حديد")),
    ("concrete", ("concrete", "خرسان")),
]

_CATEGORY_UNITS = {
    "concrete": f"{CURRENCY}/m3",
    "cement": f"{CURRENCY}/ton",
    "steel": f"{CURRENCY}/ton",
}
_DEFAULT_UNIT = f"{CURRENCY}/unit"

# Spellings of the local currency seen on Egyptian sites
_CURRENCY_ALIASES = {"EGP", "LE", "L.E", "L.E.", "E£", "جنيه", "ج.م"}

_NON_NUMERIC_RE = re.compile(r"[^0-9.,]")


def infer_category(material: Optional[str]) -> str:
    """Guess the material category from a free-form name."""
    name = (material or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in name for k in keywords):
            return category
    return "other"


def infer_unit(category: Optional[str]) -> str:
    """Display unit implied by a category."""
    return _CATEGORY_UNITS.get(category or "", _DEFAULT_UNIT)


def parse_numeric(text) -> Optional[float]:
    """Parse a price string like '18,500 EGP' → 18500.0.

    Commas are treated as thousands separators. Returns None when nothing
    numeric is left.
    """
    if text is None:
        return None
    cleaned = _NON_NUMERIC_RE.sub("", str(text)).replace(",", "")
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_category(value) -> Optional[str]:
    """Return a supplied category if it is one we know, else None."""
    if not isinstance(value, str):
        return None
    category = value.strip().lower()
    return category if category in CATEGORIES else None


def normalize_currency(value) -> Optional[str]:
    """Map local currency spellings to the ISO code.

    Anything else comes back upper-cased so it can be rejected.
    """
    if value is None:
        return None
    code = str(value).strip()
    if not code:
        return None
    if code.upper() in _CURRENCY_ALIASES or code in _CURRENCY_ALIASES:
        return CURRENCY
    return code.upper()
