"""Pydantic model for raw candidates returned by the LLM."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class CandidateRecord(BaseModel):
    """One untrusted price candidate. Nothing here is validated yet."""

    model_config = ConfigDict(extra="ignore")

    material: Any = None
    material_category: Any = None
    price_text: Any = None
    price_numeric: Any = None
    unit: Any = None
    currency: Any = None
    source: Any = None
