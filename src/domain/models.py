"""
Domain models for the price archive service.

Defines the priced-item record stored in the `prices` table (created from
`SCHEMA_SQL` in `src.infrastructure.store`) and the statistics summary returned
by an ingest call.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, Field

CSV_HEADER = ("id", "name", "category", "price", "create_date")


class Record(BaseModel):
    """
    Representation of a single row in the `prices` table.
    """

    id: int = Field(..., ge=0, description="Externally supplied identifier (primary key).")
    name: str = Field(..., min_length=1, description="Item name.")
    category: str = Field(..., min_length=1, description="Category label.")
    price: Decimal = Field(..., ge=0, description="Non-negative price.")
    created_at: date = Field(..., description="Calendar date the price was recorded.")

    model_config = {"frozen": True}

    def to_row(self) -> tuple[str, str, str, str, str]:
        """Render the record as the five canonical CSV fields."""
        return (
            str(self.id),
            self.name,
            self.category,
            f"{self.price:.2f}",
            self.created_at.isoformat(),
        )


class IngestStats(BaseModel):
    """
    Aggregates over the whole store, taken inside the ingest transaction.
    """

    total_items: int = Field(..., ge=0)
    total_categories: int = Field(..., ge=0)
    total_price: Decimal = Field(...)

    model_config = {"frozen": True}

    def as_response(self) -> Dict[str, Any]:
        """JSON-ready body; total_price is emitted as a number, not a string."""
        return {
            "total_items": self.total_items,
            "total_categories": self.total_categories,
            "total_price": float(self.total_price),
        }


__all__ = ["CSV_HEADER", "IngestStats", "Record"]
