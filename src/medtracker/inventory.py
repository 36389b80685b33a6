"""Medication stock levels and refill queries."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MedicationStock(BaseModel):
    model_config = ConfigDict(frozen=True)

    medication_name: str
    remaining_units: int = Field(ge=0)
    units_per_day: int = Field(default=1, gt=0)

    @field_validator("medication_name")
    @classmethod
    def medication_name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("medication_name must not be empty")
        return v


def days_of_supply(stock: MedicationStock) -> int:
    """Whole days the remaining units cover at the daily rate."""
    return stock.remaining_units // stock.units_per_day


def low_stock(stocks: Iterable[MedicationStock], threshold: int) -> list[MedicationStock]:
    """Stocks at or below ``threshold`` remaining units, in input order."""
    if threshold < 0:
        raise ValueError("threshold must be non-negative")
    return [stock for stock in stocks if stock.remaining_units <= threshold]


def refills_needed(stocks: Iterable[MedicationStock], threshold: int) -> int:
    return len(low_stock(stocks, threshold))
