"""
Electricity Apportionment

Shared sub-meter per room. Consumption since the previous reading is charged
at the configured rate and split equally between the room's active occupants:

  units  = max(0, current - previous)
  amount = units * rate                    (1 occupant)
  amount = units * rate / occupant_count   (2+ occupants)

Missing or negative readings count as zero consumption; the charge is never
negative.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ValidationFailed


@dataclass(frozen=True)
class ElectricityCharge:
    previous_reading: float
    current_reading: float
    units: float
    rate: float
    occupant_count: int
    amount: float


def _clean_reading(value: Optional[float]) -> float:
    if value is None or value < 0:
        return 0.0
    return float(value)


def consumed_units(current_reading: Optional[float], previous_reading: Optional[float]) -> float:
    if current_reading is None or previous_reading is None:
        return 0.0
    if current_reading < 0 or previous_reading < 0:
        return 0.0
    return max(0.0, float(current_reading) - float(previous_reading))


def apportion_electricity(
    current_reading: Optional[float],
    previous_reading: Optional[float],
    occupant_count: int,
    rate: float,
) -> ElectricityCharge:
    """Per-tenant electricity charge for one billing period."""
    if rate < 0:
        raise ValidationFailed("Electricity rate cannot be negative")

    units = consumed_units(current_reading, previous_reading)
    occupants = max(1, int(occupant_count or 0))
    gross = units * rate
    amount = gross if occupants == 1 else gross / occupants

    return ElectricityCharge(
        previous_reading=_clean_reading(previous_reading),
        current_reading=_clean_reading(current_reading),
        units=units,
        rate=float(rate),
        occupant_count=occupants,
        amount=amount,
    )
