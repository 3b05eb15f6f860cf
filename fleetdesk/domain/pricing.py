"""
Booking Price Calculator  (Strategy Pattern)
============================================

Formula
-------
Units      = ceil(duration / 1 day)   for daily rates
           = ceil(duration / 1 hour)  for hourly rates
Base       = Base_Rate x Units
Tax        = Base x TAX_RATE          (10 %)
ServiceFee = Base x SERVICE_FEE_RATE  (5 %)
Total      = Base + Tax + ServiceFee

The total is derived from the itemised parts so the displayed breakdown
always sums to the displayed total.

Complexity: O(1) per quote.
"""

from __future__ import annotations

import math
from abc import ABC
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .clock import on_clock_of
from .enums import RateType


@dataclass(frozen=True)
class Quote:
    base: float = 0.0
    tax: float = 0.0
    service_fee: float = 0.0
    total: float = 0.0
    units: int = 0


ZERO_QUOTE = Quote()


# ── Strategy hierarchy ────────────────────────────────────────────────


class RateStrategy(ABC):
    """Turns a rental window into billable units."""

    unit: timedelta

    def units(self, start: datetime, end: datetime) -> int:
        return math.ceil((end - start) / self.unit)


class DailyRate(RateStrategy):
    unit = timedelta(days=1)


class HourlyRate(RateStrategy):
    unit = timedelta(hours=1)


STRATEGIES: dict[RateType, RateStrategy] = {
    RateType.DAILY: DailyRate(),
    RateType.HOURLY: HourlyRate(),
}


# ── Calculator facade ─────────────────────────────────────────────────


class PricingCalculator:
    """High-level API used by the booking views."""

    def __init__(self, tax_rate: float = 0.10, service_fee_rate: float = 0.05):
        self.tax_rate = tax_rate
        self.service_fee_rate = service_fee_rate

    def quote(
        self,
        base_rate: float,
        rate_type: RateType,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> Quote:
        """Price a rental window; an empty or inverted window quotes zero."""
        if start is None or end is None:
            return ZERO_QUOTE
        end = on_clock_of(end, start)
        if end <= start:
            return ZERO_QUOTE

        units = STRATEGIES[RateType(rate_type)].units(start, end)
        base = base_rate * units
        tax = round(base * self.tax_rate, 2)
        service_fee = round(base * self.service_fee_rate, 2)
        return Quote(
            base=round(base, 2),
            tax=tax,
            service_fee=service_fee,
            total=round(base + tax + service_fee, 2),
            units=units,
        )


_default = PricingCalculator()


def quote(
    base_rate: float,
    rate_type: RateType,
    start: Optional[datetime],
    end: Optional[datetime],
) -> Quote:
    """Quote with the standard 10 % tax and 5 % service fee."""
    return _default.quote(base_rate, rate_type, start, end)
