"""Rental pricing.

Tiers, evaluated in order:
- 30+ days with a monthly rate: whole months at the monthly rate, the rest daily
- 7+ days with a weekly rate: whole weeks at the weekly rate, the rest daily
- otherwise every day at the daily rate

A rate that is missing or zero is treated as not offered.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from rento.core.exceptions import ValidationError

SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30

CENTS = Decimal("0.01")


class RateTier(str, Enum):
    """Which rate a quote was priced with."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class PriceQuote:
    """Result of pricing a rental period."""

    duration_days: int
    tier: RateTier
    periods: int
    remainder_days: int
    total_amount: Decimal


def rental_duration_days(start: date | datetime, end: date | datetime) -> int:
    """Number of billable days between start and end, rounded up, at least 1."""
    delta = end - start
    days = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
    return max(days, 1)


def quote_rental(
    price_per_day: Decimal,
    start: date | datetime,
    end: date | datetime,
    price_per_week: Decimal | None = None,
    price_per_month: Decimal | None = None,
) -> PriceQuote:
    """Price a rental period using the cheapest tier the vehicle offers.

    Args:
        price_per_day: Daily rate (positive)
        start: First day of the rental
        end: Last day of the rental
        price_per_week: Optional weekly rate
        price_per_month: Optional monthly rate

    Returns:
        PriceQuote: Duration, tier breakdown and total amount
    """
    days = rental_duration_days(start, end)
    daily = Decimal(price_per_day)

    if days >= DAYS_PER_MONTH and price_per_month:
        months, remainder = divmod(days, DAYS_PER_MONTH)
        total = months * Decimal(price_per_month) + remainder * daily
        return PriceQuote(days, RateTier.MONTHLY, months, remainder, total.quantize(CENTS))

    if days >= DAYS_PER_WEEK and price_per_week:
        weeks, remainder = divmod(days, DAYS_PER_WEEK)
        total = weeks * Decimal(price_per_week) + remainder * daily
        return PriceQuote(days, RateTier.WEEKLY, weeks, remainder, total.quantize(CENTS))

    return PriceQuote(days, RateTier.DAILY, days, 0, (days * daily).quantize(CENTS))


def calculate_total(
    price_per_day: Decimal,
    start: date | datetime,
    end: date | datetime,
    price_per_week: Decimal | None = None,
    price_per_month: Decimal | None = None,
) -> Decimal:
    """Total amount for a rental period."""
    return quote_rental(price_per_day, start, end, price_per_week, price_per_month).total_amount


def check_rate_tiers(
    price_per_day: Decimal,
    price_per_week: Decimal | None = None,
    price_per_month: Decimal | None = None,
) -> None:
    """Reject rates where a longer tier costs more than paying daily."""
    if price_per_day is None or price_per_day <= 0:
        raise ValidationError("Daily rate must be greater than zero")
    if price_per_week and price_per_week > DAYS_PER_WEEK * price_per_day:
        raise ValidationError("Weekly rate cannot exceed 7 times the daily rate")
    if price_per_month and price_per_month > DAYS_PER_MONTH * price_per_day:
        raise ValidationError("Monthly rate cannot exceed 30 times the daily rate")
