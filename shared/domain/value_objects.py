"""
Common Value Objects

Value objects used across the marina domains:
- Money: Represents monetary amounts with currency
- DateRange: Represents an inclusive range of dates (booking period)
- Dimensions: Length/width of a vessel or a berth, normalized to Decimal
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

SUPPORTED_CURRENCIES = ('RUB', 'USD', 'EUR')


def to_decimal(value: Any, field_name: str = 'value') -> Decimal:
    """
    Parse a numeric value coming from the data layer or the API.

    Accepts Decimal, int, float and numeric strings ("7.0", " 7,5 ").
    Raises ValueError for anything else, including NaN/Infinity.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field_name}: numeric value expected, got {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(' ', '').replace(',', '.')
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"{field_name}: cannot parse {value!r} as a number") from None
    else:
        raise ValueError(f"{field_name}: unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"{field_name}: {value!r} is not a finite number")
    return result


@dataclass(frozen=True)
class Money:
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'RUB'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', to_decimal(self.amount, 'amount'))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'RUB') -> 'Money':
        return cls(Decimal('0.00'), currency)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def quantized(self) -> Decimal:
        """Amount rounded to kopecks/cents, as stored in DecimalField(decimal_places=2)."""
        return self.amount.quantize(Decimal('0.01'))

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"


@dataclass(frozen=True)
class DateRange:
    """
    Date range value object

    Both ends are inclusive: a berth rented for June is 06-01..06-30.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must not be after end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another.

        Ranges sharing a single boundary day overlap, because both ends are
        occupied days.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    def intersection(self, other: 'DateRange') -> 'DateRange | None':
        if not self.overlaps_with(other):
            return None
        return DateRange(max(self.start_date, other.start_date), min(self.end_date, other.end_date))

    @property
    def days(self) -> int:
        """Number of occupied days."""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.strftime('%d.%m.%Y')} - {self.end_date.strftime('%d.%m.%Y')}"


@dataclass(frozen=True)
class Dimensions:
    """
    Length and width in metres.

    Built once from raw column/API values with ``from_raw`` so every later
    comparison is Decimal against Decimal. Width may be unknown for vessels.
    """
    length: Decimal
    width: Decimal | None = None

    @classmethod
    def from_raw(cls, length: Any, width: Any = None) -> 'Dimensions':
        parsed_length = to_decimal(length, 'length')
        parsed_width = None
        if width is not None and width != '':
            parsed_width = to_decimal(width, 'width')
        if parsed_length <= 0 or (parsed_width is not None and parsed_width <= 0):
            raise ValueError("Dimensions must be positive")
        return cls(parsed_length, parsed_width)

    def length_exceeds(self, limit: 'Dimensions') -> bool:
        return self.length > limit.length

    def width_exceeds(self, limit: 'Dimensions') -> bool:
        if self.width is None or limit.width is None:
            return False
        return self.width > limit.width

    def fits_within(self, limit: 'Dimensions') -> bool:
        return not self.length_exceeds(limit) and not self.width_exceeds(limit)


def normalize_months(months: Iterable[Any] | None) -> list[int]:
    """Sorted unique month numbers 1-12; raises ValueError on anything else."""
    if not months:
        return []
    result = set()
    for month in months:
        value = to_decimal(month, 'month')
        if value != value.to_integral_value():
            raise ValueError(f"Month must be a whole number, got {month!r}")
        number = int(value)
        if number < 1 or number > 12:
            raise ValueError(f"Month must be in 1..12, got {month!r}")
        result.add(number)
    return sorted(result)


def month_range(year: int, month: int) -> DateRange:
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def season_period(year: int, months: Iterable[int]) -> DateRange:
    """From the 1st of the first month to the last day of the last month."""
    months = sorted(months)
    if not months:
        raise ValueError("At least one month is required")
    return DateRange(month_range(year, months[0]).start_date, month_range(year, months[-1]).end_date)
