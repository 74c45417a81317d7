"""
Date utilities.

Provides:
- Tenor parsing and date generation
- Schedule generation for coupon legs (swaps, CDS premium legs)
- Inflation observation periods
"""

from datetime import date, timedelta
from typing import List, Optional, Tuple
import re

from .conventions import (
    BusinessDayConvention,
    Frequency,
    adjust_business_day,
    is_business_day,
)


class DateUtils:
    """Utility class for date manipulation."""

    # Tenor regex pattern: optionally signed number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^([+-]?\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_months(start: date, months: int) -> date:
        """Add (possibly negative) months, clipping the day to the month end."""
        year = start.year + (start.month + months - 1) // 12
        month = (start.month + months - 1) % 12 + 1
        day = min(start.day, _days_in_month(year, month))
        return date(year, month, day)

    @staticmethod
    def add_tenor(start: date, tenor: str, holidays: Optional[set] = None) -> date:
        """
        Add a tenor to a date.

        Day tenors count business days, all other units are calendar based.
        A negative tenor such as "-3M" moves backward.
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            step = timedelta(days=1 if amount >= 0 else -1)
            result = start
            days_added = 0
            while days_added < abs(amount):
                result += step
                if is_business_day(result, holidays):
                    days_added += 1
            return result
        elif unit == 'W':
            return start + timedelta(weeks=amount)
        elif unit == 'M':
            return DateUtils.add_months(start, amount)
        elif unit == 'Y':
            return DateUtils.add_months(start, 12 * amount)
        raise ValueError(f"Unknown tenor unit: {unit}")

    @staticmethod
    def generate_schedule(
        start: date,
        end: date,
        frequency: int,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None
    ) -> List[date]:
        """
        Generate schedule dates between start and end, both included.

        Dates are rolled backward from the end date so that any stub sits at
        the front. The first date is the unadjusted start date, the others
        are adjusted with the business day convention.

        Args:
            start: Schedule start (accrual start)
            end: Schedule end (maturity)
            frequency: Periods per year (1=annual, 2=semi, 4=quarterly, 12=monthly)
            convention: Business day adjustment
            holidays: Holiday calendar

        Returns:
            List of schedule dates
        """
        if frequency <= 0:
            raise ValueError("Frequency must be positive")
        if end <= start:
            raise ValueError("Schedule end must be after start")

        months_per_period = 12 // frequency

        unadjusted = [end]
        n = 1
        while True:
            prev_date = DateUtils.add_months(end, -n * months_per_period)
            if prev_date <= start:
                break
            unadjusted.insert(0, prev_date)
            n += 1
        unadjusted.insert(0, start)

        adjusted = [unadjusted[0]]
        adjusted.extend(adjust_business_day(d, convention, holidays) for d in unadjusted[1:])
        return adjusted

    @staticmethod
    def inflation_period(d: date, frequency: Frequency) -> Tuple[date, date]:
        """
        Observation period enclosing a date.

        Args:
            d: Any date
            frequency: Index publication frequency

        Returns:
            (first day of the period, last day of the period)
        """
        months = frequency.months
        first_month = ((d.month - 1) // months) * months + 1
        start = date(d.year, first_month, 1)
        next_start = DateUtils.add_months(start, months)
        return start, next_start - timedelta(days=1)


def _days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    if month in (1, 3, 5, 7, 8, 10, 12):
        return 31
    elif month in (4, 6, 9, 11):
        return 30
    elif month == 2:
        if (year % 4 == 0 and year % 100 != 0) or (year % 400 == 0):
            return 29
        return 28
    raise ValueError(f"Invalid month: {month}")


__all__ = [
    "DateUtils",
]
