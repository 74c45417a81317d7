"""
Day count, business day and market conventions.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, OIS, CDS)
- ACT/365: Actual days / 365 (model time axis)
- ACT/ACT: Actual days / actual days in year
- 30/360: 30 days per month / 360 (some swaps)

Business Day Conventions:
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Following: Move to next business day
- Preceding: Move to previous business day

Market conventions are modelled as one frozen dataclass per convention
kind, each holding only its own fields. CONVENTION_TYPES maps the closed
ConventionType enumeration to its dataclass and is the single dispatch
table used by convention_from_dict / convention_to_dict.
"""

from dataclasses import dataclass, field, fields
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Type
import calendar

from .errors import ConfigurationError


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "A360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "A365F": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"

    @classmethod
    def from_string(cls, s: str) -> "BusinessDayConvention":
        key = s.upper().replace(" ", "").replace("_", "")
        for member in cls:
            if member.value.upper() == key or member.name.replace("_", "") == key:
                return member
        if key in ("MF", "MODFOLLOWING"):
            return cls.MODIFIED_FOLLOWING
        if key == "F":
            return cls.FOLLOWING
        if key == "P":
            return cls.PRECEDING
        if key in ("U", "NONE"):
            return cls.UNADJUSTED
        raise ValueError(f"Unknown business day convention: {s}")


class CompoundingConvention(Enum):
    """Interest rate compounding convention."""
    CONTINUOUS = "Continuous"
    ANNUAL = "Annual"
    SEMI_ANNUAL = "SemiAnnual"
    QUARTERLY = "Quarterly"
    SIMPLE = "Simple"


class Frequency(Enum):
    """Payment / observation frequency as number of periods per year."""
    ANNUAL = 1
    SEMI_ANNUAL = 2
    QUARTERLY = 4
    MONTHLY = 12

    @property
    def months(self) -> int:
        return 12 // self.value

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        mapping = {
            "A": cls.ANNUAL, "ANNUAL": cls.ANNUAL, "1Y": cls.ANNUAL,
            "S": cls.SEMI_ANNUAL, "SEMIANNUAL": cls.SEMI_ANNUAL, "6M": cls.SEMI_ANNUAL,
            "Q": cls.QUARTERLY, "QUARTERLY": cls.QUARTERLY, "3M": cls.QUARTERLY,
            "M": cls.MONTHLY, "MONTHLY": cls.MONTHLY, "1M": cls.MONTHLY,
        }
        key = s.upper().replace(" ", "").replace("_", "").replace("-", "")
        if key.isdigit():
            return cls(int(key))
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown frequency: {s}")


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float. Negative when end precedes start.
    """
    if start == end:
        return 0.0
    if end < start:
        return -year_fraction(end, start, day_count)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        # ISDA ACT/ACT: split by year boundaries
        if start.year == end.year:
            days_in_year = 366 if calendar.isleap(start.year) else 365
            return actual_days / days_in_year
        total = 0.0
        for year in range(start.year, end.year + 1):
            days_in_year = 366 if calendar.isleap(year) else 365
            period_start = start if year == start.year else date(year, 1, 1)
            period_end = end if year == end.year else date(year + 1, 1, 1)
            total += (period_end - period_start).days / days_in_year
        return total

    elif day_count == DayCount.THIRTY_360:
        # 30/360 US convention
        d1 = min(start.day, 30)
        d2 = end.day
        if end.day == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """
    Adjust a date according to business day convention.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    if convention == BusinessDayConvention.FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.PRECEDING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.MODIFIED_FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)
        # If we crossed into next month, go preceding instead
        if adjusted.month != d.month:
            adjusted = d
            while not is_business_day(adjusted, holidays):
                adjusted -= timedelta(days=1)
        return adjusted

    return d


# ---------------------------------------------------------------------------
# Market conventions
# ---------------------------------------------------------------------------

class ConventionType(Enum):
    """Closed set of market convention kinds."""
    ZERO = "Zero"
    DEPOSIT = "Deposit"
    OIS = "OIS"
    IBOR_INDEX = "IborIndex"
    OVERNIGHT_INDEX = "OvernightIndex"
    SWAP_INDEX = "SwapIndex"
    SWAP = "Swap"
    FX = "FX"
    CDS = "CDS"
    INFLATION_SWAP = "InflationSwap"
    COMMODITY_FUTURE = "CommodityFuture"

    @classmethod
    def from_string(cls, s: str) -> "ConventionType":
        for member in cls:
            if member.value.upper() == s.upper():
                return member
        raise ConfigurationError(f"Unknown convention type: {s}")


def _parse_field(value: Any, target: Any) -> Any:
    """Coerce a serialized value to the enum type a field declares."""
    if isinstance(target, type) and issubclass(target, Enum) and not isinstance(value, target):
        if hasattr(target, "from_string"):
            return target.from_string(str(value))
        return target(value)
    return value


@dataclass(frozen=True)
class Convention:
    """Base fields shared by every convention kind."""
    id: str

    TYPE = None  # type: Optional[ConventionType]

    def __post_init__(self):
        if not self.id:
            raise ConfigurationError(f"{type(self).__name__}: empty convention id")
        hints = {f.name: f.type for f in fields(self)}
        for name, target in hints.items():
            resolved = _FIELD_TYPES.get(target, target)
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _parse_field(value, resolved))
        self.validate()

    def validate(self) -> None:
        """Kind specific consistency checks, raise ConfigurationError."""

    @property
    def type(self) -> ConventionType:
        return self.TYPE


@dataclass(frozen=True)
class ZeroRateConvention(Convention):
    day_count: DayCount = DayCount.ACT_365
    compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS
    frequency: Frequency = Frequency.ANNUAL
    tenor_calendar: Optional[str] = None
    spot_lag: int = 0
    roll_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING

    TYPE = ConventionType.ZERO


@dataclass(frozen=True)
class DepositConvention(Convention):
    index: Optional[str] = None
    calendar: Optional[str] = None
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    end_of_month: bool = False
    day_count: DayCount = DayCount.ACT_360

    TYPE = ConventionType.DEPOSIT

    def validate(self) -> None:
        if self.index is None and self.calendar is None:
            raise ConfigurationError(f"Deposit convention {self.id}: need either an index or a calendar")


@dataclass(frozen=True)
class OisConvention(Convention):
    index: str = ""
    spot_lag: int = 2
    fixed_day_count: DayCount = DayCount.ACT_360
    payment_lag: int = 0
    end_of_month: bool = False
    fixed_frequency: Frequency = Frequency.ANNUAL
    fixed_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    fixed_payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING

    TYPE = ConventionType.OIS

    def validate(self) -> None:
        if not self.index:
            raise ConfigurationError(f"OIS convention {self.id}: index is required")


@dataclass(frozen=True)
class IborIndexConvention(Convention):
    fixing_calendar: str = "WEEKENDS"
    day_count: DayCount = DayCount.ACT_360
    settlement_days: int = 2
    business_day_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    end_of_month: bool = False

    TYPE = ConventionType.IBOR_INDEX

    def validate(self) -> None:
        # CCY-NAME-TENOR
        if len(self.id.split("-")) != 3:
            raise ConfigurationError(f"Ibor index convention id {self.id} must be of the form CCY-NAME-TENOR")

    @property
    def tenor(self) -> str:
        return self.id.split("-")[2]


@dataclass(frozen=True)
class OvernightIndexConvention(Convention):
    fixing_calendar: str = "WEEKENDS"
    day_count: DayCount = DayCount.ACT_360
    settlement_days: int = 0

    TYPE = ConventionType.OVERNIGHT_INDEX

    def validate(self) -> None:
        if len(self.id.split("-")) != 2:
            raise ConfigurationError(f"Overnight index convention id {self.id} must be of the form CCY-NAME")


@dataclass(frozen=True)
class SwapIndexConvention(Convention):
    conventions: str = ""
    fixing_calendar: Optional[str] = None

    TYPE = ConventionType.SWAP_INDEX

    def validate(self) -> None:
        if not self.conventions:
            raise ConfigurationError(f"Swap index convention {self.id}: swap conventions id is required")
        if self.conventions == self.id:
            raise ConfigurationError(f"Swap index convention {self.id} refers to itself")


@dataclass(frozen=True)
class IRSwapConvention(Convention):
    index: str = ""
    fixed_calendar: str = "WEEKENDS"
    fixed_frequency: Frequency = Frequency.ANNUAL
    fixed_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    fixed_day_count: DayCount = DayCount.THIRTY_360
    float_frequency: Optional[Frequency] = None
    has_sub_period: bool = False

    TYPE = ConventionType.SWAP

    def validate(self) -> None:
        if not self.index:
            raise ConfigurationError(f"Swap convention {self.id}: index is required")
        if self.index == self.id:
            raise ConfigurationError(f"Swap convention {self.id} uses itself as floating index")
        if self.has_sub_period and self.float_frequency is None:
            raise ConfigurationError(f"Swap convention {self.id}: sub period swaps need a float frequency")


@dataclass(frozen=True)
class FXConvention(Convention):
    source_currency: str = ""
    target_currency: str = ""
    spot_days: int = 2
    points_factor: float = 10000.0
    advance_calendar: Optional[str] = None
    spot_relative: bool = True

    TYPE = ConventionType.FX

    def validate(self) -> None:
        if len(self.source_currency) != 3 or len(self.target_currency) != 3:
            raise ConfigurationError(f"FX convention {self.id}: currencies must be ISO codes")
        if self.source_currency == self.target_currency:
            raise ConfigurationError(f"FX convention {self.id}: source and target currency are equal")
        if self.points_factor <= 0:
            raise ConfigurationError(f"FX convention {self.id}: points factor must be positive")


@dataclass(frozen=True)
class CdsConvention(Convention):
    settlement_days: int = 1
    calendar: str = "WEEKENDS"
    frequency: Frequency = Frequency.QUARTERLY
    payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    day_count: DayCount = DayCount.ACT_360
    settles_accrual: bool = True
    pays_at_default_time: bool = True

    TYPE = ConventionType.CDS


@dataclass(frozen=True)
class InflationSwapConvention(Convention):
    index: str = ""
    fix_calendar: str = "WEEKENDS"
    fix_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    day_count: DayCount = DayCount.THIRTY_360
    interpolated: bool = False
    observation_lag: str = "3M"
    adjust_inflation_observation_dates: bool = False

    TYPE = ConventionType.INFLATION_SWAP

    def validate(self) -> None:
        if not self.index:
            raise ConfigurationError(f"Inflation swap convention {self.id}: index is required")


@dataclass(frozen=True)
class CommodityFutureConvention(Convention):
    anchor_day: int = 1
    contract_frequency: Frequency = Frequency.MONTHLY
    calendar: str = "WEEKENDS"
    expiry_offset_days: int = 0
    business_day_convention: BusinessDayConvention = BusinessDayConvention.PRECEDING
    continuation_mappings: Dict[int, int] = field(default_factory=dict)

    TYPE = ConventionType.COMMODITY_FUTURE

    def validate(self) -> None:
        if not 1 <= self.anchor_day <= 31:
            raise ConfigurationError(f"Commodity future convention {self.id}: anchor day {self.anchor_day} out of range")
        previous_to = 0
        for frm in sorted(self.continuation_mappings):
            to = self.continuation_mappings[frm]
            if frm < 1 or to < 1:
                raise ConfigurationError(
                    f"Commodity future convention {self.id}: continuation mapping {frm} -> {to} must be positive")
            if frm > to:
                raise ConfigurationError(
                    f"Commodity future convention {self.id}: continuation mapping 'from' ({frm}) "
                    f"exceeds 'to' ({to})")
            if to <= previous_to:
                raise ConfigurationError(
                    f"Commodity future convention {self.id}: continuation mapping 'to' values must be "
                    "strictly increasing")
            previous_to = to


_FIELD_TYPES = {
    "DayCount": DayCount,
    "BusinessDayConvention": BusinessDayConvention,
    "CompoundingConvention": CompoundingConvention,
    "Frequency": Frequency,
    "Optional[Frequency]": Frequency,
    Optional[Frequency]: Frequency,
}


CONVENTION_TYPES: Dict[ConventionType, Type[Convention]] = {
    ConventionType.ZERO: ZeroRateConvention,
    ConventionType.DEPOSIT: DepositConvention,
    ConventionType.OIS: OisConvention,
    ConventionType.IBOR_INDEX: IborIndexConvention,
    ConventionType.OVERNIGHT_INDEX: OvernightIndexConvention,
    ConventionType.SWAP_INDEX: SwapIndexConvention,
    ConventionType.SWAP: IRSwapConvention,
    ConventionType.FX: FXConvention,
    ConventionType.CDS: CdsConvention,
    ConventionType.INFLATION_SWAP: InflationSwapConvention,
    ConventionType.COMMODITY_FUTURE: CommodityFutureConvention,
}


def convention_from_dict(data: Dict[str, Any]) -> Convention:
    """
    Build a convention from its dictionary form.

    Args:
        data: Mapping with a "type" key naming the convention kind and
            one key per dataclass field

    Returns:
        Convention instance of the matching kind

    Raises:
        ConfigurationError: unknown type or unknown field
    """
    payload = dict(data)
    if "type" not in payload:
        raise ConfigurationError("Convention data has no 'type'")
    kind = ConventionType.from_string(str(payload.pop("type")))
    cls = CONVENTION_TYPES[kind]
    known = {f.name for f in fields(cls)}
    unknown = set(payload) - known
    if unknown:
        raise ConfigurationError(f"Unknown fields for {kind.value} convention: {sorted(unknown)}")
    if "continuation_mappings" in payload:
        payload["continuation_mappings"] = {
            int(k): int(v) for k, v in payload["continuation_mappings"].items()
        }
    return cls(**payload)


def convention_to_dict(convention: Convention) -> Dict[str, Any]:
    """Serialize a convention to the dictionary form read by convention_from_dict."""
    result: Dict[str, Any] = {"type": convention.type.value}
    for f in fields(convention):
        value = getattr(convention, f.name)
        if isinstance(value, Enum):
            value = value.value if not isinstance(value, Frequency) else value.name
        elif isinstance(value, dict):
            value = dict(value)
        result[f.name] = value
    return result


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "Frequency",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
    "ConventionType",
    "Convention",
    "ZeroRateConvention",
    "DepositConvention",
    "OisConvention",
    "IborIndexConvention",
    "OvernightIndexConvention",
    "SwapIndexConvention",
    "IRSwapConvention",
    "FXConvention",
    "CdsConvention",
    "InflationSwapConvention",
    "CommodityFutureConvention",
    "CONVENTION_TYPES",
    "convention_from_dict",
    "convention_to_dict",
]
