from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DATE_KEY_FORMAT, DEFAULT_TIMEZONE, DISPLAY_DATE_FORMAT
from ..core.exceptions import MalformedTimestamp

_CENT = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)
END_OF_DAY = time(23, 59, 59)


def org_timezone(name: str = DEFAULT_TIMEZONE) -> tzinfo:
    return ZoneInfo(name)


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in the organization time zone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz or org_timezone())


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise MalformedTimestamp(f"Ngày không hợp lệ: {value!r}") from e


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored ISO 8601 timestamp (must carry a UTC offset)."""
    if not isinstance(value, str):
        raise MalformedTimestamp(f"Thời gian không hợp lệ: {value!r}")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise MalformedTimestamp(f"Thời gian không hợp lệ: {value!r}") from e
    if parsed.tzinfo is None:
        raise MalformedTimestamp(f"Thiếu múi giờ: {value!r}")
    return parsed


def date_key(d: date) -> str:
    return d.strftime(DATE_KEY_FORMAT)


def display_date(d: date) -> str:
    return d.strftime(DISPLAY_DATE_FORMAT)


def end_of_day(d: date, tz: tzinfo) -> datetime:
    """23:59:59 of ``d`` in ``tz`` (forced close time for abandoned shifts)."""
    return datetime.combine(d, END_OF_DAY, tzinfo=tz)


def elapsed_hours(start: datetime, end: datetime) -> Decimal:
    seconds = Decimal(str((end - start).total_seconds()))
    return seconds / _SECONDS_PER_HOUR


def round2(value: Decimal) -> Decimal:
    """Half-up rounding to 2 decimal places (money and hours)."""
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, default: str = "0") -> Decimal:
    """Lenient numeric coercion for values read from the JSON document."""
    if value is None or value == "":
        return Decimal(default)
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return Decimal(default)
