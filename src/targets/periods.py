"""Period tokens ("YYYY" / "YYYY-MM") and their inclusive time windows."""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from targets.exceptions import InvalidPeriodFormat
from targets.models import PeriodType

MIN_YEAR = 1900
MAX_YEAR = 2100

_MONTHLY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_YEARLY_RE = re.compile(r"^(\d{4})$")


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive ``[start, end]`` window; ``end`` is the period's last second."""

    period: str
    period_type: str
    start: datetime
    end: datetime

    @property
    def year(self) -> int:
        return self.start.year

    def contains(self, value: datetime | None) -> bool:
        if value is None:
            return False
        return self.start <= value <= self.end


def _check_year(year: int, period: str, period_type: str) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriodFormat(
            period, period_type, f"year must be between {MIN_YEAR} and {MAX_YEAR}"
        )


def parse_monthly(period: str) -> tuple[int, int]:
    match = _MONTHLY_RE.match(period or "")
    if not match:
        raise InvalidPeriodFormat(period, PeriodType.MONTHLY, "expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    _check_year(year, period, PeriodType.MONTHLY)
    if not 1 <= month <= 12:
        raise InvalidPeriodFormat(period, PeriodType.MONTHLY, "month must be 01-12")
    return year, month


def parse_yearly(period: str) -> int:
    match = _YEARLY_RE.match(period or "")
    if not match:
        raise InvalidPeriodFormat(period, PeriodType.YEARLY, "expected YYYY")
    year = int(match.group(1))
    _check_year(year, period, PeriodType.YEARLY)
    return year


def resolve_period(target_period: str, period_type: str, tz=None) -> PeriodWindow:
    """Resolve a period token into an aware, inclusive window.

    MONTHLY runs from the 1st at 00:00:00 to the last calendar day at
    23:59:59; YEARLY from Jan 1 00:00:00 to Dec 31 23:59:59.
    """
    tz = tz or timezone.get_current_timezone()
    if period_type == PeriodType.MONTHLY:
        year, month = parse_monthly(target_period)
        last_day = calendar.monthrange(year, month)[1]
        start = datetime(year, month, 1)
        end = datetime(year, month, last_day, 23, 59, 59)
    elif period_type == PeriodType.YEARLY:
        year = parse_yearly(target_period)
        start = datetime(year, 1, 1)
        end = datetime(year, 12, 31, 23, 59, 59)
    else:
        raise InvalidPeriodFormat(target_period, period_type, "unknown period type")

    return PeriodWindow(
        period=target_period,
        period_type=str(period_type),
        start=timezone.make_aware(start, tz),
        end=timezone.make_aware(end, tz),
    )


def year_of(target_period: str) -> str:
    """Year token of a monthly or yearly period ("2025-03" -> "2025")."""
    return (target_period or "")[:4]


def expected_month_lookup(target_period: str, period_type: str) -> dict:
    """ORM lookup matching ``po_expected_month`` against a period.

    Exact month for MONTHLY, any month of the year for YEARLY.
    """
    if period_type == PeriodType.MONTHLY:
        parse_monthly(target_period)
        return {"po_expected_month": target_period}
    parse_yearly(target_period)
    return {"po_expected_month__startswith": f"{target_period}-"}


def current_year_window(tz=None) -> PeriodWindow:
    """Window of the current calendar year (for year-to-date figures)."""
    today = timezone.localdate()
    return resolve_period(str(today.year), PeriodType.YEARLY, tz=tz)
