"""Forecast analytics: PO value expected per month against orders received.

The forecast of a month is the offer value of every open or closed offer
whose ``po_expected_month`` names that month; lost offers are left out.
Actual orders are the PO values of closed offers by the month of their
``po_date``.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from offers.models import Offer
from targets.achievement import achievement_pct, variance_pct
from targets.exceptions import InvalidPeriodFormat
from targets.models import PeriodType, ZoneTarget
from targets.periods import PeriodWindow, parse_monthly, resolve_period
from targets.rules import CLOSED_STAGES
from targets.scopes import ZONE

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MONTH_NAMES = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")
QUARTERS = (
    ("Q1", (1, 2, 3)),
    ("Q2", (4, 5, 6)),
    ("Q3", (7, 8, 9)),
    ("Q4", (10, 11, 12)),
)


@dataclass(frozen=True)
class MonthlyForecast:
    month: int
    month_name: str
    forecast: Decimal
    offer_count: int
    actual: Decimal
    variance: Decimal
    achievement: Decimal
    by_zone: dict


@dataclass(frozen=True)
class QuarterForecast:
    quarter: str
    target: Decimal
    forecast: Decimal
    deviation_pct: Decimal


@dataclass(frozen=True)
class ForecastSummary:
    year: int
    zones: list
    monthly: list
    annual_forecast: Decimal
    annual_actual: Decimal
    variance: Decimal
    achievement: Decimal
    product_type_totals: list
    quarters: list


@dataclass(frozen=True)
class PoExpectedUser:
    user_id: int
    user_name: str
    amount: Decimal


@dataclass(frozen=True)
class PoExpectedMonth:
    month: int
    total: Decimal
    users: list


@dataclass(frozen=True)
class PoExpectedZone:
    zone_id: int
    zone_name: str
    months: list


@dataclass(frozen=True)
class PoExpectedByMonth:
    month: int
    month_name: str
    total: Decimal
    offer_count: int
    by_zone: dict


@dataclass(frozen=True)
class PoExpectedBreakdown:
    year: int
    zones: list
    by_month: list


@dataclass(frozen=True)
class ZoneHighlight:
    zone_id: int
    zone_name: str
    offer_count: int = 0
    offers_value: Decimal = ZERO
    orders_received: Decimal = ZERO
    open_funnel: Decimal = ZERO
    order_booking: Decimal = ZERO
    bu_year: Decimal = ZERO
    deviation_pct: Decimal = ZERO
    balance_bu: Decimal = ZERO


@dataclass(frozen=True)
class ForecastHighlights:
    year: int
    rows: list
    total: ZoneHighlight


# ──────────────────────────────────────────────────────────────────────
# Shared queries
# ──────────────────────────────────────────────────────────────────────


def year_window(year) -> PeriodWindow:
    """Validated calendar-year window; raises ``InvalidPeriodFormat``."""
    return resolve_period(str(year), PeriodType.YEARLY)


def expected_offers(year: int, zone_id=None):
    """Offers expected to turn into a PO during ``year``, lost ones excluded."""
    qs = Offer.objects.filter(po_expected_month__startswith=f"{year}-").exclude(
        stage=Offer.Stage.LOST
    )
    if zone_id is not None:
        qs = qs.filter(zone_id=zone_id)
    return qs


def received_orders(window: PeriodWindow, zone_id=None):
    """Closed offers whose PO date falls inside ``window``."""
    qs = Offer.objects.filter(
        stage__in=sorted(CLOSED_STAGES),
        po_date__range=(window.start, window.end),
    )
    if zone_id is not None:
        qs = qs.filter(zone_id=zone_id)
    return qs


def _month_of(token: str) -> int | None:
    try:
        return parse_monthly(token)[1]
    except InvalidPeriodFormat:
        logger.warning("Ignoring malformed expected PO month %r", token)
        return None


def _orders_by_zone_month(window: PeriodWindow, zone_id=None) -> dict:
    """``{(zone_id, month): po value}`` in the current timezone."""
    totals = defaultdict(lambda: ZERO)
    rows = received_orders(window, zone_id).values_list("zone_id", "po_date", "po_value")
    for order_zone, po_date, po_value in rows:
        month = timezone.localtime(po_date).month
        totals[(order_zone, month)] += po_value or ZERO
    return totals


# ──────────────────────────────────────────────────────────────────────
# Summary
# ──────────────────────────────────────────────────────────────────────


def build_forecast_summary(year: int, zone_id=None) -> ForecastSummary:
    """Month-by-month forecast against actual orders for a calendar year.

    Months with neither forecast nor actual value are left out. Quarters
    compare the forecast with the sum of the MONTHLY zone targets stored for
    their months.
    """
    window = year_window(year)
    zones = list(ZONE.eligible(zone_id=zone_id))

    forecast = defaultdict(lambda: (ZERO, 0))
    grouped = (
        expected_offers(year, zone_id)
        .order_by()
        .values("zone_id", "po_expected_month")
        .annotate(total=Sum("offer_value"), count=Count("id"))
    )
    for row in grouped:
        month = _month_of(row["po_expected_month"])
        if month is None:
            continue
        value, count = forecast[(row["zone_id"], month)]
        forecast[(row["zone_id"], month)] = (value + (row["total"] or ZERO), count + row["count"])

    actuals = _orders_by_zone_month(window, zone_id)

    monthly = []
    for month in range(1, 13):
        by_zone = {zone.name: forecast[(zone.pk, month)][0] for zone in zones}
        forecast_sum = sum(by_zone.values(), ZERO)
        offer_count = sum(forecast[(zone.pk, month)][1] for zone in zones)
        actual_sum = sum(
            (value for (_, order_month), value in actuals.items() if order_month == month),
            ZERO,
        )
        if forecast_sum <= 0 and actual_sum <= 0:
            continue
        monthly.append(
            MonthlyForecast(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                forecast=forecast_sum,
                offer_count=offer_count,
                actual=actual_sum,
                variance=forecast_sum - actual_sum,
                achievement=achievement_pct(forecast_sum, actual_sum),
                by_zone=by_zone,
            )
        )

    annual_forecast = sum((row.forecast for row in monthly), ZERO)
    annual_actual = sum((row.actual for row in monthly), ZERO)

    products = (
        expected_offers(year, zone_id)
        .exclude(product_type__isnull=True)
        .order_by()
        .values("product_type")
        .annotate(total=Sum("offer_value"))
        .order_by("product_type")
    )
    product_type_totals = [
        {"product_type": row["product_type"], "total": row["total"] or ZERO} for row in products
    ]

    return ForecastSummary(
        year=window.year,
        zones=[ZONE.describe(zone) for zone in zones],
        monthly=monthly,
        annual_forecast=annual_forecast,
        annual_actual=annual_actual,
        variance=annual_forecast - annual_actual,
        achievement=achievement_pct(annual_forecast, annual_actual),
        product_type_totals=product_type_totals,
        quarters=_quarters(year, monthly, zone_id),
    )


def _quarters(year: int, monthly: list, zone_id=None) -> list:
    targets = ZoneTarget.objects.filter(
        period_type=PeriodType.MONTHLY,
        target_period__startswith=f"{year}-",
    )
    if zone_id is not None:
        targets = targets.filter(service_zone_id=zone_id)

    month_targets = defaultdict(lambda: ZERO)
    for period, value in targets.values_list("target_period", "target_value"):
        month_targets[parse_monthly(period)[1]] += value

    forecast_by_month = {row.month: row.forecast for row in monthly}
    quarters = []
    for name, months in QUARTERS:
        target = sum((month_targets[m] for m in months), ZERO)
        quarter_forecast = sum((forecast_by_month.get(m, ZERO) for m in months), ZERO)
        quarters.append(
            QuarterForecast(
                quarter=name,
                target=target,
                forecast=quarter_forecast,
                deviation_pct=variance_pct(target, quarter_forecast),
            )
        )
    return quarters


# ──────────────────────────────────────────────────────────────────────
# PO expected
# ──────────────────────────────────────────────────────────────────────


def build_po_expected(year: int, zone_id=None) -> PoExpectedBreakdown:
    """Expected PO value per zone, month and owner, plus month totals."""
    window = year_window(year)

    grouped = (
        expected_offers(year, zone_id)
        .order_by()
        .values(
            "zone_id",
            "zone__name",
            "po_expected_month",
            "created_by_id",
            "created_by__name",
            "created_by__email",
        )
        .annotate(total=Sum("offer_value"), count=Count("id"))
    )

    zone_names = {}
    amounts = defaultdict(lambda: defaultdict(dict))
    by_month = defaultdict(lambda: {"total": ZERO, "count": 0, "by_zone": defaultdict(lambda: ZERO)})
    for row in grouped:
        month = _month_of(row["po_expected_month"])
        if month is None:
            continue
        amount = row["total"] or ZERO
        owner_id = row["created_by_id"]
        zone_names[row["zone_id"]] = row["zone__name"]

        users = amounts[row["zone_id"]][month]
        name = row["created_by__name"] or row["created_by__email"]
        previous = users.get(owner_id)
        users[owner_id] = PoExpectedUser(
            user_id=owner_id,
            user_name=name,
            amount=(previous.amount if previous else ZERO) + amount,
        )

        bucket = by_month[month]
        bucket["total"] += amount
        bucket["count"] += row["count"]
        bucket["by_zone"][row["zone__name"]] += amount

    zones = []
    for zone_key in sorted(amounts, key=lambda key: zone_names[key]):
        months = []
        for month in sorted(amounts[zone_key]):
            users = sorted(amounts[zone_key][month].values(), key=lambda u: (u.user_name, u.user_id))
            months.append(
                PoExpectedMonth(
                    month=month,
                    total=sum((u.amount for u in users), ZERO),
                    users=users,
                )
            )
        zones.append(PoExpectedZone(zone_id=zone_key, zone_name=zone_names[zone_key], months=months))

    return PoExpectedBreakdown(
        year=window.year,
        zones=zones,
        by_month=[
            PoExpectedByMonth(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                total=by_month[month]["total"],
                offer_count=by_month[month]["count"],
                by_zone=dict(by_month[month]["by_zone"]),
            )
            for month in sorted(by_month)
        ],
    )


# ──────────────────────────────────────────────────────────────────────
# Highlights
# ──────────────────────────────────────────────────────────────────────


def build_forecast_highlights(year: int, zone_id=None) -> ForecastHighlights:
    """Per-zone pipeline of the year against its yearly business target.

    The business target (``bu_year``) is the sum of the zone's YEARLY rows
    for the year; when no zone has a yearly row the MONTHLY rows of the
    year are summed instead.
    """
    window = year_window(year)
    zones = list(ZONE.eligible(zone_id=zone_id))

    offers = {
        row["zone_id"]: row
        for row in expected_offers(year, zone_id)
        .order_by()
        .values("zone_id")
        .annotate(count=Count("id"), value=Sum("offer_value"))
    }

    received = defaultdict(lambda: ZERO)
    booked = defaultdict(lambda: ZERO)
    for order_zone, stage, po_value in received_orders(window, zone_id).values_list(
        "zone_id", "stage", "po_value"
    ):
        received[order_zone] += po_value or ZERO
        if stage == Offer.Stage.ORDER_BOOKED:
            booked[order_zone] += po_value or ZERO

    bu_year = _business_targets(year, zone_id)

    rows = []
    for zone in zones:
        offered = offers.get(zone.pk, {})
        offers_value = offered.get("value") or ZERO
        bu = bu_year[zone.pk]
        rows.append(
            ZoneHighlight(
                zone_id=zone.pk,
                zone_name=zone.name,
                offer_count=offered.get("count", 0),
                offers_value=offers_value,
                orders_received=received[zone.pk],
                open_funnel=max(ZERO, offers_value - received[zone.pk]),
                order_booking=booked[zone.pk],
                bu_year=bu,
                deviation_pct=variance_pct(bu, received[zone.pk]),
                balance_bu=bu - received[zone.pk],
            )
        )

    def total(attr):
        return sum((getattr(row, attr) for row in rows), ZERO)

    total_bu = total("bu_year")
    total_received = total("orders_received")
    return ForecastHighlights(
        year=window.year,
        rows=rows,
        total=ZoneHighlight(
            zone_id=0,
            zone_name="Total",
            offer_count=sum(row.offer_count for row in rows),
            offers_value=total("offers_value"),
            orders_received=total_received,
            open_funnel=total("open_funnel"),
            order_booking=total("order_booking"),
            bu_year=total_bu,
            deviation_pct=variance_pct(total_bu, total_received),
            balance_bu=total("balance_bu"),
        ),
    )


def _business_targets(year: int, zone_id=None) -> dict:
    yearly = ZoneTarget.objects.filter(period_type=PeriodType.YEARLY, target_period=str(year))
    monthly = ZoneTarget.objects.filter(
        period_type=PeriodType.MONTHLY, target_period__startswith=f"{year}-"
    )
    if zone_id is not None:
        yearly = yearly.filter(service_zone_id=zone_id)
        monthly = monthly.filter(service_zone_id=zone_id)

    source = yearly if yearly.exists() else monthly
    totals = defaultdict(lambda: ZERO)
    for target_zone, value in source.values_list("service_zone_id", "target_value"):
        totals[target_zone] += value
    return totals
