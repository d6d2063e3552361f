"""Pipeline and forecast metrics attached to grouped roll-up rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Count, Q, Sum, Value
from django.db.models.functions import Coalesce

from offers.models import Offer
from targets.engine import aggregation_guard
from targets.exceptions import AggregationQueryFailure
from targets.periods import PeriodWindow, current_year_window, expected_month_lookup

logger = logging.getLogger(__name__)

EXPECTED_PROBABILITY_THRESHOLD = 50


@dataclass(frozen=True)
class PerformanceMetrics:
    total_offers: int = 0
    total_offers_value: Decimal = Decimal("0")
    orders_received: Decimal = Decimal("0")
    open_funnel: Decimal = Decimal("0")
    expected_offers: Decimal = Decimal("0")
    order_booking: int = 0

    @classmethod
    def zero(cls) -> "PerformanceMetrics":
        return cls()


class MetricsComposer:
    """Compute the metrics bundle for one scope and period.

    Notes on the figures:
    - ``orders_received`` sums ``offer_value`` of WON offers created in the
      period, not ``po_value``.
    - ``expected_offers`` looks at ``po_expected_month`` only, whatever the
      creation date, and keeps offers above 50% probability.
    - ``order_booking`` is always year-to-date for the current calendar year.
    """

    def compose(self, scope, scope_id, window: PeriodWindow) -> PerformanceMetrics:
        try:
            with aggregation_guard(scope, scope_id, window):
                return self._compose(scope, scope_id, window)
        except AggregationQueryFailure:
            logger.exception(
                "Metrics computation failed for %s=%s period=%s",
                scope.kind,
                scope_id,
                window.period,
            )
            return PerformanceMetrics.zero()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _compose(self, scope, scope_id, window: PeriodWindow) -> PerformanceMetrics:
        offers = Offer.objects.filter(scope.offer_filter(scope_id))

        created = self._created_in_period(offers, window)
        total_value = created["total_offers_value"]
        orders_received = created["orders_received"]

        return PerformanceMetrics(
            total_offers=created["total_offers"] or 0,
            total_offers_value=total_value,
            orders_received=orders_received,
            open_funnel=total_value - orders_received,
            expected_offers=self._expected_offers(offers, window),
            order_booking=self._order_booking_ytd(offers),
        )

    def _created_in_period(self, offers, window: PeriodWindow) -> dict:
        return offers.filter(
            created_at__range=(window.start, window.end),
        ).aggregate(
            total_offers=Count("id"),
            total_offers_value=Coalesce(Sum("offer_value"), Value(Decimal("0"))),
            orders_received=Coalesce(
                Sum("offer_value", filter=Q(stage=Offer.Stage.WON)),
                Value(Decimal("0")),
            ),
        )

    def _expected_offers(self, offers, window: PeriodWindow) -> Decimal:
        rows = offers.filter(
            probability_percentage__gt=EXPECTED_PROBABILITY_THRESHOLD,
            offer_value__isnull=False,
            **expected_month_lookup(window.period, window.period_type),
        ).values_list("offer_value", "probability_percentage")

        total = Decimal("0")
        for offer_value, probability in rows.iterator():
            total += offer_value * probability / Decimal("100")
        return total

    def _order_booking_ytd(self, offers) -> int:
        ytd = current_year_window()
        return offers.filter(
            stage=Offer.Stage.ORDER_BOOKED,
            booking_date_in_sap__range=(ytd.start, ytd.end),
        ).count()
