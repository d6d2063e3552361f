"""Actual performance: closed business attributed to a scope in a period."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import Count, Sum, Value
from django.db.models.functions import Coalesce

from offers.models import Offer
from targets.exceptions import AggregationQueryFailure
from targets.periods import PeriodWindow
from targets.rules import (
    CLOSED_STAGES,
    CLOSING_DATE_RULES,
    closing_date_filter,
    effective_value_expression,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActualPerformance:
    value: Decimal = Decimal("0")
    count: int = 0


@contextmanager
def aggregation_guard(scope, scope_id, window: PeriodWindow):
    """Re-raise data store errors as ``AggregationQueryFailure``.

    The body runs in a savepoint so a failed query leaves the enclosing
    transaction usable for the next scope.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        raise AggregationQueryFailure(
            f"{scope.kind} {scope_id} {window.period_type} {window.period}: {exc}"
        ) from exc


class ActualPerformanceAggregator:
    """Sum and count the closed offers of one scope inside a period window.

    An offer counts when its stage is closed (WON, PO_RECEIVED,
    ORDER_BOOKED), its closing date satisfies the first applicable
    ``ClosingDateRule`` and its effective value (PO value, else offer value)
    is positive.
    """

    def __init__(self, rules=CLOSING_DATE_RULES) -> None:
        self.rules = rules

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def queryset(self, scope, scope_id, window: PeriodWindow, product_type=None):
        """Closed offers of the scope whose closing date falls in ``window``."""
        qs = Offer.objects.filter(
            scope.offer_filter(scope_id),
            stage__in=sorted(CLOSED_STAGES),
        ).filter(closing_date_filter(window, self.rules))
        if product_type:
            qs = qs.filter(product_type=product_type)
        return qs

    def compute(
        self,
        scope,
        scope_id,
        window: PeriodWindow,
        product_type: str | None = None,
    ) -> ActualPerformance:
        """Return ``ActualPerformance(value, count)``.

        Store failures are logged and degrade to a zero result so that one
        bad scope cannot fail a whole roll-up.
        """
        try:
            with aggregation_guard(scope, scope_id, window):
                return self._aggregate(scope, scope_id, window, product_type)
        except AggregationQueryFailure:
            logger.exception(
                "Actual performance aggregation failed for %s=%s period=%s product_type=%s",
                scope.kind,
                scope_id,
                window.period,
                product_type,
            )
            return ActualPerformance()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _aggregate(self, scope, scope_id, window, product_type) -> ActualPerformance:
        agg = (
            self.queryset(scope, scope_id, window, product_type)
            .annotate(effective_value=effective_value_expression())
            .filter(effective_value__gt=0)
            .aggregate(
                total=Coalesce(Sum("effective_value"), Value(Decimal("0"))),
                count=Count("id"),
            )
        )
        return ActualPerformance(value=agg["total"], count=agg["count"] or 0)
