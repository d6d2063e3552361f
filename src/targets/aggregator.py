"""Stored targets for a scope and period, normalized to the display period."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from targets.models import PeriodType
from targets.periods import PeriodWindow, resolve_period, year_of

MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class TargetView:
    """Which stored targets to read and which window to measure actuals in.

    ``target_period`` / ``period_type`` select the stored rows. ``window`` is
    the display window: the stored period itself, or the month named by
    ``actual_value_period`` when a yearly target is viewed month by month.
    """

    target_period: str
    period_type: str
    window: PeriodWindow

    @classmethod
    def build(cls, target_period, period_type, actual_value_period=None) -> "TargetView":
        stored = resolve_period(target_period, period_type)
        if actual_value_period:
            window = resolve_period(actual_value_period, PeriodType.MONTHLY)
        else:
            window = stored
        return cls(target_period=target_period, period_type=str(period_type), window=window)

    @property
    def display_period(self) -> str:
        return self.window.period

    @property
    def display_type(self) -> str:
        return self.window.period_type


@dataclass(frozen=True)
class TargetFigures:
    value: Decimal = Decimal("0")
    offer_count: int = 0
    rows: tuple = field(default_factory=tuple)
    stored_type: str = ""
    derived: bool = False

    @property
    def target_count(self) -> int:
        return len(self.rows)


def normalize(value, stored_type: str, display_type: str) -> Decimal:
    """Bring a stored target value to the display period.

    A yearly value shown monthly is divided by 12 and rounded half-up to a
    whole amount. Every other combination is returned unchanged.
    """
    value = Decimal(value or 0)
    if stored_type == PeriodType.YEARLY and display_type == PeriodType.MONTHLY:
        return (value / MONTHS_PER_YEAR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return value


class TargetAggregator:
    """Read target rows and sum them per scope.

    When a monthly period has no monthly rows for a scope, the yearly rows of
    the same year are used instead and shown as a twelfth.
    """

    def rows_by_scope(self, scope, view: TargetView, scope_ids=None) -> dict:
        """Target rows of the view keyed by scope id, in one query per kind."""
        model = scope.target_model
        key = scope.target_scope_field

        qs = model.objects.filter(
            target_period=view.target_period,
            period_type=view.period_type,
        )
        if scope_ids is not None:
            qs = qs.filter(**{f"{key}__in": list(scope_ids)})

        grouped = defaultdict(list)
        for row in qs.order_by(key, "pk"):
            grouped[getattr(row, key)].append(row)

        if view.period_type == PeriodType.MONTHLY:
            fallback = model.objects.filter(
                target_period=year_of(view.target_period),
                period_type=PeriodType.YEARLY,
            ).exclude(**{f"{key}__in": list(grouped)})
            if scope_ids is not None:
                fallback = fallback.filter(**{f"{key}__in": list(scope_ids)})
            for row in fallback.order_by(key, "pk"):
                grouped[getattr(row, key)].append(row)

        return dict(grouped)

    def figures(self, rows, view: TargetView) -> TargetFigures:
        """Sum ``rows`` and normalize the total once."""
        rows = tuple(rows)
        if not rows:
            return TargetFigures(stored_type=view.period_type)

        stored_type = rows[0].period_type
        total = sum((row.target_value for row in rows), Decimal("0"))
        return TargetFigures(
            value=normalize(total, stored_type, view.display_type),
            offer_count=sum(row.target_offer_count or 0 for row in rows),
            rows=rows,
            stored_type=stored_type,
            derived=stored_type != view.display_type,
        )

    def load(self, scope, scope_id, view: TargetView, product_type=None) -> TargetFigures:
        """Summed target of one scope; ``product_type=None`` sums every row."""
        rows = self.rows_by_scope(scope, view, scope_ids=[scope_id]).get(scope_id, [])
        if product_type:
            rows = [row for row in rows if row.product_type == product_type]
        return self.figures(rows, view)
