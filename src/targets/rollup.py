"""Roll-ups: every eligible zone or user with its targets and actuals.

Two shapes are produced. ``scope_rows`` keeps one record per stored target
row (per product type); ``scope_summaries`` collapses a scope's rows into a
single record with the metrics bundle attached.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from targets.achievement import achievement_pct, compute_achievement
from targets.aggregator import TargetAggregator, TargetView, normalize
from targets.engine import ActualPerformanceAggregator
from targets.metrics import MetricsComposer, PerformanceMetrics
from targets.scopes import USER, ZONE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerScopePerProductRecord:
    id: int | None
    scope_id: int
    scope: dict
    target_period: str
    period_type: str
    display_period: str
    product_type: str | None
    target_value: Decimal
    target_offer_count: int
    actual_value: Decimal
    actual_offer_count: int
    achievement: Decimal
    variance: Decimal
    variance_pct: Decimal
    derived: bool = False


@dataclass(frozen=True)
class ScopeSummaryRecord:
    id: int | None
    scope_id: int
    scope: dict
    target_period: str
    period_type: str
    display_period: str
    target_value: Decimal
    target_offer_count: int
    actual_value: Decimal
    actual_offer_count: int
    target_count: int
    achievement: Decimal
    variance: Decimal
    variance_pct: Decimal
    expected_achievement: Decimal
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics.zero)
    derived: bool = False


class RollupAssembler:
    """Drive the per-scope pipeline for one scope kind (zones or users).

    Scopes are computed one after the other; each one runs its own
    aggregate queries and failures degrade to zero figures for that scope
    only.
    """

    def __init__(self, scope, actuals=None, metrics=None, targets=None):
        self.scope = scope
        self.actuals = actuals or ActualPerformanceAggregator()
        self.metrics = metrics or MetricsComposer()
        self.targets = targets or TargetAggregator()

    def _members(self, view, scope_id, zone_id):
        members = self.scope.resolve(scope_id=scope_id, zone_id=zone_id)
        rows_by_scope = self.targets.rows_by_scope(
            self.scope, view, scope_ids=[member.pk for member in members]
        )
        logger.debug(
            "Roll-up %s period=%s/%s display=%s: %d scopes, %d with targets",
            self.scope.kind,
            view.target_period,
            view.period_type,
            view.display_period,
            len(members),
            len(rows_by_scope),
        )
        for member in members:
            yield member, rows_by_scope.get(member.pk, [])

    # ------------------------------------------------------------------
    # Ungrouped
    # ------------------------------------------------------------------

    def scope_rows(self, view: TargetView, scope_id=None, zone_id=None) -> list:
        records = []
        for member, rows in self._members(view, scope_id, zone_id):
            if not rows:
                records.append(self._row_record(member, view, None))
                continue
            for row in rows:
                records.append(self._row_record(member, view, row))
        return records

    def _row_record(self, member, view: TargetView, row) -> PerScopePerProductRecord:
        product_type = row.product_type if row is not None else None
        actual = self.actuals.compute(
            self.scope, member.pk, view.window, product_type=product_type
        )
        if row is not None:
            target_value = normalize(row.target_value, row.period_type, view.display_type)
            target_offer_count = row.target_offer_count or 0
            derived = row.period_type != view.display_type
        else:
            target_value, target_offer_count, derived = Decimal("0"), 0, False

        result = compute_achievement(target_value, actual.value)
        return PerScopePerProductRecord(
            id=row.pk if row is not None else None,
            scope_id=member.pk,
            scope=self.scope.describe(member),
            target_period=view.target_period,
            period_type=view.period_type,
            display_period=view.display_period,
            product_type=product_type,
            target_value=target_value,
            target_offer_count=target_offer_count,
            actual_value=actual.value,
            actual_offer_count=actual.count,
            achievement=result.achievement,
            variance=result.variance,
            variance_pct=result.variance_pct,
            derived=derived,
        )

    # ------------------------------------------------------------------
    # Grouped
    # ------------------------------------------------------------------

    def scope_summaries(self, view: TargetView, scope_id=None, zone_id=None) -> list:
        records = []
        for member, rows in self._members(view, scope_id, zone_id):
            figures = self.targets.figures(rows, view)
            actual = self.actuals.compute(self.scope, member.pk, view.window)
            metrics = self.metrics.compose(self.scope, member.pk, view.window)
            result = compute_achievement(figures.value, actual.value, metrics.expected_offers)
            records.append(
                ScopeSummaryRecord(
                    id=rows[0].pk if rows else None,
                    scope_id=member.pk,
                    scope=self.scope.describe(member),
                    target_period=view.target_period,
                    period_type=view.period_type,
                    display_period=view.display_period,
                    target_value=figures.value,
                    target_offer_count=figures.offer_count,
                    actual_value=actual.value,
                    actual_offer_count=actual.count,
                    target_count=figures.target_count,
                    achievement=result.achievement,
                    variance=result.variance,
                    variance_pct=result.variance_pct,
                    expected_achievement=result.expected_achievement,
                    metrics=metrics,
                    derived=figures.derived,
                )
            )
        return records


# ──────────────────────────────────────────────────────────────────────
# Target dashboard
# ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DashboardEntry:
    id: int
    scope_id: int
    name: str
    product_type: str | None
    target_value: Decimal
    actual_value: Decimal
    target_offer_count: int | None
    actual_offer_count: int
    achievement: Decimal


@dataclass(frozen=True)
class TargetDashboard:
    period: str
    period_type: str
    display_period: str
    total_target_value: Decimal
    total_actual_value: Decimal
    achievement: Decimal
    zones: list
    users: list


def _dashboard_entries(scope, view: TargetView, actuals, zone_id=None) -> list:
    model = scope.target_model
    qs = model.objects.filter(
        target_period=view.target_period,
        period_type=view.period_type,
    )
    if zone_id is not None:
        if scope is ZONE:
            qs = qs.filter(service_zone_id=zone_id)
        else:
            qs = qs.filter(user__zone_memberships__zone_id=zone_id).distinct()

    related = "service_zone" if scope is ZONE else "user"
    entries = []
    for target in qs.select_related(related).order_by("pk"):
        scope_id = getattr(target, scope.target_scope_field)
        actual = actuals.compute(scope, scope_id, view.window, product_type=target.product_type)
        owner = getattr(target, related)
        target_value = normalize(target.target_value, target.period_type, view.display_type)
        entries.append(
            DashboardEntry(
                id=target.pk,
                scope_id=scope_id,
                name=scope.describe(owner)["name"],
                product_type=target.product_type,
                target_value=target_value,
                actual_value=actual.value,
                target_offer_count=target.target_offer_count,
                actual_offer_count=actual.count,
                achievement=achievement_pct(target_value, actual.value),
            )
        )
    return entries


def build_target_dashboard(view: TargetView, zone_id=None, actuals=None) -> TargetDashboard:
    """Every stored zone and user target of the period with its actual.

    Only rows stored for the exact period are listed; there is no yearly
    fallback here. With a monthly display window yearly rows are shown as a
    twelfth, like the roll-ups. ``zone_id`` restricts both lists to one zone.
    """
    actuals = actuals or ActualPerformanceAggregator()
    zones = _dashboard_entries(ZONE, view, actuals, zone_id=zone_id)
    users = _dashboard_entries(USER, view, actuals, zone_id=zone_id)

    entries = zones + users
    total_target = sum((entry.target_value for entry in entries), Decimal("0"))
    total_actual = sum((entry.actual_value for entry in entries), Decimal("0"))

    return TargetDashboard(
        period=view.target_period,
        period_type=view.period_type,
        display_period=view.display_period,
        total_target_value=total_target,
        total_actual_value=total_actual,
        achievement=achievement_pct(total_target, total_actual),
        zones=zones,
        users=users,
    )
