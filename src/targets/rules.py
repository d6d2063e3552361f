"""Which closed offers count in a period, and for how much.

The closing-date policy is an ordered list of rules, evaluated top to
bottom. The same list compiles to an ORM filter for aggregate queries and
evaluates in Python against a single offer, so every branch can be checked
in isolation.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from operator import or_

from django.db.models import Case, DecimalField, F, Q, Value, When

from offers.models import Offer
from targets.periods import PeriodWindow

Stage = Offer.Stage

CLOSED_STAGES = frozenset(Offer.CLOSED_STAGES)
CLOSING_DATE_FIELDS = ("po_date", "booking_date_in_sap", "offer_closed_in_crm")


@dataclass(frozen=True)
class ClosingDateRule:
    """Include an offer whose ``date_field`` falls in the window.

    ``stages`` restricts which stages the rule applies to and every field in
    ``requires_null`` must be empty for the rule to fire.
    """

    name: str
    stages: frozenset
    date_field: str
    requires_null: tuple = ()

    def as_q(self, window: PeriodWindow) -> Q:
        q = Q(stage__in=sorted(self.stages))
        q &= Q(**{f"{self.date_field}__range": (window.start, window.end)})
        for field in self.requires_null:
            q &= Q(**{f"{field}__isnull": True})
        return q

    def matches(self, offer, window: PeriodWindow) -> bool:
        if offer.stage not in self.stages:
            return False
        if any(getattr(offer, field) is not None for field in self.requires_null):
            return False
        return window.contains(getattr(offer, self.date_field))


CLOSING_DATE_RULES = (
    ClosingDateRule(
        name="po_date",
        stages=frozenset({Stage.PO_RECEIVED, Stage.ORDER_BOOKED}),
        date_field="po_date",
    ),
    ClosingDateRule(
        name="booking_date_in_sap",
        stages=frozenset({Stage.ORDER_BOOKED}),
        date_field="booking_date_in_sap",
    ),
    ClosingDateRule(
        name="offer_closed_in_crm",
        stages=frozenset({Stage.WON}),
        date_field="offer_closed_in_crm",
    ),
    # Last resort: only when the whole closing triple is empty, not merely
    # the field preferred for the offer's stage.
    ClosingDateRule(
        name="created_at",
        stages=CLOSED_STAGES,
        date_field="created_at",
        requires_null=CLOSING_DATE_FIELDS,
    ),
)


def closing_date_filter(window: PeriodWindow, rules=CLOSING_DATE_RULES) -> Q:
    """OR of every rule: offers closed inside ``window``."""
    return reduce(or_, (rule.as_q(window) for rule in rules))


def matching_rule(offer, window: PeriodWindow, rules=CLOSING_DATE_RULES):
    """First rule including ``offer`` in ``window``, or None."""
    for rule in rules:
        if rule.matches(offer, window):
            return rule
    return None


def effective_value(offer) -> Decimal | None:
    """PO value when positive, else offer value when positive, else None.

    A None result means the offer contributes nothing and is not counted.
    """
    if offer.po_value is not None and offer.po_value > 0:
        return offer.po_value
    if offer.offer_value is not None and offer.offer_value > 0:
        return offer.offer_value
    return None


def effective_value_expression() -> Case:
    """ORM counterpart of :func:`effective_value` (0 when neither is positive)."""
    output = DecimalField(max_digits=15, decimal_places=2)
    return Case(
        When(po_value__gt=0, then=F("po_value")),
        When(offer_value__gt=0, then=F("offer_value")),
        default=Value(Decimal("0")),
        output_field=output,
    )
