"""Write path for zone and user targets."""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from targets.models import PeriodType, UserTarget, ZoneTarget
from targets.periods import resolve_period

logger = logging.getLogger(__name__)


def _upsert(model, scope_lookup, *, target_period, period_type, target_value,
            target_offer_count=None, product_type=None, actor=None):
    # Validates the period token; raises InvalidPeriodFormat.
    resolve_period(target_period, period_type)

    with transaction.atomic():
        target, created = model.objects.update_or_create(
            **scope_lookup,
            target_period=target_period,
            period_type=period_type,
            product_type=product_type or None,
            defaults={
                "target_value": Decimal(target_value),
                "target_offer_count": target_offer_count,
                "updated_by": actor,
            },
            create_defaults={
                "target_value": Decimal(target_value),
                "target_offer_count": target_offer_count,
                "created_by": actor,
                "updated_by": actor,
            },
        )

    logger.info(
        "%s %s %s period=%s/%s product_type=%s value=%s by user=%s",
        "Created" if created else "Updated",
        model.__name__,
        target.pk,
        target_period,
        period_type,
        product_type,
        target_value,
        getattr(actor, "pk", None),
    )
    return target, created


def upsert_zone_target(zone, *, target_period, period_type=PeriodType.YEARLY,
                       target_value, target_offer_count=None, product_type=None,
                       actor=None):
    """Create or update the target of ``zone`` for the period and product type.

    Returns ``(target, created)``.
    """
    return _upsert(
        ZoneTarget,
        {"service_zone": zone},
        target_period=target_period,
        period_type=period_type,
        target_value=target_value,
        target_offer_count=target_offer_count,
        product_type=product_type,
        actor=actor,
    )


def upsert_user_target(user, *, target_period, period_type=PeriodType.YEARLY,
                       target_value, target_offer_count=None, product_type=None,
                       actor=None):
    """Same as :func:`upsert_zone_target` for a user."""
    return _upsert(
        UserTarget,
        {"user": user},
        target_period=target_period,
        period_type=period_type,
        target_value=target_value,
        target_offer_count=target_offer_count,
        product_type=product_type,
        actor=actor,
    )


def update_target_value(target, *, target_value, target_offer_count=None, actor=None):
    """Change the value (and optionally the offer count) of an existing target."""
    target.target_value = Decimal(target_value)
    update_fields = ["target_value", "updated_by", "updated_at"]
    if target_offer_count is not None:
        target.target_offer_count = target_offer_count
        update_fields.append("target_offer_count")
    target.updated_by = actor
    target.save(update_fields=update_fields)

    logger.info(
        "Updated %s %s value=%s by user=%s",
        type(target).__name__,
        target.pk,
        target_value,
        getattr(actor, "pk", None),
    )
    return target
