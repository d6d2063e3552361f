"""Zone and user sales targets."""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel
from offers.models import ProductType


class PeriodType(models.TextChoices):
    MONTHLY = "MONTHLY", "Monthly"
    YEARLY = "YEARLY", "Yearly"


class Target(TimeStampedModel):
    """Target value for one scope, period and (optional) product type.

    A NULL ``product_type`` is the overall target; product-type specific rows
    may coexist with it for the same scope and period.
    """

    target_period = models.CharField("target period (YYYY or YYYY-MM)", max_length=7)
    period_type = models.CharField(
        "period type",
        max_length=10,
        choices=PeriodType.choices,
        db_index=True,
    )
    product_type = models.CharField(
        "product type",
        max_length=30,
        choices=ProductType.choices,
        null=True,
        blank=True,
    )
    target_value = models.DecimalField(
        "target value",
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    target_offer_count = models.PositiveIntegerField(
        "target offer count", null=True, blank=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        abstract = True
        ordering = ["-target_period"]


class ZoneTarget(Target):
    service_zone = models.ForeignKey(
        "zones.ServiceZone",
        on_delete=models.CASCADE,
        related_name="targets",
        verbose_name="zone",
    )

    class Meta(Target.Meta):
        verbose_name = "zone target"
        verbose_name_plural = "zone targets"
        constraints = [
            models.UniqueConstraint(
                fields=["service_zone", "target_period", "period_type", "product_type"],
                condition=models.Q(product_type__isnull=False),
                name="uniq_zone_target_period_product",
            ),
            models.UniqueConstraint(
                fields=["service_zone", "target_period", "period_type"],
                condition=models.Q(product_type__isnull=True),
                name="uniq_zone_target_period_overall",
            ),
        ]
        indexes = [
            models.Index(fields=["target_period", "period_type"], name="zone_target_period_idx"),
        ]

    def __str__(self) -> str:
        label = self.product_type or "overall"
        return f"{self.service_zone} {self.target_period} {label}"


class UserTarget(Target):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="targets",
        verbose_name="user",
    )

    class Meta(Target.Meta):
        verbose_name = "user target"
        verbose_name_plural = "user targets"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "target_period", "period_type", "product_type"],
                condition=models.Q(product_type__isnull=False),
                name="uniq_user_target_period_product",
            ),
            models.UniqueConstraint(
                fields=["user", "target_period", "period_type"],
                condition=models.Q(product_type__isnull=True),
                name="uniq_user_target_period_overall",
            ),
        ]
        indexes = [
            models.Index(fields=["target_period", "period_type"], name="user_target_period_idx"),
        ]

    def __str__(self) -> str:
        label = self.product_type or "overall"
        return f"{self.user} {self.target_period} {label}"
