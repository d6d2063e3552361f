"""Service zones and the users assigned to them."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class ServiceZone(TimeStampedModel):
    """A sales territory. Targets and actuals roll up per zone."""

    name = models.CharField("name", max_length=120, unique=True)
    short_form = models.CharField("short form", max_length=10, blank=True, default="")
    description = models.TextField("description", blank=True, default="")
    is_active = models.BooleanField("active", default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "service zone"
        verbose_name_plural = "service zones"

    def __str__(self):
        return self.name


class ZoneMembership(models.Model):
    """Links a user to one or more service zones."""

    zone = models.ForeignKey(
        ServiceZone,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="zone_memberships",
    )
    is_default = models.BooleanField(
        default=False,
        help_text="If True, this zone is the user's home zone.",
    )

    class Meta:
        verbose_name = "zone membership"
        verbose_name_plural = "zone memberships"
        constraints = [
            models.UniqueConstraint(
                fields=["zone", "user"],
                name="uniq_zone_membership",
            ),
        ]

    def __str__(self):
        return f"{self.user} - {self.zone}"
