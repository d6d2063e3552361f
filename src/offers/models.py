"""Sales offers. Written by the offer CRUD layer, read by the target engine."""
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class ProductType(models.TextChoices):
    RELOCATION = "RELOCATION", "Relocation"
    CONTRACT = "CONTRACT", "Contract"
    SPP = "SPP", "Spare parts"
    UPGRADE_KIT = "UPGRADE_KIT", "Upgrade kit"
    SOFTWARE = "SOFTWARE", "Software"
    BD_CHARGES = "BD_CHARGES", "Breakdown charges"
    BD_SPARE = "BD_SPARE", "Breakdown spare"
    MIDLIFE_UPGRADE = "MIDLIFE_UPGRADE", "Midlife upgrade"
    RETROFIT_KIT = "RETROFIT_KIT", "Retrofit kit"


class Offer(TimeStampedModel):
    """A sales opportunity moving through the offer pipeline."""

    class Stage(models.TextChoices):
        INITIAL = "INITIAL", "Initial"
        PROPOSAL_SENT = "PROPOSAL_SENT", "Proposal sent"
        NEGOTIATION = "NEGOTIATION", "Negotiation"
        FINAL_APPROVAL = "FINAL_APPROVAL", "Final approval"
        PO_RECEIVED = "PO_RECEIVED", "PO received"
        ORDER_BOOKED = "ORDER_BOOKED", "Order booked"
        WON = "WON", "Won"
        LOST = "LOST", "Lost"

    CLOSED_STAGES = (Stage.WON, Stage.PO_RECEIVED, Stage.ORDER_BOOKED)

    offer_reference_number = models.CharField(
        "reference number", max_length=40, unique=True
    )
    title = models.CharField("title", max_length=255, blank=True, default="")
    stage = models.CharField(
        "stage",
        max_length=20,
        choices=Stage.choices,
        default=Stage.INITIAL,
        db_index=True,
    )
    zone = models.ForeignKey(
        "zones.ServiceZone",
        on_delete=models.PROTECT,
        related_name="offers",
        verbose_name="zone",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_offers",
        verbose_name="owner",
    )
    product_type = models.CharField(
        "product type",
        max_length=30,
        choices=ProductType.choices,
        null=True,
        blank=True,
        db_index=True,
    )

    offer_value = models.DecimalField(
        "offer value", max_digits=15, decimal_places=2, null=True, blank=True
    )
    po_value = models.DecimalField(
        "PO value", max_digits=15, decimal_places=2, null=True, blank=True
    )
    probability_percentage = models.PositiveSmallIntegerField(
        "probability (%)",
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    po_expected_month = models.CharField(
        "PO expected month (YYYY-MM)", max_length=7, null=True, blank=True
    )

    # Alternative "when did this close" timestamps, one authoritative per stage.
    po_date = models.DateTimeField("PO date", null=True, blank=True)
    booking_date_in_sap = models.DateTimeField("booking date in SAP", null=True, blank=True)
    offer_closed_in_crm = models.DateTimeField("closed in CRM", null=True, blank=True)

    # Business creation date; imported offers carry their original date.
    created_at = models.DateTimeField("created at", default=timezone.now, db_index=True)

    class Meta:
        verbose_name = "offer"
        verbose_name_plural = "offers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["zone", "stage"], name="offer_zone_stage_idx"),
            models.Index(fields=["created_by", "stage"], name="offer_owner_stage_idx"),
            models.Index(fields=["po_expected_month"], name="offer_po_expected_month_idx"),
        ]

    def __str__(self):
        return f"{self.offer_reference_number} ({self.get_stage_display()})"

    @property
    def is_closed(self) -> bool:
        return self.stage in self.CLOSED_STAGES
