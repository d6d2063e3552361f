import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

PRODUCT_TYPES = [
    ("RELOCATION", "Relocation"),
    ("CONTRACT", "Contract"),
    ("SPP", "Spare parts"),
    ("UPGRADE_KIT", "Upgrade kit"),
    ("SOFTWARE", "Software"),
    ("BD_CHARGES", "Breakdown charges"),
    ("BD_SPARE", "Breakdown spare"),
    ("MIDLIFE_UPGRADE", "Midlife upgrade"),
    ("RETROFIT_KIT", "Retrofit kit"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("zones", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("offer_reference_number", models.CharField(max_length=40, unique=True, verbose_name="reference number")),
                ("title", models.CharField(blank=True, default="", max_length=255, verbose_name="title")),
                ("stage", models.CharField(choices=[("INITIAL", "Initial"), ("PROPOSAL_SENT", "Proposal sent"), ("NEGOTIATION", "Negotiation"), ("FINAL_APPROVAL", "Final approval"), ("PO_RECEIVED", "PO received"), ("ORDER_BOOKED", "Order booked"), ("WON", "Won"), ("LOST", "Lost")], db_index=True, default="INITIAL", max_length=20, verbose_name="stage")),
                ("product_type", models.CharField(blank=True, choices=PRODUCT_TYPES, db_index=True, max_length=30, null=True, verbose_name="product type")),
                ("offer_value", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True, verbose_name="offer value")),
                ("po_value", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True, verbose_name="PO value")),
                ("probability_percentage", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)], verbose_name="probability (%)")),
                ("po_expected_month", models.CharField(blank=True, max_length=7, null=True, verbose_name="PO expected month (YYYY-MM)")),
                ("po_date", models.DateTimeField(blank=True, null=True, verbose_name="PO date")),
                ("booking_date_in_sap", models.DateTimeField(blank=True, null=True, verbose_name="booking date in SAP")),
                ("offer_closed_in_crm", models.DateTimeField(blank=True, null=True, verbose_name="closed in CRM")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name="created at")),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_offers", to=settings.AUTH_USER_MODEL, verbose_name="owner")),
                ("zone", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="offers", to="zones.servicezone", verbose_name="zone")),
            ],
            options={
                "verbose_name": "offer",
                "verbose_name_plural": "offers",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["zone", "stage"], name="offer_zone_stage_idx"),
                    models.Index(fields=["created_by", "stage"], name="offer_owner_stage_idx"),
                    models.Index(fields=["po_expected_month"], name="offer_po_expected_month_idx"),
                ],
            },
        ),
    ]
