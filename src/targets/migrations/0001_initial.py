import django.core.validators
import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models

PERIOD_TYPES = [("MONTHLY", "Monthly"), ("YEARLY", "Yearly")]

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


def _target_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
        ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
        ("target_period", models.CharField(max_length=7, verbose_name="target period (YYYY or YYYY-MM)")),
        ("period_type", models.CharField(choices=PERIOD_TYPES, db_index=True, max_length=10, verbose_name="period type")),
        ("product_type", models.CharField(blank=True, choices=PRODUCT_TYPES, max_length=30, null=True, verbose_name="product type")),
        ("target_value", models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal("0"))], verbose_name="target value")),
        ("target_offer_count", models.PositiveIntegerField(blank=True, null=True, verbose_name="target offer count")),
        ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
        ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("zones", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ZoneTarget",
            fields=_target_fields() + [
                ("service_zone", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="targets", to="zones.servicezone", verbose_name="zone")),
            ],
            options={
                "verbose_name": "zone target",
                "verbose_name_plural": "zone targets",
                "ordering": ["-target_period"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["target_period", "period_type"], name="zone_target_period_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("product_type__isnull", False)), fields=("service_zone", "target_period", "period_type", "product_type"), name="uniq_zone_target_period_product"),
                    models.UniqueConstraint(condition=models.Q(("product_type__isnull", True)), fields=("service_zone", "target_period", "period_type"), name="uniq_zone_target_period_overall"),
                ],
            },
        ),
        migrations.CreateModel(
            name="UserTarget",
            fields=_target_fields() + [
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="targets", to=settings.AUTH_USER_MODEL, verbose_name="user")),
            ],
            options={
                "verbose_name": "user target",
                "verbose_name_plural": "user targets",
                "ordering": ["-target_period"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["target_period", "period_type"], name="user_target_period_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("product_type__isnull", False)), fields=("user", "target_period", "period_type", "product_type"), name="uniq_user_target_period_product"),
                    models.UniqueConstraint(condition=models.Q(("product_type__isnull", True)), fields=("user", "target_period", "period_type"), name="uniq_user_target_period_overall"),
                ],
            },
        ),
    ]
