import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ServiceZone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("name", models.CharField(max_length=120, unique=True, verbose_name="name")),
                ("short_form", models.CharField(blank=True, default="", max_length=10, verbose_name="short form")),
                ("description", models.TextField(blank=True, default="", verbose_name="description")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
            ],
            options={
                "verbose_name": "service zone",
                "verbose_name_plural": "service zones",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="ZoneMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_default", models.BooleanField(default=False, help_text="If True, this zone is the user's home zone.")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="zone_memberships", to=settings.AUTH_USER_MODEL)),
                ("zone", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="zones.servicezone")),
            ],
            options={
                "verbose_name": "zone membership",
                "verbose_name_plural": "zone memberships",
                "constraints": [
                    models.UniqueConstraint(fields=("zone", "user"), name="uniq_zone_membership"),
                ],
            },
        ),
    ]
