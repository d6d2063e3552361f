"""Django admin for zone and user targets."""
from django.contrib import admin

from targets.models import UserTarget, ZoneTarget


class _TargetAdmin(admin.ModelAdmin):
    list_filter = ("period_type", "product_type", "target_period")
    readonly_fields = ("created_by", "updated_by", "created_at", "updated_at")
    ordering = ("-target_period",)

    def target_value_display(self, obj):
        return f"{obj.target_value:,.0f}"
    target_value_display.short_description = "Target"

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(ZoneTarget)
class ZoneTargetAdmin(_TargetAdmin):
    list_display = (
        "service_zone", "target_period", "period_type", "product_type",
        "target_value_display", "target_offer_count",
    )
    search_fields = ("service_zone__name",)


@admin.register(UserTarget)
class UserTargetAdmin(_TargetAdmin):
    list_display = (
        "user", "target_period", "period_type", "product_type",
        "target_value_display", "target_offer_count",
    )
    search_fields = ("user__email", "user__name")
    autocomplete_fields = ("user",)
