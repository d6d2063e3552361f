from django.contrib import admin

from zones.models import ServiceZone, ZoneMembership


class ZoneMembershipInline(admin.TabularInline):
    model = ZoneMembership
    extra = 0
    autocomplete_fields = ("user",)


@admin.register(ServiceZone)
class ServiceZoneAdmin(admin.ModelAdmin):
    list_display = ("name", "short_form", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "short_form")
    inlines = [ZoneMembershipInline]
