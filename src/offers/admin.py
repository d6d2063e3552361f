from django.contrib import admin

from offers.models import Offer


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = (
        "offer_reference_number", "zone", "created_by", "stage",
        "product_type", "offer_value", "po_value", "probability_percentage",
        "created_at",
    )
    list_filter = ("stage", "product_type", "zone")
    search_fields = ("offer_reference_number", "title", "created_by__email")
    date_hierarchy = "created_at"
    readonly_fields = ("updated_at",)
