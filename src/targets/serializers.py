"""DRF serializers for targets and roll-up records."""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from offers.models import ProductType
from targets.exceptions import InvalidPeriodFormat
from targets.models import PeriodType, UserTarget, ZoneTarget
from targets.periods import resolve_period
from zones.models import ServiceZone

User = get_user_model()


# ────────────────────────────────────────────────────────────
# Stored targets
# ────────────────────────────────────────────────────────────

class ZoneTargetSerializer(serializers.ModelSerializer):
    service_zone_name = serializers.CharField(source="service_zone.name", read_only=True)
    target_value = serializers.FloatField(read_only=True)

    class Meta:
        model = ZoneTarget
        fields = [
            "id", "service_zone", "service_zone_name", "target_period",
            "period_type", "product_type", "target_value", "target_offer_count",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class UserTargetSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    target_value = serializers.FloatField(read_only=True)

    class Meta:
        model = UserTarget
        fields = [
            "id", "user", "user_name", "target_period", "period_type",
            "product_type", "target_value", "target_offer_count",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_full_name() or obj.user.email


class TargetWriteSerializer(serializers.Serializer):
    """Payload of a target upsert; the scope field is added per kind."""

    target_period = serializers.CharField(max_length=7)
    period_type = serializers.ChoiceField(choices=PeriodType.choices)
    product_type = serializers.ChoiceField(
        choices=ProductType.choices, required=False, allow_null=True, allow_blank=True,
    )
    target_value = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=Decimal("0"))
    target_offer_count = serializers.IntegerField(required=False, allow_null=True, min_value=0)

    def validate(self, attrs):
        try:
            resolve_period(attrs["target_period"], attrs["period_type"])
        except InvalidPeriodFormat as exc:
            raise serializers.ValidationError({"target_period": str(exc)}) from exc
        attrs["product_type"] = attrs.get("product_type") or None
        return attrs


class ZoneTargetWriteSerializer(TargetWriteSerializer):
    service_zone = serializers.PrimaryKeyRelatedField(
        queryset=ServiceZone.objects.filter(is_active=True),
    )


class UserTargetWriteSerializer(TargetWriteSerializer):
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
    )


class TargetValueUpdateSerializer(serializers.Serializer):
    target_value = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=Decimal("0"))
    target_offer_count = serializers.IntegerField(required=False, allow_null=True, min_value=0)


# ────────────────────────────────────────────────────────────
# Roll-up records
# ────────────────────────────────────────────────────────────

class PerformanceMetricsSerializer(serializers.Serializer):
    total_offers = serializers.IntegerField()
    total_offers_value = serializers.FloatField()
    orders_received = serializers.FloatField()
    open_funnel = serializers.FloatField()
    expected_offers = serializers.FloatField()
    order_booking = serializers.IntegerField()


class _RecordSerializer(serializers.Serializer):
    id = serializers.IntegerField(allow_null=True)
    scope_id = serializers.IntegerField()
    scope = serializers.DictField()
    target_period = serializers.CharField()
    period_type = serializers.CharField()
    display_period = serializers.CharField()
    target_value = serializers.FloatField()
    target_offer_count = serializers.IntegerField()
    actual_value = serializers.FloatField()
    actual_offer_count = serializers.IntegerField()
    achievement = serializers.FloatField()
    variance = serializers.FloatField()
    variance_pct = serializers.FloatField()
    derived = serializers.BooleanField()


class PerScopePerProductRecordSerializer(_RecordSerializer):
    product_type = serializers.CharField(allow_null=True)


class ScopeSummaryRecordSerializer(_RecordSerializer):
    target_count = serializers.IntegerField()
    expected_achievement = serializers.FloatField()
    metrics = PerformanceMetricsSerializer()


class DashboardEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    scope_id = serializers.IntegerField()
    name = serializers.CharField()
    product_type = serializers.CharField(allow_null=True)
    target_value = serializers.FloatField()
    actual_value = serializers.FloatField()
    target_offer_count = serializers.IntegerField(allow_null=True)
    actual_offer_count = serializers.IntegerField()
    achievement = serializers.FloatField()


class TargetDashboardSerializer(serializers.Serializer):
    period = serializers.CharField()
    period_type = serializers.CharField()
    display_period = serializers.CharField()
    overall = serializers.SerializerMethodField()
    zones = DashboardEntrySerializer(many=True)
    users = DashboardEntrySerializer(many=True)

    def get_overall(self, obj):
        return {
            "total_target_value": float(obj.total_target_value),
            "total_actual_value": float(obj.total_actual_value),
            "achievement": float(obj.achievement),
        }


# ────────────────────────────────────────────────────────────
# Forecast
# ────────────────────────────────────────────────────────────

class MonthlyForecastSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    month_name = serializers.CharField()
    forecast = serializers.FloatField()
    offer_count = serializers.IntegerField()
    actual = serializers.FloatField()
    variance = serializers.FloatField()
    achievement = serializers.FloatField()
    by_zone = serializers.DictField(child=serializers.FloatField())


class QuarterForecastSerializer(serializers.Serializer):
    quarter = serializers.CharField()
    target = serializers.FloatField()
    forecast = serializers.FloatField()
    deviation_pct = serializers.FloatField()


class ProductTypeTotalSerializer(serializers.Serializer):
    product_type = serializers.CharField()
    total = serializers.FloatField()


class ForecastSummarySerializer(serializers.Serializer):
    year = serializers.IntegerField()
    zones = serializers.ListField(child=serializers.DictField())
    monthly = MonthlyForecastSerializer(many=True)
    totals = serializers.SerializerMethodField()
    product_type_totals = ProductTypeTotalSerializer(many=True)
    quarters = QuarterForecastSerializer(many=True)

    def get_totals(self, obj):
        return {
            "annual_forecast": float(obj.annual_forecast),
            "annual_actual": float(obj.annual_actual),
            "variance": float(obj.variance),
            "achievement": float(obj.achievement),
        }


class PoExpectedUserSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    user_name = serializers.CharField()
    amount = serializers.FloatField()


class PoExpectedMonthSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    total = serializers.FloatField()
    users = PoExpectedUserSerializer(many=True)


class PoExpectedZoneSerializer(serializers.Serializer):
    zone_id = serializers.IntegerField()
    zone_name = serializers.CharField()
    months = PoExpectedMonthSerializer(many=True)


class PoExpectedByMonthSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    month_name = serializers.CharField()
    total = serializers.FloatField()
    offer_count = serializers.IntegerField()
    by_zone = serializers.DictField(child=serializers.FloatField())


class PoExpectedBreakdownSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    zones = PoExpectedZoneSerializer(many=True)
    by_month = PoExpectedByMonthSerializer(many=True)


class ZoneHighlightSerializer(serializers.Serializer):
    zone_id = serializers.IntegerField()
    zone_name = serializers.CharField()
    offer_count = serializers.IntegerField()
    offers_value = serializers.FloatField()
    orders_received = serializers.FloatField()
    open_funnel = serializers.FloatField()
    order_booking = serializers.FloatField()
    bu_year = serializers.FloatField()
    deviation_pct = serializers.FloatField()
    balance_bu = serializers.FloatField()


class ForecastHighlightsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    rows = ZoneHighlightSerializer(many=True)
    total = ZoneHighlightSerializer()
