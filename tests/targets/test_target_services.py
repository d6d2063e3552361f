from decimal import Decimal

import pytest

from offers.models import ProductType
from targets.exceptions import InvalidPeriodFormat
from targets.models import PeriodType, UserTarget, ZoneTarget
from targets.services import update_target_value, upsert_user_target, upsert_zone_target


@pytest.mark.django_db
class TestUpsertZoneTarget:
    def test_creates_then_updates_same_key(self, zone, admin_user):
        target, created = upsert_zone_target(
            zone,
            target_period="2025",
            period_type=PeriodType.YEARLY,
            target_value="120000",
            actor=admin_user,
        )
        assert created is True
        assert target.created_by == admin_user

        again, created = upsert_zone_target(
            zone,
            target_period="2025",
            period_type=PeriodType.YEARLY,
            target_value="150000",
            target_offer_count=10,
        )

        assert created is False
        assert again.pk == target.pk
        assert ZoneTarget.objects.count() == 1
        again.refresh_from_db()
        assert again.target_value == Decimal("150000")
        assert again.target_offer_count == 10
        assert again.created_by == admin_user
        assert again.updated_by is None

    def test_product_type_is_part_of_the_key(self, zone):
        upsert_zone_target(zone, target_period="2025", period_type=PeriodType.YEARLY, target_value="1000")
        upsert_zone_target(
            zone,
            target_period="2025",
            period_type=PeriodType.YEARLY,
            target_value="400",
            product_type=ProductType.SPP,
        )
        upsert_zone_target(
            zone,
            target_period="2025",
            period_type=PeriodType.YEARLY,
            target_value="500",
            product_type=ProductType.SPP,
        )

        assert ZoneTarget.objects.count() == 2
        assert ZoneTarget.objects.get(product_type=ProductType.SPP).target_value == Decimal("500")

    def test_blank_product_type_is_overall(self, zone):
        target, _ = upsert_zone_target(
            zone, target_period="2025-04", period_type=PeriodType.MONTHLY,
            target_value="10", product_type="",
        )
        assert target.product_type is None

    def test_invalid_period_is_rejected(self, zone):
        with pytest.raises(InvalidPeriodFormat):
            upsert_zone_target(zone, target_period="2025-13", period_type=PeriodType.MONTHLY, target_value="1")
        assert ZoneTarget.objects.count() == 0


@pytest.mark.django_db
def test_upsert_user_target(zone_user, admin_user):
    target, created = upsert_user_target(
        zone_user,
        target_period="2025-03",
        period_type=PeriodType.MONTHLY,
        target_value="5000",
        actor=admin_user,
    )
    assert created is True
    assert target.user == zone_user
    assert UserTarget.objects.filter(user=zone_user).count() == 1


@pytest.mark.django_db
def test_update_target_value(zone, admin_user):
    target, _ = upsert_zone_target(zone, target_period="2025", period_type=PeriodType.YEARLY, target_value="100")

    update_target_value(target, target_value="250", target_offer_count=3, actor=admin_user)

    target.refresh_from_db()
    assert target.target_value == Decimal("250")
    assert target.target_offer_count == 3
    assert target.updated_by == admin_user
