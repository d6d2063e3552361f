from decimal import Decimal

import pytest

from conftest import aware
from offers.models import Offer
from targets.models import PeriodType, UserTarget, ZoneTarget

Stage = Offer.Stage

ZONES_URL = "/api/v1/targets/zones/"
USERS_URL = "/api/v1/targets/users/"
DASHBOARD_URL = "/api/v1/targets/dashboard/"


@pytest.fixture
def march_scenario(zone, make_offer):
    ZoneTarget.objects.create(
        service_zone=zone, target_period="2025", period_type=PeriodType.YEARLY,
        target_value=Decimal("120000"),
    )
    make_offer(stage=Stage.WON, po_value=Decimal("10000"), offer_closed_in_crm=aware(2025, 3, 10))
    make_offer(stage=Stage.WON, po_value=Decimal("15000"), offer_closed_in_crm=aware(2025, 3, 20))
    make_offer(stage=Stage.PO_RECEIVED, po_value=Decimal("5000"), po_date=aware(2025, 3, 15))


@pytest.mark.django_db
class TestZoneRollupAPI:
    def test_requires_authentication(self, api_client):
        response = api_client.get(ZONES_URL, {"target_period": "2025", "period_type": "YEARLY"})
        assert response.status_code == 401

    def test_missing_period_is_bad_request(self, admin_client):
        response = admin_client.get(ZONES_URL, {"period_type": "YEARLY"})
        assert response.status_code == 400

    def test_malformed_period_is_bad_request(self, admin_client):
        response = admin_client.get(ZONES_URL, {"target_period": "2025-13", "period_type": "MONTHLY"})
        assert response.status_code == 400

    def test_grouped_monthly_view(self, admin_client, zone, other_zone, march_scenario):
        response = admin_client.get(ZONES_URL, {
            "target_period": "2025",
            "period_type": "YEARLY",
            "actual_value_period": "2025-03",
            "grouped": "true",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["targets"]) == 2
        north = body["targets"][0]
        assert north["scope"]["name"] == "North"
        assert north["target_value"] == 10000
        assert north["actual_value"] == 30000
        assert north["achievement"] == 300
        assert north["metrics"]["orders_received"] == 0

    def test_ungrouped_rows(self, admin_client, zone, march_scenario):
        response = admin_client.get(ZONES_URL, {"target_period": "2025", "period_type": "YEARLY"})

        assert response.status_code == 200
        rows = response.json()["targets"]
        assert len(rows) == 1
        assert rows[0]["product_type"] is None
        assert rows[0]["target_value"] == 120000
        assert "metrics" not in rows[0]

    def test_unknown_zone_is_not_found(self, admin_client, zone):
        response = admin_client.get(
            ZONES_URL, {"target_period": "2025", "period_type": "YEARLY", "zone": zone.pk + 50},
        )
        assert response.status_code == 404

    def test_zone_user_only_sees_home_zone(self, zone_user_client, zone, other_zone):
        response = zone_user_client.get(
            ZONES_URL, {"target_period": "2025", "period_type": "YEARLY", "grouped": "true"},
        )

        assert response.status_code == 200
        assert [t["scope_id"] for t in response.json()["targets"]] == [zone.pk]

    def test_zone_user_cannot_request_another_zone(self, zone_user_client, other_zone):
        response = zone_user_client.get(
            ZONES_URL, {"target_period": "2025", "period_type": "YEARLY", "zone": other_zone.pk},
        )
        assert response.status_code == 404


@pytest.mark.django_db
class TestUserRollupAPI:
    def test_zone_user_sees_users_of_home_zone(self, zone_user_client, zone_user, other_zone_user):
        response = zone_user_client.get(
            USERS_URL, {"target_period": "2025", "period_type": "YEARLY"},
        )

        assert response.status_code == 200
        assert [t["scope_id"] for t in response.json()["targets"]] == [zone_user.pk]

    def test_admin_filters_by_user(self, admin_client, zone_user, other_zone_user):
        response = admin_client.get(
            USERS_URL,
            {"target_period": "2025", "period_type": "YEARLY", "user": other_zone_user.pk, "grouped": "1"},
        )

        assert response.status_code == 200
        targets = response.json()["targets"]
        assert len(targets) == 1
        assert targets[0]["scope"]["email"] == other_zone_user.email

    def test_unknown_user_is_not_found(self, admin_client, zone_user):
        response = admin_client.get(
            USERS_URL, {"target_period": "2025", "period_type": "YEARLY", "user": zone_user.pk + 99},
        )
        assert response.status_code == 404

    def test_invalid_user_id_is_bad_request(self, admin_client):
        response = admin_client.get(
            USERS_URL, {"target_period": "2025", "period_type": "YEARLY", "user": "abc"},
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestTargetWrites:
    def test_admin_upserts_zone_target(self, admin_client, zone):
        payload = {
            "service_zone": zone.pk,
            "target_period": "2025",
            "period_type": "YEARLY",
            "target_value": "120000.00",
            "target_offer_count": 12,
        }

        first = admin_client.post(ZONES_URL, payload, format="json")
        payload["target_value"] = "150000.00"
        second = admin_client.post(ZONES_URL, payload, format="json")

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["target"]["target_value"] == 150000
        assert ZoneTarget.objects.count() == 1

    def test_upsert_rejects_bad_period(self, admin_client, zone):
        response = admin_client.post(ZONES_URL, {
            "service_zone": zone.pk,
            "target_period": "2025-3",
            "period_type": "MONTHLY",
            "target_value": "1000",
        }, format="json")

        assert response.status_code == 400
        assert ZoneTarget.objects.count() == 0

    def test_zone_user_cannot_write(self, zone_user_client, zone):
        response = zone_user_client.post(ZONES_URL, {
            "service_zone": zone.pk,
            "target_period": "2025",
            "period_type": "YEARLY",
            "target_value": "1000",
        }, format="json")

        assert response.status_code == 403

    def test_admin_upserts_user_target(self, admin_client, zone_user):
        response = admin_client.post(USERS_URL, {
            "user": zone_user.pk,
            "target_period": "2025-03",
            "period_type": "MONTHLY",
            "product_type": "SPP",
            "target_value": "5000",
        }, format="json")

        assert response.status_code == 201
        target = UserTarget.objects.get()
        assert target.product_type == "SPP"
        assert target.created_by.email == "admin@test.com"

    def test_patch_updates_value(self, admin_client, zone):
        target = ZoneTarget.objects.create(
            service_zone=zone, target_period="2025", period_type=PeriodType.YEARLY,
            target_value=Decimal("100"),
        )

        response = admin_client.patch(f"{ZONES_URL}{target.pk}/", {"target_value": "300"}, format="json")

        assert response.status_code == 200
        target.refresh_from_db()
        assert target.target_value == Decimal("300")

    def test_delete(self, admin_client, zone):
        target = ZoneTarget.objects.create(
            service_zone=zone, target_period="2025", period_type=PeriodType.YEARLY,
            target_value=Decimal("100"),
        )

        response = admin_client.delete(f"{ZONES_URL}{target.pk}/")

        assert response.status_code == 204
        assert not ZoneTarget.objects.exists()


@pytest.mark.django_db
def test_dashboard(admin_client, march_scenario):
    response = admin_client.get(DASHBOARD_URL, {"target_period": "2025", "period_type": "YEARLY"})

    assert response.status_code == 200
    dashboard = response.json()["dashboard"]
    assert dashboard["overall"] == {
        "total_target_value": 120000.0,
        "total_actual_value": 30000.0,
        "achievement": 25.0,
    }
    assert dashboard["zones"][0]["name"] == "North"
    assert dashboard["users"] == []


@pytest.mark.django_db
def test_dashboard_monthly_view_of_yearly_target(admin_client, march_scenario):
    response = admin_client.get(DASHBOARD_URL, {
        "target_period": "2025",
        "period_type": "YEARLY",
        "actual_value_period": "2025-03",
    })

    assert response.status_code == 200
    dashboard = response.json()["dashboard"]
    assert dashboard["display_period"] == "2025-03"
    assert dashboard["zones"][0]["target_value"] == 10000.0
    assert dashboard["overall"]["achievement"] == 300.0


@pytest.mark.django_db
def test_user_without_zone_is_forbidden(api_client, db):
    from accounts.models import User

    user = User.objects.create_user(email="lonely@test.com", password="x", name="Lonely")
    api_client.force_authenticate(user=user)

    response = api_client.get(DASHBOARD_URL, {"target_period": "2025", "period_type": "YEARLY"})

    assert response.status_code == 403
