import itertools
from datetime import datetime

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from offers.models import Offer
from zones.models import ServiceZone, ZoneMembership


def aware(year, month, day, hour=12, minute=0, second=0):
    return timezone.make_aware(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def zone(db):
    return ServiceZone.objects.create(name="North", short_form="N")


@pytest.fixture
def other_zone(db):
    return ServiceZone.objects.create(name="South", short_form="S")


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        name="Admin User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def zone_user(db, zone):
    user = User.objects.create_user(
        email="zone.user@test.com",
        password="testpass123",
        name="Zone User",
        role=User.Role.ZONE_USER,
    )
    ZoneMembership.objects.create(zone=zone, user=user, is_default=True)
    return user


@pytest.fixture
def zone_manager(db, zone):
    user = User.objects.create_user(
        email="zone.manager@test.com",
        password="testpass123",
        name="Zone Manager",
        role=User.Role.ZONE_MANAGER,
    )
    ZoneMembership.objects.create(zone=zone, user=user, is_default=True)
    return user


@pytest.fixture
def other_zone_user(db, other_zone):
    user = User.objects.create_user(
        email="south.user@test.com",
        password="testpass123",
        name="South User",
        role=User.Role.ZONE_USER,
    )
    ZoneMembership.objects.create(zone=other_zone, user=user, is_default=True)
    return user


@pytest.fixture
def make_offer(db, zone, zone_user):
    """Factory creating offers in ``zone`` owned by ``zone_user`` by default."""
    counter = itertools.count(1)

    def _make(**kwargs):
        kwargs.setdefault("zone", zone)
        kwargs.setdefault("created_by", zone_user)
        kwargs.setdefault("offer_reference_number", f"OFF-{next(counter):05d}")
        return Offer.objects.create(**kwargs)

    return _make


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def zone_user_client(api_client, zone_user):
    api_client.force_authenticate(user=zone_user)
    return api_client
