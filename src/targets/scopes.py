"""Scopes a target and its actuals are computed against: zones and users.

Both kinds run through the same aggregation code; a scope only contributes
the offer predicate, the target table and the list of eligible members.
"""
from __future__ import annotations

from django.db.models import Q

from targets.exceptions import ScopeNotFound


class Scope:
    """Interface for one scope kind."""

    kind: str = ""
    target_scope_field: str = ""

    @property
    def target_model(self):
        raise NotImplementedError

    def offer_filter(self, scope_id) -> Q:
        """Predicate selecting the offers attributed to ``scope_id``."""
        raise NotImplementedError

    def eligible(self, zone_id=None):
        """Queryset of every scope shown in a roll-up."""
        raise NotImplementedError

    def describe(self, obj) -> dict:
        raise NotImplementedError

    def resolve(self, scope_id=None, zone_id=None) -> list:
        """Eligible scopes, optionally narrowed to one id.

        Raises ``ScopeNotFound`` when a specific id is requested but is not
        an eligible scope.
        """
        qs = self.eligible(zone_id=zone_id)
        if scope_id is not None:
            qs = qs.filter(pk=scope_id)
            found = list(qs)
            if not found:
                raise ScopeNotFound(self.kind, scope_id)
            return found
        return list(qs)


class ZoneScope(Scope):
    kind = "zone"
    target_scope_field = "service_zone_id"

    @property
    def target_model(self):
        from targets.models import ZoneTarget

        return ZoneTarget

    def offer_filter(self, scope_id) -> Q:
        return Q(zone_id=scope_id)

    def eligible(self, zone_id=None):
        from zones.models import ServiceZone

        qs = ServiceZone.objects.filter(is_active=True)
        if zone_id is not None:
            qs = qs.filter(pk=zone_id)
        return qs.order_by("name")

    def describe(self, obj) -> dict:
        return {"id": obj.pk, "name": obj.name, "short_form": obj.short_form}


class UserScope(Scope):
    kind = "user"
    target_scope_field = "user_id"

    @property
    def target_model(self):
        from targets.models import UserTarget

        return UserTarget

    def offer_filter(self, scope_id) -> Q:
        return Q(created_by_id=scope_id)

    def eligible(self, zone_id=None):
        from accounts.models import User

        qs = User.objects.filter(
            is_active=True,
            role__in=[User.Role.ZONE_USER, User.Role.ZONE_MANAGER],
        )
        if zone_id is not None:
            qs = qs.filter(zone_memberships__zone_id=zone_id).distinct()
        return qs.order_by("name", "email")

    def describe(self, obj) -> dict:
        return {
            "id": obj.pk,
            "name": obj.get_full_name() or obj.email,
            "email": obj.email,
            "role": obj.role,
        }


ZONE = ZoneScope()
USER = UserScope()

SCOPES = {ZONE.kind: ZONE, USER.kind: USER}
