"""API views for zone and user targets, their roll-ups and forecasts."""
from __future__ import annotations

import logging

from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.permissions import IsAdminRoleOrReadOnly
from targets.aggregator import TargetView
from targets.exceptions import InvalidPeriodFormat, ScopeNotFound
from targets.forecast import build_forecast_highlights, build_forecast_summary, build_po_expected
from targets.models import UserTarget, ZoneTarget
from targets.rollup import RollupAssembler, build_target_dashboard
from targets.scopes import USER, ZONE
from targets.serializers import (
    ForecastHighlightsSerializer,
    ForecastSummarySerializer,
    PerScopePerProductRecordSerializer,
    PoExpectedBreakdownSerializer,
    ScopeSummaryRecordSerializer,
    TargetDashboardSerializer,
    TargetValueUpdateSerializer,
    UserTargetSerializer,
    UserTargetWriteSerializer,
    ZoneTargetSerializer,
    ZoneTargetWriteSerializer,
)
from targets.services import update_target_value, upsert_user_target, upsert_zone_target

logger = logging.getLogger(__name__)

TRUTHY = ("1", "true", "yes", "on")


# ────────────────────────────────────────────────────────────
# Request helpers
# ────────────────────────────────────────────────────────────

def _restricted_zone_id(user):
    """Home zone of a zone user or manager; None for admins (no restriction)."""
    if user.is_admin:
        return None
    zone_id = user.home_zone_id
    if zone_id is None:
        raise PermissionDenied("No zone is assigned to this user.")
    return zone_id


def _int_param(request, name):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError({name: "A valid integer is required."}) from exc


def _target_view(request) -> TargetView:
    params = request.query_params
    target_period = params.get("target_period")
    period_type = params.get("period_type")
    if not target_period or not period_type:
        raise ValidationError({"detail": "target_period and period_type are required."})
    try:
        return TargetView.build(
            target_period,
            period_type.upper(),
            actual_value_period=params.get("actual_value_period") or None,
        )
    except InvalidPeriodFormat as exc:
        raise ValidationError({"detail": str(exc)}) from exc


# ────────────────────────────────────────────────────────────
# Zone & user targets
# ────────────────────────────────────────────────────────────

class _TargetViewSet(
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """GET lists the roll-up, POST upserts, PUT/PATCH change the value."""

    permission_classes = [permissions.IsAuthenticated, IsAdminRoleOrReadOnly]
    pagination_class = None
    scope = None
    owner_field = ""
    write_serializer_class = None

    def upsert(self, owner, **kwargs):
        raise NotImplementedError

    def restrict_queryset(self, qs, zone_id):
        raise NotImplementedError

    def get_queryset(self):
        qs = self.scope.target_model.objects.select_related(self.owner_field)
        zone_id = _restricted_zone_id(self.request.user)
        if zone_id is not None:
            qs = self.restrict_queryset(qs, zone_id)
        return qs

    def rollup_scope(self, request):
        """``(scope_id, zone_id)`` passed to the assembler."""
        raise NotImplementedError

    def list(self, request, *args, **kwargs):
        view = _target_view(request)
        grouped = request.query_params.get("grouped", "").lower() in TRUTHY
        scope_id, zone_id = self.rollup_scope(request)

        assembler = RollupAssembler(self.scope)
        try:
            if grouped:
                records = assembler.scope_summaries(view, scope_id=scope_id, zone_id=zone_id)
                data = ScopeSummaryRecordSerializer(records, many=True).data
            else:
                records = assembler.scope_rows(view, scope_id=scope_id, zone_id=zone_id)
                data = PerScopePerProductRecordSerializer(records, many=True).data
        except ScopeNotFound as exc:
            raise NotFound(str(exc)) from exc

        return Response({"success": True, "targets": data})

    def create(self, request, *args, **kwargs):
        serializer = self.write_serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        owner = data.pop(self.owner_field)

        target, created = self.upsert(owner, actor=request.user, **data)
        return Response(
            {"success": True, "target": self.get_serializer(target).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def update(self, request, *args, **kwargs):
        target = self.get_object()
        serializer = TargetValueUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        update_target_value(target, actor=request.user, **serializer.validated_data)
        return Response({"success": True, "target": self.get_serializer(target).data})

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        logger.info(
            "Deleted %s %s by user=%s",
            type(instance).__name__,
            instance.pk,
            self.request.user.pk,
        )
        instance.delete()


class ZoneTargetViewSet(_TargetViewSet):
    scope = ZONE
    owner_field = "service_zone"
    serializer_class = ZoneTargetSerializer
    write_serializer_class = ZoneTargetWriteSerializer
    queryset = ZoneTarget.objects.all()

    def upsert(self, owner, **kwargs):
        return upsert_zone_target(owner, **kwargs)

    def restrict_queryset(self, qs, zone_id):
        return qs.filter(service_zone_id=zone_id)

    def rollup_scope(self, request):
        requested = _int_param(request, "zone")
        home = _restricted_zone_id(request.user)
        if home is None:
            return requested, None
        if requested is not None and requested != home:
            raise NotFound(f"zone {requested} not found")
        return home, None


class UserTargetViewSet(_TargetViewSet):
    scope = USER
    owner_field = "user"
    serializer_class = UserTargetSerializer
    write_serializer_class = UserTargetWriteSerializer
    queryset = UserTarget.objects.all()

    def upsert(self, owner, **kwargs):
        return upsert_user_target(owner, **kwargs)

    def restrict_queryset(self, qs, zone_id):
        return qs.filter(user__zone_memberships__zone_id=zone_id).distinct()

    def rollup_scope(self, request):
        user_id = _int_param(request, "user")
        zone_id = _int_param(request, "zone")
        home = _restricted_zone_id(request.user)
        if home is not None:
            if zone_id is not None and zone_id != home:
                raise NotFound(f"zone {zone_id} not found")
            zone_id = home
        return user_id, zone_id


# ────────────────────────────────────────────────────────────
# Dashboard
# ────────────────────────────────────────────────────────────

class TargetDashboardAPIView(APIView):
    """GET: every stored target of the period with its actual and totals."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        view = _target_view(request)
        zone_id = _restricted_zone_id(request.user)
        dashboard = build_target_dashboard(view, zone_id=zone_id)
        return Response({"success": True, "dashboard": TargetDashboardSerializer(dashboard).data})


# ────────────────────────────────────────────────────────────
# Forecast
# ────────────────────────────────────────────────────────────

class _ForecastAPIView(APIView):
    """GET ``?year=&zone=``: one forecast report for a calendar year."""

    permission_classes = [permissions.IsAuthenticated]
    builder = None
    serializer_class = None

    def forecast_zone(self, request):
        requested = _int_param(request, "zone")
        home = _restricted_zone_id(request.user)
        if home is None:
            return requested
        if requested is not None and requested != home:
            raise NotFound(f"zone {requested} not found")
        return home

    def get(self, request):
        year = _int_param(request, "year")
        if year is None:
            year = timezone.localdate().year
        zone_id = self.forecast_zone(request)
        try:
            report = self.builder(year, zone_id=zone_id)
        except InvalidPeriodFormat as exc:
            raise ValidationError({"year": str(exc)}) from exc
        return Response({"success": True, "data": self.serializer_class(report).data})


class ForecastSummaryAPIView(_ForecastAPIView):
    builder = staticmethod(build_forecast_summary)
    serializer_class = ForecastSummarySerializer


class ForecastPoExpectedAPIView(_ForecastAPIView):
    builder = staticmethod(build_po_expected)
    serializer_class = PoExpectedBreakdownSerializer


class ForecastHighlightsAPIView(_ForecastAPIView):
    builder = staticmethod(build_forecast_highlights)
    serializer_class = ForecastHighlightsSerializer
