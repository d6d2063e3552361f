from decimal import Decimal

import pytest

from conftest import aware
from offers.models import Offer, ProductType
from targets.exceptions import InvalidPeriodFormat
from targets.forecast import (
    build_forecast_highlights,
    build_forecast_summary,
    build_po_expected,
)
from targets.models import PeriodType, ZoneTarget

Stage = Offer.Stage


@pytest.fixture
def forecast_offers(zone, other_zone, zone_user, other_zone_user, make_offer):
    make_offer(
        stage=Stage.NEGOTIATION,
        product_type=ProductType.SPP,
        offer_value=Decimal("10000"),
        po_expected_month="2025-03",
    )
    make_offer(
        stage=Stage.WON,
        product_type=ProductType.CONTRACT,
        offer_value=Decimal("5000"),
        po_value=Decimal("4000"),
        po_expected_month="2025-03",
        po_date=aware(2025, 3, 15),
    )
    make_offer(
        zone=other_zone,
        created_by=other_zone_user,
        stage=Stage.PROPOSAL_SENT,
        product_type=ProductType.SPP,
        offer_value=Decimal("8000"),
        po_expected_month="2025-05",
    )
    # Neither counts: lost, and expected in another year.
    make_offer(stage=Stage.LOST, offer_value=Decimal("9999"), po_expected_month="2025-03")
    make_offer(stage=Stage.INITIAL, offer_value=Decimal("7777"), po_expected_month="2024-03")


@pytest.mark.django_db
class TestForecastSummary:
    def test_months_with_activity(self, zone, forecast_offers):
        summary = build_forecast_summary(2025)

        assert summary.year == 2025
        assert [row.month_name for row in summary.monthly] == ["MAR", "MAY"]
        march, may = summary.monthly
        assert march.forecast == Decimal("15000")
        assert march.offer_count == 2
        assert march.by_zone == {"North": Decimal("15000"), "South": Decimal("0")}
        assert march.actual == Decimal("4000")
        assert march.variance == Decimal("11000")
        assert round(float(march.achievement), 2) == 26.67
        assert may.forecast == Decimal("8000")
        assert may.actual == Decimal("0")
        assert may.achievement == Decimal("0")

    def test_annual_totals_and_product_types(self, forecast_offers):
        summary = build_forecast_summary(2025)

        assert summary.annual_forecast == Decimal("23000")
        assert summary.annual_actual == Decimal("4000")
        assert summary.variance == Decimal("19000")
        assert summary.product_type_totals == [
            {"product_type": ProductType.CONTRACT, "total": Decimal("5000")},
            {"product_type": ProductType.SPP, "total": Decimal("18000")},
        ]

    def test_quarters_against_monthly_zone_targets(self, zone, other_zone, forecast_offers):
        ZoneTarget.objects.create(
            service_zone=zone, target_period="2025-02",
            period_type=PeriodType.MONTHLY, target_value=Decimal("10000"),
        )
        ZoneTarget.objects.create(
            service_zone=other_zone, target_period="2025-03",
            period_type=PeriodType.MONTHLY, target_value=Decimal("5000"),
        )
        # Yearly rows are not part of the quarter targets.
        ZoneTarget.objects.create(
            service_zone=zone, target_period="2025",
            period_type=PeriodType.YEARLY, target_value=Decimal("999999"),
        )

        quarters = {q.quarter: q for q in build_forecast_summary(2025).quarters}

        assert quarters["Q1"].target == Decimal("15000")
        assert quarters["Q1"].forecast == Decimal("15000")
        assert quarters["Q1"].deviation_pct == Decimal("0")
        assert quarters["Q2"].target == Decimal("0")
        assert quarters["Q2"].forecast == Decimal("8000")
        assert quarters["Q2"].deviation_pct == Decimal("0")

    def test_restricted_to_one_zone(self, other_zone, forecast_offers):
        summary = build_forecast_summary(2025, zone_id=other_zone.pk)

        assert [z["name"] for z in summary.zones] == ["South"]
        assert [row.month for row in summary.monthly] == [5]
        assert summary.annual_actual == Decimal("0")

    def test_malformed_expected_month_is_skipped(self, make_offer):
        make_offer(stage=Stage.INITIAL, offer_value=Decimal("500"), po_expected_month="2025-1x")

        summary = build_forecast_summary(2025)

        assert summary.monthly == []
        assert summary.annual_forecast == Decimal("0")

    def test_invalid_year(self, db):
        with pytest.raises(InvalidPeriodFormat):
            build_forecast_summary(12345)


@pytest.mark.django_db
class TestPoExpected:
    def test_per_zone_month_and_owner(self, zone_manager, make_offer, forecast_offers):
        make_offer(
            created_by=zone_manager,
            stage=Stage.FINAL_APPROVAL,
            offer_value=Decimal("2000"),
            po_expected_month="2025-03",
        )

        breakdown = build_po_expected(2025)

        assert [z.zone_name for z in breakdown.zones] == ["North", "South"]
        north = breakdown.zones[0]
        assert [m.month for m in north.months] == [3]
        march = north.months[0]
        assert march.total == Decimal("17000")
        assert [(u.user_name, u.amount) for u in march.users] == [
            ("Zone Manager", Decimal("2000")),
            ("Zone User", Decimal("15000")),
        ]
        south = breakdown.zones[1]
        assert south.months[0].month == 5
        assert south.months[0].users[0].user_name == "South User"

    def test_month_totals(self, forecast_offers):
        by_month = {row.month: row for row in build_po_expected(2025).by_month}

        assert set(by_month) == {3, 5}
        assert by_month[3].month_name == "MAR"
        assert by_month[3].total == Decimal("15000")
        assert by_month[3].offer_count == 2
        assert by_month[3].by_zone == {"North": Decimal("15000")}
        assert by_month[5].by_zone == {"South": Decimal("8000")}

    def test_empty_year(self, db):
        breakdown = build_po_expected(2030)

        assert breakdown.zones == []
        assert breakdown.by_month == []


@pytest.mark.django_db
class TestForecastHighlights:
    def test_rows_against_yearly_targets(self, zone, other_zone, forecast_offers):
        ZoneTarget.objects.create(
            service_zone=zone, target_period="2025",
            period_type=PeriodType.YEARLY, target_value=Decimal("120000"),
        )

        highlights = build_forecast_highlights(2025)

        north, south = highlights.rows
        assert north.zone_name == "North"
        assert north.offer_count == 2
        assert north.offers_value == Decimal("15000")
        assert north.orders_received == Decimal("4000")
        assert north.open_funnel == Decimal("11000")
        assert north.order_booking == Decimal("0")
        assert north.bu_year == Decimal("120000")
        assert north.balance_bu == Decimal("116000")
        assert round(float(north.deviation_pct), 2) == -96.67
        assert south.bu_year == Decimal("0")
        assert south.deviation_pct == Decimal("0")

        assert highlights.total.offer_count == 3
        assert highlights.total.offers_value == Decimal("23000")
        assert highlights.total.bu_year == Decimal("120000")

    def test_monthly_targets_when_no_yearly_row(self, zone, make_offer):
        for month in ("2025-01", "2025-02"):
            ZoneTarget.objects.create(
                service_zone=zone, target_period=month,
                period_type=PeriodType.MONTHLY, target_value=Decimal("5000"),
            )
        make_offer(
            stage=Stage.ORDER_BOOKED,
            po_value=Decimal("2500"),
            po_date=aware(2025, 2, 10),
        )

        row = build_forecast_highlights(2025).rows[0]

        assert row.bu_year == Decimal("10000")
        assert row.orders_received == Decimal("2500")
        assert row.order_booking == Decimal("2500")
        assert row.deviation_pct == Decimal("-75")
