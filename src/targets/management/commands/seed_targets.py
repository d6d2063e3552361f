"""Seed yearly targets from last activity: closed business plus an uplift."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from offers.models import Offer, ProductType
from targets.engine import ActualPerformanceAggregator
from targets.exceptions import InvalidPeriodFormat
from targets.models import PeriodType
from targets.periods import resolve_period
from targets.scopes import USER, ZONE
from targets.services import upsert_user_target, upsert_zone_target


class Command(BaseCommand):
    help = "Create or update yearly zone and user targets from closed offers"

    DEFAULT_ZONE_TARGET = Decimal("5000000")
    DEFAULT_USER_TARGET = Decimal("1000000")
    DEFAULT_OFFER_COUNT = 10

    def add_arguments(self, parser):
        parser.add_argument("--year", default=str(timezone.localdate().year), help="Target year (YYYY)")
        parser.add_argument("--uplift", default="1.2", help="Multiplier applied to closed value")
        parser.add_argument("--actor", default="", help="Email of the admin recorded as author")
        parser.add_argument(
            "--with-products",
            action="store_true",
            help="Also create one target per product type that has closed offers.",
        )

    def handle(self, *args, **options):
        try:
            window = resolve_period(options["year"], PeriodType.YEARLY)
        except InvalidPeriodFormat as exc:
            raise CommandError(str(exc)) from exc

        try:
            uplift = Decimal(options["uplift"])
        except InvalidOperation as exc:
            raise CommandError(f"--uplift must be a number, got {options['uplift']!r}") from exc
        if not uplift.is_finite() or uplift <= 0:
            raise CommandError("--uplift must be a positive number")
        actor = self._actor(options["actor"])
        aggregator = ActualPerformanceAggregator()

        created = updated = 0
        plans = [
            (ZONE, upsert_zone_target, self.DEFAULT_ZONE_TARGET),
            (USER, upsert_user_target, self.DEFAULT_USER_TARGET),
        ]
        for scope, upsert, default_value in plans:
            for member in scope.resolve():
                for product_type in self._product_types(scope, member, window, aggregator, options):
                    actual = aggregator.compute(scope, member.pk, window, product_type=product_type)
                    offers = Offer.objects.filter(scope.offer_filter(member.pk))
                    if product_type:
                        offers = offers.filter(product_type=product_type)
                    value = self._uplifted(actual.value, uplift) or default_value
                    count = int(self._uplifted(offers.count(), uplift)) or self.DEFAULT_OFFER_COUNT

                    _, was_created = upsert(
                        member,
                        target_period=window.period,
                        period_type=PeriodType.YEARLY,
                        target_value=value,
                        target_offer_count=count,
                        product_type=product_type,
                        actor=actor,
                    )
                    if was_created:
                        created += 1
                    else:
                        updated += 1

        self.stdout.write(self.style.SUCCESS(
            f"Targets for {window.period}: {created} created, {updated} updated"
        ))

    def _actor(self, email):
        if not email:
            return None
        from accounts.models import User

        user = User.objects.filter(email=email).first()
        if user is None:
            raise CommandError(f"No user with email {email}")
        return user

    def _product_types(self, scope, member, window, aggregator, options):
        yield None
        if not options["with_products"]:
            return
        for product_type in ProductType.values:
            if aggregator.compute(scope, member.pk, window, product_type=product_type).count:
                yield product_type

    @staticmethod
    def _uplifted(value, uplift):
        return (Decimal(value) * uplift).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
