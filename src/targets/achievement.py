"""Achievement and variance of an actual figure against a target."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Achievement:
    achievement: Decimal = ZERO
    variance: Decimal = ZERO
    variance_pct: Decimal = ZERO
    expected_achievement: Decimal = ZERO


def _pct(part, target) -> Decimal:
    target = Decimal(target or 0)
    if target <= 0:
        return ZERO
    return Decimal(part or 0) / target * HUNDRED


def achievement_pct(target, actual) -> Decimal:
    return _pct(actual, target)


def variance(target, actual) -> Decimal:
    return Decimal(actual or 0) - Decimal(target or 0)


def variance_pct(target, actual) -> Decimal:
    return _pct(variance(target, actual), target)


def expected_achievement_pct(target, expected) -> Decimal:
    return _pct(expected, target)


def compute_achievement(target, actual, expected=ZERO) -> Achievement:
    """All figures at once; percentages are left unrounded."""
    return Achievement(
        achievement=achievement_pct(target, actual),
        variance=variance(target, actual),
        variance_pct=variance_pct(target, actual),
        expected_achievement=expected_achievement_pct(target, expected),
    )
