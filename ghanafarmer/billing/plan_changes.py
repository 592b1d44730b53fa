"""
Plan change arithmetic: direction of a change and upgrade proration.

Everything here is a pure function of the plan catalog. Nothing charges,
refunds or changes a subscription; see billing.services for the latter.

Mid-cycle upgrades are quoted as the monthly-equivalent price difference
scaled by the days left in a 30-day month. The prorated figure is floored
at zero: downgrades and same-price moves quote 0 rather than a credit, so
this module cannot express refunds.

Usage:
    quote = upgrade_price(Tier.FREE, Tier.PRO, BillingCycle.MONTHLY, days_remaining=15)
    quote.prorated   # Decimal("32.50")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP
from decimal import Decimal
from enum import Enum

from ghanafarmer.billing.catalog import cycle_price
from ghanafarmer.billing.catalog import ordinal
from ghanafarmer.billing.catalog import price_of
from ghanafarmer.billing.constants import DAYS_PER_BILLING_MONTH

CENTS = Decimal("0.01")


class PlanChangeType(str, Enum):
    """Types of plan changes."""

    UPGRADE = "upgrade"  # Moving to a higher tier
    DOWNGRADE = "downgrade"  # Moving to a lower tier
    LATERAL = "lateral"  # Same tier


@dataclass(frozen=True)
class UpgradeQuote:
    """
    Price quote for moving to a new tier mid-cycle.

    ``price`` is the monthly-equivalent price of the new tier, ``prorated``
    the charge for the rest of the current cycle and ``total`` the full
    price of one cycle of the new tier.
    """

    price: Decimal
    prorated: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "price": str(self.price),
            "prorated": str(self.prorated),
            "total": str(self.total),
        }


def can_upgrade_to(current_tier: str, target_tier: str) -> bool:
    """True if ``target_tier`` ranks above ``current_tier``."""
    return ordinal(target_tier) > ordinal(current_tier)


def can_downgrade_to(current_tier: str, target_tier: str) -> bool:
    """True if ``target_tier`` ranks below ``current_tier``."""
    return ordinal(target_tier) < ordinal(current_tier)


def get_change_type(current_tier: str, target_tier: str) -> PlanChangeType:
    if can_upgrade_to(current_tier, target_tier):
        return PlanChangeType.UPGRADE
    if can_downgrade_to(current_tier, target_tier):
        return PlanChangeType.DOWNGRADE
    return PlanChangeType.LATERAL


def upgrade_price(
    current_tier: str,
    new_tier: str,
    billing_cycle: str,
    days_remaining: int = DAYS_PER_BILLING_MONTH,
) -> UpgradeQuote:
    """
    Quote an upgrade from ``current_tier`` to ``new_tier``.

    ``days_remaining`` defaults to a full 30-day month when the caller does
    not know where the subscriber is in their cycle.

    Raises:
        ValueError: ``days_remaining`` is negative
    """
    if days_remaining < 0:
        msg = f"days_remaining must not be negative, got {days_remaining}"
        raise ValueError(msg)

    new_price = price_of(new_tier, billing_cycle)
    difference = new_price - price_of(current_tier, billing_cycle)
    prorated = difference * days_remaining / DAYS_PER_BILLING_MONTH

    return UpgradeQuote(
        price=new_price.quantize(CENTS, rounding=ROUND_HALF_UP),
        prorated=max(Decimal(0), prorated).quantize(CENTS, rounding=ROUND_HALF_UP),
        total=cycle_price(new_tier, billing_cycle).quantize(CENTS, rounding=ROUND_HALF_UP),
    )
