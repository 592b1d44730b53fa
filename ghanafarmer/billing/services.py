"""
Subscription service: keeps User.tier and Subscription rows in step.

User.tier is what every gate reads. Subscription rows are the billing
history. The synchronization rule is:

- The user's tier is the tier of their newest TRIALING or ACTIVE
  subscription, or FREE when they have none.
- ``activate`` and ``cancel`` change both in one transaction, so they cannot
  drift through this service.
- ``sync_tier`` re-derives the tier from the subscriptions, for repairing
  rows changed behind the service's back (admin edits, data fixes).

Payment collection is out of scope; callers activate a subscription once
payment has been confirmed elsewhere.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone

from ghanafarmer.billing.catalog import PLAN_CATALOG
from ghanafarmer.billing.catalog import TIER_ORDER
from ghanafarmer.billing.constants import CURRENT_SUBSCRIPTION_STATUSES
from ghanafarmer.billing.constants import DAYS_PER_BILLING_MONTH
from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import SubscriptionStatus
from ghanafarmer.billing.constants import Tier
from ghanafarmer.billing.metering import add_months
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.models import Subscription

if TYPE_CHECKING:
    from datetime import datetime

    from ghanafarmer.users.models import User

logger = logging.getLogger(__name__)

PLAN_DESCRIPTIONS = {
    Tier.FREE: "Get started with one farm and the essentials.",
    Tier.PRO: "Unlimited farms and plots, market prices and weather forecasts.",
    Tier.BUSINESS: "Inventory, team access, API and financial integrations.",
    Tier.ENTERPRISE: "Custom reporting, white-label and a dedicated account manager.",
}


def plan_rows_from_catalog() -> dict[Tier, dict]:
    """Field values for each Plan row, derived from the catalog."""
    return {
        tier: {
            "name": str(tier.label),
            "description": PLAN_DESCRIPTIONS.get(tier, ""),
            "monthly_price_cents": int(PLAN_CATALOG[tier].monthly_price * 100),
            "yearly_price_cents": int(PLAN_CATALOG[tier].yearly_price * 100),
            "is_popular": tier == Tier.PRO,
            "display_order": position,
        }
        for position, tier in enumerate(TIER_ORDER)
    }


def sync_plans_from_catalog(*, force_update: bool = False) -> list[tuple[Plan, str]]:
    """
    Create missing Plan rows and, with ``force_update``, rewrite existing ones.

    Returns (plan, action) pairs where action is "created", "updated" or
    "unchanged".
    """
    results = []
    for tier, values in plan_rows_from_catalog().items():
        plan, created = Plan.objects.get_or_create(code=tier, defaults=values)
        if created:
            results.append((plan, "created"))
        elif force_update:
            for field, value in values.items():
                setattr(plan, field, value)
            plan.save()
            results.append((plan, "updated"))
        else:
            results.append((plan, "unchanged"))
    return results


class SubscriptionService:
    """
    Create, cancel and reconcile subscriptions for a user.

    Usage:
        service = SubscriptionService()
        service.activate(user, Tier.PRO, BillingCycle.MONTHLY)
        service.cancel(user)
    """

    def active_subscription(self, user: User) -> Subscription | None:
        """Newest TRIALING or ACTIVE subscription, if any."""
        return (
            Subscription.objects.filter(
                user=user,
                status__in=CURRENT_SUBSCRIPTION_STATUSES,
            )
            .select_related("plan")
            .order_by("-created", "-pk")
            .first()
        )

    def days_remaining(
        self,
        subscription: Subscription | None,
        now: datetime | None = None,
    ) -> int:
        """
        Whole days left in the current period, capped at one billing month.

        No subscription (or no recorded period end) counts as a full month.
        """
        if subscription is None or subscription.current_period_end is None:
            return DAYS_PER_BILLING_MONTH
        left = (subscription.current_period_end - (now or timezone.now())).days
        return max(0, min(DAYS_PER_BILLING_MONTH, left))

    @transaction.atomic
    def activate(
        self,
        user: User,
        tier: str,
        billing_cycle: str = BillingCycle.MONTHLY,
        *,
        status: str = SubscriptionStatus.ACTIVE,
    ) -> Subscription | None:
        """
        Start a subscription on ``tier`` and move the user onto it.

        Any earlier current subscription is canceled first. Activating FREE
        simply cancels and leaves the user on FREE without a record.
        """
        tier = Tier(tier)
        self._cancel_current(user)

        if tier == Tier.FREE:
            self._set_tier(user, Tier.FREE)
            return None

        plan, _created = Plan.objects.get_or_create(
            code=tier,
            defaults=plan_rows_from_catalog()[tier],
        )
        now = timezone.now()
        months = 12 if billing_cycle == BillingCycle.YEARLY else 1
        subscription = Subscription.objects.create(
            user=user,
            plan=plan,
            billing_cycle=billing_cycle,
            status=status,
            current_period_start=now,
            current_period_end=add_months(now, months),
        )
        self._set_tier(user, tier)
        return subscription

    @transaction.atomic
    def cancel(self, user: User) -> None:
        """Cancel the current subscription and drop the user to FREE."""
        self._cancel_current(user)
        self._set_tier(user, Tier.FREE)

    @transaction.atomic
    def sync_tier(self, user: User) -> str:
        """
        Re-derive User.tier from the user's subscriptions.

        Returns the tier the user ends up on. Drift is logged at warning.
        """
        subscription = self.active_subscription(user)
        expected = subscription.tier if subscription else Tier.FREE
        user.refresh_from_db(fields=["tier"])
        if user.tier != expected:
            logger.warning(
                "Tier drift for user=%s: stored %s, subscriptions say %s",
                user.pk,
                user.tier,
                expected,
            )
            self._set_tier(user, expected)
        return expected

    def _cancel_current(self, user: User) -> None:
        canceled = Subscription.objects.filter(
            user=user,
            status__in=CURRENT_SUBSCRIPTION_STATUSES,
        ).update(status=SubscriptionStatus.CANCELED, canceled_at=timezone.now())
        if canceled:
            logger.info("Canceled %d subscription(s) for user=%s", canceled, user.pk)

    def _set_tier(self, user: User, tier: str) -> None:
        if user.tier != tier:
            logger.info("Moving user=%s from %s to %s", user.pk, user.tier, tier)
        user.tier = tier
        user.save(update_fields=["tier"])
