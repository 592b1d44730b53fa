"""
Billing models for the Ghana Farmer subscription system.

Key design decisions:
- The plan catalog in billing.catalog is the single source of truth for
  quotas, feature flags and prices. Plan rows are a billing-facing copy
  written by the seed_plans command.
- User.tier is the authoritative tier for gating. Subscription rows are the
  billing history; SubscriptionService keeps the two in step.
- UsageLedgerEntry holds one row per subscriber per calendar month and is
  only ever changed by atomic increments.

Relationship: User ──1:N── Subscription ──N:1── Plan
              User ──1:N── UsageLedgerEntry
"""

from django.conf import settings
from django.db import models
from model_utils.models import TimeStampedModel

from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import SubscriptionStatus
from ghanafarmer.billing.constants import Tier


class Plan(models.Model):
    """
    Lookup table for plan display and billing data.

    Rows are written from billing.catalog by ``manage.py seed_plans``. Do not
    edit limits here; change the catalog and reseed.
    """

    code = models.CharField(
        max_length=20,
        choices=Tier.choices,
        primary_key=True,
        help_text="Tier code, also used as PK.",
    )
    name = models.CharField(max_length=50, help_text="Display name for the plan.")
    description = models.TextField(
        blank=True,
        help_text="Marketing description shown on pricing page.",
    )
    monthly_price_cents = models.IntegerField(
        default=0,
        help_text="Monthly list price in pesewas. 0 = free or contact sales.",
    )
    yearly_price_cents = models.IntegerField(
        default=0,
        help_text="Yearly list price in pesewas. 0 = free or contact sales.",
    )
    currency = models.CharField(max_length=3, default="GHS")
    is_popular = models.BooleanField(
        default=False,
        help_text="Highlight this plan on the pricing page.",
    )
    is_active = models.BooleanField(default=True)
    display_order = models.IntegerField(
        default=0,
        help_text="Order in which plans appear on pricing page.",
    )

    class Meta:
        ordering = ["display_order"]

    def __str__(self) -> str:
        return self.name

    @property
    def monthly_price(self) -> int:
        """Monthly price in whole cedis for display."""
        return self.monthly_price_cents // 100


class Subscription(TimeStampedModel):
    """
    Billing-facing subscription record for a user.

    Informational only: gating reads User.tier. Use
    billing.services.SubscriptionService to create or cancel subscriptions
    so that User.tier follows.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscriptions",
    )
    plan = models.ForeignKey(
        Plan,
        on_delete=models.PROTECT,  # Never delete a plan with subscriptions
        related_name="subscriptions",
    )
    billing_cycle = models.CharField(
        max_length=10,
        choices=BillingCycle.choices,
        default=BillingCycle.MONTHLY,
    )
    status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.ACTIVE,
    )
    current_period_start = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Start of current billing period.",
    )
    current_period_end = models.DateTimeField(
        null=True,
        blank=True,
        help_text="End of current billing period.",
    )
    canceled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created"]
        indexes = [
            models.Index(fields=["user", "status"], name="billing_sub_user_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user} - {self.plan.name} ({self.status})"

    @property
    def tier(self) -> str:
        return self.plan_id


class UsageLedgerEntry(TimeStampedModel):
    """
    Flow usage counters for one subscriber over one calendar month.

    Created lazily on the first increment of a period and never deleted.
    Counters only move through billing.metering, which updates them with
    single UPDATE statements so concurrent increments cannot be lost.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="usage_ledger",
    )
    period_start = models.DateTimeField(
        help_text="First instant of the calendar month (inclusive).",
    )
    period_end = models.DateTimeField(
        help_text="First instant of the following month (exclusive).",
    )

    records_created = models.PositiveIntegerField(default=0)
    api_calls = models.PositiveIntegerField(default=0)
    dse_recommendations = models.PositiveIntegerField(default=0)
    exports_generated = models.PositiveIntegerField(default=0)
    price_alerts_created = models.PositiveIntegerField(default=0)
    listings_created = models.PositiveIntegerField(default=0)
    storage_used_mb = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["period_start"]
        verbose_name_plural = "usage ledger entries"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "period_start"],
                name="usage_ledger_one_row_per_period",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user}: {self.period_start:%Y-%m}"
