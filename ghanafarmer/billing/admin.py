"""
Django admin configuration for billing models.

Provides admin interfaces for:
- Plan: View plan rows written by ``seed_plans``
- Subscription: View/manage user subscriptions
- UsageLedgerEntry: View monthly usage counters
"""

from django.contrib import admin

from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.models import Subscription
from ghanafarmer.billing.models import UsageLedgerEntry


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    """Admin for pricing plans."""

    list_display = [
        "code",
        "name",
        "monthly_price_cents",
        "yearly_price_cents",
        "currency",
        "is_popular",
        "is_active",
        "display_order",
    ]
    list_editable = ["display_order"]
    ordering = ["display_order"]
    search_fields = ["code", "name"]

    fieldsets = [
        (None, {"fields": ["code", "name", "description"]}),
        (
            "Pricing",
            {
                "fields": ["monthly_price_cents", "yearly_price_cents", "currency"],
                "description": "Prices come from the plan catalog; reseed to change them.",
            },
        ),
        ("Display", {"fields": ["is_popular", "is_active", "display_order"]}),
    ]


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """
    Admin for user subscriptions.

    Editing status or plan here bypasses SubscriptionService, so the user's
    tier is re-synced after every save.
    """

    list_display = [
        "user",
        "plan",
        "billing_cycle",
        "status",
        "current_period_end",
        "created",
    ]
    list_filter = ["status", "plan", "billing_cycle"]
    search_fields = ["user__username", "user__email", "user__phone_number"]
    raw_id_fields = ["user"]
    readonly_fields = ["created", "modified", "canceled_at"]

    fieldsets = [
        (None, {"fields": ["user", "plan", "billing_cycle", "status"]}),
        (
            "Billing Period",
            {"fields": ["current_period_start", "current_period_end", "canceled_at"]},
        ),
        ("Timestamps", {"fields": ["created", "modified"]}),
    ]

    def save_model(self, request, obj, form, change):
        from ghanafarmer.billing.services import SubscriptionService

        super().save_model(request, obj, form, change)
        SubscriptionService().sync_tier(obj.user)


@admin.register(UsageLedgerEntry)
class UsageLedgerEntryAdmin(admin.ModelAdmin):
    """Admin for monthly usage counters (read-only)."""

    list_display = [
        "user",
        "period_start",
        "records_created",
        "dse_recommendations",
        "exports_generated",
        "api_calls",
    ]
    list_filter = ["period_start"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user"]
    date_hierarchy = "period_start"

    def has_change_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False
