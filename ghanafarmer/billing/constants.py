"""
Billing constants for the subscription and entitlement system.

These enums define the tier codes, billing cycles, subscription lifecycle
states and the closed sets of limit types, usage counters and feature flags
used throughout the billing module. Tier declaration order is the tier
order: upgrade/downgrade validity and the "cheapest tier that grants X"
lookups both depend on it.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Tier(models.TextChoices):
    """
    Subscription tiers, cheapest first.

    Adding a tier means adding it here and giving it a PlanDefinition in
    billing.catalog in the same change.
    """

    FREE = "FREE", _("Free")
    PRO = "PRO", _("Pro")
    BUSINESS = "BUSINESS", _("Business")
    ENTERPRISE = "ENTERPRISE", _("Enterprise")


class BillingCycle(models.TextChoices):
    MONTHLY = "MONTHLY", _("Monthly")
    YEARLY = "YEARLY", _("Yearly")


class SubscriptionStatus(models.TextChoices):
    """
    Subscription lifecycle states.

    Only TRIALING and ACTIVE subscriptions count as "current" when the
    denormalized tier on the user is re-derived.
    """

    TRIALING = "TRIALING", _("Trial")
    ACTIVE = "ACTIVE", _("Active")
    PAST_DUE = "PAST_DUE", _("Past Due")
    CANCELED = "CANCELED", _("Canceled")
    EXPIRED = "EXPIRED", _("Expired")


CURRENT_SUBSCRIPTION_STATUSES = frozenset(
    {SubscriptionStatus.TRIALING, SubscriptionStatus.ACTIVE},
)


class LimitType(models.TextChoices):
    """Quota types a caller may gate on."""

    FARMS = "farms", _("Farms")
    PLOTS = "plots", _("Plots")
    RECORDS = "records", _("Records this month")
    PRICE_ALERTS = "priceAlerts", _("Active price alerts")
    DSE_RECOMMENDATIONS = "dseRecommendations", _("AI recommendations this month")
    EXPORTS = "exports", _("Report exports this month")
    LISTINGS = "listings", _("Active listings")


class UsageType(models.TextChoices):
    """Named counters held on each usage ledger row."""

    RECORDS_CREATED = "recordsCreated", _("Records created")
    API_CALLS = "apiCalls", _("API calls")
    DSE_RECOMMENDATIONS = "dseRecommendations", _("AI recommendations")
    EXPORTS_GENERATED = "exportsGenerated", _("Reports exported")
    PRICE_ALERTS_CREATED = "priceAlertsCreated", _("Price alerts created")
    LISTINGS_CREATED = "listingsCreated", _("Listings created")
    STORAGE_USED_MB = "storageUsedMb", _("Storage used (MB)")


# Ledger column backing each usage counter.
USAGE_FIELDS = {
    UsageType.RECORDS_CREATED: "records_created",
    UsageType.API_CALLS: "api_calls",
    UsageType.DSE_RECOMMENDATIONS: "dse_recommendations",
    UsageType.EXPORTS_GENERATED: "exports_generated",
    UsageType.PRICE_ALERTS_CREATED: "price_alerts_created",
    UsageType.LISTINGS_CREATED: "listings_created",
    UsageType.STORAGE_USED_MB: "storage_used_mb",
}

# Ledger counters are 32-bit signed columns on PostgreSQL.
MAX_COUNTER_VALUE = 2**31 - 1

# Largest amount a client may report in one usage call.
MAX_USAGE_AMOUNT = 10_000


class Feature(models.TextChoices):
    """Boolean feature flags carried by every plan definition."""

    ADVANCED_ANALYTICS = "advancedAnalytics", _("Advanced Analytics")
    REAL_TIME_PRICES = "realTimePrices", _("Real-time Market Prices")
    WEATHER_FORECASTS = "weatherForecasts", _("7-Day Weather Forecasts")
    EXPORT_REPORTS = "exportReports", _("Export Reports (PDF/Excel)")
    OFFLINE_MODE = "offlineMode", _("Offline Mode")
    PRIORITY_SUPPORT = "prioritySupport", _("Priority Support")
    INVENTORY_MANAGEMENT = "inventoryManagement", _("Inventory Management")
    MULTI_USER_ACCESS = "multiUserAccess", _("Multi-user Access")
    API_ACCESS = "apiAccess", _("API Access")
    BULK_OPERATIONS = "bulkOperations", _("Bulk Operations")
    FINANCIAL_INTEGRATION = "financialIntegration", _("Financial Integration")
    LOAN_ELIGIBILITY_REPORTS = "loanEligibilityReports", _("Loan Eligibility Reports")
    UNLIMITED_DSE = "unlimitedDse", _("Unlimited AI Recommendations")
    SUPPLIER_INTEGRATION = "supplierIntegration", _("Supplier Integration")
    WHITE_LABEL = "whiteLabel", _("White-label Option")
    DEDICATED_SUPPORT = "dedicatedSupport", _("Dedicated Account Manager")
    CUSTOM_REPORTING = "customReporting", _("Custom Reporting")
    SLA_GUARANTEE = "slaGuarantee", _("99.9% SLA Guarantee")


# Sentinel limit value meaning "no cap".
UNLIMITED = -1

# Proration is computed against a 30-day month.
DAYS_PER_BILLING_MONTH = 30
