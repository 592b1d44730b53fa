"""
Serializers for the billing API.

Request payloads and response bodies use camelCase keys, matching the
names the gate engine and the ledger already expose (``usageType``,
``maxFarms``, ``currentTier``).
"""

from rest_framework import serializers

from ghanafarmer.billing.catalog import LIMIT_FIELDS
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.catalog import tier_features
from ghanafarmer.billing.constants import DAYS_PER_BILLING_MONTH
from ghanafarmer.billing.constants import MAX_USAGE_AMOUNT
from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import Tier
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.models import Subscription
from ghanafarmer.billing.models import UsageLedgerEntry

# Storage is measured by the platform, not reported by clients.
RECORDABLE_USAGE_TYPES = [
    choice for choice in UsageType.choices if choice[0] != UsageType.STORAGE_USED_MB
]


class PlanSerializer(serializers.ModelSerializer):
    """A plan row plus the limits and feature flags its tier grants."""

    monthlyPrice = serializers.SerializerMethodField()
    yearlyPrice = serializers.SerializerMethodField()
    isPopular = serializers.BooleanField(source="is_popular")
    limits = serializers.SerializerMethodField()
    features = serializers.SerializerMethodField()

    class Meta:
        model = Plan
        fields = [
            "code",
            "name",
            "description",
            "monthlyPrice",
            "yearlyPrice",
            "currency",
            "isPopular",
            "limits",
            "features",
        ]

    def get_monthlyPrice(self, obj) -> str:
        return f"{obj.monthly_price_cents / 100:.2f}"

    def get_yearlyPrice(self, obj) -> str:
        return f"{obj.yearly_price_cents / 100:.2f}"

    def get_limits(self, obj) -> dict:
        definition = limits_for(obj.code)
        return {field: definition.limit(field) for field in LIMIT_FIELDS}

    def get_features(self, obj) -> list:
        return tier_features(obj.code)


class UsageLedgerEntrySerializer(serializers.ModelSerializer):
    """One month of ledger counters, keyed by usage type."""

    periodStart = serializers.DateTimeField(source="period_start")
    periodEnd = serializers.DateTimeField(source="period_end")
    recordsCreated = serializers.IntegerField(source="records_created")
    apiCalls = serializers.IntegerField(source="api_calls")
    dseRecommendations = serializers.IntegerField(source="dse_recommendations")
    exportsGenerated = serializers.IntegerField(source="exports_generated")
    priceAlertsCreated = serializers.IntegerField(source="price_alerts_created")
    listingsCreated = serializers.IntegerField(source="listings_created")
    storageUsedMb = serializers.IntegerField(source="storage_used_mb")

    class Meta:
        model = UsageLedgerEntry
        fields = [
            "periodStart",
            "periodEnd",
            "recordsCreated",
            "apiCalls",
            "dseRecommendations",
            "exportsGenerated",
            "priceAlertsCreated",
            "listingsCreated",
            "storageUsedMb",
        ]


class SubscriptionSerializer(serializers.ModelSerializer):
    """The billing-facing subscription record."""

    tier = serializers.CharField(read_only=True)
    planName = serializers.CharField(source="plan.name", read_only=True)
    billingCycle = serializers.CharField(source="billing_cycle")
    currentPeriodStart = serializers.DateTimeField(source="current_period_start")
    currentPeriodEnd = serializers.DateTimeField(source="current_period_end")
    canceledAt = serializers.DateTimeField(source="canceled_at")

    class Meta:
        model = Subscription
        fields = [
            "id",
            "tier",
            "planName",
            "status",
            "billingCycle",
            "currentPeriodStart",
            "currentPeriodEnd",
            "canceledAt",
        ]


class SubscribeSerializer(serializers.Serializer):
    tier = serializers.ChoiceField(choices=Tier.choices)
    cycle = serializers.ChoiceField(
        choices=BillingCycle.choices,
        default=BillingCycle.MONTHLY,
    )


class SubscriptionActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["cancel"])


class UsageRecordSerializer(serializers.Serializer):
    usageType = serializers.ChoiceField(choices=RECORDABLE_USAGE_TYPES)
    amount = serializers.IntegerField(
        min_value=1,
        max_value=MAX_USAGE_AMOUNT,
        default=1,
    )


class UpgradeQuoteQuerySerializer(serializers.Serializer):
    tier = serializers.ChoiceField(choices=Tier.choices)
    cycle = serializers.ChoiceField(
        choices=BillingCycle.choices,
        default=BillingCycle.MONTHLY,
    )
    daysRemaining = serializers.IntegerField(
        min_value=0,
        max_value=DAYS_PER_BILLING_MONTH,
        default=DAYS_PER_BILLING_MONTH,
    )


class GateDecisionSerializer(serializers.Serializer):
    """Response shape of GateDecision.as_dict(), for the schema."""

    allowed = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    upgradeRequired = serializers.ChoiceField(choices=Tier.choices, allow_null=True)
    currentTier = serializers.ChoiceField(choices=Tier.choices)
    limit = serializers.IntegerField(allow_null=True)
    current = serializers.IntegerField(allow_null=True)


class UpgradeQuoteSerializer(serializers.Serializer):
    """Response shape of UpgradeQuote.as_dict(), for the schema."""

    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    prorated = serializers.DecimalField(max_digits=10, decimal_places=2)
    total = serializers.DecimalField(max_digits=10, decimal_places=2)
