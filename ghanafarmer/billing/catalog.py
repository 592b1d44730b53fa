"""
Plan catalog and tier ordering.

This is the single source of truth for what each tier grants: numeric
quotas, boolean feature flags and list prices. Everything else that needs a
tier fact derives it from here:

- ``minimum_tier_for_feature`` scans tiers cheapest first and returns the
  first one whose plan grants the feature.
- ``next_tier_for_limit`` scans tiers above the current one and returns the
  first whose quota would admit one more unit.

The catalog is immutable at runtime. The ``Plan`` table in the database is a
billing-facing copy written by the ``seed_plans`` command.

Usage:
    from ghanafarmer.billing.catalog import is_feature_enabled, limits_for

    limits_for(Tier.FREE).limit("maxFarms")            # 1
    is_feature_enabled(Tier.PRO, Feature.API_ACCESS)   # False
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import Feature
from ghanafarmer.billing.constants import Tier

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12

# Quota fields every plan definition carries.
LIMIT_FIELDS = (
    "maxFarms",
    "maxPlots",
    "maxRecordsPerMonth",
    "maxUsers",
    "maxPriceAlerts",
    "maxDseRecommendations",
    "maxExportsPerMonth",
    "maxListings",
)

TIER_ORDER: tuple[Tier, ...] = tuple(Tier)


@dataclass(frozen=True)
class PlanDefinition:
    """Quotas, feature flags and list prices for one tier."""

    tier: Tier
    limits: Mapping[str, int]
    features: Mapping[str, bool]
    monthly_price: Decimal
    yearly_price: Decimal

    def limit(self, field: str) -> int:
        """Quota for ``field``; a field the plan does not list reads as 0."""
        return self.limits.get(field, 0)

    def has_feature(self, feature: str) -> bool:
        return self.features.get(feature, False) is True

    @property
    def is_custom_priced(self) -> bool:
        """Paid tier with no list price (contact sales)."""
        return self.tier != Tier.FREE and self.monthly_price == 0


def _flags(*enabled: Feature) -> Mapping[str, bool]:
    """Explicit True/False for every known feature."""
    return MappingProxyType({feature.value: feature in enabled for feature in Feature})


_PRO_FEATURES = (
    Feature.ADVANCED_ANALYTICS,
    Feature.REAL_TIME_PRICES,
    Feature.WEATHER_FORECASTS,
    Feature.EXPORT_REPORTS,
    Feature.OFFLINE_MODE,
    Feature.PRIORITY_SUPPORT,
)
_BUSINESS_FEATURES = (
    *_PRO_FEATURES,
    Feature.INVENTORY_MANAGEMENT,
    Feature.MULTI_USER_ACCESS,
    Feature.API_ACCESS,
    Feature.BULK_OPERATIONS,
    Feature.FINANCIAL_INTEGRATION,
    Feature.LOAN_ELIGIBILITY_REPORTS,
    Feature.UNLIMITED_DSE,
    Feature.SUPPLIER_INTEGRATION,
)
_ENTERPRISE_FEATURES = (
    *_BUSINESS_FEATURES,
    Feature.WHITE_LABEL,
    Feature.DEDICATED_SUPPORT,
    Feature.CUSTOM_REPORTING,
    Feature.SLA_GUARANTEE,
)

PLAN_CATALOG: Mapping[Tier, PlanDefinition] = MappingProxyType(
    {
        Tier.FREE: PlanDefinition(
            tier=Tier.FREE,
            limits=MappingProxyType(
                {
                    "maxFarms": 1,
                    "maxPlots": 5,
                    "maxRecordsPerMonth": 50,
                    "maxUsers": 1,
                    "maxPriceAlerts": 3,
                    "maxDseRecommendations": 5,
                    "maxExportsPerMonth": 0,
                    "maxListings": 5,
                },
            ),
            features=_flags(),
            monthly_price=Decimal(0),
            yearly_price=Decimal(0),
        ),
        Tier.PRO: PlanDefinition(
            tier=Tier.PRO,
            limits=MappingProxyType(
                {
                    "maxFarms": UNLIMITED,
                    "maxPlots": UNLIMITED,
                    "maxRecordsPerMonth": UNLIMITED,
                    "maxUsers": 1,
                    "maxPriceAlerts": UNLIMITED,
                    "maxDseRecommendations": 10,
                    "maxExportsPerMonth": 20,
                    "maxListings": 20,
                },
            ),
            features=_flags(*_PRO_FEATURES),
            monthly_price=Decimal(65),
            yearly_price=Decimal(650),
        ),
        Tier.BUSINESS: PlanDefinition(
            tier=Tier.BUSINESS,
            limits=MappingProxyType(
                {
                    "maxFarms": UNLIMITED,
                    "maxPlots": UNLIMITED,
                    "maxRecordsPerMonth": UNLIMITED,
                    "maxUsers": 5,
                    "maxPriceAlerts": UNLIMITED,
                    "maxDseRecommendations": UNLIMITED,
                    "maxExportsPerMonth": UNLIMITED,
                    "maxListings": UNLIMITED,
                },
            ),
            features=_flags(*_BUSINESS_FEATURES),
            monthly_price=Decimal(200),
            yearly_price=Decimal(2000),
        ),
        Tier.ENTERPRISE: PlanDefinition(
            tier=Tier.ENTERPRISE,
            limits=MappingProxyType(dict.fromkeys(LIMIT_FIELDS, UNLIMITED)),
            features=_flags(*_ENTERPRISE_FEATURES),
            # Custom pricing, negotiated per customer
            monthly_price=Decimal(0),
            yearly_price=Decimal(0),
        ),
    },
)


# =============================================================================
# Lookups
# =============================================================================


def limits_for(tier: str) -> PlanDefinition:
    """
    Plan definition for ``tier``.

    An unrecognised tier value gets the FREE definition, so a corrupt tier
    column can only ever reduce what a subscriber is allowed to do.
    """
    try:
        return PLAN_CATALOG[Tier(tier)]
    except (KeyError, ValueError):
        logger.warning("Unknown tier %r; falling back to FREE plan limits", tier)
        return PLAN_CATALOG[Tier.FREE]


def is_feature_enabled(tier: str, feature: str) -> bool:
    """True if ``tier`` grants ``feature``. Unknown features are never enabled."""
    return limits_for(tier).has_feature(feature)


def is_known_feature(feature: str) -> bool:
    return any(feature in plan.features for plan in PLAN_CATALOG.values())


def ordinal(tier: str) -> int:
    """
    Position of ``tier`` in the tier order. For comparisons only.

    Unknown tiers rank as FREE, matching ``limits_for``.
    """
    try:
        return TIER_ORDER.index(Tier(tier))
    except ValueError:
        return 0


def minimum_tier_for_feature(feature: str) -> Tier | None:
    """Cheapest tier whose plan grants ``feature``, or None if no tier does."""
    for tier in TIER_ORDER:
        if PLAN_CATALOG[tier].has_feature(feature):
            return tier
    return None


def next_tier_for_limit(current_tier: str, field: str, current: int) -> Tier | None:
    """
    First tier above ``current_tier`` that would admit one more unit.

    A tier qualifies when its quota for ``field`` is unlimited or strictly
    greater than ``current``. Returns None when no higher tier helps.
    """
    start = ordinal(current_tier) + 1
    for tier in TIER_ORDER[start:]:
        limit = PLAN_CATALOG[tier].limit(field)
        if limit == UNLIMITED or current < limit:
            return tier
    return None


def price_of(tier: str, cycle: str) -> Decimal:
    """Monthly-equivalent list price of ``tier`` under ``cycle``."""
    plan = limits_for(tier)
    if cycle == BillingCycle.YEARLY:
        return plan.yearly_price / MONTHS_PER_YEAR
    return plan.monthly_price


def cycle_price(tier: str, cycle: str) -> Decimal:
    """Price charged for one full billing cycle of ``tier``."""
    plan = limits_for(tier)
    if cycle == BillingCycle.YEARLY:
        return plan.yearly_price
    return plan.monthly_price


# =============================================================================
# Display helpers
# =============================================================================


def feature_display_name(feature: str) -> str:
    try:
        return str(Feature(feature).label)
    except ValueError:
        return feature


def tier_features(tier: str) -> list[dict]:
    """
    Every feature the top tier knows about, with its state on ``tier``.

    Used by pricing tables and the entitlements endpoint.
    """
    top = PLAN_CATALOG[TIER_ORDER[-1]]
    plan = limits_for(tier)
    return [
        {
            "name": feature,
            "display_name": feature_display_name(feature),
            "enabled": plan.has_feature(feature),
        }
        for feature in top.features
    ]


def catalog_problems() -> list[str]:
    """
    Describe gaps in the catalog: tiers without a definition, or definitions
    missing a limit field or a feature flag. Empty when the catalog is whole.
    """
    problems = []
    for tier in TIER_ORDER:
        plan = PLAN_CATALOG.get(tier)
        if plan is None:
            problems.append(f"Tier {tier} has no plan definition.")
            continue
        missing_limits = [field for field in LIMIT_FIELDS if field not in plan.limits]
        if missing_limits:
            problems.append(f"Tier {tier} is missing limits: {', '.join(missing_limits)}.")
        missing_features = [f.value for f in Feature if f.value not in plan.features]
        if missing_features:
            problems.append(
                f"Tier {tier} is missing features: {', '.join(missing_features)}.",
            )
    return problems
