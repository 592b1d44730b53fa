"""
Tests for the plan catalog and the tier facts derived from it.
"""

from decimal import Decimal

import pytest

from ghanafarmer.billing.catalog import LIMIT_FIELDS
from ghanafarmer.billing.catalog import PLAN_CATALOG
from ghanafarmer.billing.catalog import TIER_ORDER
from ghanafarmer.billing.catalog import catalog_problems
from ghanafarmer.billing.catalog import cycle_price
from ghanafarmer.billing.catalog import is_feature_enabled
from ghanafarmer.billing.catalog import is_known_feature
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.catalog import minimum_tier_for_feature
from ghanafarmer.billing.catalog import next_tier_for_limit
from ghanafarmer.billing.catalog import ordinal
from ghanafarmer.billing.catalog import price_of
from ghanafarmer.billing.catalog import tier_features
from ghanafarmer.billing.checks import check_plan_catalog
from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import Feature
from ghanafarmer.billing.constants import Tier


class TestPlanCatalog:
    def test_every_tier_defines_every_limit_and_feature(self):
        for tier in TIER_ORDER:
            plan = PLAN_CATALOG[tier]
            assert set(plan.limits) == set(LIMIT_FIELDS)
            assert set(plan.features) == {feature.value for feature in Feature}

    def test_catalog_has_no_problems(self):
        assert catalog_problems() == []
        assert check_plan_catalog(None) == []

    def test_free_tier_limits(self):
        free = limits_for(Tier.FREE)

        assert free.limit("maxFarms") == 1
        assert free.limit("maxPlots") == 5
        assert free.limit("maxRecordsPerMonth") == 50
        assert free.limit("maxExportsPerMonth") == 0

    def test_enterprise_is_unlimited_everywhere(self):
        enterprise = limits_for(Tier.ENTERPRISE)

        assert all(enterprise.limit(field) == UNLIMITED for field in LIMIT_FIELDS)

    def test_missing_limit_field_reads_as_zero(self):
        assert limits_for(Tier.PRO).limit("maxSpaceships") == 0

    def test_unknown_tier_falls_back_to_free(self, caplog):
        assert limits_for("PLATINUM") is PLAN_CATALOG[Tier.FREE]
        assert "Unknown tier" in caplog.text

    def test_features_are_cumulative_up_the_tiers(self):
        for lower, higher in zip(TIER_ORDER, TIER_ORDER[1:], strict=False):
            for feature in Feature:
                if is_feature_enabled(lower, feature):
                    assert is_feature_enabled(higher, feature)

    def test_pro_lacks_inventory_management(self):
        assert not is_feature_enabled(Tier.PRO, Feature.INVENTORY_MANAGEMENT)
        assert is_feature_enabled(Tier.BUSINESS, Feature.INVENTORY_MANAGEMENT)

    def test_unknown_feature_is_never_enabled(self):
        assert not is_known_feature("teleportation")
        assert not is_feature_enabled(Tier.ENTERPRISE, "teleportation")

    def test_tier_features_lists_every_feature_with_state(self):
        features = tier_features(Tier.PRO)

        assert len(features) == len(Feature)
        by_name = {feature["name"]: feature for feature in features}
        assert by_name["exportReports"]["enabled"] is True
        assert by_name["apiAccess"]["enabled"] is False
        assert by_name["apiAccess"]["display_name"] == "API Access"


class TestDerivedTierFacts:
    @pytest.mark.parametrize(
        ("feature", "expected"),
        [
            (Feature.EXPORT_REPORTS, Tier.PRO),
            (Feature.INVENTORY_MANAGEMENT, Tier.BUSINESS),
            (Feature.UNLIMITED_DSE, Tier.BUSINESS),
            (Feature.WHITE_LABEL, Tier.ENTERPRISE),
        ],
    )
    def test_minimum_tier_for_feature(self, feature, expected):
        assert minimum_tier_for_feature(feature) == expected

    def test_minimum_tier_for_unknown_feature_is_none(self):
        assert minimum_tier_for_feature("teleportation") is None

    def test_next_tier_for_limit_from_free(self):
        assert next_tier_for_limit(Tier.FREE, "maxFarms", 1) == Tier.PRO

    def test_next_tier_for_limit_skips_tiers_that_do_not_help(self):
        # PRO allows 20 listings, so 25 needs BUSINESS.
        assert next_tier_for_limit(Tier.FREE, "maxListings", 25) == Tier.BUSINESS

    def test_next_tier_for_limit_above_top_is_none(self):
        assert next_tier_for_limit(Tier.ENTERPRISE, "maxFarms", 10) is None

    def test_tier_ordering(self):
        assert [ordinal(tier) for tier in TIER_ORDER] == [0, 1, 2, 3]
        assert ordinal("PLATINUM") == ordinal(Tier.FREE)


class TestPrices:
    def test_monthly_price(self):
        assert price_of(Tier.PRO, BillingCycle.MONTHLY) == Decimal(65)

    def test_yearly_price_is_monthly_equivalent(self):
        assert price_of(Tier.BUSINESS, BillingCycle.YEARLY) == Decimal(2000) / 12

    def test_cycle_price_is_full_cycle(self):
        assert cycle_price(Tier.PRO, BillingCycle.YEARLY) == Decimal(650)
        assert cycle_price(Tier.PRO, BillingCycle.MONTHLY) == Decimal(65)

    def test_enterprise_is_custom_priced(self):
        assert PLAN_CATALOG[Tier.ENTERPRISE].is_custom_priced
        assert not PLAN_CATALOG[Tier.FREE].is_custom_priced
