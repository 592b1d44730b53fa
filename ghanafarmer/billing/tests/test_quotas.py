"""
Tests for quota resolution.

Stock counts, live-flow counts and ledger reads are exercised separately:
they are measured differently and go stale differently.
"""

from datetime import UTC
from datetime import datetime

import pytest
from django.test import TestCase

from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.constants import LimitType
from ghanafarmer.billing.constants import Tier
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.metering import UnknownLimitType
from ghanafarmer.billing.metering import increment
from ghanafarmer.billing.quotas import LIMIT_SOURCES
from ghanafarmer.billing.quotas import Backing
from ghanafarmer.billing.quotas import QuotaUsage
from ghanafarmer.billing.quotas import quota_resolver
from ghanafarmer.farms.models import MarketListing
from ghanafarmer.farms.tests.factories import CropEntryFactory
from ghanafarmer.farms.tests.factories import ExpenseFactory
from ghanafarmer.farms.tests.factories import FarmFactory
from ghanafarmer.farms.tests.factories import IncomeFactory
from ghanafarmer.farms.tests.factories import LivestockEntryFactory
from ghanafarmer.farms.tests.factories import MarketListingFactory
from ghanafarmer.farms.tests.factories import PlotFactory
from ghanafarmer.farms.tests.factories import PriceAlertFactory
from ghanafarmer.farms.tests.factories import TaskFactory
from ghanafarmer.users.tests.factories import UserFactory

MID_MARCH = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
LATE_FEBRUARY = datetime(2025, 2, 27, 12, 0, tzinfo=UTC)


def test_every_limit_type_has_a_source():
    assert set(LIMIT_SOURCES) == set(LimitType)
    for source in LIMIT_SOURCES.values():
        assert (source.usage_type is not None) == (source.backing == Backing.LEDGER)


class TestQuotaUsage:
    def test_strictly_below_limit_is_allowed(self):
        assert QuotaUsage(current=2, limit=3).allowed
        assert not QuotaUsage(current=3, limit=3).allowed
        assert not QuotaUsage(current=4, limit=3).allowed

    def test_unlimited_is_always_allowed(self):
        usage = QuotaUsage(current=10_000, limit=UNLIMITED)

        assert usage.allowed
        assert usage.remaining == UNLIMITED

    def test_remaining_never_negative(self):
        assert QuotaUsage(current=7, limit=5).remaining == 0


class StockQuotaTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory(tier=Tier.FREE)
        cls.other = UserFactory(tier=Tier.FREE)

    def test_farms_counts_only_own_rows(self):
        FarmFactory(user=self.user)
        FarmFactory(user=self.other)

        usage = quota_resolver.resolve(self.user, LimitType.FARMS)

        self.assertEqual((usage.current, usage.limit), (1, 1))

    def test_plots(self):
        PlotFactory.create_batch(3, user=self.user)

        usage = quota_resolver.resolve(self.user, LimitType.PLOTS)

        self.assertEqual((usage.current, usage.limit), (3, 5))

    def test_price_alerts_count_only_active(self):
        PriceAlertFactory.create_batch(2, user=self.user)
        PriceAlertFactory(user=self.user, is_active=False)

        usage = quota_resolver.resolve(self.user, LimitType.PRICE_ALERTS)

        self.assertEqual((usage.current, usage.limit), (2, 3))

    def test_listings_count_only_active(self):
        MarketListingFactory(user=self.user)
        MarketListingFactory(user=self.user, status=MarketListing.Status.SOLD)
        MarketListingFactory(user=self.user, status=MarketListing.Status.DRAFT)

        usage = quota_resolver.resolve(self.user, LimitType.LISTINGS)

        self.assertEqual(usage.current, 1)

    def test_stock_count_drops_when_rows_are_removed(self):
        farm = FarmFactory(user=self.user)
        self.assertEqual(quota_resolver.current_usage(self.user, LimitType.FARMS), 1)

        farm.delete()

        self.assertEqual(quota_resolver.current_usage(self.user, LimitType.FARMS), 0)


class LiveFlowQuotaTests(TestCase):
    """Monthly records are counted from the record collections themselves."""

    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory(tier=Tier.FREE)

    def test_records_sum_all_record_collections_this_period(self):
        CropEntryFactory(user=self.user, created=MID_MARCH)
        LivestockEntryFactory(user=self.user, created=MID_MARCH)
        ExpenseFactory(user=self.user, created=MID_MARCH)
        IncomeFactory(user=self.user, created=MID_MARCH)
        TaskFactory(user=self.user, created=MID_MARCH)

        usage = quota_resolver.resolve(self.user, LimitType.RECORDS, now=MID_MARCH)

        self.assertEqual((usage.current, usage.limit), (5, 50))

    def test_records_from_previous_period_do_not_count(self):
        CropEntryFactory(user=self.user, created=LATE_FEBRUARY)
        CropEntryFactory(user=self.user, created=MID_MARCH)

        usage = quota_resolver.resolve(self.user, LimitType.RECORDS, now=MID_MARCH)

        self.assertEqual(usage.current, 1)

    def test_records_ignore_the_ledger(self):
        increment(self.user, UsageType.RECORDS_CREATED, amount=40, now=MID_MARCH)

        usage = quota_resolver.resolve(self.user, LimitType.RECORDS, now=MID_MARCH)

        self.assertEqual(usage.current, 0)


class LedgerQuotaTests(TestCase):
    """AI recommendations and exports are read from the usage ledger."""

    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory(tier=Tier.PRO)

    def test_exports_read_ledger_counter(self):
        increment(self.user, UsageType.EXPORTS_GENERATED, amount=4, now=MID_MARCH)

        usage = quota_resolver.resolve(self.user, LimitType.EXPORTS, now=MID_MARCH)

        self.assertEqual((usage.current, usage.limit), (4, 20))

    def test_ledger_backed_quota_is_only_as_fresh_as_recorded_usage(self):
        # Rows exist but nobody recorded usage: the ledger reads zero.
        CropEntryFactory.create_batch(3, user=self.user, created=MID_MARCH)

        usage = quota_resolver.resolve(self.user, LimitType.DSE_RECOMMENDATIONS, now=MID_MARCH)

        self.assertEqual((usage.current, usage.limit), (0, 10))

    def test_ledger_counter_resets_next_period(self):
        increment(self.user, UsageType.DSE_RECOMMENDATIONS, amount=10, now=LATE_FEBRUARY)

        usage = quota_resolver.resolve(self.user, LimitType.DSE_RECOMMENDATIONS, now=MID_MARCH)

        self.assertEqual(usage.current, 0)


class UnlimitedQuotaTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory(tier=Tier.BUSINESS)
        MarketListingFactory.create_batch(3, user=cls.user)

    def test_unlimited_skips_counting(self):
        usage = quota_resolver.resolve(self.user, LimitType.LISTINGS)

        self.assertEqual((usage.current, usage.limit), (0, UNLIMITED))

    def test_unlimited_counts_when_asked(self):
        usage = quota_resolver.resolve(self.user, LimitType.LISTINGS, count_unlimited=True)

        self.assertEqual((usage.current, usage.limit), (3, UNLIMITED))


@pytest.mark.django_db
def test_unknown_limit_type_raises(user):
    with pytest.raises(UnknownLimitType):
        quota_resolver.resolve(user, "tractors")
