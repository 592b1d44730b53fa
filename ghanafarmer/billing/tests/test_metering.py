"""
Tests for the usage ledger.

Covers period bounds in the reference time zone, additive increments,
period rollover, the conditional increment used for race-free quota
enforcement and read-only snapshots.
"""

from datetime import UTC
from datetime import datetime

import pytest
from django.test import TestCase

from ghanafarmer.billing.constants import MAX_COUNTER_VALUE
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.metering import SubscriberNotFound
from ghanafarmer.billing.metering import UnknownUsageType
from ghanafarmer.billing.metering import UsageCounterOverflow
from ghanafarmer.billing.metering import add_months
from ghanafarmer.billing.metering import current_period_bounds
from ghanafarmer.billing.metering import increment
from ghanafarmer.billing.metering import increment_within_limit
from ghanafarmer.billing.metering import read
from ghanafarmer.billing.metering import usage_history
from ghanafarmer.billing.models import UsageLedgerEntry
from ghanafarmer.billing.tests.factories import UsageLedgerEntryFactory
from ghanafarmer.users.tests.factories import UserFactory

MID_MARCH = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
MID_APRIL = datetime(2025, 4, 15, 12, 0, tzinfo=UTC)


class TestPeriods:
    def test_current_period_is_calendar_month(self):
        start, end = current_period_bounds(MID_MARCH)

        assert (start.year, start.month, start.day, start.hour) == (2025, 3, 1, 0)
        assert (end.year, end.month, end.day) == (2025, 4, 1)

    def test_december_rolls_into_next_year(self):
        start, end = current_period_bounds(datetime(2024, 12, 31, 23, 0, tzinfo=UTC))

        assert (start.year, start.month) == (2024, 12)
        assert (end.year, end.month) == (2025, 1)

    def test_add_months_clamps_day(self):
        shifted = add_months(datetime(2025, 1, 31, tzinfo=UTC), 1)

        assert (shifted.month, shifted.day) == (2, 28)

    def test_add_months_backwards_across_year(self):
        shifted = add_months(datetime(2025, 2, 1, tzinfo=UTC), -6)

        assert (shifted.year, shifted.month) == (2024, 8)

    def test_naive_now_is_read_in_reference_zone(self):
        start, end = current_period_bounds(datetime(2025, 3, 31, 23, 30))

        assert start.tzinfo is not None
        assert (start.month, end.month) == (3, 4)


class IncrementTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory()

    def test_two_increments_in_one_month_add_up(self):
        increment(self.user, UsageType.EXPORTS_GENERATED, now=MID_MARCH)
        increment(self.user, UsageType.EXPORTS_GENERATED, now=MID_MARCH)

        snapshot = read(self.user, now=MID_MARCH)
        self.assertEqual(snapshot.get(UsageType.EXPORTS_GENERATED), 2)
        self.assertEqual(UsageLedgerEntry.objects.filter(user=self.user).count(), 1)

    def test_next_month_starts_fresh(self):
        increment(self.user, UsageType.EXPORTS_GENERATED, now=MID_MARCH)
        self.assertEqual(
            read(self.user, now=MID_APRIL).get(UsageType.EXPORTS_GENERATED),
            0,
        )

        increment(self.user, UsageType.EXPORTS_GENERATED, now=MID_APRIL)

        self.assertEqual(read(self.user, now=MID_APRIL).get(UsageType.EXPORTS_GENERATED), 1)
        self.assertEqual(read(self.user, now=MID_MARCH).get(UsageType.EXPORTS_GENERATED), 1)

    def test_increment_by_amount(self):
        increment(self.user, UsageType.API_CALLS, amount=25, now=MID_MARCH)

        self.assertEqual(read(self.user, now=MID_MARCH).get(UsageType.API_CALLS), 25)

    def test_increment_only_touches_named_counter(self):
        increment(self.user, UsageType.DSE_RECOMMENDATIONS, now=MID_MARCH)

        snapshot = read(self.user, now=MID_MARCH)
        self.assertEqual(snapshot.get(UsageType.DSE_RECOMMENDATIONS), 1)
        self.assertEqual(snapshot.get(UsageType.EXPORTS_GENERATED), 0)

    def test_increment_accepts_user_id(self):
        increment(self.user.pk, UsageType.RECORDS_CREATED, now=MID_MARCH)

        self.assertEqual(read(self.user.pk, now=MID_MARCH).get(UsageType.RECORDS_CREATED), 1)

    def test_unknown_usage_type_raises(self):
        with pytest.raises(UnknownUsageType):
            increment(self.user, "photosUploaded", now=MID_MARCH)

    def test_non_positive_amount_raises(self):
        with pytest.raises(ValueError, match="positive"):
            increment(self.user, UsageType.API_CALLS, amount=0, now=MID_MARCH)

    def test_amount_beyond_column_range_raises(self):
        with pytest.raises(UsageCounterOverflow):
            increment(self.user, UsageType.API_CALLS, amount=2**63, now=MID_MARCH)

        self.assertFalse(UsageLedgerEntry.objects.filter(user=self.user).exists())

    def test_increment_that_would_overflow_counter_is_refused(self):
        start, end = current_period_bounds(MID_MARCH)
        UsageLedgerEntryFactory(
            user=self.user,
            period_start=start,
            period_end=end,
            api_calls=MAX_COUNTER_VALUE - 1,
        )

        with pytest.raises(UsageCounterOverflow):
            increment(self.user, UsageType.API_CALLS, amount=2, now=MID_MARCH)
        increment(self.user, UsageType.API_CALLS, amount=1, now=MID_MARCH)

        self.assertEqual(
            read(self.user, now=MID_MARCH).get(UsageType.API_CALLS),
            MAX_COUNTER_VALUE,
        )

    def test_unknown_subscriber_raises_and_writes_nothing(self):
        with pytest.raises(SubscriberNotFound):
            increment(987654, UsageType.API_CALLS, now=MID_MARCH)

        self.assertFalse(UsageLedgerEntry.objects.filter(user_id=987654).exists())


class IncrementWithinLimitTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory()

    def test_applies_until_limit_then_refuses(self):
        results = [
            increment_within_limit(self.user, UsageType.EXPORTS_GENERATED, 2, now=MID_MARCH)
            for _ in range(3)
        ]

        self.assertEqual(results, [True, True, False])
        self.assertEqual(read(self.user, now=MID_MARCH).get(UsageType.EXPORTS_GENERATED), 2)

    def test_refuses_amount_that_would_overshoot(self):
        increment(self.user, UsageType.EXPORTS_GENERATED, now=MID_MARCH)

        applied = increment_within_limit(
            self.user,
            UsageType.EXPORTS_GENERATED,
            limit=3,
            amount=3,
            now=MID_MARCH,
        )

        self.assertFalse(applied)
        self.assertEqual(read(self.user, now=MID_MARCH).get(UsageType.EXPORTS_GENERATED), 1)

    def test_zero_limit_never_applies(self):
        self.assertFalse(
            increment_within_limit(self.user, UsageType.EXPORTS_GENERATED, 0, now=MID_MARCH),
        )

    def test_unlimited_always_applies(self):
        for _ in range(5):
            self.assertTrue(
                increment_within_limit(
                    self.user,
                    UsageType.EXPORTS_GENERATED,
                    -1,
                    now=MID_MARCH,
                ),
            )
        self.assertEqual(read(self.user, now=MID_MARCH).get(UsageType.EXPORTS_GENERATED), 5)

    def test_stale_caller_cannot_overshoot(self):
        # Two callers both saw 1/2 used; only one of them may take the last unit.
        increment(self.user, UsageType.DSE_RECOMMENDATIONS, now=MID_MARCH)

        first = increment_within_limit(self.user, UsageType.DSE_RECOMMENDATIONS, 2, now=MID_MARCH)
        second = increment_within_limit(self.user, UsageType.DSE_RECOMMENDATIONS, 2, now=MID_MARCH)

        self.assertEqual((first, second), (True, False))


class ReadTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = UserFactory()

    def test_read_without_activity_is_zero_and_creates_nothing(self):
        snapshot = read(self.user, now=MID_MARCH)

        self.assertFalse(snapshot.exists)
        self.assertEqual(snapshot.get(UsageType.EXPORTS_GENERATED), 0)
        self.assertFalse(UsageLedgerEntry.objects.filter(user=self.user).exists())

    def test_snapshot_as_dict_uses_usage_type_keys(self):
        increment(self.user, UsageType.LISTINGS_CREATED, now=MID_MARCH)

        data = read(self.user, now=MID_MARCH).as_dict()

        self.assertEqual(data["listingsCreated"], 1)
        self.assertEqual(data["storageUsedMb"], 0)
        self.assertIn("periodStart", data)

    def test_read_specific_period(self):
        increment(self.user, UsageType.API_CALLS, now=MID_MARCH)

        snapshot = read(self.user, period_start=datetime(2025, 3, 1, tzinfo=UTC), now=MID_APRIL)

        self.assertEqual(snapshot.get(UsageType.API_CALLS), 1)

    def test_usage_history_is_ascending_and_bounded(self):
        for month in range(1, 11):
            increment(
                self.user,
                UsageType.API_CALLS,
                amount=month,
                now=datetime(2024, month, 10, tzinfo=UTC),
            )

        history = usage_history(self.user, now=datetime(2024, 10, 20, tzinfo=UTC))

        self.assertEqual([entry.period_start.month for entry in history], [4, 5, 6, 7, 8, 9, 10])
        self.assertEqual(history[-1].api_calls, 10)
