"""
Tests for SubscriptionService and plan seeding.

The synchronization rule under test: User.tier equals the tier of the
newest TRIALING or ACTIVE subscription, or FREE when there is none.
"""

from datetime import UTC
from datetime import datetime
from datetime import timedelta

from django.test import TestCase

from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import SubscriptionStatus
from ghanafarmer.billing.constants import Tier
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.models import Subscription
from ghanafarmer.billing.services import SubscriptionService
from ghanafarmer.billing.services import sync_plans_from_catalog
from ghanafarmer.billing.tests.factories import SubscriptionFactory
from ghanafarmer.billing.tests.factories import plan_for
from ghanafarmer.users.tests.factories import UserFactory


class ActivateTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.service = SubscriptionService()

    def setUp(self):
        self.user = UserFactory(tier=Tier.FREE)

    def test_activate_moves_user_onto_tier(self):
        subscription = self.service.activate(self.user, Tier.PRO)

        self.user.refresh_from_db()
        self.assertEqual(self.user.tier, Tier.PRO)
        self.assertEqual(subscription.status, SubscriptionStatus.ACTIVE)
        self.assertEqual(subscription.tier, Tier.PRO)

    def test_activate_cancels_previous_subscription(self):
        first = self.service.activate(self.user, Tier.PRO)
        second = self.service.activate(self.user, Tier.BUSINESS, BillingCycle.YEARLY)

        first.refresh_from_db()
        self.assertEqual(first.status, SubscriptionStatus.CANCELED)
        self.assertIsNotNone(first.canceled_at)
        self.assertEqual(self.service.active_subscription(self.user), second)
        self.assertEqual(self.user.tier, Tier.BUSINESS)

    def test_yearly_period_is_twelve_months(self):
        subscription = self.service.activate(self.user, Tier.PRO, BillingCycle.YEARLY)

        start = subscription.current_period_start
        end = subscription.current_period_end
        self.assertEqual((end.year - start.year) * 12 + end.month - start.month, 12)

    def test_activate_free_only_cancels(self):
        self.service.activate(self.user, Tier.PRO)

        result = self.service.activate(self.user, Tier.FREE)

        self.assertIsNone(result)
        self.assertEqual(self.user.tier, Tier.FREE)
        self.assertIsNone(self.service.active_subscription(self.user))

    def test_trialing_counts_as_current(self):
        self.service.activate(self.user, Tier.BUSINESS, status=SubscriptionStatus.TRIALING)

        self.assertEqual(self.service.sync_tier(self.user), Tier.BUSINESS)


class CancelTests(TestCase):
    def test_cancel_drops_user_to_free(self):
        service = SubscriptionService()
        user = UserFactory(tier=Tier.FREE)
        subscription = service.activate(user, Tier.PRO)

        service.cancel(user)

        subscription.refresh_from_db()
        user.refresh_from_db()
        self.assertEqual(subscription.status, SubscriptionStatus.CANCELED)
        self.assertEqual(user.tier, Tier.FREE)


class DaysRemainingTests(TestCase):
    now = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)

    def test_no_subscription_is_a_full_month(self):
        self.assertEqual(SubscriptionService().days_remaining(None, now=self.now), 30)

    def test_days_left_in_period(self):
        subscription = SubscriptionFactory(current_period_end=self.now + timedelta(days=12))

        self.assertEqual(SubscriptionService().days_remaining(subscription, now=self.now), 12)

    def test_yearly_period_is_capped_at_a_month(self):
        subscription = SubscriptionFactory(current_period_end=self.now + timedelta(days=200))

        self.assertEqual(SubscriptionService().days_remaining(subscription, now=self.now), 30)

    def test_lapsed_period_is_zero(self):
        subscription = SubscriptionFactory(current_period_end=self.now - timedelta(days=3))

        self.assertEqual(SubscriptionService().days_remaining(subscription, now=self.now), 0)


class SyncTierTests(TestCase):
    def test_sync_repairs_drift_from_subscription(self):
        user = UserFactory(tier=Tier.FREE)
        SubscriptionFactory(user=user, plan=plan_for(Tier.BUSINESS))

        with self.assertLogs("ghanafarmer.billing.services", level="WARNING") as logs:
            tier = SubscriptionService().sync_tier(user)

        user.refresh_from_db()
        self.assertEqual(tier, Tier.BUSINESS)
        self.assertEqual(user.tier, Tier.BUSINESS)
        self.assertIn("Tier drift", logs.output[0])

    def test_sync_without_current_subscription_is_free(self):
        user = UserFactory(tier=Tier.PRO)
        SubscriptionFactory(user=user, status=SubscriptionStatus.EXPIRED)

        self.assertEqual(SubscriptionService().sync_tier(user), Tier.FREE)
        user.refresh_from_db()
        self.assertEqual(user.tier, Tier.FREE)

    def test_sync_without_drift_changes_nothing(self):
        user = UserFactory(tier=Tier.PRO)
        SubscriptionFactory(user=user, plan=plan_for(Tier.PRO))

        self.assertEqual(SubscriptionService().sync_tier(user), Tier.PRO)


class SyncPlansTests(TestCase):
    def test_seeding_is_idempotent(self):
        Plan.objects.filter(subscriptions__isnull=True).delete()

        created = sync_plans_from_catalog()
        again = sync_plans_from_catalog()

        self.assertEqual([action for _plan, action in created], ["created"] * 4)
        self.assertEqual([action for _plan, action in again], ["unchanged"] * 4)

    def test_plan_rows_follow_catalog(self):
        sync_plans_from_catalog()

        pro = Plan.objects.get(code=Tier.PRO)
        self.assertEqual(pro.monthly_price_cents, 6500)
        self.assertEqual(pro.yearly_price_cents, 65000)
        self.assertTrue(pro.is_popular)
        self.assertEqual(
            list(Plan.objects.values_list("code", flat=True)),
            ["FREE", "PRO", "BUSINESS", "ENTERPRISE"],
        )

    def test_force_rewrites_existing_rows(self):
        Plan.objects.filter(code=Tier.PRO).update(name="Old Pro", monthly_price_cents=1)

        results = {
            plan.code: action
            for plan, action in sync_plans_from_catalog(force_update=True)
        }

        pro = Plan.objects.get(code=Tier.PRO)
        self.assertEqual(results["PRO"], "updated")
        self.assertEqual(pro.name, "Pro")
        self.assertEqual(pro.monthly_price_cents, 6500)


class SubscriptionModelTests(TestCase):
    def test_str(self):
        subscription = SubscriptionFactory(user=UserFactory(name="Ama Mensah"))

        self.assertEqual(str(subscription), "Ama Mensah - Pro (ACTIVE)")

    def test_default_ordering_is_newest_first(self):
        user = UserFactory()
        older = SubscriptionFactory(user=user)
        newer = SubscriptionFactory(user=user)

        self.assertEqual(list(Subscription.objects.filter(user=user)), [newer, older])
