import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from ghanafarmer.billing.constants import BillingCycle
from ghanafarmer.billing.constants import SubscriptionStatus
from ghanafarmer.billing.constants import Tier
from ghanafarmer.billing.metering import current_period_bounds
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.models import Subscription
from ghanafarmer.billing.models import UsageLedgerEntry
from ghanafarmer.users.tests.factories import UserFactory


def plan_for(tier: str) -> Plan:
    """Seeded Plan row for ``tier``."""
    return Plan.objects.get(code=tier)


class SubscriptionFactory(DjangoModelFactory):
    class Meta:
        model = Subscription

    user = factory.SubFactory(UserFactory)
    plan = factory.LazyFunction(lambda: plan_for(Tier.PRO))
    billing_cycle = BillingCycle.MONTHLY
    status = SubscriptionStatus.ACTIVE
    current_period_start = factory.LazyFunction(timezone.now)


class UsageLedgerEntryFactory(DjangoModelFactory):
    """Ledger row for the current period unless ``period_start`` is given."""

    class Meta:
        model = UsageLedgerEntry

    user = factory.SubFactory(UserFactory)
    period_start = factory.LazyFunction(lambda: current_period_bounds()[0])
    period_end = factory.LazyAttribute(lambda o: current_period_bounds(o.period_start)[1])
