from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from ghanafarmer.farms.models import CropEntry
from ghanafarmer.farms.models import Expense
from ghanafarmer.farms.models import Farm
from ghanafarmer.farms.models import Income
from ghanafarmer.farms.models import LivestockEntry
from ghanafarmer.farms.models import MarketListing
from ghanafarmer.farms.models import Plot
from ghanafarmer.farms.models import PriceAlert
from ghanafarmer.farms.models import Task
from ghanafarmer.users.tests.factories import UserFactory


class FarmFactory(DjangoModelFactory):
    class Meta:
        model = Farm

    user = factory.SubFactory(UserFactory)
    name = factory.Sequence(lambda n: f"Farm {n}")
    location = "Kumasi"


class PlotFactory(DjangoModelFactory):
    class Meta:
        model = Plot

    user = factory.SubFactory(UserFactory)
    farm = factory.SubFactory(FarmFactory, user=factory.SelfAttribute("..user"))
    name = factory.Sequence(lambda n: f"Plot {n}")


class CropEntryFactory(DjangoModelFactory):
    class Meta:
        model = CropEntry

    user = factory.SubFactory(UserFactory)
    crop_name = "Maize"


class LivestockEntryFactory(DjangoModelFactory):
    class Meta:
        model = LivestockEntry

    user = factory.SubFactory(UserFactory)
    animal_type = "Goat"
    head_count = 4


class ExpenseFactory(DjangoModelFactory):
    class Meta:
        model = Expense

    user = factory.SubFactory(UserFactory)
    category = "Fertilizer"
    amount = Decimal("120.00")


class IncomeFactory(DjangoModelFactory):
    class Meta:
        model = Income

    user = factory.SubFactory(UserFactory)
    source = "Maize sale"
    amount = Decimal("450.00")


class TaskFactory(DjangoModelFactory):
    class Meta:
        model = Task

    user = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Weed plot {n}")


class PriceAlertFactory(DjangoModelFactory):
    class Meta:
        model = PriceAlert

    user = factory.SubFactory(UserFactory)
    commodity = "Cocoa"
    target_price = Decimal("900.00")
    is_active = True


class MarketListingFactory(DjangoModelFactory):
    class Meta:
        model = MarketListing

    user = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f"Yam tubers lot {n}")
    status = MarketListing.Status.ACTIVE
