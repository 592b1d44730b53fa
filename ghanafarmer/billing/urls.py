"""
URL configuration for the billing API, mounted under /api/billing/.

Routes:
- features/                     - Current tier, feature flags and quotas
- usage/                        - Usage counters (GET) / record usage (POST)
- plans/                        - Public plan listing
- upgrade-quote/                - Prorated upgrade price
- subscription/                 - Subscription (GET), subscribe (POST), cancel (PATCH)
- gate/feature/<feature>/       - Feature decision
- gate/limit/<limit_type>/      - Quota decision
"""

from django.urls import path

from ghanafarmer.billing.api import EntitlementsView
from ghanafarmer.billing.api import FeatureGateView
from ghanafarmer.billing.api import LimitGateView
from ghanafarmer.billing.api import PlanListView
from ghanafarmer.billing.api import SubscriptionView
from ghanafarmer.billing.api import UpgradeQuoteView
from ghanafarmer.billing.api import UsageView

app_name = "billing"

urlpatterns = [
    path("features/", EntitlementsView.as_view(), name="features"),
    path("usage/", UsageView.as_view(), name="usage"),
    path("plans/", PlanListView.as_view(), name="plans"),
    path("upgrade-quote/", UpgradeQuoteView.as_view(), name="upgrade-quote"),
    path("subscription/", SubscriptionView.as_view(), name="subscription"),
    path("gate/feature/<str:feature>/", FeatureGateView.as_view(), name="gate-feature"),
    path("gate/limit/<str:limit_type>/", LimitGateView.as_view(), name="gate-limit"),
]
