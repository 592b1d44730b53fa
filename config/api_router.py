"""
Public API router.

ViewSets for farm records and the current user are registered on the router;
the billing endpoints are plain APIViews and are included under billing/.
"""

from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from ghanafarmer.farms.api.views import CropEntryViewSet
from ghanafarmer.farms.api.views import FarmViewSet
from ghanafarmer.farms.api.views import PlotViewSet
from ghanafarmer.farms.api.views import ReportExportView
from ghanafarmer.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("farms", FarmViewSet, basename="farm")
router.register("plots", PlotViewSet, basename="plot")
router.register("crop-entries", CropEntryViewSet, basename="crop-entry")

app_name = "api"
urlpatterns = [
    path("billing/", include("ghanafarmer.billing.urls")),
    path("reports/export/", ReportExportView.as_view(), name="report-export"),
    *router.urls,
]
