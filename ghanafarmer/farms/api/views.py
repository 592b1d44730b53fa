"""
Farm record endpoints.

Every create goes through the gate engine. Farms and plots are stock-like
quotas, crop entries count against the monthly records quota; all three are
created inside ``gate_engine.reserve`` so two concurrent requests from one
subscriber cannot both take the last unit. Report exports are a
ledger-backed quota and are taken with ``gate_engine.consume``.
"""

import logging

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import permissions
from rest_framework import serializers
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from ghanafarmer.billing.constants import Feature
from ghanafarmer.billing.constants import LimitType
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.gates import gate_engine
from ghanafarmer.billing.permissions import feature_required
from ghanafarmer.billing.quotas import RECORD_MODELS
from ghanafarmer.farms.models import CropEntry
from ghanafarmer.farms.models import Farm
from ghanafarmer.farms.models import Plot

from .serializers import CropEntrySerializer
from .serializers import FarmSerializer
from .serializers import PlotSerializer

logger = logging.getLogger(__name__)


class QuotaExceeded(PermissionDenied):
    default_code = "limit_reached"


class GatedCreateMixin:
    """
    Create the object while holding the subscriber's quota reservation.

    Subclasses set ``limit_type``; the row is only saved when the decision
    allows it, inside the same transaction as the decision.
    """

    limit_type: str

    def perform_create(self, serializer):
        with gate_engine.reserve(self.request.user, self.limit_type) as decision:
            if not decision.allowed:
                raise QuotaExceeded(detail=decision.reason)
            serializer.save(user=self.request.user)


class OwnedQuerysetMixin:
    def get_queryset(self):
        return super().get_queryset().filter(user=self.request.user)


class FarmViewSet(
    GatedCreateMixin,
    OwnedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    queryset = Farm.objects.all()
    serializer_class = FarmSerializer
    permission_classes = [permissions.IsAuthenticated]
    limit_type = LimitType.FARMS


class PlotViewSet(
    GatedCreateMixin,
    OwnedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    queryset = Plot.objects.select_related("farm")
    serializer_class = PlotSerializer
    permission_classes = [permissions.IsAuthenticated]
    limit_type = LimitType.PLOTS


class CropEntryViewSet(
    GatedCreateMixin,
    OwnedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    GenericViewSet,
):
    queryset = CropEntry.objects.all()
    serializer_class = CropEntrySerializer
    permission_classes = [permissions.IsAuthenticated]
    limit_type = LimitType.RECORDS

    def perform_create(self, serializer):
        super().perform_create(serializer)
        gate_engine.record_usage(self.request.user, UsageType.RECORDS_CREATED)


class ReportExportView(APIView):
    """
    Export a summary of the requester's farm records.

    Needs the export feature and takes one unit of the monthly export quota.
    """

    permission_classes = [
        permissions.IsAuthenticated,
        feature_required(Feature.EXPORT_REPORTS),
    ]

    @extend_schema(
        summary="Export a farm report",
        request=None,
        responses={
            201: inline_serializer(
                name="ReportExportResponse",
                fields={
                    "farms": serializers.IntegerField(),
                    "plots": serializers.IntegerField(),
                    "records": serializers.DictField(child=serializers.IntegerField()),
                },
            ),
            403: {"description": "Plan lacks exports or the monthly quota is used."},
        },
        tags=["Farms"],
    )
    def post(self, request):
        decision = gate_engine.consume(request.user, LimitType.EXPORTS)
        if not decision.allowed:
            raise QuotaExceeded(detail=decision.reason)

        user = request.user
        report = {
            "farms": Farm.objects.filter(user=user).count(),
            "plots": Plot.objects.filter(user=user).count(),
            "records": {
                model._meta.model_name: model.objects.filter(user=user).count()
                for model in RECORD_MODELS
            },
        }
        logger.info(
            "Report exported for user=%s (%s/%s this month)",
            user.pk,
            decision.current,
            decision.limit,
        )
        return Response(report, status=status.HTTP_201_CREATED)
