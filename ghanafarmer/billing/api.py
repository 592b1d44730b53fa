"""
Billing API endpoints.

Views over the gate engine, the usage ledger, the plan catalog and the
subscription service, used by the web and mobile clients to render plan
pages, usage meters and upgrade prompts, and to subscribe or cancel.
Gate decisions are always answered with 200; ``allowed`` carries the
outcome.

Errors from the engine are returned as ``{"detail": ..., "code": ...}``.
"""

import logging

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import inline_serializer
from rest_framework import serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ghanafarmer.billing import metering
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.gates import gate_engine
from ghanafarmer.billing.metering import BillingError
from ghanafarmer.billing.metering import SubscriberNotFound
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.plan_changes import can_upgrade_to
from ghanafarmer.billing.plan_changes import upgrade_price
from ghanafarmer.billing.serializers import GateDecisionSerializer
from ghanafarmer.billing.serializers import PlanSerializer
from ghanafarmer.billing.serializers import SubscribeSerializer
from ghanafarmer.billing.serializers import SubscriptionActionSerializer
from ghanafarmer.billing.serializers import SubscriptionSerializer
from ghanafarmer.billing.serializers import UpgradeQuoteQuerySerializer
from ghanafarmer.billing.serializers import UpgradeQuoteSerializer
from ghanafarmer.billing.serializers import UsageLedgerEntrySerializer
from ghanafarmer.billing.serializers import UsageRecordSerializer
from ghanafarmer.billing.services import SubscriptionService

logger = logging.getLogger(__name__)


class BillingAPIView(APIView):
    """APIView that renders BillingError as a JSON error response."""

    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        if isinstance(exc, SubscriberNotFound):
            return Response(
                {"detail": exc.detail, "code": exc.code},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        if isinstance(exc, BillingError):
            logger.warning("Billing request rejected: %s", exc.detail)
            return Response(
                {"detail": exc.detail, "code": exc.code},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)


def require_upgrade(current: str, target: str) -> None:
    if not can_upgrade_to(current, target):
        raise BillingError(
            f"{target} is not an upgrade from {current}.",
            code="not_an_upgrade",
        )


class EntitlementsView(BillingAPIView):
    """
    The requester's tier, every feature flag and every quota.

    Quotas are reported as ``{current, limit, remaining}`` with -1 for
    unlimited.
    """

    @extend_schema(
        summary="Get current entitlements",
        responses={
            200: inline_serializer(
                name="EntitlementsResponse",
                fields={
                    "tier": serializers.CharField(),
                    "features": serializers.DictField(child=serializers.BooleanField()),
                    "limits": serializers.DictField(child=serializers.DictField()),
                },
            ),
        },
        tags=["Billing"],
    )
    def get(self, request):
        return Response(gate_engine.entitlements(request.user))


class UsageView(BillingAPIView):
    """
    GET: this month's ledger counters plus the last six months of history.
    POST: record usage of a metered action that has already succeeded.
    """

    @extend_schema(
        summary="Get usage",
        responses={
            200: inline_serializer(
                name="UsageResponse",
                fields={
                    "current": serializers.DictField(),
                    "history": UsageLedgerEntrySerializer(many=True),
                },
            ),
        },
        tags=["Billing"],
    )
    def get(self, request):
        current = metering.read(request.user)
        history = metering.usage_history(request.user)
        return Response(
            {
                "current": current.as_dict(),
                "history": UsageLedgerEntrySerializer(history, many=True).data,
            },
        )

    @extend_schema(
        summary="Record usage",
        request=UsageRecordSerializer,
        responses={
            200: inline_serializer(
                name="UsageRecordResponse",
                fields={"message": serializers.CharField()},
            ),
            400: {"description": "Unknown usage type or invalid amount."},
        },
        tags=["Billing"],
    )
    def post(self, request):
        serializer = UsageRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        gate_engine.record_usage(
            request.user,
            serializer.validated_data["usageType"],
            serializer.validated_data["amount"],
        )
        return Response({"message": "Usage updated"})


class PlanListView(APIView):
    """Active plans in display order. Public."""

    permission_classes = [AllowAny]

    @extend_schema(
        summary="List plans",
        responses={200: PlanSerializer(many=True)},
        tags=["Billing"],
    )
    def get(self, request):
        plans = Plan.objects.filter(is_active=True).order_by("display_order")
        return Response(PlanSerializer(plans, many=True).data)


class UpgradeQuoteView(BillingAPIView):
    """Prorated price for moving the requester up to ``tier``."""

    @extend_schema(
        summary="Quote an upgrade",
        parameters=[
            OpenApiParameter("tier", str, required=True),
            OpenApiParameter("cycle", str, required=False),
            OpenApiParameter("daysRemaining", int, required=False),
        ],
        responses={
            200: UpgradeQuoteSerializer,
            400: {"description": "Invalid parameters or not an upgrade."},
        },
        tags=["Billing"],
    )
    def get(self, request):
        query = UpgradeQuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        target = query.validated_data["tier"]
        current = request.user.tier

        require_upgrade(current, target)

        quote = upgrade_price(
            current,
            target,
            query.validated_data["cycle"],
            query.validated_data["daysRemaining"],
        )
        return Response(quote.as_dict())


class SubscriptionView(BillingAPIView):
    """
    The requester's subscription.

    GET: subscription record, tier, quotas, feature flags and this month's
    usage. POST: subscribe to a higher tier. PATCH: ``{"action": "cancel"}``.

    Payment is collected elsewhere; POST activates the subscription directly
    and reports the prorated price it quoted.
    """

    @extend_schema(
        summary="Get current subscription",
        responses={
            200: inline_serializer(
                name="SubscriptionResponse",
                fields={
                    "tier": serializers.CharField(),
                    "subscription": SubscriptionSerializer(allow_null=True),
                    "limits": serializers.DictField(child=serializers.DictField()),
                    "features": serializers.DictField(child=serializers.BooleanField()),
                    "usage": serializers.DictField(),
                },
            ),
        },
        tags=["Billing"],
    )
    def get(self, request):
        subscription = SubscriptionService().active_subscription(request.user)
        entitlements = gate_engine.entitlements(request.user)
        return Response(
            {
                "tier": entitlements["tier"],
                "subscription": (
                    SubscriptionSerializer(subscription).data if subscription else None
                ),
                "limits": entitlements["limits"],
                "features": entitlements["features"],
                "usage": metering.read(request.user).as_dict(),
            },
        )

    @extend_schema(
        summary="Subscribe or upgrade",
        request=SubscribeSerializer,
        responses={
            201: inline_serializer(
                name="SubscribeResponse",
                fields={
                    "message": serializers.CharField(),
                    "subscription": SubscriptionSerializer(),
                    "quote": UpgradeQuoteSerializer(),
                },
            ),
            400: {"description": "Not an upgrade, or the tier is sold by contract."},
        },
        tags=["Billing"],
    )
    def post(self, request):
        serializer = SubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["tier"]
        cycle = serializer.validated_data["cycle"]
        current = request.user.tier

        require_upgrade(current, target)
        if limits_for(target).is_custom_priced:
            raise BillingError(
                f"{target} is sold by contract. Contact sales to subscribe.",
                code="contact_sales",
            )

        service = SubscriptionService()
        days = service.days_remaining(service.active_subscription(request.user))
        quote = upgrade_price(current, target, cycle, days)
        subscription = service.activate(request.user, target, cycle)
        logger.info(
            "User=%s subscribed to %s (%s), prorated %s",
            request.user.pk,
            target,
            cycle,
            quote.prorated,
        )
        return Response(
            {
                "message": "Subscription created",
                "subscription": SubscriptionSerializer(subscription).data,
                "quote": quote.as_dict(),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Cancel subscription",
        request=SubscriptionActionSerializer,
        responses={
            200: inline_serializer(
                name="SubscriptionActionResponse",
                fields={
                    "message": serializers.CharField(),
                    "tier": serializers.CharField(),
                },
            ),
            404: {"description": "No active subscription."},
        },
        tags=["Billing"],
    )
    def patch(self, request):
        serializer = SubscriptionActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = SubscriptionService()
        if service.active_subscription(request.user) is None:
            return Response(
                {"detail": "No active subscription found.", "code": "no_subscription"},
                status=status.HTTP_404_NOT_FOUND,
            )

        service.cancel(request.user)
        return Response({"message": "Subscription canceled", "tier": request.user.tier})


class FeatureGateView(BillingAPIView):
    """Raw feature decision for the requester."""

    @extend_schema(
        summary="Check a feature",
        responses={200: GateDecisionSerializer},
        tags=["Billing"],
    )
    def get(self, request, feature):
        return Response(gate_engine.decide_feature(request.user, feature).as_dict())


class LimitGateView(BillingAPIView):
    """Raw quota decision for the requester."""

    @extend_schema(
        summary="Check a limit",
        responses={200: GateDecisionSerializer},
        tags=["Billing"],
    )
    def get(self, request, limit_type):
        return Response(gate_engine.decide_limit(request.user, limit_type).as_dict())
