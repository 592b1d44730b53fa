"""
DRF permissions that put a gate in front of a view.

Usage:
    class InventoryViewSet(viewsets.ModelViewSet):
        permission_classes = [
            IsAuthenticated,
            feature_required(Feature.INVENTORY_MANAGEMENT),
        ]

    class FarmCreateView(APIView):
        permission_classes = [IsAuthenticated, limit_required(LimitType.FARMS)]

A denied check answers 403 with the decision's reason as the detail. The
limit permission is a snapshot check; views that create the gated row
should still create it inside ``gate_engine.reserve``.
"""

from __future__ import annotations

from rest_framework import permissions

from ghanafarmer.billing.gates import gate_engine


class _GatePermission(permissions.BasePermission):
    """Base class; subclasses set ``message`` from the decision they deny on."""

    message = "Your plan does not include this action."

    def _check(self, decision) -> bool:
        if not decision.allowed:
            self.message = decision.reason or self.message
        return decision.allowed


def feature_required(feature: str) -> type[permissions.BasePermission]:
    """Permission class that allows only subscribers whose tier has ``feature``."""

    class FeatureRequired(_GatePermission):
        def has_permission(self, request, view) -> bool:
            user = getattr(request, "user", None)
            if not user or not user.is_authenticated:
                return False
            return self._check(gate_engine.decide_feature(user, feature))

    FeatureRequired.__name__ = f"FeatureRequired[{feature}]"
    return FeatureRequired


def limit_required(limit_type: str) -> type[permissions.BasePermission]:
    """Permission class that allows only subscribers with room under ``limit_type``."""

    class LimitRequired(_GatePermission):
        def has_permission(self, request, view) -> bool:
            user = getattr(request, "user", None)
            if not user or not user.is_authenticated:
                return False
            return self._check(gate_engine.decide_limit(user, limit_type))

    LimitRequired.__name__ = f"LimitRequired[{limit_type}]"
    return LimitRequired
