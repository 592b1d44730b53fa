"""
Gate decision engine: may this subscriber do X?

Two question shapes are answered, both with a GateDecision value:

- ``decide_feature``: is a boolean feature enabled on the subscriber's tier?
- ``decide_limit``: is there room for one more unit of a quota?

Being refused is a normal outcome and is returned as ``allowed=False``,
never raised. Only a missing subscriber (SubscriberNotFound) or, in strict
mode, an unknown feature/limit name raises. Outside strict mode unknown
names fail closed: logged and denied.

``decide_limit`` is a snapshot read for prompts and displays. Callers that
go on to act must use one of the race-free paths, otherwise two concurrent
requests can both see room for the last unit:

- ``consume``: for ledger-backed limits, decides and records in one
  conditional UPDATE.
- ``reserve``: for any limit, serializes the subscriber's requests on a row
  lock while the caller creates its row inside the block.

Usage:
    decision = gate_engine.decide_feature(user, Feature.INVENTORY_MANAGEMENT)
    if not decision.allowed:
        return Response(decision.as_dict(), status=403)

    with gate_engine.reserve(user, LimitType.FARMS) as decision:
        if decision.allowed:
            Farm.objects.create(user=user, name=name)

    decision = gate_engine.consume(user, LimitType.EXPORTS)
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from ghanafarmer.billing import metering
from ghanafarmer.billing.catalog import PLAN_CATALOG
from ghanafarmer.billing.catalog import TIER_ORDER
from ghanafarmer.billing.catalog import is_feature_enabled
from ghanafarmer.billing.catalog import is_known_feature
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.catalog import minimum_tier_for_feature
from ghanafarmer.billing.catalog import next_tier_for_limit
from ghanafarmer.billing.constants import LimitType
from ghanafarmer.billing.metering import BillingError
from ghanafarmer.billing.metering import SubscriberNotFound
from ghanafarmer.billing.metering import UnknownFeature
from ghanafarmer.billing.metering import UnknownLimitType
from ghanafarmer.billing.quotas import Backing
from ghanafarmer.billing.quotas import QuotaResolver
from ghanafarmer.billing.quotas import QuotaUsage
from ghanafarmer.billing.quotas import quota_resolver

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator
    from datetime import datetime

    from ghanafarmer.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    """
    Outcome of a gate check.

    Carries enough for a caller to render an upgrade prompt without a second
    query: the subscriber's tier, the tier that would unlock the action and,
    for quotas, the limit and current usage.
    """

    allowed: bool
    current_tier: str
    reason: str | None = None
    required_tier: str | None = None
    limit: int | None = None
    current: int | None = None

    def as_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "upgradeRequired": self.required_tier,
            "currentTier": self.current_tier,
            "limit": self.limit,
            "current": self.current,
        }


class GateEngine:
    """
    Public decision surface over the plan catalog and quota resolver.

    Each call reads the subscriber's tier and usage afresh; nothing is
    cached between calls.
    """

    def __init__(
        self,
        resolver: QuotaResolver | None = None,
        *,
        strict: bool | None = None,
    ):
        self.resolver = resolver or quota_resolver
        self._strict = strict

    @property
    def strict(self) -> bool:
        """Raise on unknown feature/limit names instead of denying."""
        if self._strict is not None:
            return self._strict
        return getattr(settings, "BILLING_STRICT_GATES", settings.DEBUG)

    # -------------------------------------------------------------------------
    # Subscriber resolution
    # -------------------------------------------------------------------------

    def resolve_subscriber(self, user_or_id, *, for_update: bool = False) -> User:
        """
        Load the subscriber for a User instance or primary key.

        With ``for_update`` the row is re-read under SELECT ... FOR UPDATE,
        which must happen inside a transaction.

        Raises:
            SubscriberNotFound: nothing resolvable (None, anonymous, missing id)
        """
        if user_or_id is None:
            raise SubscriberNotFound
        if hasattr(user_or_id, "is_authenticated"):
            if not user_or_id.is_authenticated:
                raise SubscriberNotFound
            if not for_update:
                return user_or_id
            user_or_id = user_or_id.pk

        queryset = get_user_model().objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=user_or_id)
        except (get_user_model().DoesNotExist, ValueError, TypeError) as exc:
            raise SubscriberNotFound(f"Subscriber {user_or_id} does not exist.") from exc

    # -------------------------------------------------------------------------
    # Feature gate
    # -------------------------------------------------------------------------

    def decide_feature(self, user_or_id, feature: str) -> GateDecision:
        """May this subscriber use ``feature``?"""
        user = self.resolve_subscriber(user_or_id)
        return self._decide_feature(user.tier, feature)

    def decide_features(
        self,
        user_or_id,
        features: Iterable[str],
    ) -> dict[str, GateDecision]:
        """Feature decisions for several features against one tier read."""
        user = self.resolve_subscriber(user_or_id)
        return {
            feature: self._decide_feature(user.tier, feature) for feature in features
        }

    def _decide_feature(self, tier: str, feature: str) -> GateDecision:
        if is_feature_enabled(tier, feature):
            return GateDecision(allowed=True, current_tier=tier)

        if not is_known_feature(feature):
            return self._fail_closed(tier, UnknownFeature(feature))

        required = minimum_tier_for_feature(feature)
        if required is None:
            return GateDecision(
                allowed=False,
                current_tier=tier,
                reason=f"{feature} is not available on any plan",
            )
        return GateDecision(
            allowed=False,
            current_tier=tier,
            required_tier=required.value,
            reason=f"{feature} requires {required.value} plan or higher",
        )

    # -------------------------------------------------------------------------
    # Limit gate
    # -------------------------------------------------------------------------

    def decide_limit(
        self,
        user_or_id,
        limit_type: str,
        *,
        now: datetime | None = None,
    ) -> GateDecision:
        """May this subscriber consume one more unit of ``limit_type``?"""
        user = self.resolve_subscriber(user_or_id)
        try:
            usage = self.resolver.resolve(user, limit_type, now=now)
        except UnknownLimitType as exc:
            return self._fail_closed(user.tier, exc)

        if usage.allowed:
            return GateDecision(
                allowed=True,
                current_tier=user.tier,
                limit=usage.limit,
                current=usage.current,
            )
        return self._limit_denied(user.tier, limit_type, usage)

    def _limit_denied(
        self,
        tier: str,
        limit_type: str,
        usage: QuotaUsage,
    ) -> GateDecision:
        source = self.resolver.source_for(limit_type)
        required = next_tier_for_limit(tier, source.field, usage.current)
        return GateDecision(
            allowed=False,
            current_tier=tier,
            reason=f"{limit_type} limit reached ({usage.current}/{usage.limit})",
            required_tier=required.value if required else None,
            limit=usage.limit,
            current=usage.current,
        )

    @contextlib.contextmanager
    def reserve(
        self,
        user_or_id,
        limit_type: str,
        *,
        now: datetime | None = None,
    ) -> Iterator[GateDecision]:
        """
        Decide a limit while holding the subscriber's row lock.

        The caller performs the gated write inside the ``with`` block; it
        commits (or rolls back) together with the decision, and concurrent
        reservations for the same subscriber wait for the lock.
        """
        with transaction.atomic():
            user = self.resolve_subscriber(user_or_id, for_update=True)
            decision = self.decide_limit(user, limit_type, now=now)
            yield decision

    def consume(
        self,
        user_or_id,
        limit_type: str,
        amount: int = 1,
        *,
        now: datetime | None = None,
    ) -> GateDecision:
        """
        Decide and record ``amount`` units of a ledger-backed limit at once.

        The ledger is only incremented when the whole amount fits. Use this
        for actions whose success is known up front (or that can be undone);
        otherwise use ``reserve`` and ``record_usage``.

        Raises:
            ValueError: ``limit_type`` is not ledger-backed
        """
        user = self.resolve_subscriber(user_or_id)
        try:
            source = self.resolver.source_for(limit_type)
        except UnknownLimitType as exc:
            return self._fail_closed(user.tier, exc)
        if source.backing != Backing.LEDGER:
            msg = f"{limit_type} is not ledger-backed; use reserve() instead"
            raise ValueError(msg)

        limit = limits_for(user.tier).limit(source.field)
        applied = metering.increment_within_limit(
            user,
            source.usage_type,
            limit,
            amount,
            now=now,
        )
        current = metering.read(user, now=now).get(source.usage_type)
        if applied:
            return GateDecision(
                allowed=True,
                current_tier=user.tier,
                limit=limit,
                current=current,
            )
        usage = QuotaUsage(current=current, limit=limit)
        return self._limit_denied(user.tier, limit_type, usage)

    # -------------------------------------------------------------------------
    # Usage recording
    # -------------------------------------------------------------------------

    def record_usage(
        self,
        user_or_id,
        usage_type: str,
        amount: int = 1,
        *,
        now: datetime | None = None,
    ) -> None:
        """
        Record that a gated action succeeded. Call only after it has.

        Storage errors propagate to the caller.
        """
        user = self.resolve_subscriber(user_or_id)
        metering.increment(user, usage_type, amount, now=now)

    # -------------------------------------------------------------------------
    # Summaries
    # -------------------------------------------------------------------------

    def entitlements(self, user_or_id, *, now: datetime | None = None) -> dict:
        """
        Tier, every feature flag and every quota's usage for one subscriber.

        Quota usage here is always counted, including unlimited ones, since
        it feeds usage displays rather than a gate.
        """
        user = self.resolve_subscriber(user_or_id)
        plan = limits_for(user.tier)
        top = PLAN_CATALOG[TIER_ORDER[-1]]
        return {
            "tier": user.tier,
            "features": {
                feature: plan.has_feature(feature) for feature in top.features
            },
            "limits": {
                limit_type.value: self.resolver.resolve(
                    user,
                    limit_type,
                    now=now,
                    count_unlimited=True,
                ).as_dict()
                for limit_type in LimitType
            },
        }

    def _fail_closed(self, tier: str, error: BillingError) -> GateDecision:
        if self.strict:
            raise error
        logger.error("Denying gate check on tier %s: %s", tier, error.detail)
        return GateDecision(allowed=False, current_tier=tier, reason=error.detail)


gate_engine = GateEngine()


def decide_feature(user_or_id, feature: str) -> GateDecision:
    return gate_engine.decide_feature(user_or_id, feature)


def decide_limit(user_or_id, limit_type: str) -> GateDecision:
    return gate_engine.decide_limit(user_or_id, limit_type)


def record_usage(user_or_id, usage_type: str, amount: int = 1) -> None:
    gate_engine.record_usage(user_or_id, usage_type, amount)
