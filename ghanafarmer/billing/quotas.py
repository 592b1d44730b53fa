"""
Quota resolution: current usage and plan limit for a limit type.

Every limit type is statically classified by how its current usage is
measured:

- STOCK: a live count of rows the subscriber owns right now (farms, plots,
  active price alerts, active listings). Re-counted on every call.
- LIVE_FLOW: a live count of rows created since the start of the current
  period. Only ``records`` works this way: crop, livestock, expense, income
  and task entries summed by creation timestamp. Always fresh, but costs
  five counts.
- LEDGER: the subscriber's usage ledger counter for the current period
  (AI recommendations, report exports). One point read, but only as fresh
  as the callers that record usage.

The two flow backings are tested apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ghanafarmer.billing import metering
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.constants import LimitType
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.metering import UnknownLimitType
from ghanafarmer.farms.models import CropEntry
from ghanafarmer.farms.models import Expense
from ghanafarmer.farms.models import Farm
from ghanafarmer.farms.models import Income
from ghanafarmer.farms.models import LivestockEntry
from ghanafarmer.farms.models import MarketListing
from ghanafarmer.farms.models import Plot
from ghanafarmer.farms.models import PriceAlert
from ghanafarmer.farms.models import Task

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from ghanafarmer.users.models import User

logger = logging.getLogger(__name__)


class Backing(str, Enum):
    STOCK = "stock"
    LIVE_FLOW = "live_flow"
    LEDGER = "ledger"


@dataclass(frozen=True)
class LimitSource:
    """Where a limit type's cap and current usage come from."""

    field: str
    backing: Backing
    usage_type: UsageType | None = None


LIMIT_SOURCES: dict[LimitType, LimitSource] = {
    LimitType.FARMS: LimitSource("maxFarms", Backing.STOCK),
    LimitType.PLOTS: LimitSource("maxPlots", Backing.STOCK),
    LimitType.PRICE_ALERTS: LimitSource("maxPriceAlerts", Backing.STOCK),
    LimitType.LISTINGS: LimitSource("maxListings", Backing.STOCK),
    LimitType.RECORDS: LimitSource("maxRecordsPerMonth", Backing.LIVE_FLOW),
    LimitType.DSE_RECOMMENDATIONS: LimitSource(
        "maxDseRecommendations",
        Backing.LEDGER,
        UsageType.DSE_RECOMMENDATIONS,
    ),
    LimitType.EXPORTS: LimitSource(
        "maxExportsPerMonth",
        Backing.LEDGER,
        UsageType.EXPORTS_GENERATED,
    ),
}

# Collections whose new rows count against the monthly records quota.
RECORD_MODELS = (CropEntry, LivestockEntry, Expense, Income, Task)

STOCK_COUNTERS: dict[LimitType, Callable[[int | str], int]] = {
    LimitType.FARMS: lambda user_id: Farm.objects.filter(user_id=user_id).count(),
    LimitType.PLOTS: lambda user_id: Plot.objects.filter(user_id=user_id).count(),
    LimitType.PRICE_ALERTS: lambda user_id: PriceAlert.objects.filter(
        user_id=user_id,
        is_active=True,
    ).count(),
    LimitType.LISTINGS: lambda user_id: MarketListing.objects.filter(
        user_id=user_id,
        status=MarketListing.Status.ACTIVE,
    ).count(),
}


def records_created_since(user_id: int | str, since: datetime) -> int:
    """Rows created across all record collections at or after ``since``."""
    return sum(
        model.objects.filter(user_id=user_id, created__gte=since).count()
        for model in RECORD_MODELS
    )


@dataclass(frozen=True)
class QuotaUsage:
    current: int
    limit: int

    @property
    def unlimited(self) -> bool:
        return self.limit == UNLIMITED

    @property
    def allowed(self) -> bool:
        """Room for one more unit: unlimited, or strictly below the cap."""
        return self.unlimited or self.current < self.limit

    @property
    def remaining(self) -> int:
        if self.unlimited:
            return UNLIMITED
        return max(0, self.limit - self.current)

    def as_dict(self) -> dict:
        return {
            "current": self.current,
            "limit": self.limit,
            "remaining": self.remaining,
        }


class QuotaResolver:
    """
    Resolve ``{current, limit}`` for a subscriber and limit type.

    Nothing is cached: every call re-reads the tier's plan and re-counts.

    Usage:
        usage = QuotaResolver().resolve(user, LimitType.FARMS)
        if usage.allowed:
            ...
    """

    def source_for(self, limit_type: str) -> LimitSource:
        try:
            return LIMIT_SOURCES[LimitType(limit_type)]
        except ValueError as exc:
            raise UnknownLimitType(limit_type) from exc

    def resolve(
        self,
        user: User,
        limit_type: str,
        *,
        now: datetime | None = None,
        count_unlimited: bool = False,
    ) -> QuotaUsage:
        """
        Current usage and plan limit for ``limit_type``.

        When the plan limit is unlimited the count is skipped and reported
        as 0, unless ``count_unlimited`` asks for the real figure (usage
        displays want it, gate decisions do not).

        Raises:
            UnknownLimitType: ``limit_type`` is not a known limit type
        """
        source = self.source_for(limit_type)
        limit = limits_for(user.tier).limit(source.field)
        if limit == UNLIMITED and not count_unlimited:
            return QuotaUsage(current=0, limit=UNLIMITED)
        current = self.current_usage(user, limit_type, now=now)
        return QuotaUsage(current=current, limit=limit)

    def current_usage(
        self,
        user: User,
        limit_type: str,
        *,
        now: datetime | None = None,
    ) -> int:
        source = self.source_for(limit_type)
        if source.backing == Backing.STOCK:
            return STOCK_COUNTERS[LimitType(limit_type)](user.pk)
        if source.backing == Backing.LIVE_FLOW:
            period_start, _end = metering.current_period_bounds(now)
            return records_created_since(user.pk, period_start)
        return metering.read(user, now=now).get(source.usage_type)


quota_resolver = QuotaResolver()
