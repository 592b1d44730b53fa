"""
Usage ledger: period-scoped usage counters per subscriber.

Each subscriber has at most one UsageLedgerEntry per calendar month. Rows
are created on the first increment of a period and then only ever changed
by single UPDATE statements using F() expressions, so concurrent callers
incrementing the same counter cannot lose updates.

Usage:
    # After a report export has actually succeeded
    increment(user, UsageType.EXPORTS_GENERATED)

    # Count and cap in one statement; False means the cap was hit
    if not increment_within_limit(user, UsageType.DSE_RECOMMENDATIONS, limit=10):
        ...

    # Read without side effects
    snapshot = read(user)
    snapshot.get(UsageType.EXPORTS_GENERATED)
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ghanafarmer.billing.constants import MAX_COUNTER_VALUE
from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.constants import USAGE_FIELDS
from ghanafarmer.billing.constants import UsageType
from ghanafarmer.billing.models import UsageLedgerEntry

if TYPE_CHECKING:
    from ghanafarmer.users.models import User

logger = logging.getLogger(__name__)

# Constants
HISTORY_MONTHS = 6


# =============================================================================
# Exceptions
# =============================================================================


class BillingError(Exception):
    """Base exception for billing-related errors."""

    def __init__(self, detail: str, code: str = "billing_error"):
        self.detail = detail
        self.code = code
        super().__init__(detail)


class SubscriberNotFound(BillingError):
    """Raised when no subscriber can be resolved for a call."""

    def __init__(self, detail: str = "No subscriber found for this request."):
        super().__init__(detail, code="unauthenticated")


class UnknownLimitType(BillingError):
    """Raised when a limit type outside the known set reaches the engine."""

    def __init__(self, limit_type: str):
        self.limit_type = limit_type
        super().__init__(f"Unknown limit type: {limit_type!r}", code="unknown_limit_type")


class UnknownFeature(BillingError):
    """Raised when a feature name no plan defines reaches the engine."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Unknown feature: {feature!r}", code="unknown_feature")


class UnknownUsageType(BillingError):
    """Raised when a usage counter outside the ledger's columns is named."""

    def __init__(self, usage_type: str):
        self.usage_type = usage_type
        super().__init__(f"Unknown usage type: {usage_type!r}", code="unknown_usage_type")


class UsageCounterOverflow(BillingError):
    """Raised when an increment would push a counter past its column's range."""

    def __init__(self, usage_type: str, amount: int):
        self.usage_type = usage_type
        self.amount = amount
        super().__init__(
            f"Adding {amount} to {usage_type} would exceed the counter's maximum.",
            code="usage_overflow",
        )


# =============================================================================
# Periods
# =============================================================================


def current_period_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return (start, end) of the calendar month containing ``now``.

    The month is taken in the reference time zone (settings.TIME_ZONE), and
    a naive ``now`` is read as wall-clock time in that zone. ``start`` is
    inclusive, ``end`` is the first instant of the next month.
    """
    now = now or timezone.now()
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    local = timezone.localtime(now)
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, add_months(start, 1)


def add_months(start: datetime, months: int) -> datetime:
    """
    Shift ``start`` by ``months`` (may be negative).

    The day is clamped to the length of the target month, so Jan 31 plus
    one month is the last day of February.
    """
    index = start.year * 12 + (start.month - 1) + months
    year, month = index // 12, index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


# =============================================================================
# Snapshots
# =============================================================================


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only view of one period's counters. Zeroes when no row exists."""

    period_start: datetime
    period_end: datetime
    counters: dict[str, int] = field(default_factory=dict)
    exists: bool = False

    def get(self, usage_type: str) -> int:
        return self.counters.get(usage_type, 0)

    def as_dict(self) -> dict:
        return {
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            **{usage_type.value: self.get(usage_type) for usage_type in UsageType},
        }


def _snapshot(entry: UsageLedgerEntry) -> LedgerSnapshot:
    return LedgerSnapshot(
        period_start=entry.period_start,
        period_end=entry.period_end,
        counters={
            usage_type.value: getattr(entry, column)
            for usage_type, column in USAGE_FIELDS.items()
        },
        exists=True,
    )


# =============================================================================
# Helper Functions
# =============================================================================


def usage_field(usage_type: str) -> str:
    """Ledger column for ``usage_type``; raises UnknownUsageType otherwise."""
    try:
        return USAGE_FIELDS[UsageType(usage_type)]
    except ValueError as exc:
        raise UnknownUsageType(usage_type) from exc


def check_amount(usage_type: str, amount: int) -> None:
    """
    Reject increments that are not positive or could never fit a counter.

    Raises:
        ValueError: ``amount`` is not positive
        UsageCounterOverflow: ``amount`` alone exceeds the column range
    """
    if amount <= 0:
        msg = f"Usage increments must be positive, got {amount}"
        raise ValueError(msg)
    if amount > MAX_COUNTER_VALUE:
        raise UsageCounterOverflow(usage_type, amount)


def subscriber_id(user: User | int | str) -> int | str:
    return getattr(user, "pk", user)


def _ensure_subscriber(user: User | int | str) -> int | str:
    user_id = subscriber_id(user)
    if not get_user_model().objects.filter(pk=user_id).exists():
        logger.error("Usage increment for unknown subscriber id=%s", user_id)
        raise SubscriberNotFound(f"Subscriber {user_id} does not exist.")
    return user_id


def _get_or_create_period_entry(user_id, now: datetime | None) -> UsageLedgerEntry:
    """
    Fetch the ledger row for the current period, creating it if absent.

    get_or_create retries the lookup when a concurrent insert wins the
    unique constraint, so "period already exists" never surfaces.
    """
    start, end = current_period_bounds(now)
    entry, created = UsageLedgerEntry.objects.get_or_create(
        user_id=user_id,
        period_start=start,
        defaults={"period_end": end},
    )
    if created:
        logger.debug("Opened usage ledger period %s for user=%s", start.date(), user_id)
    return entry


# =============================================================================
# Ledger operations
# =============================================================================


def increment(
    user: User | int | str,
    usage_type: str,
    amount: int = 1,
    *,
    now: datetime | None = None,
) -> None:
    """
    Add ``amount`` to a counter on the subscriber's current-period row.

    Raises:
        UnknownUsageType: ``usage_type`` is not a ledger counter
        SubscriberNotFound: the subscriber does not exist
        ValueError: ``amount`` is not positive
        UsageCounterOverflow: the counter would pass MAX_COUNTER_VALUE
    Database errors propagate: a swallowed increment would under-count.
    """
    column = usage_field(usage_type)
    check_amount(usage_type, amount)
    user_id = _ensure_subscriber(user)

    with transaction.atomic():
        entry = _get_or_create_period_entry(user_id, now)
        updated = UsageLedgerEntry.objects.filter(
            pk=entry.pk,
            **{f"{column}__lte": MAX_COUNTER_VALUE - amount},
        ).update(**{column: F(column) + amount})

    if not updated:
        logger.error(
            "Usage %s += %d for user=%s would overflow the counter",
            usage_type,
            amount,
            user_id,
        )
        raise UsageCounterOverflow(usage_type, amount)

    logger.debug("Usage %s += %d for user=%s", usage_type, amount, user_id)


def increment_within_limit(
    user: User | int | str,
    usage_type: str,
    limit: int,
    amount: int = 1,
    *,
    now: datetime | None = None,
) -> bool:
    """
    Add ``amount`` only if the counter would stay within ``limit``.

    The check and the write are one conditional UPDATE, so two concurrent
    callers can never both take the last unit. Returns True when the
    increment was applied, False when it would have exceeded the limit.
    ``limit == -1`` means unlimited and always applies.
    """
    if limit == UNLIMITED:
        increment(user, usage_type, amount, now=now)
        return True

    column = usage_field(usage_type)
    check_amount(usage_type, amount)
    user_id = _ensure_subscriber(user)
    if amount > limit:
        return False

    with transaction.atomic():
        entry = _get_or_create_period_entry(user_id, now)
        updated = UsageLedgerEntry.objects.filter(
            pk=entry.pk,
            **{f"{column}__lte": limit - amount},
        ).update(**{column: F(column) + amount})

    if updated:
        logger.debug(
            "Usage %s += %d for user=%s (limit %d)",
            usage_type,
            amount,
            user_id,
            limit,
        )
    else:
        logger.info("Usage %s at limit %d for user=%s", usage_type, limit, user_id)
    return bool(updated)


def read(
    user: User | int | str,
    period_start: datetime | None = None,
    *,
    now: datetime | None = None,
) -> LedgerSnapshot:
    """
    Counters for the period starting at ``period_start`` (default: current).

    Never creates a row; a period with no activity reads as all zeroes.
    """
    if period_start is None:
        start, end = current_period_bounds(now)
    else:
        start, end = current_period_bounds(period_start)

    entry = UsageLedgerEntry.objects.filter(
        user_id=subscriber_id(user),
        period_start=start,
    ).first()
    if entry is None:
        return LedgerSnapshot(period_start=start, period_end=end)
    return _snapshot(entry)


def usage_history(
    user: User | int | str,
    months: int = HISTORY_MONTHS,
    *,
    now: datetime | None = None,
) -> list[UsageLedgerEntry]:
    """Ledger rows for the current period and the ``months`` before it."""
    start, _end = current_period_bounds(now)
    return list(
        UsageLedgerEntry.objects.filter(
            user_id=subscriber_id(user),
            period_start__gte=add_months(start, -months),
        ).order_by("period_start"),
    )
