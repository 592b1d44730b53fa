from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.utils.translation import gettext_lazy as _

from ghanafarmer.billing.constants import Tier


class User(AbstractUser):
    """
    Default custom user model for Ghana Farmer.

    Every user is a subscriber. ``tier`` is the denormalized subscription
    tier and the authoritative read path for entitlement checks; the
    billing-facing Subscription rows are kept in step with it by
    billing.services.SubscriptionService.
    """

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Name of User"), blank=True, max_length=255)
    phone_number = CharField(_("Phone number"), blank=True, default="", max_length=32)
    region = CharField(_("Region"), blank=True, default="", max_length=64)

    tier = models.CharField(
        _("Subscription tier"),
        max_length=20,
        choices=Tier.choices,
        default=Tier.FREE,
        help_text=_("Current tier used for feature and quota gating."),
    )

    first_name = None  # type: ignore[assignment]
    last_name = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.name or self.username
