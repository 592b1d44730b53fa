"""
Farm records owned by a subscriber.

These are the rows the entitlement engine counts when it enforces
stock-like quotas (farms, plots, active price alerts, active listings) and
the monthly records quota (crop, livestock, expense, income and task
entries created this period). Only the columns those counts filter on are
modelled here.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils.models import TimeStampedModel


class Farm(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="farms",
    )
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, default="")
    size_acres = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )

    def __str__(self) -> str:
        return self.name


class Plot(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="plots",
    )
    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name="plots")
    name = models.CharField(max_length=255)

    def __str__(self) -> str:
        return f"{self.farm.name}: {self.name}"


class CropEntry(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="crop_entries",
    )
    crop_name = models.CharField(max_length=100)

    class Meta:
        verbose_name_plural = "crop entries"
        indexes = [
            models.Index(fields=["user", "created"], name="farms_crop_user_created_idx"),
        ]


class LivestockEntry(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="livestock_entries",
    )
    animal_type = models.CharField(max_length=100)
    head_count = models.PositiveIntegerField(default=1)

    class Meta:
        verbose_name_plural = "livestock entries"
        indexes = [
            models.Index(fields=["user", "created"], name="farms_stock_user_created_idx"),
        ]


class Expense(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="expenses",
    )
    category = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        indexes = [
            models.Index(fields=["user", "created"], name="farms_exp_user_created_idx"),
        ]


class Income(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="incomes",
    )
    source = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        indexes = [
            models.Index(fields=["user", "created"], name="farms_inc_user_created_idx"),
        ]


class Task(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    title = models.CharField(max_length=255)

    class Meta:
        indexes = [
            models.Index(fields=["user", "created"], name="farms_task_user_created_idx"),
        ]


class PriceAlert(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="price_alerts",
    )
    commodity = models.CharField(max_length=100)
    target_price = models.DecimalField(max_digits=12, decimal_places=2)
    is_active = models.BooleanField(default=True)


class MarketListing(TimeStampedModel):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        ACTIVE = "ACTIVE", _("Active")
        SOLD = "SOLD", _("Sold")
        EXPIRED = "EXPIRED", _("Expired")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="market_listings",
    )
    title = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    class Meta:
        indexes = [
            models.Index(fields=["user", "status"], name="farms_listing_user_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title
