import django.db.models.deletion
import django.utils.timezone
import model_utils.fields
from django.conf import settings
from django.db import migrations
from django.db import models

TIER_CHOICES = [
    ("FREE", "Free"),
    ("PRO", "Pro"),
    ("BUSINESS", "Business"),
    ("ENTERPRISE", "Enterprise"),
]


def _timestamps():
    return [
        (
            "created",
            model_utils.fields.AutoCreatedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="created",
            ),
        ),
        (
            "modified",
            model_utils.fields.AutoLastModifiedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="modified",
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Plan",
            fields=[
                (
                    "code",
                    models.CharField(
                        choices=TIER_CHOICES,
                        help_text="Tier code, also used as PK.",
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Display name for the plan.",
                        max_length=50,
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True,
                        help_text="Marketing description shown on pricing page.",
                    ),
                ),
                (
                    "monthly_price_cents",
                    models.IntegerField(
                        default=0,
                        help_text="Monthly list price in pesewas. 0 = free or contact sales.",
                    ),
                ),
                (
                    "yearly_price_cents",
                    models.IntegerField(
                        default=0,
                        help_text="Yearly list price in pesewas. 0 = free or contact sales.",
                    ),
                ),
                ("currency", models.CharField(default="GHS", max_length=3)),
                (
                    "is_popular",
                    models.BooleanField(
                        default=False,
                        help_text="Highlight this plan on the pricing page.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "display_order",
                    models.IntegerField(
                        default=0,
                        help_text="Order in which plans appear on pricing page.",
                    ),
                ),
            ],
            options={"ordering": ["display_order"]},
        ),
        migrations.CreateModel(
            name="Subscription",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                *_timestamps(),
                (
                    "billing_cycle",
                    models.CharField(
                        choices=[("MONTHLY", "Monthly"), ("YEARLY", "Yearly")],
                        default="MONTHLY",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("TRIALING", "Trial"),
                            ("ACTIVE", "Active"),
                            ("PAST_DUE", "Past Due"),
                            ("CANCELED", "Canceled"),
                            ("EXPIRED", "Expired"),
                        ],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                (
                    "current_period_start",
                    models.DateTimeField(
                        blank=True,
                        help_text="Start of current billing period.",
                        null=True,
                    ),
                ),
                (
                    "current_period_end",
                    models.DateTimeField(
                        blank=True,
                        help_text="End of current billing period.",
                        null=True,
                    ),
                ),
                ("canceled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="subscriptions",
                        to="billing.plan",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="subscriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
                "indexes": [
                    models.Index(
                        fields=["user", "status"],
                        name="billing_sub_user_status_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UsageLedgerEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                *_timestamps(),
                (
                    "period_start",
                    models.DateTimeField(
                        help_text="First instant of the calendar month (inclusive).",
                    ),
                ),
                (
                    "period_end",
                    models.DateTimeField(
                        help_text="First instant of the following month (exclusive).",
                    ),
                ),
                ("records_created", models.PositiveIntegerField(default=0)),
                ("api_calls", models.PositiveIntegerField(default=0)),
                ("dse_recommendations", models.PositiveIntegerField(default=0)),
                ("exports_generated", models.PositiveIntegerField(default=0)),
                ("price_alerts_created", models.PositiveIntegerField(default=0)),
                ("listings_created", models.PositiveIntegerField(default=0)),
                ("storage_used_mb", models.PositiveIntegerField(default=0)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="usage_ledger",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["period_start"],
                "verbose_name_plural": "usage ledger entries",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "period_start"),
                        name="usage_ledger_one_row_per_period",
                    ),
                ],
            },
        ),
    ]
