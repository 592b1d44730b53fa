import django.db.models.deletion
import django.utils.timezone
import model_utils.fields
from django.conf import settings
from django.db import migrations
from django.db import models


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


def _id():
    return (
        "id",
        models.BigAutoField(
            auto_created=True,
            primary_key=True,
            serialize=False,
            verbose_name="ID",
        ),
    )


def _owner(related_name):
    return (
        "user",
        models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name=related_name,
            to=settings.AUTH_USER_MODEL,
        ),
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Farm",
            fields=[
                _id(),
                *_timestamps(),
                ("name", models.CharField(max_length=255)),
                (
                    "location",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "size_acres",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                    ),
                ),
                _owner("farms"),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Plot",
            fields=[
                _id(),
                *_timestamps(),
                ("name", models.CharField(max_length=255)),
                (
                    "farm",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="plots",
                        to="farms.farm",
                    ),
                ),
                _owner("plots"),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="CropEntry",
            fields=[
                _id(),
                *_timestamps(),
                ("crop_name", models.CharField(max_length=100)),
                _owner("crop_entries"),
            ],
            options={
                "verbose_name_plural": "crop entries",
                "indexes": [
                    models.Index(
                        fields=["user", "created"],
                        name="farms_crop_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LivestockEntry",
            fields=[
                _id(),
                *_timestamps(),
                ("animal_type", models.CharField(max_length=100)),
                ("head_count", models.PositiveIntegerField(default=1)),
                _owner("livestock_entries"),
            ],
            options={
                "verbose_name_plural": "livestock entries",
                "indexes": [
                    models.Index(
                        fields=["user", "created"],
                        name="farms_stock_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                _id(),
                *_timestamps(),
                ("category", models.CharField(max_length=100)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                _owner("expenses"),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "created"],
                        name="farms_exp_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Income",
            fields=[
                _id(),
                *_timestamps(),
                ("source", models.CharField(max_length=100)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                _owner("incomes"),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "created"],
                        name="farms_inc_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Task",
            fields=[
                _id(),
                *_timestamps(),
                ("title", models.CharField(max_length=255)),
                _owner("tasks"),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "created"],
                        name="farms_task_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PriceAlert",
            fields=[
                _id(),
                *_timestamps(),
                ("commodity", models.CharField(max_length=100)),
                (
                    "target_price",
                    models.DecimalField(decimal_places=2, max_digits=12),
                ),
                ("is_active", models.BooleanField(default=True)),
                _owner("price_alerts"),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="MarketListing",
            fields=[
                _id(),
                *_timestamps(),
                ("title", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("ACTIVE", "Active"),
                            ("SOLD", "Sold"),
                            ("EXPIRED", "Expired"),
                        ],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                _owner("market_listings"),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["user", "status"],
                        name="farms_listing_user_status_idx",
                    ),
                ],
            },
        ),
    ]
