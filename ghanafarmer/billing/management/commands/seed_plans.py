"""
Management command to seed billing plans from the plan catalog.

Creates the four Plan rows (Free, Pro, Business, Enterprise) with names,
prices and display order taken from billing.catalog. Limits and feature
flags are not copied: gates read them from the catalog directly.

Usage:
    python manage.py seed_plans            # Create missing plans
    python manage.py seed_plans --force    # Also rewrite existing plans
"""

from django.core.management.base import BaseCommand

from ghanafarmer.billing.catalog import LIMIT_FIELDS
from ghanafarmer.billing.catalog import limits_for
from ghanafarmer.billing.catalog import tier_features
from ghanafarmer.billing.constants import UNLIMITED
from ghanafarmer.billing.models import Plan
from ghanafarmer.billing.services import sync_plans_from_catalog


class Command(BaseCommand):
    help = "Seed billing plans from the plan catalog"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Update existing plans with latest catalog values",
        )

    def handle(self, *args, **options):
        self._seed_plans(force_update=options["force"])
        self._show_summary()

    def _seed_plans(self, force_update: bool):
        """Create or update Plan records."""
        self.stdout.write("\n" + "=" * 60)
        self.stdout.write("Seeding Plans")
        self.stdout.write("=" * 60)

        for plan, action in sync_plans_from_catalog(force_update=force_update):
            if action == "created":
                self.stdout.write(self.style.SUCCESS(f"  Created: {plan.name}"))
            elif action == "updated":
                self.stdout.write(self.style.SUCCESS(f"  Updated: {plan.name}"))
            else:
                self.stdout.write(
                    f"  Exists: {plan.name} (use --force to update)",
                )

    def _show_summary(self):
        """Show final summary of all plans with their catalog limits."""
        self.stdout.write("\n" + "=" * 60)
        self.stdout.write("Summary")
        self.stdout.write("=" * 60)

        for plan in Plan.objects.all().order_by("display_order"):
            definition = limits_for(plan.code)
            if plan.monthly_price_cents:
                price = f"GHS {plan.monthly_price_cents / 100:.0f}/mo"
            elif definition.is_custom_priced:
                price = "Contact us"
            else:
                price = "Free"
            enabled = sum(1 for feature in tier_features(plan.code) if feature["enabled"])
            self.stdout.write(f"  {plan.name}: {price}, {enabled} features")
            for field in LIMIT_FIELDS:
                value = definition.limit(field)
                shown = "unlimited" if value == UNLIMITED else f"{value:,}"
                self.stdout.write(f"    {field}: {shown}")

        self.stdout.write(self.style.SUCCESS("\nDone!"))
