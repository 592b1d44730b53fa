"""
System checks for the billing app.

``manage.py check`` (and every runserver/migrate) reports an error when the
plan catalog is missing a tier, a limit field or a feature flag, so a gap is
caught at startup instead of at the first gate call.

``manage.py check --database default`` (and migrate) also warns when the
database cannot take row locks: ``gate_engine.reserve`` then decides without
serializing concurrent creates.
"""

from django.core import checks
from django.db import connections

from ghanafarmer.billing.catalog import catalog_problems


@checks.register()
def check_plan_catalog(app_configs, **kwargs):
    return [
        checks.Error(problem, id="billing.E001")
        for problem in catalog_problems()
    ]


@checks.register(checks.Tags.database)
def check_row_locks(app_configs, databases=None, **kwargs):
    return [
        checks.Warning(
            f"Database {alias!r} does not support SELECT ... FOR UPDATE.",
            hint="Use PostgreSQL so quota reservations are serialized.",
            id="billing.W001",
        )
        for alias in databases or ()
        if not connections[alias].features.has_select_for_update
    ]
