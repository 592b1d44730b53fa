from django.apps import AppConfig


class BillingConfig(AppConfig):
    """
    Django app configuration for the billing app.

    Handles the plan catalog, usage ledger and gate decisions.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "ghanafarmer.billing"

    def ready(self):
        """
        Import system checks so the catalog is validated on startup.
        """
        from ghanafarmer.billing import checks  # noqa: F401
