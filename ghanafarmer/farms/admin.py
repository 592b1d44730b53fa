from django.contrib import admin

from ghanafarmer.farms.models import Farm
from ghanafarmer.farms.models import MarketListing
from ghanafarmer.farms.models import Plot
from ghanafarmer.farms.models import PriceAlert


@admin.register(Farm)
class FarmAdmin(admin.ModelAdmin):
    list_display = ["name", "user", "location", "created"]
    search_fields = ["name", "user__username"]
    raw_id_fields = ["user"]


@admin.register(Plot)
class PlotAdmin(admin.ModelAdmin):
    list_display = ["name", "farm", "user"]
    raw_id_fields = ["user", "farm"]


@admin.register(PriceAlert)
class PriceAlertAdmin(admin.ModelAdmin):
    list_display = ["commodity", "user", "target_price", "is_active"]
    list_filter = ["is_active"]
    raw_id_fields = ["user"]


@admin.register(MarketListing)
class MarketListingAdmin(admin.ModelAdmin):
    list_display = ["title", "user", "status", "created"]
    list_filter = ["status"]
    raw_id_fields = ["user"]
