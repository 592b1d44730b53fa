from rest_framework import serializers

from ghanafarmer.farms.models import CropEntry
from ghanafarmer.farms.models import Farm
from ghanafarmer.farms.models import Plot


class FarmSerializer(serializers.ModelSerializer[Farm]):
    class Meta:
        model = Farm
        fields = ["id", "name", "location", "size_acres", "created"]
        read_only_fields = ["id", "created"]


class PlotSerializer(serializers.ModelSerializer[Plot]):
    class Meta:
        model = Plot
        fields = ["id", "farm", "name", "created"]
        read_only_fields = ["id", "created"]

    def validate_farm(self, farm: Farm) -> Farm:
        request = self.context.get("request")
        if request is not None and farm.user_id != request.user.pk:
            raise serializers.ValidationError("Farm not found.")
        return farm


class CropEntrySerializer(serializers.ModelSerializer[CropEntry]):
    class Meta:
        model = CropEntry
        fields = ["id", "crop_name", "created"]
        read_only_fields = ["id", "created"]
