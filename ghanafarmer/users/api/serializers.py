from rest_framework import serializers

from ghanafarmer.users.models import User


class UserSerializer(serializers.ModelSerializer[User]):
    """
    Serializer for the User model.

    ``tier`` is read-only here: it only changes through SubscriptionService.
    """

    class Meta:
        model = User
        fields = ["username", "name", "region", "tier"]
        read_only_fields = ["tier"]
