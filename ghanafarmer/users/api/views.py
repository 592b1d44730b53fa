from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from ghanafarmer.users.models import User

from .serializers import UserSerializer


class UserViewSet(GenericViewSet):
    """
    Minimal user API for the mobile client.

    Only exposes the 'me' action, which the client calls after login to
    learn the user's tier before fetching entitlements.
    """

    serializer_class = UserSerializer
    queryset = User.objects.all()

    @action(detail=False, methods=["get"])
    def me(self, request):
        """Return the current authenticated user's information."""
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(status=status.HTTP_200_OK, data=serializer.data)
