"""API views for the booking domain."""

from __future__ import annotations

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.checkout import StartCheckoutCommand, StartCheckoutHandler
from .filters import BookingFilter
from .models import Booking
from .serializers import BookingSerializer, CheckoutResponseSerializer, CheckoutSerializer


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    """The caller's bookings; staff see every booking."""

    queryset = Booking.objects.select_related("session", "user").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilter

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False):
            return qs
        return qs.filter(user=user)

    @extend_schema(request=CheckoutSerializer, responses={201: CheckoutResponseSerializer})
    @action(detail=False, methods=["post"])
    def checkout(self, request):  # type: ignore
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = StartCheckoutHandler().handle(
            StartCheckoutCommand(
                session_id=serializer.validated_data["session_id"],
                user_id=request.user.pk,
            )
        )
        return Response(
            {
                "booking": BookingSerializer(result.booking, context=self.get_serializer_context()).data,
                "client_secret": result.client_secret,
                "split_details": result.split.as_dict(),
            },
            status=status.HTTP_201_CREATED,
        )
