"""API views for sessions: listing, cancelling a seat and joining the waitlist."""

from __future__ import annotations

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.application.cancellation import (
    CancelSessionBookingCommand,
    CancelSessionBookingHandler,
)
from apps.waitlist.application.join import JoinWaitlistCommand, JoinWaitlistHandler

from .models import Session
from .serializers import CancellationResultSerializer, SessionSerializer, WaitlistEntrySerializer

UUID_PATTERN = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"


class SessionViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only session catalogue plus the seat-holder actions."""

    queryset = Session.objects.all()
    serializer_class = SessionSerializer
    filterset_fields = ["waitlist_enabled", "organizer"]
    lookup_value_regex = UUID_PATTERN

    @extend_schema(request=None, responses={200: CancellationResultSerializer})
    @action(
        detail=True,
        methods=["post"],
        url_path="cancel-booking",
        permission_classes=[permissions.IsAuthenticated],
    )
    def cancel_booking(self, request, pk=None):  # type: ignore
        result = CancelSessionBookingHandler().handle(
            CancelSessionBookingCommand(session_id=pk, user_id=request.user.pk)
        )
        return Response(CancellationResultSerializer(result.as_dict()).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={201: WaitlistEntrySerializer})
    @action(
        detail=True,
        methods=["post"],
        url_path="waitlist",
        permission_classes=[permissions.IsAuthenticated],
    )
    def waitlist(self, request, pk=None):  # type: ignore
        entry = JoinWaitlistHandler().handle(
            JoinWaitlistCommand(session_id=pk, user_id=request.user.pk)
        )
        return Response(WaitlistEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
