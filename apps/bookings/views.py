"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.core.permissions import is_staff_role
from apps.finances.serializers import PaymentScheduleSerializer
from apps.finances.services import get_payment_schedule

from .models import Booking
from .serializers import BookingCreateSerializer, BookingQuoteSerializer, BookingSerializer
from .services import (
    BookingConflictError,
    BookingError,
    BookingValidationError,
    cancel_booking,
    create_booking,
    quote_booking,
)

logger = logging.getLogger(__name__)


def booking_error_response(exc: BookingError) -> Response:
    """400 for infeasible requests, 409 for conflicts, with a stable `code`."""

    http_status = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, BookingConflictError):
        http_status = status.HTTP_409_CONFLICT
    return Response({"detail": exc.message, "code": exc.code}, status=http_status)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Бронирования мест. Изменение статуса выполняется только через действия."""

    queryset = Booking.objects.select_related("club", "berth", "vessel", "vessel_owner").prefetch_related(
        "payments"
    )
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["club", "berth", "vessel", "status"]

    def get_serializer_class(self):  # type: ignore
        if self.action in ("create", "quote"):
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user):
            return qs
        return qs.filter(Q(vessel_owner=user) | Q(club__owner=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        tariff = data.get("tariff")

        try:
            booking = create_booking(
                request.user,
                club_id=data["club"].pk,
                berth_id=data["berth"].pk,
                vessel_id=data["vessel"].pk,
                tariff_id=tariff.pk if tariff else None,
                auto_renewal=data["auto_renewal"],
                notes=data["notes"],
                request=request,
            )
        except (BookingValidationError, BookingConflictError) as exc:
            logger.info(f"Booking rejected for user {request.user.id}: {exc.code}")
            return booking_error_response(exc)

        booking = self.get_queryset().get(pk=booking.pk)
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=False, methods=["post"])
    def quote(self, request):  # type: ignore
        """Расчёт периода и стоимости без создания бронирования."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        tariff = data.get("tariff")

        try:
            quote = quote_booking(
                request.user,
                club_id=data["club"].pk,
                berth_id=data["berth"].pk,
                vessel_id=data["vessel"].pk,
                tariff_id=tariff.pk if tariff else None,
            )
        except BookingError as exc:
            return booking_error_response(exc)
        return Response(BookingQuoteSerializer(quote.as_dict()).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        # Lookup is not scoped by role: outsiders get 403 from the service
        try:
            booking = cancel_booking(pk, request.user, request=request)
        except BookingError as exc:
            return booking_error_response(exc)

        booking = Booking.objects.prefetch_related("payments").get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get"], url_path="payment-schedule")
    def payment_schedule(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        schedule = get_payment_schedule(booking)
        return Response(PaymentScheduleSerializer(schedule).data)
