"""API views for clubs and berths."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from rest_framework import permissions, serializers, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.activity_logs.mixins import ActivityLogMixin
from apps.activity_logs.models import ActivityLog
from apps.core.permissions import IsClubOwnerOrSuperAdmin, is_staff_role, is_super_admin

from .filters import BerthFilterSet, ClubFilterSet
from .models import DEFAULT_BERTH_LENGTH, DEFAULT_BERTH_WIDTH, Berth, Club
from .serializers import BerthSerializer, ClubSerializer

logger = logging.getLogger(__name__)


class ClubViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Яхт-клубы.

    Список открыт всем авторизованным пользователям (активные клубы),
    владельцы дополнительно видят свои неактивные клубы.
    """

    queryset = Club.objects.select_related("owner").all()
    serializer_class = ClubSerializer
    permission_classes = [IsClubOwnerOrSuperAdmin]
    filterset_class = ClubFilterSet
    activity_entity_type = ActivityLog.EntityType.CLUB

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user):
            return qs
        return qs.filter(Q(is_active=True) | Q(owner=user))

    def perform_create(self, serializer):  # type: ignore
        with transaction.atomic():
            club = serializer.save(owner=self.request.user)
            if club.total_berths:
                Berth.objects.bulk_create(
                    [
                        Berth(
                            club=club,
                            number=str(index),
                            length=DEFAULT_BERTH_LENGTH,
                            width=DEFAULT_BERTH_WIDTH,
                            price_per_day=club.base_price,
                        )
                        for index in range(1, club.total_berths + 1)
                    ]
                )
        logger.info(f"Club {club.id} created by user {self.request.user.id} with {club.total_berths} berths")
        self.log_created(club)

    @action(detail=True, methods=["get"])
    def berths(self, request, pk=None):  # type: ignore
        """Все места клуба."""
        club = self.get_object()
        serializer = BerthSerializer(club.berths.order_by("number"), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["get"], url_path="available-berths")
    def available_berths(self, request, pk=None):  # type: ignore
        """Свободные места клуба, опционально на период `start_date`..`end_date`."""
        from apps.bookings.models import Booking  # Local import to prevent circular dependency

        club = self.get_object()
        if not club.is_active:
            raise serializers.ValidationError({"detail": "Яхт-клуб неактивен."})

        live = Booking.objects.filter(club=club).exclude(status=Booking.Status.CANCELLED)
        blocking = live
        start_date = request.query_params.get("start_date")
        end_date = request.query_params.get("end_date")
        if start_date and end_date:
            blocking = live.filter(start_date__lte=end_date, end_date__gte=start_date)

        # Unavailable berths without live bookings are closed by the club
        berths = club.berths.filter(
            Q(is_available=True) | Q(pk__in=live.values("berth_id"))
        ).exclude(pk__in=blocking.values("berth_id")).order_by("number")
        return Response(BerthSerializer(berths, many=True).data)


class BerthViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Места яхт-клубов; изменять может владелец клуба или супер-администратор."""

    queryset = Berth.objects.select_related("club").all()
    serializer_class = BerthSerializer
    permission_classes = [permissions.IsAuthenticated, IsClubOwnerOrSuperAdmin]
    filterset_class = BerthFilterSet
    activity_entity_type = ActivityLog.EntityType.BERTH

    def perform_create(self, serializer):  # type: ignore
        club = serializer.validated_data["club"]
        user = self.request.user
        if not is_super_admin(user) and club.owner_id != user.id:
            raise PermissionDenied("Недостаточно прав для создания места.")
        berth = serializer.save()
        club.refresh_total_berths()
        self.log_created(berth)

    def perform_destroy(self, instance):  # type: ignore
        from apps.bookings.models import Booking  # Local import to prevent circular dependency

        if instance.bookings.exclude(status=Booking.Status.CANCELLED).exists():
            raise serializers.ValidationError({"detail": "Нельзя удалить место с активными бронированиями."})
        club = instance.club
        super().perform_destroy(instance)
        club.refresh_total_berths()
