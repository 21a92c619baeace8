"""API views for tariffs and booking rules."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore

from apps.activity_logs.mixins import ActivityLogMixin
from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import snapshot
from apps.core.permissions import IsClubOwnerOrSuperAdmin, is_super_admin

from .models import BookingRule, Tariff
from .serializers import BookingRuleSerializer, TariffSerializer


def ensure_club_manager(user, club) -> None:
    """Только владелец клуба или супер-администратор."""
    if not is_super_admin(user) and club.owner_id != user.id:
        raise PermissionDenied("Доступ запрещен.")


class ClubScopedViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Общая логика: чтение для всех, изменения только для управляющего клубом."""

    permission_classes = [permissions.IsAuthenticated, IsClubOwnerOrSuperAdmin]
    filterset_fields = ["club"]

    def perform_create(self, serializer):  # type: ignore
        ensure_club_manager(self.request.user, serializer.validated_data["club"])
        instance = serializer.save()
        self.log_created(instance)

    def perform_update(self, serializer):  # type: ignore
        if "club" in serializer.validated_data:
            ensure_club_manager(self.request.user, serializer.validated_data["club"])
        before = snapshot(serializer.instance)
        instance = serializer.save()
        self.log_updated(instance, before)


class TariffViewSet(ClubScopedViewSet):
    queryset = Tariff.objects.select_related("club").prefetch_related("berths").all()
    serializer_class = TariffSerializer
    filterset_fields = ["club", "type", "season"]
    activity_entity_type = ActivityLog.EntityType.TARIFF


class BookingRuleViewSet(ClubScopedViewSet):
    queryset = BookingRule.objects.select_related("club", "tariff").all()
    serializer_class = BookingRuleSerializer
    filterset_fields = ["club", "tariff", "rule_type"]
    activity_entity_type = ActivityLog.EntityType.BOOKING_RULE
