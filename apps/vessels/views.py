"""API views for vessels."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.activity_logs.mixins import ActivityLogMixin
from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import snapshot
from apps.core.permissions import IsSuperAdmin, is_staff_role, is_super_admin

from .models import Vessel
from .serializers import VesselSerializer


class IsVesselOwnerOrSuperAdmin(permissions.BasePermission):
    """Владелец судна управляет им; супер-администратор имеет полный доступ."""

    def has_object_permission(self, request, view, obj: Vessel):  # type: ignore
        # Visibility is already scoped by get_queryset
        if request.method in permissions.SAFE_METHODS or is_super_admin(request.user):
            return True
        return obj.owner_id == request.user.id


class VesselViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Суда. Судовладельцы видят свои суда, владельцы клубов - суда,
    забронировавшие места в их клубах."""

    queryset = Vessel.objects.select_related("owner").all()
    serializer_class = VesselSerializer
    permission_classes = [permissions.IsAuthenticated, IsVesselOwnerOrSuperAdmin]
    filterset_fields = ["owner", "type", "is_active", "is_validated"]
    activity_entity_type = ActivityLog.EntityType.VESSEL

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user):
            return qs
        if hasattr(user, "is_club_owner") and user.is_club_owner():
            return qs.filter(Q(owner=user) | Q(bookings__club__owner=user)).distinct()
        return qs.filter(owner=user)

    def perform_create(self, serializer):  # type: ignore
        vessel = serializer.save(owner=self.request.user)
        self.log_created(vessel)

    @action(detail=True, methods=["post"], permission_classes=[IsSuperAdmin])
    def validate(self, request, pk=None):  # type: ignore
        """Подтверждение судна супер-администратором."""
        vessel = self.get_object()
        before = snapshot(vessel)
        vessel.is_validated = True
        vessel.save(update_fields=["is_validated", "updated_at"])
        self.log_updated(vessel, before)
        return Response(self.get_serializer(vessel).data)
