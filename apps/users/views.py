"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.activity_logs.mixins import ActivityLogMixin
from apps.activity_logs.models import ActivityLog
from apps.core.permissions import IsSuperAdmin

from .serializers import UserAdminSerializer, UserSerializer

User = get_user_model()


class UserViewSet(
    ActivityLogMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Управление пользователями.

    - `me` возвращает профиль текущего пользователя
    - список, просмотр и редактирование доступны только супер-администратору
    """

    queryset = User.objects.all()
    serializer_class = UserAdminSerializer
    permission_classes = [IsSuperAdmin]
    activity_entity_type = ActivityLog.EntityType.USER
    filterset_fields = ["role", "is_active"]

    @action(detail=False, methods=["get", "patch"], permission_classes=[permissions.IsAuthenticated])
    def me(self, request):
        """Профиль текущего пользователя; PATCH обновляет имя и телефон."""
        if request.method == "PATCH":
            serializer = UserSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(UserSerializer(request.user).data)
