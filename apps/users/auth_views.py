"""Views for authentication flows (register, login, token refresh)."""

from __future__ import annotations

from django.contrib.auth.models import update_last_login  # type: ignore
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import log_activity

from .auth_serializers import RegisterSerializer, LoginSerializer
from .serializers import UserSerializer


def _tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):  # type: ignore
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_activity(
            ActivityLog.ActivityType.CREATE,
            ActivityLog.EntityType.USER,
            entity_id=user.id,
            user=user,
            new_values={"email": user.email, "role": user.role},
            request=request,
        )
        data = {
            "user": UserSerializer(user).data,
            "tokens": _tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        update_last_login(None, user)
        log_activity(
            ActivityLog.ActivityType.LOGIN,
            ActivityLog.EntityType.USER,
            entity_id=user.id,
            user=user,
            request=request,
        )
        data = {
            "user": UserSerializer(user).data,
            "tokens": _tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_200_OK)
