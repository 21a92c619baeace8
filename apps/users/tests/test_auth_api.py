"""API tests for authentication and user endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activity_logs.models import ActivityLog
from apps.users.models import User


class AuthAPITests(APITestCase):
    def _register_payload(self, **overrides) -> dict:
        payload = {
            "email": "captain@example.com",
            "phone": "+79001234567",
            "first_name": "Иван",
            "last_name": "Петров",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
            "role": User.RoleChoices.VESSEL_OWNER,
        }
        payload.update(overrides)
        return payload

    def test_register_returns_tokens(self) -> None:
        payload = self._register_payload()

        response = self.client.post(reverse("auth:register"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.VESSEL_OWNER)
        self.assertTrue(User.objects.filter(email=payload["email"]).exists())

    def test_register_cannot_claim_admin_role(self) -> None:
        response = self.client.post(
            reverse("auth:register"),
            self._register_payload(role=User.RoleChoices.SUPER_ADMIN),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("role", response.data)

    def test_register_rejects_password_mismatch(self) -> None:
        response = self.client.post(
            reverse("auth:register"),
            self._register_payload(password_confirm="OtherPass123"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("password_confirm", response.data)

    def test_register_rejects_duplicate_email(self) -> None:
        User.objects.create_user(email="captain@example.com", password="StrongPass123")

        response = self.client.post(reverse("auth:register"), self._register_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("email", response.data)

    def test_login_records_activity(self) -> None:
        user = User.objects.create_user(
            email="owner@example.com",
            password="CorrectPassword1",
            role=User.RoleChoices.CLUB_OWNER,
        )

        response = self.client.post(
            reverse("auth:login"),
            {"email": user.email, "password": "CorrectPassword1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("refresh", response.data["tokens"])
        user.refresh_from_db()
        self.assertIsNotNone(user.last_login)
        self.assertTrue(
            ActivityLog.objects.filter(user=user, activity_type=ActivityLog.ActivityType.LOGIN).exists()
        )

    def test_login_with_wrong_password(self) -> None:
        User.objects.create_user(email="owner@example.com", password="CorrectPassword1")

        response = self.client.post(
            reverse("auth:login"),
            {"email": "owner@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_token_refresh(self) -> None:
        User.objects.create_user(email="owner@example.com", password="CorrectPassword1")
        login = self.client.post(
            reverse("auth:login"),
            {"email": "owner@example.com", "password": "CorrectPassword1"},
            format="json",
        )

        response = self.client.post(
            reverse("auth:token_refresh"),
            {"refresh": login.data["tokens"]["refresh"]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)


class UserAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="sailor@example.com",
            password="StrongPass123",
            role=User.RoleChoices.VESSEL_OWNER,
        )
        self.client.force_authenticate(self.user)

    def test_me_returns_profile(self) -> None:
        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["email"], self.user.email)

    def test_me_cannot_change_role(self) -> None:
        response = self.client.patch(
            reverse("user-me"),
            {"first_name": "Олег", "role": User.RoleChoices.SUPER_ADMIN},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, "Олег")
        self.assertEqual(self.user.role, User.RoleChoices.VESSEL_OWNER)

    def test_user_list_requires_super_admin(self) -> None:
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = User.objects.create_superuser(email="root@example.com", password="StrongPass123")
        self.client.force_authenticate(admin)
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 2)
