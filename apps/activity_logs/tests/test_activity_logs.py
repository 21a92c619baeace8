"""Tests for the activity log service and API."""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.db import DatabaseError  # type: ignore
from django.test import RequestFactory, TestCase  # type: ignore
from django.urls import reverse  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.test import APITestCase  # type: ignore

from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import describe_activity, diff_values, log_activity
from apps.users.models import User
from shared.tests.factories import make_user


class LogActivityTests(TestCase):
    def test_entry_captures_request_metadata(self) -> None:
        user = make_user(first_name="Анна", last_name="Иванова")
        request = RequestFactory().get(
            "/", HTTP_X_FORWARDED_FOR="10.0.0.7, 172.16.0.1", HTTP_USER_AGENT="pytest"
        )

        entry = log_activity(
            ActivityLog.ActivityType.CREATE,
            ActivityLog.EntityType.CLUB,
            entity_id=5,
            user=user,
            new_values={"price": Decimal("10.50")},
            request=request,
        )

        entry.refresh_from_db()
        self.assertEqual(entry.ip_address, "10.0.0.7")
        self.assertEqual(entry.user_agent, "pytest")
        self.assertEqual(entry.description, "Анна Иванова создал(а) яхт-клуб #5")
        self.assertEqual(entry.new_values, {"price": "10.50"})
        self.assertIsNone(entry.old_values)

    def test_write_failure_is_not_propagated(self) -> None:
        with mock.patch.object(ActivityLog.objects, "create", side_effect=DatabaseError("disk full")):
            entry = log_activity(ActivityLog.ActivityType.LOGIN, ActivityLog.EntityType.USER, entity_id=1)

        self.assertIsNone(entry)
        self.assertFalse(ActivityLog.objects.exists())

    def test_unserializable_values_are_not_propagated(self) -> None:
        entry = log_activity(
            ActivityLog.ActivityType.UPDATE,
            ActivityLog.EntityType.TARIFF,
            entity_id=2,
            new_values={"months": {6, 7}},
        )

        self.assertIsNone(entry)
        self.assertFalse(ActivityLog.objects.exists())

    def test_system_action_has_no_user(self) -> None:
        entry = log_activity(
            ActivityLog.ActivityType.DELETE,
            ActivityLog.EntityType.BOOKING,
            entity_id=3,
            user_agent="System: cleanup",
        )

        self.assertIsNone(entry.user)
        self.assertEqual(entry.user_agent, "System: cleanup")
        self.assertEqual(entry.description, "Система удалил(а) бронирование #3")


class DescribeActivityTests(TestCase):
    def test_login_description_omits_entity(self) -> None:
        user = make_user()

        text = describe_activity(ActivityLog.ActivityType.LOGIN, ActivityLog.EntityType.USER, user.id, user)

        self.assertEqual(text, f"{user.email} вошел(а) в систему")

    def test_explicit_entity_name_is_used(self) -> None:
        text = describe_activity(
            ActivityLog.ActivityType.UPDATE,
            ActivityLog.EntityType.BERTH,
            entity_id=None,
            entity_name="место A-1",
        )

        self.assertEqual(text, "Система обновил(а) место A-1")


class DiffValuesTests(TestCase):
    def test_only_changed_keys_are_kept(self) -> None:
        old, new = diff_values(
            {"status": "pending", "notes": "", "updated_at": 1},
            {"status": "confirmed", "notes": "", "updated_at": 2},
        )

        self.assertEqual(old, {"status": "pending"})
        self.assertEqual(new, {"status": "confirmed"})

    def test_added_and_removed_keys(self) -> None:
        old, new = diff_values(None, {"name": "Чайка"})

        self.assertEqual(old, {"name": None})
        self.assertEqual(new, {"name": "Чайка"})


class ActivityLogAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = make_user(role=User.RoleChoices.SUPER_ADMIN)
        log_activity(ActivityLog.ActivityType.LOGIN, ActivityLog.EntityType.USER, self.admin.id, self.admin)
        log_activity(ActivityLog.ActivityType.CREATE, ActivityLog.EntityType.CLUB, 1, self.admin)

    def test_listing_is_restricted_to_super_admin(self) -> None:
        self.client.force_authenticate(make_user(role=User.RoleChoices.CLUB_OWNER))

        response = self.client.get(reverse("activity-log-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_super_admin_filters_by_entity_type(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("activity-log-list"), {"entity_type": ActivityLog.EntityType.CLUB})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["entity_type"], ActivityLog.EntityType.CLUB)
