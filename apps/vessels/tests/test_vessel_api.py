"""API tests for vessels."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activity_logs.models import ActivityLog
from apps.vessels.models import Vessel
from apps.users.models import User
from shared.tests.factories import make_user, make_vessel


class VesselAPITests(APITestCase):
    def setUp(self) -> None:
        self.sailor = make_user(role=User.RoleChoices.VESSEL_OWNER)
        self.client.force_authenticate(self.sailor)

    def test_owner_registers_vessel(self) -> None:
        response = self.client.post(
            reverse("vessel-list"),
            {"name": "Надежда", "type": "Яхта", "length": "9.50", "width": "3.10", "is_validated": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        vessel = Vessel.objects.get()
        self.assertEqual(vessel.owner, self.sailor)
        self.assertFalse(vessel.is_validated)

    def test_owners_see_only_their_vessels(self) -> None:
        make_vessel(self.sailor)
        make_vessel(make_user())

        response = self.client.get(reverse("vessel-list"))

        self.assertEqual(response.data["count"], 1)

    def test_owner_cannot_validate_vessel(self) -> None:
        vessel = make_vessel(self.sailor, is_validated=False)

        response = self.client.post(reverse("vessel-validate", args=[vessel.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_super_admin_validates_vessel(self) -> None:
        vessel = make_vessel(self.sailor, is_validated=False)
        self.client.force_authenticate(make_user(role=User.RoleChoices.SUPER_ADMIN))

        response = self.client.post(reverse("vessel-validate", args=[vessel.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        vessel.refresh_from_db()
        self.assertTrue(vessel.is_validated)
        entry = ActivityLog.objects.get(entity_type=ActivityLog.EntityType.VESSEL, entity_id=vessel.id)
        self.assertEqual(entry.new_values, {"is_validated": True})
