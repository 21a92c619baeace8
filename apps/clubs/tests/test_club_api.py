"""API tests for clubs and berths."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.services import create_booking
from apps.clubs.models import Berth, Club
from apps.users.models import User
from shared.tests.factories import make_berth, make_club, make_tariff, make_user, make_vessel


class ClubAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.client.force_authenticate(self.owner)
        self.list_url = reverse("club-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "name": "Балтийский",
            "address": "Санкт-Петербург, Петровская коса, 9",
            "latitude": "59.9600000",
            "longitude": "30.2500000",
            "total_berths": 3,
            "base_price": "120.00",
            "season": 2025,
            "rental_months": [9, 5, 6, 7, 8],
        }
        payload.update(overrides)
        return payload

    def test_club_owner_creates_club_with_default_berths(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        club = Club.objects.get()
        self.assertEqual(club.owner, self.owner)
        self.assertEqual(club.rental_months, [5, 6, 7, 8, 9])
        self.assertEqual(club.berths.count(), 3)
        self.assertEqual(club.berths.first().price_per_day, Decimal("120.00"))

    def test_vessel_owner_cannot_create_club(self) -> None:
        self.client.force_authenticate(make_user(role=User.RoleChoices.VESSEL_OWNER))

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_invalid_rental_months_are_rejected(self) -> None:
        response = self.client.post(self.list_url, self._payload(rental_months=[4, 13]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("rental_months", response.data)

    def test_only_owner_can_update_club(self) -> None:
        club = make_club(self.owner)
        self.client.force_authenticate(make_user(role=User.RoleChoices.CLUB_OWNER))

        response = self.client.patch(reverse("club-detail", args=[club.id]), {"name": "Чужой"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_inactive_clubs_are_hidden_from_others(self) -> None:
        make_club(self.owner, is_active=False)
        self.client.force_authenticate(make_user())

        response = self.client.get(self.list_url)

        self.assertEqual(response.data["count"], 0)

    def test_available_berths_excludes_booked(self) -> None:
        club = make_club(self.owner)
        booked = make_berth(club, number="1")
        free = make_berth(club, number="2")
        sailor = make_user()
        create_booking(sailor, club.id, booked.id, make_vessel(sailor).id, make_tariff(club).id)

        response = self.client.get(reverse("club-available-berths", args=[club.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([berth["id"] for berth in response.data], [free.id])

    def test_booked_berth_is_available_outside_its_period(self) -> None:
        club = make_club(self.owner)
        booked = make_berth(club, number="1")
        closed = make_berth(club, number="2", is_available=False)
        sailor = make_user()
        create_booking(sailor, club.id, booked.id, make_vessel(sailor).id, make_tariff(club).id)

        response = self.client.get(
            reverse("club-available-berths", args=[club.id]),
            {"start_date": "2024-09-01", "end_date": "2024-09-30"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([berth["id"] for berth in response.data], [booked.id])
        self.assertNotIn(closed.id, [berth["id"] for berth in response.data])


class BerthAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.club = make_club(self.owner)
        self.client.force_authenticate(self.owner)

    def test_owner_adds_berth(self) -> None:
        response = self.client.post(
            reverse("berth-list"),
            {"club": self.club.id, "number": "A-1", "length": "12.50", "width": "4.20"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.club.refresh_from_db()
        self.assertEqual(self.club.total_berths, 1)

    def test_duplicate_number_is_rejected(self) -> None:
        make_berth(self.club, number="A-1")

        response = self.client.post(
            reverse("berth-list"),
            {"club": self.club.id, "number": "A-1", "length": "12.50", "width": "4.20"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_foreign_owner_cannot_add_berth(self) -> None:
        self.client.force_authenticate(make_user(role=User.RoleChoices.CLUB_OWNER))

        response = self.client.post(
            reverse("berth-list"),
            {"club": self.club.id, "number": "B-1", "length": "10", "width": "3"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertFalse(Berth.objects.exists())

    def test_booked_berth_cannot_be_deleted(self) -> None:
        berth = make_berth(self.club)
        sailor = make_user()
        create_booking(sailor, self.club.id, berth.id, make_vessel(sailor).id, make_tariff(self.club).id)

        response = self.client.delete(reverse("berth-detail", args=[berth.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertTrue(Berth.objects.filter(pk=berth.pk).exists())
