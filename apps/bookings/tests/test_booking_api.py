"""Integration tests for booking API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activity_logs.models import ActivityLog
from apps.bookings.models import Booking
from apps.finances.models import Payment
from apps.users.models import User
from shared.tests.factories import make_berth, make_club, make_tariff, make_user, make_vessel


class BookingAPITests(APITestCase):
    """Covers создание, конфликты и отмену бронирований."""

    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.sailor = make_user(role=User.RoleChoices.VESSEL_OWNER)
        self.club = make_club(self.owner, rental_months=[5, 6, 7, 8, 9], season=2024)
        self.berth = make_berth(self.club)
        self.vessel = make_vessel(self.sailor)
        self.tariff = make_tariff(self.club, months=[6, 7, 8], amount=Decimal("1000.00"))
        self.client.force_authenticate(self.sailor)
        self.list_url = reverse("booking-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "club": self.club.id,
            "berth": self.berth.id,
            "vessel": self.vessel.id,
            "tariff": self.tariff.id,
        }
        payload.update(overrides)
        return payload

    def _book(self, **overrides):
        return self.client.post(self.list_url, self._payload(**overrides), format="json")

    def test_vessel_owner_can_book_with_monthly_tariff(self) -> None:
        response = self._book()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["start_date"], "2024-06-01")
        self.assertEqual(response.data["end_date"], "2024-08-31")
        self.assertEqual(response.data["total_price"], "3000.00")
        self.assertEqual(response.data["status"], Booking.Status.PENDING)
        self.assertEqual(len(response.data["payments"]), 3)

        booking = Booking.objects.get()
        self.assertEqual(booking.vessel_owner, self.sailor)
        self.assertEqual(sum(p.amount for p in booking.payments.all()), booking.total_price)
        self.berth.refresh_from_db()
        self.assertFalse(self.berth.is_available)
        self.assertTrue(
            ActivityLog.objects.filter(
                entity_type=ActivityLog.EntityType.BOOKING,
                entity_id=booking.id,
                activity_type=ActivityLog.ActivityType.CREATE,
            ).exists()
        )

    def test_overlapping_berth_booking_is_conflict(self) -> None:
        first = self._book()
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)

        other_vessel = make_vessel(self.sailor)
        second = self._book(vessel=other_vessel.id)

        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT, second.data)
        self.assertEqual(second.data["code"], "berth_already_booked")
        self.assertEqual(Booking.objects.count(), 1)

    def test_overlapping_vessel_booking_is_conflict(self) -> None:
        first = self._book()
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)

        other_berth = make_berth(self.club)
        second = self._book(berth=other_berth.id)

        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT, second.data)
        self.assertEqual(second.data["code"], "vessel_already_booked")

    def test_non_overlapping_tariffs_share_berth(self) -> None:
        spring = make_tariff(self.club, name="Весна", months=[5, 6])
        autumn = make_tariff(self.club, name="Осень", months=[8, 9])
        other_vessel = make_vessel(self.sailor)

        first = self._book(tariff=spring.id)
        second = self._book(tariff=autumn.id, vessel=other_vessel.id)

        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)
        self.assertEqual(second.status_code, status.HTTP_201_CREATED, second.data)
        self.assertEqual(second.data["start_date"], "2024-08-01")
        self.assertEqual(Booking.objects.filter(berth=self.berth).count(), 2)

    def test_unavailable_berth_is_conflict(self) -> None:
        self.berth.is_available = False
        self.berth.save()

        response = self._book()

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "berth_unavailable")

    def test_too_long_vessel_is_rejected(self) -> None:
        small_berth = make_berth(self.club, length=Decimal("6.00"))
        long_vessel = make_vessel(self.sailor, length=Decimal("7.00"))

        response = self._book(berth=small_berth.id, vessel=long_vessel.id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "vessel_length_exceeds")
        self.assertFalse(Booking.objects.exists())
        self.assertFalse(Payment.objects.exists())

    def test_unvalidated_vessel_is_rejected(self) -> None:
        vessel = make_vessel(self.sailor, is_validated=False)

        response = self._book(vessel=vessel.id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "vessel_not_validated")

    def test_cannot_book_someone_elses_vessel(self) -> None:
        stranger_vessel = make_vessel(make_user())

        response = self._book(vessel=stranger_vessel.id)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertFalse(Booking.objects.exists())

    def test_super_admin_books_on_behalf_of_owner(self) -> None:
        admin = make_user(role=User.RoleChoices.SUPER_ADMIN)
        self.client.force_authenticate(admin)

        response = self._book()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["vessel_owner"], self.sailor.id)

    def test_quote_does_not_persist(self) -> None:
        response = self.client.post(reverse("booking-quote"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], "3000.00")
        self.assertEqual(response.data["months"], [6, 7, 8])
        self.assertFalse(Booking.objects.exists())

    def test_list_is_scoped_by_role(self) -> None:
        self._book()
        outsider = make_user()

        self.client.force_authenticate(outsider)
        self.assertEqual(self.client.get(self.list_url).data["count"], 0)

        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.get(self.list_url).data["count"], 1)

    def test_payment_schedule_endpoint(self) -> None:
        booking_id = self._book().data["id"]

        response = self.client.get(reverse("booking-payment-schedule", args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_amount"], "3000.00")
        self.assertEqual(response.data["paid_amount"], "0.00")
        self.assertEqual([p["payment_order"] for p in response.data["payments"]], [1, 2, 3])


class BookingCancellationAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.sailor = make_user(role=User.RoleChoices.VESSEL_OWNER)
        self.club = make_club(self.owner)
        self.berth = make_berth(self.club)
        self.vessel = make_vessel(self.sailor)
        tariff = make_tariff(self.club)
        self.client.force_authenticate(self.sailor)
        response = self.client.post(
            reverse("booking-list"),
            {"club": self.club.id, "berth": self.berth.id, "vessel": self.vessel.id, "tariff": tariff.id},
            format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED, response.data
        self.booking = Booking.objects.get(pk=response.data["id"])
        self.cancel_url = reverse("booking-cancel", args=[self.booking.id])

    def test_vessel_owner_cancels_booking(self) -> None:
        response = self.client.post(self.cancel_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)
        self.booking.refresh_from_db()
        self.assertIsNotNone(self.booking.cancelled_at)
        self.assertFalse(self.booking.payments.exclude(status=Payment.Status.CANCELLED).exists())
        self.berth.refresh_from_db()
        self.assertTrue(self.berth.is_available)

    def test_second_cancellation_is_conflict(self) -> None:
        self.client.post(self.cancel_url)
        self.booking.refresh_from_db()
        cancelled_at = self.booking.cancelled_at

        response = self.client.post(self.cancel_url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "already_cancelled")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.cancelled_at, cancelled_at)

    def test_paid_payment_blocks_cancellation(self) -> None:
        payment = self.booking.payments.order_by("payment_order").first()
        Payment.objects.filter(pk=payment.pk).update(status=Payment.Status.PAID)

        response = self.client.post(self.cancel_url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "payments_not_pending")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)
        self.assertEqual(self.booking.payments.filter(status=Payment.Status.PENDING).count(), 2)

    def test_club_owner_can_cancel(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.post(self.cancel_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_outsider_cannot_cancel(self) -> None:
        self.client.force_authenticate(make_user())

        response = self.client.post(self.cancel_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_cancelled_booking_frees_the_slot(self) -> None:
        self.client.post(self.cancel_url)
        tariff = self.booking.tariff

        response = self.client.post(
            reverse("booking-list"),
            {"club": self.club.id, "berth": self.berth.id, "vessel": self.vessel.id, "tariff": tariff.id},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
