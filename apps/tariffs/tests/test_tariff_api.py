"""API tests for tariffs and booking rules."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.tariffs.models import BookingRule, Tariff
from apps.users.models import User
from shared.tests.factories import make_berth, make_club, make_tariff, make_user


class TariffAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.club = make_club(self.owner)
        self.client.force_authenticate(self.owner)
        self.url = reverse("tariff-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "club": self.club.id,
            "name": "Лето",
            "type": Tariff.Type.MONTHLY_PAYMENT,
            "amount": "1000.00",
            "season": 2024,
            "months": [8, 6, 7],
        }
        payload.update(overrides)
        return payload

    def test_monthly_tariff_is_created_with_sorted_months(self) -> None:
        berth = make_berth(self.club)

        response = self.client.post(
            self.url,
            self._payload(berths=[berth.id], monthly_amounts={"6": 1200}),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        tariff = Tariff.objects.get()
        self.assertEqual(tariff.months, [6, 7, 8])
        self.assertEqual(tariff.monthly_amounts, {"6": "1200"})
        self.assertEqual(list(tariff.berths.all()), [berth])

    def test_monthly_tariff_requires_months(self) -> None:
        response = self.client.post(self.url, self._payload(months=[]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("months", response.data)

    def test_months_out_of_range_are_rejected(self) -> None:
        response = self.client.post(self.url, self._payload(months=[0, 6]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_fractional_months_are_rejected(self) -> None:
        response = self.client.post(self.url, self._payload(months=[5.5, "6.9"]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("months", response.data)
        self.assertFalse(Tariff.objects.exists())

    def test_season_tariff_drops_months(self) -> None:
        response = self.client.post(
            self.url,
            self._payload(type=Tariff.Type.SEASON_PAYMENT, amount="25000.00"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(Tariff.objects.get().months)

    def test_berths_of_other_club_are_rejected(self) -> None:
        foreign_berth = make_berth(make_club(self.owner))

        response = self.client.post(self.url, self._payload(berths=[foreign_berth.id]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("berths", response.data)

    def test_foreign_club_owner_cannot_create_tariff(self) -> None:
        self.client.force_authenticate(make_user(role=User.RoleChoices.CLUB_OWNER))

        response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)


class BookingRuleAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(role=User.RoleChoices.CLUB_OWNER)
        self.club = make_club(self.owner)
        self.client.force_authenticate(self.owner)
        self.url = reverse("booking-rule-list")

    def test_deposit_rule_is_created(self) -> None:
        response = self.client.post(
            self.url,
            {
                "club": self.club.id,
                "rule_type": BookingRule.RuleType.REQUIRE_DEPOSIT,
                "description": "Залог 10%",
                "parameters": {"depositPercentage": 10},
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_deposit_rule_requires_amount(self) -> None:
        response = self.client.post(
            self.url,
            {
                "club": self.club.id,
                "rule_type": BookingRule.RuleType.REQUIRE_DEPOSIT,
                "description": "Залог",
                "parameters": {},
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_rule_tariff_must_belong_to_club(self) -> None:
        foreign_tariff = make_tariff(make_club(self.owner))

        response = self.client.post(
            self.url,
            {
                "club": self.club.id,
                "tariff": foreign_tariff.id,
                "rule_type": BookingRule.RuleType.REQUIRE_PAYMENT_MONTHS,
                "description": "Июнь и июль",
                "parameters": {"months": [6, 7]},
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("tariff", response.data)

    def test_period_rule_requires_positive_days(self) -> None:
        response = self.client.post(
            self.url,
            {
                "club": self.club.id,
                "rule_type": BookingRule.RuleType.MIN_BOOKING_PERIOD,
                "description": "Минимум",
                "parameters": {"days": 0},
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
