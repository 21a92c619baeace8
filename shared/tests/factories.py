"""Model builders shared by the test suites."""

from __future__ import annotations

from decimal import Decimal
from itertools import count

from apps.clubs.models import Berth, Club
from apps.tariffs.models import BookingRule, Tariff
from apps.users.models import User
from apps.vessels.models import Vessel

_sequence = count(1)


def make_user(role=User.RoleChoices.VESSEL_OWNER, **extra) -> User:
    number = next(_sequence)
    extra.setdefault("email", f"user{number}@example.com")
    extra.setdefault("password", "StrongPass123")
    return User.objects.create_user(role=role, **extra)


def make_club(owner: User, **extra) -> Club:
    defaults = {
        "name": f"Яхт-клуб {next(_sequence)}",
        "address": "Набережная, 1",
        "latitude": Decimal("59.9386300"),
        "longitude": Decimal("30.3141300"),
        "base_price": Decimal("50.00"),
        "rental_months": [5, 6, 7, 8, 9],
        "season": 2024,
    }
    defaults.update(extra)
    return Club.objects.create(owner=owner, **defaults)


def make_berth(club: Club, **extra) -> Berth:
    defaults = {
        "number": str(next(_sequence)),
        "length": Decimal("10.00"),
        "width": Decimal("4.00"),
        "price_per_day": Decimal("100.00"),
    }
    defaults.update(extra)
    return Berth.objects.create(club=club, **defaults)


def make_vessel(owner: User, **extra) -> Vessel:
    defaults = {
        "name": f"Судно {next(_sequence)}",
        "type": "Яхта",
        "length": Decimal("8.00"),
        "width": Decimal("3.00"),
        "is_validated": True,
    }
    defaults.update(extra)
    return Vessel.objects.create(owner=owner, **defaults)


def make_tariff(club: Club, **extra) -> Tariff:
    berths = extra.pop("berths", None)
    defaults = {
        "name": "Летний",
        "type": Tariff.Type.MONTHLY_PAYMENT,
        "amount": Decimal("1000.00"),
        "season": club.season or 2024,
        "months": [6, 7, 8],
    }
    defaults.update(extra)
    tariff = Tariff.objects.create(club=club, **defaults)
    if berths:
        tariff.berths.set(berths)
    return tariff


def make_rule(club: Club, rule_type: str, parameters: dict, tariff: Tariff | None = None) -> BookingRule:
    return BookingRule.objects.create(
        club=club,
        tariff=tariff,
        rule_type=rule_type,
        description="Правило",
        parameters=parameters,
    )
