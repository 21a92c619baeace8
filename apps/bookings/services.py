"""Domain services for booking workflows.

`resolve_booking` decides whether a vessel fits a berth and computes the
booking period and price from the club season, the tariff and the club's
booking rules. `create_booking` and `cancel_booking` wrap it with row locks,
overlap checks and the payment schedule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework.exceptions import NotFound, PermissionDenied  # type: ignore

from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import log_activity
from apps.clubs.models import Berth, Club
from apps.core.permissions import is_super_admin
from apps.finances.models import Payment
from apps.finances.services import create_payment_schedule
from apps.tariffs.models import BookingRule, Tariff
from apps.vessels.models import Vessel
from shared.domain.value_objects import DateRange, Dimensions, month_range, normalize_months, season_period, to_decimal

from .models import Booking

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
SWEEP_USER_AGENT = "System: payment expiry sweep"


class BookingError(Exception):
    """Base class for booking rejections carrying a machine readable code."""

    default_code = "booking_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class BookingValidationError(BookingError):
    """Raised when the request cannot be satisfied: dimensions, months, configuration."""

    default_code = "invalid_booking"


class BookingConflictError(BookingError):
    """Raised when a berth or vessel is busy, or the booking state forbids the action."""

    default_code = "booking_conflict"


@dataclass(frozen=True)
class BookingQuote:
    """Result of the feasibility and pricing check."""

    period: DateRange
    base_price: Decimal
    deposit: Decimal
    months: tuple[int, ...]
    tariff_type: str | None = None
    monthly_amounts: tuple[tuple[int, Decimal], ...] = field(default_factory=tuple)

    @property
    def total_price(self) -> Decimal:
        return self.base_price + self.deposit

    @property
    def is_monthly(self) -> bool:
        return self.tariff_type == Tariff.Type.MONTHLY_PAYMENT

    @property
    def season(self) -> int:
        return self.period.start_date.year

    def as_dict(self) -> dict:
        return {
            "start_date": self.period.start_date,
            "end_date": self.period.end_date,
            "days": self.period.days,
            "months": list(self.months),
            "tariff_type": self.tariff_type,
            "base_price": self.base_price,
            "deposit": self.deposit,
            "total_price": self.total_price,
            "monthly_amounts": [
                {"month": month, "amount": amount} for month, amount in self.monthly_amounts
            ],
        }


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def applicable_rules(club: Club, tariff: Tariff | None = None) -> list[BookingRule]:
    """Club rules without a tariff plus the rules of the selected tariff."""

    rules = BookingRule.objects.filter(club=club)
    if tariff is None:
        rules = rules.filter(tariff__isnull=True)
    else:
        rules = rules.filter(Q(tariff__isnull=True) | Q(tariff=tariff))
    return list(rules.order_by("id"))


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

def _check_dimensions(berth: Berth, vessel: Vessel) -> None:
    try:
        vessel_dims = Dimensions.from_raw(vessel.length, vessel.width)
        berth_dims = Dimensions.from_raw(berth.length, berth.width)
    except ValueError as exc:
        raise BookingValidationError(f"Некорректные размеры судна или места: {exc}", "invalid_dimensions")

    if vessel_dims.length_exceeds(berth_dims):
        raise BookingValidationError(
            f"Длина судна ({vessel_dims.length} м) превышает максимальную длину места ({berth_dims.length} м).",
            "vessel_length_exceeds",
        )
    if vessel_dims.width_exceeds(berth_dims):
        raise BookingValidationError(
            f"Ширина судна ({vessel_dims.width} м) превышает ширину места ({berth_dims.width} м).",
            "vessel_width_exceeds",
        )


def _check_consistency(club: Club, berth: Berth, tariff: Tariff | None) -> None:
    if berth.club_id != club.pk:
        raise BookingValidationError("Место не принадлежит выбранному яхт-клубу.", "berth_not_in_club")
    if tariff is None:
        return
    if tariff.club_id != club.pk:
        raise BookingValidationError("Тариф не принадлежит выбранному яхт-клубу.", "tariff_not_in_club")
    bound_berth_ids = {bound.pk for bound in tariff.berths.all()}
    if bound_berth_ids and berth.pk not in bound_berth_ids:
        raise BookingValidationError("Тариф не действует для выбранного места.", "tariff_not_for_berth")


def _club_months(club: Club) -> list[int]:
    try:
        months = normalize_months(club.rental_months)
    except (TypeError, ValueError):
        months = []
    if not months:
        raise BookingValidationError(
            "В яхт-клубе не настроены месяцы навигации.", "club_months_not_configured"
        )
    return months


def _required_months(rules: Iterable[BookingRule]) -> list[list[int]]:
    result = []
    for rule in rules:
        if rule.rule_type != BookingRule.RuleType.REQUIRE_PAYMENT_MONTHS:
            continue
        try:
            months = normalize_months(rule.param("months"))
        except (TypeError, ValueError):
            logger.warning(f"Booking rule {rule.pk} has invalid months {rule.parameters!r}, ignored")
            continue
        if months:
            result.append(months)
    return result


def _deposit(rules: Sequence[BookingRule], base_price: Decimal, tariff: Tariff | None) -> Decimal:
    deposit_rules = [rule for rule in rules if rule.rule_type == BookingRule.RuleType.REQUIRE_DEPOSIT]
    if not deposit_rules:
        return Decimal("0.00")
    # A tariff-specific rule wins over a club-wide one
    deposit_rules.sort(key=lambda rule: rule.tariff_id is None)
    rule = deposit_rules[0]
    try:
        amount = rule.param("depositAmount")
        if amount not in (None, ""):
            return to_decimal(amount, "depositAmount").quantize(CENT)
        percentage = rule.param("depositPercentage")
        if percentage not in (None, ""):
            return (base_price * to_decimal(percentage, "depositPercentage") / Decimal("100")).quantize(CENT)
    except ValueError as exc:
        raise BookingValidationError(f"Некорректные параметры залога: {exc}", "invalid_deposit_rule")
    return Decimal("0.00")


def _check_period_rules(rules: Iterable[BookingRule], period: DateRange) -> None:
    for rule in rules:
        days = rule.param("days")
        if not isinstance(days, int) or isinstance(days, bool):
            continue
        if rule.rule_type == BookingRule.RuleType.MIN_BOOKING_PERIOD and period.days < days:
            raise BookingValidationError(
                f"Минимальный период бронирования - {days} дн.", "booking_period_too_short"
            )
        if rule.rule_type == BookingRule.RuleType.MAX_BOOKING_PERIOD and period.days > days:
            raise BookingValidationError(
                f"Максимальный период бронирования - {days} дн.", "booking_period_too_long"
            )


def resolve_booking(
    club: Club,
    berth: Berth,
    vessel: Vessel,
    tariff: Tariff | None = None,
    rules: Sequence[BookingRule] | None = None,
    today: date | None = None,
) -> BookingQuote:
    """
    Проверяет возможность бронирования и рассчитывает период и стоимость.

    Без тарифа: весь сезон клуба по цене места (или базовой цене клуба) за день.
    Сезонный тариф: весь сезон клуба, ограниченный сроком действия тарифа,
    цена равна сумме тарифа. Помесячный тариф: пересечение месяцев клуба,
    тарифа и правил обязательной оплаты, цена складывается помесячно.
    Залог по правилу `require_deposit` добавляется к цене.
    """

    _check_dimensions(berth, vessel)
    _check_consistency(club, berth, tariff)

    if rules is None:
        rules = applicable_rules(club, tariff)

    year = club.season or (tariff.season if tariff is not None else None) or (today or timezone.localdate()).year
    club_months = _club_months(club)
    monthly_amounts: tuple[tuple[int, Decimal], ...] = ()

    if tariff is None:
        months = club_months
        period = season_period(year, months)
        base_price = to_decimal(berth.daily_price, "price_per_day") * period.days

    elif tariff.type == Tariff.Type.SEASON_PAYMENT:
        months = club_months
        period = season_period(year, months)
        validity = tariff.validity_range
        if validity is not None:
            clipped = period.intersection(validity)
            if clipped is None:
                raise BookingValidationError(
                    "Срок действия тарифа не пересекается с сезоном клуба.", "empty_tariff_period"
                )
            period = clipped
            months = [month for month in months if month_range(year, month).overlaps_with(period)]
        base_price = to_decimal(tariff.amount, "amount")

    else:
        try:
            tariff_months = tariff.normalized_months()
        except (TypeError, ValueError):
            tariff_months = []
        if not tariff_months:
            raise BookingValidationError(
                "Для помесячного тарифа не выбраны месяцы.", "tariff_months_not_configured"
            )
        selected = set(club_months) & set(tariff_months)
        for required in _required_months(rules):
            selected &= set(required)
        months = sorted(selected)
        if not months:
            raise BookingValidationError(
                "Месяцы тарифа не пересекаются с месяцами навигации клуба.", "no_common_months"
            )
        validity = tariff.validity_range
        if validity is not None:
            months = [month for month in months if month_range(year, month).overlaps_with(validity)]
            if not months:
                raise BookingValidationError(
                    "Срок действия тарифа не пересекается с выбранными месяцами.", "empty_tariff_period"
                )
        period = season_period(year, months)
        try:
            monthly_amounts = tuple((month, tariff.amount_for_month(month).quantize(CENT)) for month in months)
        except ValueError as exc:
            raise BookingValidationError(f"Некорректная сумма тарифа: {exc}", "invalid_tariff_amount")
        base_price = sum((amount for _, amount in monthly_amounts), Decimal("0.00"))

    _check_period_rules(rules, period)
    base_price = base_price.quantize(CENT)
    deposit = _deposit(rules, base_price, tariff)

    return BookingQuote(
        period=period,
        base_price=base_price,
        deposit=deposit,
        months=tuple(months),
        tariff_type=tariff.type if tariff is not None else None,
        monthly_amounts=monthly_amounts,
    )


# ---------------------------------------------------------------------------
# Overlap checks
# ---------------------------------------------------------------------------

def ensure_slot_is_free(
    berth: Berth,
    vessel: Vessel,
    period: DateRange,
    *,
    exclude_booking_id=None,
) -> None:
    """Ensure neither the berth nor the vessel holds an overlapping booking."""

    # Both ends inclusive: bookings sharing a boundary day overlap
    overlapping = Booking.objects.exclude(status=Booking.Status.CANCELLED).filter(
        start_date__lte=period.end_date,
        end_date__gte=period.start_date,
    )
    if exclude_booking_id is not None:
        overlapping = overlapping.exclude(pk=exclude_booking_id)

    if overlapping.filter(berth=berth).exists():
        raise BookingConflictError("Место уже забронировано на этот период.", "berth_already_booked")
    if overlapping.filter(vessel=vessel).exists():
        raise BookingConflictError("Судно уже забронировано на этот период.", "vessel_already_booked")


def berth_has_live_booking(berth_id) -> bool:
    return Booking.objects.filter(berth_id=berth_id).exclude(status=Booking.Status.CANCELLED).exists()


def berth_is_closed(berth) -> bool:
    """An unavailable berth with no live booking was closed by the club."""
    return not berth.is_available and not berth_has_live_booking(berth.pk)


def release_berth(berth_id) -> None:
    """Mark the berth available once it holds no live booking."""

    if berth_has_live_booking(berth_id):
        return
    Berth.objects.filter(pk=berth_id).update(is_available=True, updated_at=timezone.now())


# ---------------------------------------------------------------------------
# Use cases
# ---------------------------------------------------------------------------

def _load(model, pk, *, lock: bool = False, message: str, code: str):
    queryset = model.objects.filter(pk=pk)
    if lock:
        queryset = _lock_queryset_if_possible(queryset)
    instance = queryset.first()
    if instance is None:
        raise BookingValidationError(message, code)
    return instance


def quote_booking(user, club_id, berth_id, vessel_id, tariff_id=None) -> BookingQuote:
    """Dry run of `create_booking`: same checks, nothing is persisted."""

    club = _load(Club, club_id, message="Яхт-клуб не найден.", code="club_not_found")
    berth = _load(Berth, berth_id, message="Место не найдено.", code="berth_not_found")
    vessel = _load(Vessel, vessel_id, message="Судно не найдено.", code="vessel_not_found")
    tariff = None
    if tariff_id is not None:
        tariff = _load(Tariff, tariff_id, message="Тариф не найден.", code="tariff_not_found")
    if vessel.owner_id != user.id and not is_super_admin(user):
        raise PermissionDenied("Можно бронировать только собственные суда.")

    quote = resolve_booking(club, berth, vessel, tariff)
    ensure_slot_is_free(berth, vessel, quote.period)
    if berth_is_closed(berth):
        raise BookingConflictError("Место недоступно для бронирования.", "berth_unavailable")
    return quote


def create_booking(
    user,
    club_id,
    berth_id,
    vessel_id,
    tariff_id=None,
    auto_renewal: bool = False,
    notes: str = "",
    request=None,
) -> Booking:
    """
    Создаёт бронирование в статусе PENDING и график платежей.

    Строки места и судна блокируются до конца транзакции, поэтому
    конкурирующие запросы на тот же слот выполняются по очереди и второй
    получает конфликт.
    """

    with transaction.atomic():
        club = _load(Club, club_id, message="Яхт-клуб не найден.", code="club_not_found")
        berth = _load(Berth, berth_id, lock=True, message="Место не найдено.", code="berth_not_found")
        vessel = _load(Vessel, vessel_id, lock=True, message="Судно не найдено.", code="vessel_not_found")
        tariff = None
        if tariff_id is not None:
            tariff = _load(Tariff, tariff_id, message="Тариф не найден.", code="tariff_not_found")

        if vessel.owner_id != user.id and not is_super_admin(user):
            raise PermissionDenied("Можно бронировать только собственные суда.")
        if not club.is_active:
            raise BookingValidationError("Яхт-клуб неактивен.", "club_inactive")
        if not vessel.is_active:
            raise BookingValidationError("Судно неактивно.", "vessel_inactive")
        if not vessel.is_validated:
            raise BookingValidationError("Судно ещё не прошло проверку.", "vessel_not_validated")

        quote = resolve_booking(club, berth, vessel, tariff)
        ensure_slot_is_free(berth, vessel, quote.period)
        if berth_is_closed(berth):
            raise BookingConflictError("Место недоступно для бронирования.", "berth_unavailable")

        booking = Booking.objects.create(
            club=club,
            berth=berth,
            vessel=vessel,
            vessel_owner=vessel.owner,
            tariff=tariff,
            start_date=quote.period.start_date,
            end_date=quote.period.end_date,
            status=Booking.Status.PENDING,
            total_price=quote.total_price,
            auto_renewal=auto_renewal,
            notes=notes,
        )
        berth.is_available = False
        berth.save(update_fields=["is_available", "updated_at"])
        create_payment_schedule(booking, quote, payer=vessel.owner)

    logger.info(
        f"Booking {booking.pk} created: berth {berth.pk}, vessel {vessel.pk}, "
        f"{quote.period}, total {quote.total_price}"
    )
    log_activity(
        ActivityLog.ActivityType.CREATE,
        ActivityLog.EntityType.BOOKING,
        entity_id=booking.pk,
        user=user,
        new_values={
            "berth": berth.pk,
            "vessel": vessel.pk,
            "tariff": tariff.pk if tariff else None,
            "start_date": booking.start_date,
            "end_date": booking.end_date,
            "total_price": booking.total_price,
        },
        request=request,
    )
    return booking


def can_cancel(booking: Booking, user) -> bool:
    if is_super_admin(user):
        return True
    return user.id in (booking.vessel_owner_id, booking.club.owner_id)


def cancel_booking(booking_id, user, request=None) -> Booking:
    """
    Отменяет бронирование, если все его платежи ещё в статусе PENDING.

    Бронирование и платежи переводятся в CANCELLED одной транзакцией,
    место освобождается.
    """

    booking = Booking.objects.select_related("club").filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Бронирование не найдено.")
    if not can_cancel(booking, user):
        raise PermissionDenied("Недостаточно прав для отмены бронирования.")

    with transaction.atomic():
        booking = _lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).get()
        if booking.is_cancelled:
            raise BookingConflictError("Бронирование уже отменено.", "already_cancelled")

        payments = list(_lock_queryset_if_possible(Payment.objects.filter(booking=booking)))
        blocking = [payment for payment in payments if payment.status != Payment.Status.PENDING]
        if blocking:
            raise BookingConflictError(
                f"Нельзя отменить бронирование: платежей не в статусе ожидания оплаты - {len(blocking)}.",
                "payments_not_pending",
            )

        old_status = booking.status
        Payment.objects.filter(pk__in=[payment.pk for payment in payments]).update(
            status=Payment.Status.CANCELLED,
            updated_at=timezone.now(),
        )
        booking.mark_cancelled()
        release_berth(booking.berth_id)

    logger.info(f"Booking {booking.pk} cancelled by user {user.id}, {len(payments)} payments cancelled")
    log_activity(
        ActivityLog.ActivityType.UPDATE,
        ActivityLog.EntityType.BOOKING,
        entity_id=booking.pk,
        user=user,
        old_values={"status": old_status},
        new_values={"status": booking.status},
        request=request,
    )
    return booking


def expire_immediate_payment(payment_id) -> str:
    """
    Просрочка одного немедленного платежа.

    Платёж и бронирование перечитываются под блокировкой: если пользователь
    успел оплатить, ничего не меняется. Returns "skipped", "expired" or
    "cancelled" (the payment expired and its booking was cancelled).
    """

    with transaction.atomic():
        payment = _lock_queryset_if_possible(Payment.objects.filter(pk=payment_id)).first()
        if payment is None or payment.status != Payment.Status.PENDING:
            return "skipped"

        payment.status = Payment.Status.OVERDUE
        payment.notes = (payment.notes + "\n" if payment.notes else "") + "Срок немедленной оплаты истёк."
        payment.save(update_fields=["status", "notes", "updated_at"])

        booking = _lock_queryset_if_possible(Booking.objects.filter(pk=payment.booking_id)).get()
        if booking.status != Booking.Status.PENDING:
            return "expired"

        Payment.objects.filter(booking=booking, status=Payment.Status.PENDING).update(
            status=Payment.Status.CANCELLED,
            updated_at=timezone.now(),
        )
        booking.mark_cancelled()
        release_berth(booking.berth_id)

    log_activity(
        ActivityLog.ActivityType.DELETE,
        ActivityLog.EntityType.BOOKING,
        entity_id=booking.pk,
        user=None,
        description=(
            f"Система автоматически отменила бронирование #{booking.pk}: "
            f"платеж #{payment.pk} не оплачен в срок"
        ),
        old_values={"status": Booking.Status.PENDING},
        new_values={"status": Booking.Status.CANCELLED, "payment": payment.pk},
        user_agent=SWEEP_USER_AGENT,
    )
    return "cancelled"
