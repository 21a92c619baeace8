"""Payment schedule, payment processing and club financial analytics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count, Sum  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import log_activity
from shared.domain.value_objects import Money

from .models import CashTransaction, Expense, Income, Payment

if TYPE_CHECKING:
    from apps.bookings.models import Booking
    from apps.bookings.services import BookingQuote

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class PaymentStateError(Exception):
    """Raised when a payment cannot move to the requested state."""

    def __init__(self, message: str, code: str = "invalid_payment_state") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def _lock_queryset_if_possible(queryset):
    if not transaction.get_connection().in_atomic_block:
        return queryset
    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _start_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------

def create_payment_schedule(booking: "Booking", quote: "BookingQuote", payer) -> list[Payment]:
    """
    Создаёт график платежей для нового бронирования.

    Залог (order 0) оплачивается сразу. Без помесячного тарифа остаток
    платится одним платежом (order 1) за MARINA_FULL_PAYMENT_LEAD_DAYS до
    начала; для помесячного тарифа по платежу на месяц (order 1..n) за
    MARINA_MONTHLY_PAYMENT_LEAD_DAYS до 1-го числа месяца. Срок в прошлом
    заменяется сроком немедленной оплаты. Сумма графика равна total_price.
    """

    now = timezone.now()
    immediate_due = now + timedelta(minutes=settings.MARINA_IMMEDIATE_PAYMENT_DUE_MINUTES)
    currency = settings.MARINA_CURRENCY

    def clamp(due: datetime) -> datetime:
        return due if due > immediate_due else immediate_due

    items: list[dict] = []
    if quote.deposit > 0:
        items.append({
            "payment_type": Payment.PaymentType.DEPOSIT,
            "payment_order": 0,
            "amount": quote.deposit,
            "due_date": immediate_due,
            "notes": "Залог",
        })

    if quote.is_monthly:
        lead = timedelta(days=settings.MARINA_MONTHLY_PAYMENT_LEAD_DAYS)
        for order, (month, amount) in enumerate(quote.monthly_amounts, start=1):
            month_start = _start_of_day(date(quote.season, month, 1))
            items.append({
                "payment_type": Payment.PaymentType.MONTHLY,
                "payment_order": order,
                "payment_month": month,
                "amount": amount,
                "due_date": clamp(month_start - lead),
                "notes": f"Оплата за {month:02d}.{quote.season}",
            })
    else:
        lead = timedelta(days=settings.MARINA_FULL_PAYMENT_LEAD_DAYS)
        items.append({
            "payment_type": Payment.PaymentType.FULL,
            "payment_order": 1,
            "amount": quote.base_price,
            "due_date": clamp(_start_of_day(quote.period.start_date) - lead),
            "notes": "Оплата бронирования",
        })

    payments = [
        Payment.objects.create(booking=booking, payer=payer, currency=currency, **item)
        for item in items
    ]
    logger.info(f"Created {len(payments)} payments for booking {booking.pk}")
    return payments


@dataclass(frozen=True)
class PaymentSchedule:
    payments: list[Payment]
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    next_payment_due: Payment | None


def get_payment_schedule(booking: "Booking") -> PaymentSchedule:
    payments = list(booking.payments.order_by("payment_order", "due_date"))
    live = [payment for payment in payments if payment.status != Payment.Status.CANCELLED]

    currency = live[0].currency if live else settings.MARINA_CURRENCY
    total = paid = Money.zero(currency)
    for payment in live:
        amount = Money(payment.amount, payment.currency)
        total += amount
        if payment.status == Payment.Status.PAID:
            paid += amount

    next_due = next(
        (
            payment for payment in live
            if payment.status in (Payment.Status.PENDING, Payment.Status.OVERDUE)
        ),
        None,
    )
    return PaymentSchedule(
        payments=payments,
        total_amount=total.quantized(),
        paid_amount=paid.quantized(),
        remaining_amount=(total - paid).quantized(),
        next_payment_due=next_due,
    )


def required_payments_paid(booking: "Booking") -> bool:
    """Deposit (if any) and the first main payment are paid."""

    statuses = dict(
        booking.payments.filter(payment_order__in=[0, 1]).values_list("payment_order", "status")
    )
    if 1 not in statuses:
        return False
    return all(status == Payment.Status.PAID for status in statuses.values())


# ---------------------------------------------------------------------------
# Payment state changes
# ---------------------------------------------------------------------------

def mark_payment_paid(
    payment_id,
    user=None,
    method: str | None = None,
    transaction_id: str = "",
    request=None,
) -> Payment:
    """
    Отмечает платёж оплаченным и записывает доход клуба.

    Когда оплачены залог и первый основной платёж, бронирование
    подтверждается.
    """

    with transaction.atomic():
        payment = _lock_queryset_if_possible(
            Payment.objects.select_related("booking", "booking__club").filter(pk=payment_id)
        ).get()

        if payment.status == Payment.Status.PAID:
            raise PaymentStateError("Платёж уже оплачен.", "already_paid")
        if payment.status in (Payment.Status.CANCELLED, Payment.Status.REFUNDED):
            raise PaymentStateError("Платёж отменён и не может быть оплачен.", "payment_not_payable")

        booking = payment.booking
        if booking.is_cancelled:
            raise PaymentStateError("Бронирование отменено.", "booking_cancelled")

        old_status = payment.status
        payment.status = Payment.Status.PAID
        payment.paid_at = timezone.now()
        payment.transaction_id = transaction_id or payment.transaction_id
        if method:
            payment.method = method
        payment.save(update_fields=["status", "paid_at", "transaction_id", "method", "updated_at"])

        Income.objects.create(
            club=booking.club,
            booking=booking,
            payment=payment,
            type=Income.Type.RENTAL,
            amount=payment.amount,
            currency=payment.currency,
            date=timezone.localdate(),
            description=f"Оплата по бронированию #{booking.pk} ({payment.get_payment_type_display()})",
        )
        if payment.penalty > 0:
            Income.objects.create(
                club=booking.club,
                booking=booking,
                type=Income.Type.PENALTY,
                amount=payment.penalty,
                currency=payment.currency,
                date=timezone.localdate(),
                description=f"Пеня по платежу #{payment.pk}",
            )

        confirmed = False
        if booking.status == booking.Status.PENDING and required_payments_paid(booking):
            booking.mark_confirmed()
            confirmed = True

    logger.info(f"Payment {payment.pk} paid, booking {booking.pk} confirmed={confirmed}")
    log_activity(
        ActivityLog.ActivityType.UPDATE,
        ActivityLog.EntityType.PAYMENT,
        entity_id=payment.pk,
        user=user,
        old_values={"status": old_status},
        new_values={"status": payment.status, "transaction_id": payment.transaction_id},
        request=request,
    )
    return payment


def calculate_penalty(payment: Payment, now: datetime | None = None) -> Decimal:
    rate = Decimal(str(settings.MARINA_OVERDUE_PENALTY_RATE))
    days = payment.days_overdue(now)
    return (payment.amount * rate * days).quantize(CENT)


def mark_overdue_payments(club=None, now: datetime | None = None) -> int:
    """
    Переводит просроченные платежи в OVERDUE и начисляет пеню.

    Немедленные платежи пропускаются: их просрочку обрабатывает
    `bookings.expire_immediate_payments`, который заодно отменяет бронирование.
    """

    now = now or timezone.now()
    candidates = Payment.objects.filter(status=Payment.Status.PENDING, due_date__lt=now)
    if club is not None:
        candidates = candidates.filter(booking__club=club)

    count = 0
    for candidate in candidates.only("id", "due_date", "created_at"):
        if candidate.is_immediate:
            continue
        with transaction.atomic():
            payment = _lock_queryset_if_possible(Payment.objects.filter(pk=candidate.pk)).first()
            if payment is None or payment.status != Payment.Status.PENDING:
                continue
            payment.status = Payment.Status.OVERDUE
            payment.penalty = calculate_penalty(payment, now)
            payment.save(update_fields=["status", "penalty", "updated_at"])
            count += 1

    if count:
        logger.info(f"Marked {count} payments as overdue")
    return count


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def _total(queryset) -> Decimal:
    return queryset.aggregate(total=Sum("amount"))["total"] or ZERO


def financial_analytics(club, start_date: date, end_date: date) -> dict:
    """Доходы, расходы и прибыль клуба за период, с разбивкой по типам и месяцам."""

    incomes = Income.objects.filter(club=club, date__gte=start_date, date__lte=end_date)
    expenses = Expense.objects.filter(
        club=club,
        is_approved=True,
        date__gte=start_date,
        date__lte=end_date,
    )

    total_income = _total(incomes)
    total_expense = _total(expenses)
    profit = total_income - total_expense
    margin = ZERO
    if total_income > 0:
        margin = (profit / total_income * Decimal("100")).quantize(CENT)

    income_by_type = {
        row["type"]: row["total"]
        for row in incomes.values("type").annotate(total=Sum("amount")).order_by("type")
    }
    income_by_category = [
        {"category": row["category__name"], "total": row["total"], "count": row["count"]}
        for row in incomes.values("category__name")
        .annotate(total=Sum("amount"), count=Count("id"))
        .order_by("-total")
    ]
    expense_by_category = [
        {"category": row["category__name"], "total": row["total"], "count": row["count"]}
        for row in expenses.values("category__name")
        .annotate(total=Sum("amount"), count=Count("id"))
        .order_by("-total")
    ]

    by_month: dict[str, dict[str, Decimal]] = {}
    for row in incomes.annotate(month=TruncMonth("date")).values("month").annotate(total=Sum("amount")):
        key = row["month"].strftime("%Y-%m")
        by_month.setdefault(key, {"income": ZERO, "expense": ZERO})["income"] = row["total"]
    for row in expenses.annotate(month=TruncMonth("date")).values("month").annotate(total=Sum("amount")):
        key = row["month"].strftime("%Y-%m")
        by_month.setdefault(key, {"income": ZERO, "expense": ZERO})["expense"] = row["total"]

    return {
        "club": club.pk,
        "period": {"start_date": start_date, "end_date": end_date},
        "income": {"total": total_income, "by_type": income_by_type, "by_category": income_by_category},
        "expense": {"total": total_expense, "by_category": expense_by_category},
        "profit": profit,
        "profit_margin": margin,
        "by_month": [
            {"month": key, "income": values["income"], "expense": values["expense"],
             "profit": values["income"] - values["expense"]}
            for key, values in sorted(by_month.items())
        ],
    }


# ---------------------------------------------------------------------------
# Vessel owner cash books
# ---------------------------------------------------------------------------

def _cash_summary(transactions) -> dict:
    income = transactions.filter(transaction_type=CashTransaction.Kind.INCOME)
    expense = transactions.filter(transaction_type=CashTransaction.Kind.EXPENSE)
    total_income = _total(income)
    total_expense = _total(expense)

    by_method = {}
    for method in CashTransaction.Method.values:
        by_method[method] = _total(income.filter(payment_method=method)) - _total(
            expense.filter(payment_method=method)
        )

    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "balance": total_income - total_expense,
        "balance_by_payment_method": by_method,
        "transactions_count": transactions.count(),
    }


def cash_book_balance(cash_book) -> dict:
    """Остаток кассы в целом и отдельно по наличным и безналичным."""
    summary = _cash_summary(cash_book.transactions.all())
    summary["cash_book"] = cash_book.pk
    return summary


def cash_totals(owner, start_date: date | None = None, end_date: date | None = None) -> dict:
    """Сводка по всем кассам судовладельца за период, с разбивкой по кассам."""
    transactions = CashTransaction.objects.filter(cash_book__owner=owner)
    if start_date is not None:
        transactions = transactions.filter(date__gte=start_date)
    if end_date is not None:
        transactions = transactions.filter(date__lte=end_date)

    summary = _cash_summary(transactions)
    summary["period"] = {"start_date": start_date, "end_date": end_date}
    summary["by_cash_book"] = [
        {
            "cash_book": book.pk,
            "name": book.name,
            "balance": _total(transactions.filter(cash_book=book, transaction_type=CashTransaction.Kind.INCOME))
            - _total(transactions.filter(cash_book=book, transaction_type=CashTransaction.Kind.EXPENSE)),
        }
        for book in owner.cash_books.order_by("name", "id")
    ]
    return summary
