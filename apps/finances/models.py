"""Financial domain models for the marina CRM."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Currency(models.TextChoices):
    RUB = "RUB", "RUB"
    USD = "USD", "USD"
    EUR = "EUR", "EUR"


class Payment(models.Model):
    """Платёж по графику бронирования."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Ожидает оплаты")
        PAID = "paid", _("Оплачен")
        OVERDUE = "overdue", _("Просрочен")
        REFUNDED = "refunded", _("Возврат")
        CANCELLED = "cancelled", _("Отменён")

    class Method(models.TextChoices):
        CASH = "cash", _("Наличные")
        CARD = "card", _("Банковская карта")
        BANK_TRANSFER = "bank_transfer", _("Банковский перевод")
        ONLINE = "online", _("Онлайн")

    class PaymentType(models.TextChoices):
        DEPOSIT = "deposit", _("Залог")
        PARTIAL = "partial", _("Частичный платеж")
        FULL = "full", _("Полная оплата")
        MONTHLY = "monthly", _("Помесячный платеж")
        PENALTY = "penalty", _("Пеня")
        REFUND = "refund", _("Возврат средств")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.RUB)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    method = models.CharField(max_length=20, choices=Method.choices, default=Method.BANK_TRANSFER)
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices, default=PaymentType.FULL)
    payment_order = models.PositiveSmallIntegerField(
        default=1,
        help_text=_("0 - залог, 1..n - основные платежи по порядку."),
    )
    payment_month = models.PositiveSmallIntegerField(null=True, blank=True)
    due_date = models.DateTimeField(help_text=_("Срок оплаты."))
    paid_at = models.DateTimeField(null=True, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    penalty = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Пеня за просрочку."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Платёж")
        verbose_name_plural = _("Платежи")
        ordering = ["booking_id", "payment_order", "due_date"]
        indexes = [
            models.Index(fields=["status", "created_at"]),
            models.Index(fields=["status", "due_date"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.id} for booking {self.booking_id} ({self.status})"

    @property
    def is_immediate(self) -> bool:
        """Срок оплаты почти совпадает с созданием: оплатить нужно сразу."""
        window = settings.MARINA_IMMEDIATE_PAYMENT_WINDOW_MINUTES * 60
        return abs((self.due_date - self.created_at).total_seconds()) <= window

    def days_overdue(self, now=None) -> int:
        now = now or timezone.now()
        if now <= self.due_date:
            return 0
        return (now.date() - self.due_date.date()).days


class IncomeCategory(models.Model):
    """Категория доходов; без клуба - общая для всех клубов."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    club = models.ForeignKey(
        "clubs.Club",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="income_categories",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Категория доходов")
        verbose_name_plural = _("Категории доходов")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Income(models.Model):
    """Доход яхт-клуба."""

    class Type(models.TextChoices):
        RENTAL = "rental", _("Аренда мест")
        ADDITIONAL_SERVICES = "additional_services", _("Дополнительные услуги")
        MEMBERSHIP_FEE = "membership_fee", _("Членские взносы")
        PENALTY = "penalty", _("Пени")
        OTHER = "other", _("Прочее")

    club = models.ForeignKey("clubs.Club", on_delete=models.CASCADE, related_name="incomes")
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="incomes",
    )
    payment = models.OneToOneField(
        Payment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="income",
    )
    type = models.CharField(max_length=30, choices=Type.choices, default=Type.OTHER)
    category = models.ForeignKey(
        IncomeCategory,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incomes",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.RUB)
    date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    invoice_number = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Доход")
        verbose_name_plural = _("Доходы")
        ordering = ["-date", "-id"]

    def __str__(self) -> str:
        return f"{self.get_type_display()} {self.amount} {self.currency} ({self.date})"


class ExpenseCategory(models.Model):
    """Категория расходов; без клуба - общая для всех клубов."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    club = models.ForeignKey(
        "clubs.Club",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="expense_categories",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Категория расходов")
        verbose_name_plural = _("Категории расходов")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Expense(models.Model):
    """Расход яхт-клуба; в аналитике учитываются только утверждённые."""

    club = models.ForeignKey("clubs.Club", on_delete=models.CASCADE, related_name="expenses")
    category = models.ForeignKey(ExpenseCategory, on_delete=models.PROTECT, related_name="expenses")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.RUB)
    date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    payment_method = models.CharField(
        max_length=20,
        choices=Payment.Method.choices,
        default=Payment.Method.BANK_TRANSFER,
    )
    counterparty = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_expenses",
    )
    is_approved = models.BooleanField(default=False)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_expenses",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Расход")
        verbose_name_plural = _("Расходы")
        ordering = ["-date", "-id"]

    def __str__(self) -> str:
        return f"{self.category} {self.amount} {self.currency} ({self.date})"

    def approve(self, user) -> None:
        self.is_approved = True
        self.approved_by = user
        self.approved_at = timezone.now()
        self.save(update_fields=["is_approved", "approved_by", "approved_at", "updated_at"])


class CashBook(models.Model):
    """Касса судовладельца: учёт приходов и расходов по судну."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cash_books",
    )
    vessel = models.ForeignKey(
        "vessels.Vessel",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_books",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Касса")
        verbose_name_plural = _("Кассы")
        ordering = ["name", "id"]

    def __str__(self) -> str:
        return self.name


class CashCategory(models.Model):
    """Личная категория прихода или расхода судовладельца."""

    class Kind(models.TextChoices):
        INCOME = "income", _("Приход")
        EXPENSE = "expense", _("Расход")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cash_categories",
    )
    kind = models.CharField(max_length=10, choices=Kind.choices)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Категория кассы")
        verbose_name_plural = _("Категории кассы")
        ordering = ["kind", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_kind_display()})"


class CashTransaction(models.Model):
    """Операция по кассе."""

    Kind = CashCategory.Kind

    class Method(models.TextChoices):
        CASH = "cash", _("Наличные")
        NON_CASH = "non_cash", _("Безналичные")

    cash_book = models.ForeignKey(CashBook, on_delete=models.CASCADE, related_name="transactions")
    transaction_type = models.CharField(max_length=10, choices=Kind.choices)
    category = models.ForeignKey(
        CashCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.RUB)
    payment_method = models.CharField(max_length=10, choices=Method.choices, default=Method.CASH)
    date = models.DateField(default=timezone.localdate)
    description = models.TextField(blank=True)
    counterparty = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Операция по кассе")
        verbose_name_plural = _("Операции по кассе")
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["cash_book", "date"]),
        ]

    def __str__(self) -> str:
        return f"{self.get_transaction_type_display()} {self.amount} {self.currency} ({self.date})"
