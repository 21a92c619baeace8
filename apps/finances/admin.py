"""Admin registration for the finance domain."""

from __future__ import annotations

from django.contrib import admin

from .models import (
    CashBook,
    CashCategory,
    CashTransaction,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    Payment,
)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking",
        "payer",
        "payment_type",
        "payment_order",
        "amount",
        "status",
        "due_date",
        "paid_at",
    )
    list_filter = ("status", "payment_type", "method")
    search_fields = ("transaction_id", "payer__email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Income)
class IncomeAdmin(admin.ModelAdmin):
    list_display = ("id", "club", "type", "category", "amount", "currency", "date")
    list_filter = ("type", "club", "category")
    search_fields = ("description", "invoice_number")


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "club", "is_active")
    list_filter = ("is_active",)


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("id", "club", "category", "amount", "date", "is_approved")
    list_filter = ("is_approved", "club", "category")
    search_fields = ("description", "counterparty")


@admin.register(IncomeCategory)
class IncomeCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "club", "is_active")
    list_filter = ("is_active",)


class CashTransactionInline(admin.TabularInline):
    model = CashTransaction
    extra = 0


@admin.register(CashBook)
class CashBookAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "vessel", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "owner__email")
    inlines = [CashTransactionInline]


@admin.register(CashCategory)
class CashCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "kind", "is_active")
    list_filter = ("kind", "is_active")


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "cash_book", "transaction_type", "amount", "payment_method", "date")
    list_filter = ("transaction_type", "payment_method")
    search_fields = ("description", "counterparty")
