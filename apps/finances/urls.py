"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    CashBookViewSet,
    CashCategoryViewSet,
    CashTransactionViewSet,
    ExpenseCategoryViewSet,
    ExpenseViewSet,
    FinancialAnalyticsView,
    IncomeCategoryViewSet,
    IncomeViewSet,
    PaymentViewSet,
)

router = DefaultRouter()
router.register(r"payments", PaymentViewSet, basename="payment")
router.register(r"finances/incomes", IncomeViewSet, basename="income")
router.register(r"finances/income-categories", IncomeCategoryViewSet, basename="income-category")
router.register(r"finances/expense-categories", ExpenseCategoryViewSet, basename="expense-category")
router.register(r"finances/expenses", ExpenseViewSet, basename="expense")
router.register(r"finances/cash-books", CashBookViewSet, basename="cash-book")
router.register(r"finances/cash-categories", CashCategoryViewSet, basename="cash-category")
router.register(r"finances/cash-transactions", CashTransactionViewSet, basename="cash-transaction")

urlpatterns = [
    path("finances/analytics/", FinancialAnalyticsView.as_view(), name="financial-analytics"),
    path("", include(router.urls)),
]
