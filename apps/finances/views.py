"""API views for payments, incomes, expenses and financial analytics.

Payments are created together with a booking and change state only
through the `pay` and `mark-overdue` actions. Incomes and expenses are
managed by the club owner; analytics aggregates them for a period.
Cash books are the personal ledgers of vessel owners.
"""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.activity_logs.mixins import ActivityLogMixin
from apps.activity_logs.models import ActivityLog
from apps.activity_logs.services import snapshot
from apps.clubs.models import Club
from apps.core.permissions import IsClubOwnerOrSuperAdmin, is_staff_role, is_super_admin

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
from .serializers import (
    AnalyticsQuerySerializer,
    CashBookSerializer,
    CashCategorySerializer,
    CashTotalsQuerySerializer,
    CashTransactionSerializer,
    ExpenseCategorySerializer,
    ExpenseSerializer,
    IncomeCategorySerializer,
    IncomeSerializer,
    PaymentPaySerializer,
    PaymentSerializer,
)
from .services import (
    PaymentStateError,
    cash_book_balance,
    cash_totals,
    financial_analytics,
    mark_overdue_payments,
    mark_payment_paid,
)

logger = logging.getLogger(__name__)


def ensure_club_access(user, club: Club) -> None:
    if is_staff_role(user) or club.owner_id == user.id:
        return
    raise PermissionDenied("У вас нет доступа к финансам этого яхт-клуба.")


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Платежи. Владелец судна видит свои, владелец клуба - платежи своих клубов."""

    queryset = Payment.objects.select_related("booking", "booking__club").all()
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = {
        "booking": ["exact"],
        "status": ["exact"],
        "booking__club": ["exact"],
    }

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        club_id = self.request.query_params.get("club")
        if club_id:
            qs = qs.filter(booking__club_id=club_id)
        if is_staff_role(user):
            return qs
        return qs.filter(Q(payer=user) | Q(booking__vessel_owner=user) | Q(booking__club__owner=user))

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):  # type: ignore
        """Отметка платежа оплаченным (интеграция с эквайрингом вне рамок API)."""
        payment = self.get_object()
        serializer = PaymentPaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = mark_payment_paid(
                payment.pk,
                user=request.user,
                method=serializer.validated_data.get("method"),
                transaction_id=serializer.validated_data.get("transaction_id", ""),
                request=request,
            )
        except PaymentStateError as exc:
            return Response({"detail": exc.message, "code": exc.code}, status=status.HTTP_409_CONFLICT)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="mark-overdue")
    def mark_overdue(self, request):  # type: ignore
        """Ручной запуск отметки просроченных платежей (по клубу или по всем)."""
        user = request.user
        club_id = request.data.get("club") or request.query_params.get("club")
        club = None
        if club_id:
            club = get_object_or_404(Club, pk=club_id)
            ensure_club_access(user, club)
        elif not is_staff_role(user):
            raise PermissionDenied("Укажите яхт-клуб.")

        count = mark_overdue_payments(club=club)
        logger.info(f"User {user.id} marked {count} payments overdue (club={club_id or 'all'})")
        return Response({"overdue": count})


class ClubFinanceViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Base viewset for records owned by a club: visible to the club owner and staff."""

    permission_classes = [IsClubOwnerOrSuperAdmin]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user):
            return qs
        return qs.filter(club__owner=user)

    def perform_create(self, serializer):  # type: ignore
        ensure_club_access(self.request.user, serializer.validated_data["club"])
        instance = serializer.save(**self.extra_save_kwargs())
        self.log_created(instance)

    def perform_update(self, serializer):  # type: ignore
        club = serializer.validated_data.get("club")
        if club is not None:
            ensure_club_access(self.request.user, club)
        super().perform_update(serializer)

    def extra_save_kwargs(self) -> dict:
        return {}


class IncomeViewSet(ClubFinanceViewSet):
    queryset = Income.objects.select_related("club", "booking", "category").all()
    serializer_class = IncomeSerializer
    filterset_fields = {
        "club": ["exact"],
        "type": ["exact"],
        "category": ["exact"],
        "date": ["gte", "lte"],
    }
    activity_entity_type = ActivityLog.EntityType.INCOME


class ExpenseViewSet(ClubFinanceViewSet):
    queryset = Expense.objects.select_related("club", "category").all()
    serializer_class = ExpenseSerializer
    filterset_fields = {
        "club": ["exact"],
        "category": ["exact"],
        "is_approved": ["exact"],
        "date": ["gte", "lte"],
    }
    activity_entity_type = ActivityLog.EntityType.EXPENSE

    def extra_save_kwargs(self) -> dict:
        return {"created_by": self.request.user}

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        """Утверждение расхода владельцем клуба; только утверждённые попадают в аналитику."""
        expense = self.get_object()
        ensure_club_access(request.user, expense.club)
        if expense.is_approved:
            return Response({"detail": "Расход уже утверждён."}, status=status.HTTP_400_BAD_REQUEST)
        before = snapshot(expense)
        expense.approve(request.user)
        self.log_updated(expense, before)
        return Response(ExpenseSerializer(expense).data)


class SharedCategoryViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Категории: общие (без клуба) видны всем, изменяют их супер-администраторы."""

    permission_classes = [IsClubOwnerOrSuperAdmin]
    filterset_fields = ["club", "is_active"]
    activity_entity_type = ActivityLog.EntityType.OTHER

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user):
            return qs
        return qs.filter(Q(club__isnull=True) | Q(club__owner=user))

    def perform_create(self, serializer):  # type: ignore
        club = serializer.validated_data.get("club")
        if club is None and not is_super_admin(self.request.user):
            raise PermissionDenied("Общие категории создаёт только супер-администратор.")
        if club is not None:
            ensure_club_access(self.request.user, club)
        instance = serializer.save()
        self.log_created(instance)

    def check_object_permissions(self, request, obj):  # type: ignore
        super().check_object_permissions(request, obj)
        if request.method not in permissions.SAFE_METHODS and obj.club_id is None and not is_super_admin(request.user):
            raise PermissionDenied("Общие категории изменяет только супер-администратор.")


class ExpenseCategoryViewSet(SharedCategoryViewSet):
    queryset = ExpenseCategory.objects.select_related("club").all()
    serializer_class = ExpenseCategorySerializer


class IncomeCategoryViewSet(SharedCategoryViewSet):
    queryset = IncomeCategory.objects.select_related("club").all()
    serializer_class = IncomeCategorySerializer


class FinancialAnalyticsView(APIView):
    """Финансовая аналитика клуба за период."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        query = AnalyticsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        club = get_object_or_404(Club, pk=query.validated_data["club"])
        ensure_club_access(request.user, club)

        report = financial_analytics(
            club,
            query.validated_data["start_date"],
            query.validated_data["end_date"],
        )
        return Response(report)


class OwnedRecordViewSet(ActivityLogMixin, viewsets.ModelViewSet):
    """Base viewset for a vessel owner's personal records; staff can read all of them."""

    permission_classes = [permissions.IsAuthenticated]
    owner_lookup = "owner"

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_staff_role(user) and self.request.method in permissions.SAFE_METHODS:
            return qs
        return qs.filter(**{self.owner_lookup: user})

    def perform_create(self, serializer):  # type: ignore
        instance = serializer.save(**self.extra_save_kwargs())
        self.log_created(instance)

    def extra_save_kwargs(self) -> dict:
        return {"owner": self.request.user}


class CashBookViewSet(OwnedRecordViewSet):
    """Кассы судовладельца."""

    queryset = CashBook.objects.select_related("owner", "vessel").all()
    serializer_class = CashBookSerializer
    filterset_fields = ["vessel", "is_active"]
    activity_entity_type = ActivityLog.EntityType.CASH_BOOK

    @action(detail=True, methods=["get"])
    def balance(self, request, pk=None):  # type: ignore
        return Response(cash_book_balance(self.get_object()))

    @action(detail=False, methods=["get"])
    def totals(self, request):  # type: ignore
        """Сводка по всем кассам текущего пользователя за период."""
        query = CashTotalsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(
            cash_totals(
                request.user,
                query.validated_data.get("start_date"),
                query.validated_data.get("end_date"),
            )
        )


class CashCategoryViewSet(OwnedRecordViewSet):
    queryset = CashCategory.objects.all()
    serializer_class = CashCategorySerializer
    filterset_fields = ["kind", "is_active"]


class CashTransactionViewSet(OwnedRecordViewSet):
    queryset = CashTransaction.objects.select_related("cash_book", "category").all()
    serializer_class = CashTransactionSerializer
    owner_lookup = "cash_book__owner"
    filterset_fields = {
        "cash_book": ["exact"],
        "transaction_type": ["exact"],
        "payment_method": ["exact"],
        "category": ["exact"],
        "date": ["gte", "lte"],
    }
    activity_entity_type = ActivityLog.EntityType.CASH_TRANSACTION

    def extra_save_kwargs(self) -> dict:
        return {}
