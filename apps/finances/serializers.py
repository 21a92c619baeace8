"""Serializers for the finance domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

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


class PaymentSerializer(serializers.ModelSerializer):
    """Платёж графика бронирования; изменяется только через сервисы."""

    is_immediate = serializers.BooleanField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "payer",
            "amount",
            "currency",
            "status",
            "method",
            "payment_type",
            "payment_order",
            "payment_month",
            "due_date",
            "paid_at",
            "transaction_id",
            "penalty",
            "notes",
            "is_immediate",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentPaySerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Payment.Method.choices, required=False)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class PaymentScheduleSerializer(serializers.Serializer):
    payments = PaymentSerializer(many=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    next_payment_due = PaymentSerializer(allow_null=True)


class IncomeCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = IncomeCategory
        fields = ["id", "name", "description", "club", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class IncomeSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source="get_type_display", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Income
        fields = [
            "id",
            "club",
            "booking",
            "payment",
            "type",
            "type_display",
            "category",
            "category_name",
            "amount",
            "currency",
            "date",
            "description",
            "invoice_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "payment", "created_at", "updated_at"]

    def validate_amount(self, value):  # type: ignore
        if value <= 0:
            raise serializers.ValidationError("Сумма должна быть положительной.")
        return value

    def validate(self, attrs):  # type: ignore
        club = attrs.get("club") or getattr(self.instance, "club", None)
        booking = attrs.get("booking")
        if booking is not None and club is not None and booking.club_id != club.pk:
            raise serializers.ValidationError({"booking": "Бронирование относится к другому яхт-клубу."})
        category = attrs.get("category")
        if category is not None and category.club_id not in (None, getattr(club, "pk", None)):
            raise serializers.ValidationError({"category": "Категория принадлежит другому яхт-клубу."})
        return attrs


class ExpenseCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpenseCategory
        fields = ["id", "name", "description", "club", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class ExpenseSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Expense
        fields = [
            "id",
            "club",
            "category",
            "category_name",
            "amount",
            "currency",
            "date",
            "description",
            "payment_method",
            "counterparty",
            "created_by",
            "is_approved",
            "approved_by",
            "approved_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "created_by",
            "is_approved",
            "approved_by",
            "approved_at",
            "created_at",
            "updated_at",
        ]

    def validate_amount(self, value):  # type: ignore
        if value <= 0:
            raise serializers.ValidationError("Сумма должна быть положительной.")
        return value

    def validate(self, attrs):  # type: ignore
        club = attrs.get("club") or getattr(self.instance, "club", None)
        category = attrs.get("category")
        if category is not None and category.club_id not in (None, getattr(club, "pk", None)):
            raise serializers.ValidationError({"category": "Категория принадлежит другому яхт-клубу."})
        return attrs


class AnalyticsQuerySerializer(serializers.Serializer):
    club = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("Дата начала должна быть не позже даты окончания.")
        return attrs


class CashBookSerializer(serializers.ModelSerializer):
    vessel_name = serializers.CharField(source="vessel.name", read_only=True, default=None)

    class Meta:
        model = CashBook
        fields = [
            "id",
            "owner",
            "vessel",
            "vessel_name",
            "name",
            "description",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]

    def validate_vessel(self, value):  # type: ignore
        user = self.context["request"].user
        if value is not None and value.owner_id != user.id:
            raise serializers.ValidationError("Судно принадлежит другому владельцу.")
        return value


class CashCategorySerializer(serializers.ModelSerializer):
    kind_display = serializers.CharField(source="get_kind_display", read_only=True)

    class Meta:
        model = CashCategory
        fields = ["id", "owner", "kind", "kind_display", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]


class CashTransactionSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = CashTransaction
        fields = [
            "id",
            "cash_book",
            "transaction_type",
            "category",
            "category_name",
            "amount",
            "currency",
            "payment_method",
            "date",
            "description",
            "counterparty",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_amount(self, value):  # type: ignore
        if value <= 0:
            raise serializers.ValidationError("Сумма должна быть положительной.")
        return value

    def validate(self, attrs):  # type: ignore
        user = self.context["request"].user
        cash_book = attrs.get("cash_book") or getattr(self.instance, "cash_book", None)
        if cash_book is not None and cash_book.owner_id != user.id:
            raise serializers.ValidationError({"cash_book": "Касса принадлежит другому владельцу."})

        transaction_type = attrs.get("transaction_type") or getattr(self.instance, "transaction_type", None)
        category = attrs.get("category")
        if category is not None:
            if category.owner_id != user.id:
                raise serializers.ValidationError({"category": "Категория принадлежит другому владельцу."})
            if category.kind != transaction_type:
                raise serializers.ValidationError({"category": "Тип категории не совпадает с типом операции."})
        return attrs


class CashTotalsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start_date = attrs.get("start_date")
        end_date = attrs.get("end_date")
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError("Дата начала должна быть не позже даты окончания.")
        return attrs
