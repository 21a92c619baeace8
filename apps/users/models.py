"""User domain models for the marina CRM.

Платформа различает роли: супер-администратор, администратор, владелец
яхт-клуба, судовладелец, гость и пользователь, ожидающий проверки.
Вход выполняется по email; роль определяет видимость клубов, судов,
бронирований и платежей.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Неверный формат телефона. Используйте международный формат без пробелов."),
)


class CustomUserManager(BaseUserManager):
    """Менеджер пользователей, использующий email в качестве логина."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email обязателен для создания пользователя.")
        email = self.normalize_email(email)

        phone = extra_fields.get("phone")
        if phone:
            extra_fields["phone"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.GUEST)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.SUPER_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Суперпользователь должен иметь is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Суперпользователь должен иметь is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        """Удаляем пробелы и дефисы для унификации хранения телефона."""
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Пользователь платформы с ролью."""

    class RoleChoices(models.TextChoices):
        SUPER_ADMIN = "super_admin", _("Супер-администратор")
        ADMIN = "admin", _("Администратор")
        CLUB_OWNER = "club_owner", _("Владелец яхт-клуба")
        VESSEL_OWNER = "vessel_owner", _("Судовладелец")
        GUEST = "guest", _("Гость")
        PENDING_VALIDATION = "pending_validation", _("Ожидает проверки")

    username = models.CharField(
        _("Отображаемое имя"),
        max_length=150,
        blank=True,
        help_text=_("Опционально, используется в интерфейсах."),
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Телефон"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("Роль"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.GUEST,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("Пользователь")
        verbose_name_plural = _("Пользователи")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    # --- Доменные помощники -------------------------------------------------
    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def is_super_admin(self) -> bool:
        return self.role == self.RoleChoices.SUPER_ADMIN or self.is_superuser

    def is_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN

    def is_club_owner(self) -> bool:
        return self.role == self.RoleChoices.CLUB_OWNER

    def is_vessel_owner(self) -> bool:
        return self.role == self.RoleChoices.VESSEL_OWNER


# Backwards compatibility alias used in tests
User = CustomUser
