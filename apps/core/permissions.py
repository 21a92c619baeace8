"""Role based permission classes shared by the marina apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_super_admin(user) -> bool:
    """Django superusers are treated as platform super admins."""
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_super_admin") and user.is_super_admin()


def is_staff_role(user) -> bool:
    """Super admins and admins see every record."""
    if is_super_admin(user):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsSuperAdmin(permissions.BasePermission):
    """Доступ только для супер-администратора платформы."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_super_admin(request.user)


class IsSuperAdminOrReadOnly(permissions.BasePermission):
    """Allow super admins to write, but anyone authenticated can read."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_super_admin(user)


class IsClubOwnerOrSuperAdmin(permissions.BasePermission):
    """
    Write access for club owners and super admins.

    Object-level check resolves the club of the object: a Club itself or
    anything with a ``club`` attribute.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        if is_super_admin(user):
            return True
        return hasattr(user, "is_club_owner") and user.is_club_owner()

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if is_super_admin(user):
            return True
        club = getattr(obj, "club", obj)
        return getattr(club, "owner_id", None) == user.id
