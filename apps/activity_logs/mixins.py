"""DRF viewset hook that records create/update/delete activity."""

from __future__ import annotations

from .models import ActivityLog
from .services import describe_activity, diff_values, log_activity, snapshot


class ActivityLogMixin:
    """
    Mix into a ModelViewSet before the DRF base classes.

    Subclasses set ``activity_entity_type``. Views that need custom save
    arguments override ``perform_create`` and call ``log_created`` themselves.
    """

    activity_entity_type = ActivityLog.EntityType.OTHER

    def _log(self, activity_type, entity_id, entity_name=None, old_values=None, new_values=None):
        user = self.request.user
        log_activity(
            activity_type,
            self.activity_entity_type,
            entity_id=entity_id,
            user=user,
            description=describe_activity(
                activity_type,
                self.activity_entity_type,
                entity_id,
                user if user.is_authenticated else None,
                entity_name,
            ),
            old_values=old_values,
            new_values=new_values,
            request=self.request,
        )

    def log_created(self, instance) -> None:
        self._log(
            ActivityLog.ActivityType.CREATE,
            instance.pk,
            getattr(instance, "name", None),
            new_values=snapshot(instance),
        )

    def log_updated(self, instance, before: dict) -> None:
        old_values, new_values = diff_values(before, snapshot(instance))
        if not new_values:
            return
        self._log(
            ActivityLog.ActivityType.UPDATE,
            instance.pk,
            getattr(instance, "name", None),
            old_values=old_values,
            new_values=new_values,
        )

    def perform_create(self, serializer):  # type: ignore
        instance = serializer.save()
        self.log_created(instance)

    def perform_update(self, serializer):  # type: ignore
        before = snapshot(serializer.instance)
        instance = serializer.save()
        self.log_updated(instance, before)

    def perform_destroy(self, instance):  # type: ignore
        entity_id = instance.pk
        entity_name = getattr(instance, "name", None)
        before = snapshot(instance)
        instance.delete()
        self._log(ActivityLog.ActivityType.DELETE, entity_id, entity_name, old_values=before)
