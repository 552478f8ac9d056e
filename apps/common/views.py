import logging

from rest_framework import mixins, viewsets
from rest_framework.response import Response

from apps.audit.services import record_audit
from apps.common.exceptions import STORAGE_ERRORS
from apps.common.permissions import IsAccountOwner

logger = logging.getLogger(__name__)


class AccountScopedViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """CRUD over one catalog table, restricted to the caller's account.

    Foreign rows are filtered out of the queryset, so lookups for them 404.
    Listing degrades to an empty page when the database is unreachable;
    every other action lets the storage error reach the exception handler.
    """

    model = None
    audit_entity = None
    audit_fields = ()
    permission_classes = [IsAccountOwner]

    def get_queryset(self):
        return self.model.objects.filter(account=self.request.user).order_by("-created_at", "-id")

    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except STORAGE_ERRORS as exc:
            logger.warning("Listing %s degraded to empty result: %s", self.audit_entity, exc)
            return Response({"count": 0, "next": None, "previous": None, "results": []})

    def snapshot(self, instance):
        return {field: getattr(instance, field) for field in self.audit_fields}

    def perform_create(self, serializer):
        instance = serializer.save(account=self.request.user)
        record_audit(
            actor=self.request.user,
            action=f"{self.audit_entity}.create",
            entity_type=self.audit_entity,
            entity_id=instance.id,
            payload=self.snapshot(instance),
        )

    def perform_update(self, serializer):
        before = self.snapshot(serializer.instance)
        instance = serializer.save()
        record_audit(
            actor=self.request.user,
            action=f"{self.audit_entity}.update",
            entity_type=self.audit_entity,
            entity_id=instance.id,
            payload={"before": before, "after": self.snapshot(instance)},
        )

    def perform_destroy(self, instance):
        record_audit(
            actor=self.request.user,
            action=f"{self.audit_entity}.delete",
            entity_type=self.audit_entity,
            entity_id=instance.id,
            payload=self.snapshot(instance),
        )
        super().perform_destroy(instance)
