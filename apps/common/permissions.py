from rest_framework.permissions import BasePermission


class IsAccountOwner(BasePermission):
    """Rows are visible only to the account that owns them."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        return getattr(obj, "account_id", None) == request.user.id
