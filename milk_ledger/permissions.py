from rest_framework import permissions


class IsCollectionStaff(permissions.BasePermission):
    """Staff at the collection point: records deliveries and sales."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsLedgerAdmin(permissions.BasePermission):
    """Reviews payments, edits prices, lifts suspensions and runs the archive by hand."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser)


class IsLedgerAdminOrReadOnly(permissions.BasePermission):

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_superuser
