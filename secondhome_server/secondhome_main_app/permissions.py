from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission

from .utils.constants import UserRole


def get_role(user):
    profile = getattr(user, 'profile', None)
    return profile.role if profile else None


class IsAdminRole(BasePermission):
    """Moderation tools answer 401 to anyone who is not an admin"""

    def has_permission(self, request, view):
        if request.user and request.user.is_authenticated and get_role(request.user) == UserRole.ADMIN:
            return True
        raise NotAuthenticated('Unauthorized')


class IsOwnerOrAdmin(BasePermission):
    message = 'Only property owners can perform this action'

    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated
            and get_role(request.user) in (UserRole.OWNER, UserRole.ADMIN)
        )


class IsListingOwnerOrAdmin(BasePermission):
    message = 'You do not have permission to modify this listing'

    def has_object_permission(self, request, view, obj):
        return obj.owner_id == request.user.id or get_role(request.user) == UserRole.ADMIN
