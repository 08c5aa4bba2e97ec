from rest_framework.permissions import BasePermission

from .roles import Capability


class CapabilityPermission(BasePermission):
    """Grant access when the user's role carries ``capability``"""
    capability = None
    message = 'Access denied. Insufficient privileges.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.has_capability(self.capability)


def HasCapability(capability):
    """
    Build a permission class for one capability.

    Usage:
        @permission_classes([IsAuthenticated, HasCapability(Capability.MANAGE_ORDERS)])
    """
    capability = Capability(capability)
    return type(
        f'Has{capability.name.title().replace("_", "")}',
        (CapabilityPermission,),
        {'capability': capability},
    )


IsOrderManager = HasCapability(Capability.MANAGE_ORDERS)
IsProductManager = HasCapability(Capability.MANAGE_PRODUCTS)
IsEmployeeManager = HasCapability(Capability.MANAGE_EMPLOYEES)
IsFinanceViewer = HasCapability(Capability.VIEW_FINANCE)
IsDashboardUser = HasCapability(Capability.ACCESS_ADMIN_DASHBOARD)
