"""
Roles and capabilities shared by the API and the Python client.

Every role-gated decision goes through ``has_capability``; nothing else
compares role strings. This module must stay free of Django imports so the
client can use it without configuring settings.
"""
import re
from enum import Enum


class Role(str, Enum):
    ADMIN = 'admin'
    MANAGER = 'manager'
    SALES = 'sales'
    INVENTORY = 'inventory'
    QUALITY = 'quality'
    FINANCE = 'finance'
    USER = 'user'

    @property
    def label(self):
        return self.value.capitalize()


class Capability(str, Enum):
    ACCESS_ADMIN_DASHBOARD = 'access_admin_dashboard'
    MANAGE_ORDERS = 'manage_orders'
    MANAGE_PRODUCTS = 'manage_products'
    MANAGE_EMPLOYEES = 'manage_employees'
    VIEW_FINANCE = 'view_finance'


ROLE_CAPABILITIES = {
    Role.ADMIN: frozenset(Capability),
    Role.MANAGER: frozenset({
        Capability.ACCESS_ADMIN_DASHBOARD,
        Capability.MANAGE_ORDERS,
        Capability.MANAGE_PRODUCTS,
        Capability.MANAGE_EMPLOYEES,
    }),
    Role.SALES: frozenset({Capability.MANAGE_ORDERS}),
    Role.INVENTORY: frozenset({Capability.MANAGE_PRODUCTS}),
    Role.QUALITY: frozenset({Capability.MANAGE_PRODUCTS}),
    Role.FINANCE: frozenset({Capability.VIEW_FINANCE}),
    Role.USER: frozenset(),
}


def role_from_value(value):
    """Parse a role from a ``Role`` or a string; unknown values give ``None``."""
    if isinstance(value, Role):
        return value
    if not value:
        return None
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def has_capability(role, capability):
    role = role_from_value(role)
    if role is None:
        return False
    try:
        return Capability(capability) in ROLE_CAPABILITIES[role]
    except ValueError:
        return False


def role_choices():
    return [(role.value, role.label) for role in Role]


def is_admin_email(email, pattern):
    """Whether ``email`` matches the configured admin account pattern."""
    if not email or not pattern:
        return False
    return re.match(pattern, email) is not None
