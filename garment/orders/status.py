"""
Order status workflow and its presentation.

One table maps each status to the badge shown in order lists, detail pages
and admin panels. Kept free of Django imports so the Python client shares it.
"""
from collections import namedtuple
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = 'Pending'
    PROCESSING = 'Processing'
    SHIPPED = 'Shipped'
    DELIVERED = 'Delivered'
    CANCELLED = 'Cancelled'

    def __str__(self):
        return self.value


StatusBadge = namedtuple('StatusBadge', ['color_class', 'icon'])

DEFAULT_BADGE = StatusBadge('bg-gray-100 text-gray-800', 'info-circle')

STATUS_BADGES = {
    OrderStatus.PENDING: StatusBadge('bg-yellow-100 text-yellow-800', 'clock'),
    OrderStatus.PROCESSING: StatusBadge('bg-blue-100 text-blue-800', 'cog'),
    OrderStatus.SHIPPED: StatusBadge('bg-purple-100 text-purple-800', 'truck'),
    OrderStatus.DELIVERED: StatusBadge('bg-green-100 text-green-800', 'check-circle'),
    OrderStatus.CANCELLED: StatusBadge('bg-red-100 text-red-800', 'times-circle'),
}

# Progress bar position on the tracking page
STATUS_STEPS = {
    OrderStatus.PENDING: 0,
    OrderStatus.PROCESSING: 1,
    OrderStatus.SHIPPED: 2,
    OrderStatus.DELIVERED: 3,
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

# Admin buttons and the status each one moves the order to
ACTIONS = {
    'process': OrderStatus.PROCESSING,
    'ship': OrderStatus.SHIPPED,
    'deliver': OrderStatus.DELIVERED,
    'cancel': OrderStatus.CANCELLED,
}

NEXT_ACTIONS = {
    OrderStatus.PENDING: ('process', 'cancel'),
    OrderStatus.PROCESSING: ('ship', 'cancel'),
    OrderStatus.SHIPPED: ('deliver',),
}


def parse_status(value):
    """Return the ``OrderStatus`` for ``value`` or ``None`` if it is not a known status"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def status_badge(value):
    status = parse_status(value)
    return STATUS_BADGES.get(status, DEFAULT_BADGE)


def status_step(value):
    return STATUS_STEPS.get(parse_status(value), 0)


def is_terminal(value):
    return parse_status(value) in TERMINAL_STATUSES


def can_cancel(value):
    return parse_status(value) in CANCELLABLE_STATUSES


def can_transition(current, new):
    """
    Admin status workflow: any known status may be set, except that a
    delivered or cancelled order stays where it is.
    """
    current_status = parse_status(current)
    new_status = parse_status(new)
    if current_status is None or new_status is None:
        return False
    if current_status == new_status:
        return True
    return current_status not in TERMINAL_STATUSES


def available_actions(value):
    """Names of the admin actions that apply to an order in this status"""
    return list(NEXT_ACTIONS.get(parse_status(value), ()))


def status_choices():
    return [(status.value, status.value) for status in OrderStatus]
