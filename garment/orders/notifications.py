"""Order confirmation email, sent once the order transaction has committed"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

logger = logging.getLogger('garment.orders')


def build_confirmation_message(order, items):
    lines = [
        f"Hello {order.user.name},",
        "",
        f"Thank you for your order. Your order number is #{order.pk}.",
        "",
    ]
    for item in items:
        lines.append(f"  {item.name}  x{item.quantity}  @ {item.price:.2f}  = {item.line_total:.2f}")
    lines.extend([
        "",
        f"Total: {order.total_price:.2f}",
        "",
        f"Track your order at {settings.FRONTEND_URL}/orders/{order.pk}",
    ])
    return "\n".join(lines)


def send_order_confirmation_email(order):
    """Mail the customer a summary of the order; failures are logged only"""
    try:
        items = list(order.items.all())
        send_mail(
            f"Order Confirmation #{order.pk}",
            build_confirmation_message(order, items),
            settings.DEFAULT_FROM_EMAIL,
            [order.user.email],
            fail_silently=False,
        )
        logger.info(f"Order confirmation email sent for order {order.pk}")
    except Exception as e:
        logger.error(f"Error sending order confirmation email for order {order.pk}: {str(e)}")


def queue_order_confirmation(order):
    transaction.on_commit(lambda: send_order_confirmation_email(order))
