# app/domain/statuses.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    # ustawiane wylacznie przez bramke platnosci
    PAID = "paid"
    PAYMENT_FAILED = "payment_failed"


class PaymentStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"


# statusy ktore moze ustawic admin
ADMIN_STATUSES = frozenset(
    s.value
    for s in (
        OrderStatus.PENDING,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    )
)

# platnosc zmienia status zamowienia tylko przed realizacja,
# spozniony webhook nie cofa zamowienia wyslanego przez admina
PAYMENT_UPDATABLE_STATUSES = frozenset(
    s.value for s in (OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PAYMENT_FAILED)
)

# uzywane tylko gdy ORDER_STRICT_TRANSITIONS=true
ALLOWED_TRANSITIONS = {
    "pending": {"processing", "cancelled"},
    "paid": {"processing", "cancelled", "refunded"},
    "payment_failed": {"pending", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": {"refunded"},
    "cancelled": set(),
    "refunded": set(),
}

STATUS_MESSAGES = {
    "pending": "Your order has been received and is being processed.",
    "processing": "Your order is currently being prepared for shipment.",
    "shipped": "Your order has been shipped and is on its way to you.",
    "delivered": "Your order has been successfully delivered.",
    "cancelled": "Your order has been cancelled.",
    "refunded": "Your order has been refunded.",
}


def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, "Your order status has been updated.")
