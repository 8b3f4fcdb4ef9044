# app/domain/errors.py
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    SECURITY = "security"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class CheckoutError(Exception):
    """
    Bazowy blad domeny checkout.
    kind - zamkniety zbior kategorii (mapowany na status HTTP),
    code - stabilny kod dla klienta.
    """

    kind = ErrorKind.INTERNAL
    code = "INTERNAL_ERROR"
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# walidacja
class ValidationFailed(CheckoutError):
    kind = ErrorKind.VALIDATION
    code = "INVALID_REQUEST"
    default_message = "Invalid request"


class EmptyCart(CheckoutError):
    kind = ErrorKind.VALIDATION
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class InvalidStatus(CheckoutError):
    kind = ErrorKind.VALIDATION
    code = "INVALID_STATUS"
    default_message = "Invalid order status"


class InvalidWebhookPayload(CheckoutError):
    kind = ErrorKind.VALIDATION
    code = "INVALID_WEBHOOK_PAYLOAD"
    default_message = "Invalid webhook payload"


# konflikty
class InsufficientInventory(CheckoutError):
    kind = ErrorKind.CONFLICT
    code = "INSUFFICIENT_INVENTORY"
    default_message = "Insufficient inventory"


class ProductUnavailable(CheckoutError):
    kind = ErrorKind.CONFLICT
    code = "PRODUCT_UNAVAILABLE"
    default_message = "Product is not available"


class OrderInProgress(CheckoutError):
    kind = ErrorKind.CONFLICT
    code = "ORDER_IN_PROGRESS"
    default_message = "An order for this cart is already being created"


class InvalidStatusTransition(CheckoutError):
    kind = ErrorKind.CONFLICT
    code = "INVALID_STATUS_TRANSITION"
    default_message = "Status transition is not allowed"


# brak zasobu
class ProductNotFound(CheckoutError):
    kind = ErrorKind.NOT_FOUND
    code = "PRODUCT_NOT_FOUND"
    default_message = "Product not found"


class CartItemNotFound(CheckoutError):
    kind = ErrorKind.NOT_FOUND
    code = "ITEM_NOT_FOUND"
    default_message = "Item not found in cart"


class OrderNotFound(CheckoutError):
    kind = ErrorKind.NOT_FOUND
    code = "ORDER_NOT_FOUND"
    default_message = "Order not found"


class PaymentRecordNotFound(CheckoutError):
    kind = ErrorKind.NOT_FOUND
    code = "PAYMENT_NOT_FOUND"
    default_message = "Payment record not found"


# bezpieczenstwo
class InvalidSignature(CheckoutError):
    kind = ErrorKind.SECURITY
    code = "INVALID_SIGNATURE"
    default_message = "Invalid payment signature"


# zewnetrzne systemy
class GatewayError(CheckoutError):
    kind = ErrorKind.UPSTREAM
    code = "PAYMENT_GATEWAY_ERROR"
    default_message = "Payment gateway request failed"


class PersistenceError(CheckoutError):
    kind = ErrorKind.INTERNAL
    code = "PERSISTENCE_ERROR"
    default_message = "Failed to persist changes"
