# app/services/notification_service.py
import smtplib
from email.message import EmailMessage

from app.celery_worker import celery_app
from app.data.models.order import OrderModel
from app.domain.statuses import status_message
from app.utils import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    def send_order_status_update(self, order: OrderModel, old_status: str, new_status: str):
        """
        Kolejkuje email o zmianie statusu. Blad brokera leci wyzej,
        wolajacy decyduje czy go zignorowac.
        """
        payload = {
            "order_id": order.id,
            "email": order.user.email if order.user else None,
            "first_name": order.user.first_name if order.user else "",
            "total": str(order.total),
        }
        send_order_status_update_task.apply_async(
            args=[payload, old_status, new_status],
            retry=False,
        )


def render_status_email(payload: dict, old_status: str, new_status: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = f"Order Update - Order #{payload['order_id'][:8]}"
    msg["From"] = settings.FROM_EMAIL
    msg["To"] = payload["email"]
    msg.set_content(
        f"Hello {payload.get('first_name') or 'there'},\n\n"
        f"{status_message(new_status)}\n\n"
        f"Order: {payload['order_id']}\n"
        f"Status: {old_status} -> {new_status}\n"
        f"Total: {payload['total']}\n"
    )
    return msg


def smtp_enabled() -> bool:
    return all(
        (settings.SMTP_HOST, settings.SMTP_USERNAME, settings.SMTP_PASSWORD, settings.FROM_EMAIL)
    )


@celery_app.task(name="app.services.notification_service.send_order_status_update_task")
def send_order_status_update_task(payload: dict, old_status: str, new_status: str):
    """
    Celery task - email o zmianie statusu zamowienia.
    Bez konfiguracji SMTP tylko loguje.
    """
    order_id = payload["order_id"]

    if not smtp_enabled() or not payload.get("email"):
        logger.info(f"[NOTIFICATION] Email disabled, order {order_id}: {old_status} -> {new_status}")
        return {"order_id": order_id, "status": "skipped"}

    msg = render_status_email(payload, old_status, new_status)
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.NOTIFIER_TIMEOUT_SECONDS) as smtp:
        smtp.starttls()
        smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        smtp.send_message(msg)

    logger.info(f"[NOTIFICATION] Status email sent to {payload['email']} for order {order_id}")
    return {"order_id": order_id, "status": "sent"}
