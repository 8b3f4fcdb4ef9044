from decimal import Decimal

from app.data.models import OrderModel, UserModel
from app.services import notification_service
from app.services.notification_service import (
    NotificationService,
    render_status_email,
    send_order_status_update_task,
)


PAYLOAD = {"order_id": "0123456789abcdef", "email": "jan@example.com", "first_name": "Jan", "total": "10.00"}


class TestNotificationService:
    def test_enqueues_task_with_order_payload(self, monkeypatch):
        sent = []

        class FakeTask:
            def apply_async(self, args, retry):
                sent.append((args, retry))

        monkeypatch.setattr(notification_service, "send_order_status_update_task", FakeTask())
        order = OrderModel(id="0123456789abcdef", total=Decimal("10.00"))
        order.user = UserModel(id="u1", email="jan@example.com", first_name="Jan", last_name="K")

        NotificationService().send_order_status_update(order, "pending", "shipped")

        assert sent == [([PAYLOAD, "pending", "shipped"], False)]


class TestStatusEmailTask:
    def test_skipped_without_smtp(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "SMTP_HOST", "")
        result = send_order_status_update_task(PAYLOAD, "pending", "shipped")
        assert result == {"order_id": PAYLOAD["order_id"], "status": "skipped"}

    def test_render(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "FROM_EMAIL", "shop@example.com")
        msg = render_status_email(PAYLOAD, "pending", "shipped")

        assert msg["Subject"] == "Order Update - Order #01234567"
        assert msg["To"] == "jan@example.com"
        assert "on its way" in msg.get_content()
