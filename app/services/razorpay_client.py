# app/services/razorpay_client.py
import requests
from requests import RequestException

from app.domain.errors import GatewayError
from app.utils.retry import http_retry
from app.utils.settings import (
    RAZORPAY_API_URL,
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
    GATEWAY_TIMEOUT_SECONDS,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RazorpayClient:
    """Minimalny klient REST bramki: tylko tworzenie zamowienia platnosci."""

    def __init__(
        self,
        key_id: str = RAZORPAY_KEY_ID,
        key_secret: str = RAZORPAY_KEY_SECRET,
        base_url: str = RAZORPAY_API_URL,
        timeout: float = GATEWAY_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (key_id, key_secret)

    @http_retry()
    def _post(self, path: str, body: dict) -> dict:
        url = f"{self.base_url}{path}"
        logger.info(f"RazorpayClient POST {url}")

        resp = self.session.post(url, json=body, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict | None = None) -> dict:
        body = {"amount": amount, "currency": currency, "receipt": receipt}
        if notes:
            body["notes"] = notes

        try:
            data = self._post("/v1/orders", body)
        except RequestException as e:
            logger.error(f"Gateway order creation failed for receipt {receipt}: {e}")
            raise GatewayError(f"Failed to create gateway order: {e}") from e

        if not data.get("id"):
            raise GatewayError("Gateway response is missing order id")
        return data
