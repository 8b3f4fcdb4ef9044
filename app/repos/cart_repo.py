# app/repos/cart_repo.py
import redis
from pydantic import ValidationError

from app.domain.cart import Cart
from app.utils.retry import redis_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)

CART_KEY_PREFIX = "cart:"


class CartRepo:
    """Koszyk jako JSON pod kluczem cart:<session_id>, TTL odnawiany przy kazdym zapisie."""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{CART_KEY_PREFIX}{session_id}"

    @redis_retry()
    def get(self, session_id: str) -> Cart | None:
        data = self.redis.get(self._key(session_id))
        if data is None:
            return None
        try:
            return Cart.model_validate_json(data)
        except ValidationError:
            logger.warning(f"Corrupted cart payload for session {session_id}, treating as empty")
            return None

    @redis_retry()
    def save(self, cart: Cart) -> None:
        self.redis.set(self._key(cart.session_id), cart.model_dump_json(), ex=self.ttl_seconds)

    @redis_retry()
    def delete(self, session_id: str) -> None:
        self.redis.delete(self._key(session_id))
