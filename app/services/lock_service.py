import uuid

import redis

from app.utils.retry import redis_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua jako jedna nieprzerywalna operacje
#nie mozna wcisnac sie miedzy GET a DEL


class LockService:
    """
    -blokada checkoutu dla sesji (jeden createOrder naraz)
    -zwalnianie tylko przez wlasciciela tokenu
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    @staticmethod
    def checkout_key(session_id: str) -> str:
        return f"checkout:{session_id}:lock"

    @redis_retry()
    def acquire(self, key: str, ttl: int) -> str | None:
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        #SET checkout:abc:lock "<token>" NX EX 30
        ok = self.redis.set(name=key, value=token, nx=True, ex=ttl)
        return token if ok else None

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
