# app/data/redis_client.py
import redis
from fastapi import Request


def make_redis(url: str) -> redis.Redis:
    return redis.Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=2,
        socket_connect_timeout=2,
    )


def get_redis(request: Request) -> redis.Redis:
    return request.app.state.redis
