"""
Lifespan: branche le limiteur des mutations du panier sur Redis.
DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1 le coupe, USE_FAKE_REDIS_FOR_TESTS=1 le branche sur fakeredis.
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter
import redis.asyncio as redis

logger = logging.getLogger("uvicorn.error")


def _limiter_redis():
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        from fakeredis.aioredis import FakeRedis
        return FakeRedis(decode_responses=True)
    url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
    return redis.from_url(url, encoding="utf-8", decode_responses=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.rate_limit_enabled = False
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        logger.info("cart rate limiting disabled for tests")
        yield
        return

    try:
        await FastAPILimiter.init(_limiter_redis())
        app.state.rate_limit_enabled = True
        logger.info("cart rate limiting enabled")
    except Exception as e:
        # Le fallback mémoire est géré par optional_rate_limit
        local = os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1"
        app.state.rate_limit_enabled = local
        logger.warning("cart rate limiter unavailable (%s), local fallback=%s", e, local)
    yield
