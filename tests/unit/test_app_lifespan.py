from unittest.mock import AsyncMock
import pytest
from fastapi import FastAPI

from glori.app_setup import lifespan as lifespan_mod


async def _run(app):
    async with lifespan_mod.lifespan(app):
        return app.state.rate_limit_enabled


@pytest.mark.asyncio
async def test_disabled_for_tests(monkeypatch):
    init = AsyncMock()
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
    monkeypatch.setattr(lifespan_mod.FastAPILimiter, "init", init)
    assert await _run(FastAPI()) is False
    init.assert_not_called()


@pytest.mark.asyncio
async def test_fake_redis_enables_limiter(monkeypatch):
    init = AsyncMock()
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "0")
    monkeypatch.setenv("USE_FAKE_REDIS_FOR_TESTS", "1")
    monkeypatch.setattr(lifespan_mod.FastAPILimiter, "init", init)
    assert await _run(FastAPI()) is True
    init.assert_awaited_once()


@pytest.mark.parametrize("fallback, expected", [("1", True), ("0", False)])
@pytest.mark.asyncio
async def test_init_failure_uses_local_fallback_flag(monkeypatch, fallback, expected):
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "0")
    monkeypatch.setenv("USE_FAKE_REDIS_FOR_TESTS", "1")
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", fallback)
    monkeypatch.setattr(lifespan_mod.FastAPILimiter, "init", AsyncMock(side_effect=ConnectionError("no redis")))
    assert await _run(FastAPI()) is expected
