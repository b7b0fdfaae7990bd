from __future__ import annotations

import httpx
import pytest_asyncio

import dstats.main as main_module
from dstats.main import app


@pytest_asyncio.fixture(autouse=True)
async def clean_state() -> None:
    await main_module.store.reset()
    yield
    await main_module.store.reset()


@pytest_asyncio.fixture
async def client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
