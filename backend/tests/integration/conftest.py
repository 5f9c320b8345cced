"""
Configuration and fixtures for Redis integration tests.

Tests run against a Lua-capable Redis: a live server at ``REDIS_TEST_URL``
when one answers, and fakeredis with its Lua runtime. Unavailable backends
are skipped.
"""

import os

import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import RedisError

from redis_structures import NullCommandTracer, RedisSettings

INTEGRATION_TEST_CONFIG = {
    "redis_url": os.environ.get("REDIS_TEST_URL", "redis://localhost:6379/15"),
    "connect_timeout": 1.0,
}


async def _server_client() -> Redis:
    client = Redis.from_url(
        INTEGRATION_TEST_CONFIG["redis_url"],
        socket_connect_timeout=INTEGRATION_TEST_CONFIG["connect_timeout"],
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        await client.aclose()
        pytest.skip(f"Redis server not reachable: {e}")
    return client


def _fakeredis_client() -> Redis:
    fakeredis = pytest.importorskip("fakeredis")
    pytest.importorskip("lupa")
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


@pytest.fixture(scope="session")
def integration_config():
    """Provide integration test configuration."""
    return INTEGRATION_TEST_CONFIG


@pytest_asyncio.fixture(params=["server", "fakeredis"])
async def lua_redis(request):
    """
    Empty Lua-capable Redis database.

    Yields:
        redis.asyncio client with raw (bytes) responses
    """
    if request.param == "server":
        client = await _server_client()
    else:
        client = _fakeredis_client()

    await client.flushdb()
    yield client
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def lua_settings(lua_redis):
    """Partition backed by the Lua-capable Redis with the default codec."""
    return RedisSettings(client=lua_redis, command_tracer=NullCommandTracer())


def pytest_configure(config):
    """
    Configure custom pytest markers.
    """
    config.addinivalue_line(
        "markers", "integration: marks tests that need a Lua-capable Redis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to add markers automatically.
    """
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
