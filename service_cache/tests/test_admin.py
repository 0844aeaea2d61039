"""
Tests for the cache admin CLI.
"""

import json

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, patch

from service_cache.app import admin
from service_cache.app.cache.cache_service import CacheService
from service_cache.app.cache.namespaces import CacheNamespace
from shared.errors import UnknownNamespaceError
from shared.test_helpers import InMemoryKeyValueStore


@pytest.fixture
def store():
    """In-memory store that also supports the RedisStore lifecycle."""
    memory_store = InMemoryKeyValueStore()
    memory_store.stop = AsyncMock()
    return memory_store


@pytest_asyncio.fixture
async def seeded_store(store):
    """Store with a few cached transactions and users."""
    cache = CacheService(store)
    await cache.set(CacheNamespace.TRANSACTIONS, "t1", {"amount": 10})
    await cache.set(CacheNamespace.TRANSACTIONS, "t2", {"amount": 20})
    await cache.set(CacheNamespace.USERS, "u1", {"name": "Alice"})
    return store


def _args(*argv):
    return admin.build_parser().parse_args(list(argv))


@pytest.mark.asyncio
async def test_invalidate_command(seeded_store):
    """Test namespace invalidation through the CLI."""
    summary = await admin.run_command(_args("invalidate", "transactions"), seeded_store)

    assert summary == {"namespace": "transactions", "keys_deleted": 2}
    assert list(seeded_store.data) == ["stellar:usr:u1"]


@pytest.mark.asyncio
async def test_get_command(seeded_store):
    """Test reading a cached entry through the CLI."""
    summary = await admin.run_command(_args("get", "users", "u1"), seeded_store)

    assert summary == {"key": "stellar:usr:u1", "value": {"name": "Alice"}}


@pytest.mark.asyncio
async def test_delete_command(seeded_store):
    """Test deleting a cached entry through the CLI."""
    summary = await admin.run_command(_args("delete", "users", "u1"), seeded_store)

    assert summary == {"key": "stellar:usr:u1", "deleted": True}


@pytest.mark.asyncio
async def test_key_prefix_option(seeded_store):
    """Test the prefix option scopes commands."""
    summary = await admin.run_command(
        _args("--key-prefix", "other:", "invalidate", "transactions"), seeded_store
    )

    assert summary["keys_deleted"] == 0


@pytest.mark.asyncio
async def test_unknown_namespace(store):
    """Test unknown namespaces are rejected."""
    with pytest.raises(UnknownNamespaceError):
        await admin.run_command(_args("invalidate", "customers"), store)


def test_main_prints_json(store, capsys):
    """Test main prints the command summary as JSON."""
    with patch.object(admin, "RedisStore", return_value=store):
        exit_code = admin.main(["ping"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"healthy": True}
    store.stop.assert_awaited_once()


def test_main_unhealthy_exit_code(store, capsys):
    """Test an unhealthy store gives a non-zero exit code."""
    store.ping = AsyncMock(side_effect=ConnectionError("connection refused"))

    with patch.object(admin, "RedisStore", return_value=store):
        exit_code = admin.main(["ping"])

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out) == {"healthy": False}


def test_main_unknown_namespace(store, capsys):
    """Test unknown namespaces exit with a usage error."""
    with patch.object(admin, "RedisStore", return_value=store):
        exit_code = admin.main(["invalidate", "customers"])

    assert exit_code == 2
    assert "customers" in capsys.readouterr().err


def test_main_glob_key_prefix(store, capsys):
    """Test a key prefix with glob characters exits with a usage error."""
    with patch.object(admin, "RedisStore", return_value=store):
        exit_code = admin.main(["--key-prefix", "app*", "ping"])

    assert exit_code == 2
    assert "glob" in capsys.readouterr().err
    assert store.pings == 0
    store.stop.assert_awaited_once()
