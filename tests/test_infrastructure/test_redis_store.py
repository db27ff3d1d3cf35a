"""
Tests for the Upstash client and RedisRecordStore
===================================================

All tests run against FakeUpstash (see conftest) through httpx.MockTransport.

What's Being Tested:
    - Pipeline write: record blob with TTL, time index, project set, legacy list
    - Index pruning on write
    - Reads from the time index, with fallback to the legacy list
    - Corrupt / expired blobs dropped from results
    - Project registry reconstruction
    - clear removes every known key
    - Transport and REST errors surface as BackendUnavailableError
"""

import json
from datetime import timedelta

import pytest

from deploy_dashboard.domain.errors import BackendUnavailableError
from deploy_dashboard.infrastructure.store.redis_store import (
    DEPLOY_INDEX_KEY,
    DEPLOY_LIST_KEY,
    PROJECT_SET_KEY,
    record_key,
)
from deploy_dashboard.infrastructure.upstash.upstash_client import UpstashClient
from tests.conftest import NOW, UPSTASH_URL, make_record


class TestUpstashClient:
    async def test_execute_returns_result(self, upstash_client, fake_upstash) -> None:
        assert await upstash_client.execute("SET", "k", "v") == "OK"
        assert fake_upstash.strings == {"k": "v"}

    async def test_pipeline_returns_results_in_order(self, upstash_client) -> None:
        results = await upstash_client.pipeline([["SADD", "s", "a"], ["SMEMBERS", "s"]])
        assert results == [1, ["a"]]

    async def test_rest_error_raises(self, upstash_client, fake_upstash) -> None:
        fake_upstash.error = "ERR wrong number of arguments"
        with pytest.raises(BackendUnavailableError, match="wrong number of arguments"):
            await upstash_client.execute("GET")

    async def test_connection_error_raises(self, upstash_client, fake_upstash) -> None:
        fake_upstash.down = True
        with pytest.raises(BackendUnavailableError) as exc_info:
            await upstash_client.execute("SMEMBERS", "s")
        assert exc_info.value.backend == "redis"

    async def test_bad_token_raises(self, fake_upstash) -> None:
        client = UpstashClient(UPSTASH_URL, "wrong", transport=fake_upstash.transport())
        with pytest.raises(BackendUnavailableError, match="Unauthorized"):
            await client.execute("SMEMBERS", "s")


class TestRedisRecordStorePut:
    async def test_writes_every_index(self, redis_store, fake_upstash) -> None:
        record = make_record()
        await redis_store.put(record)

        assert json.loads(fake_upstash.strings[record_key(record.id)]) == record.to_dict()
        assert fake_upstash.zsets[DEPLOY_INDEX_KEY] == {record.id: float(record.score)}
        assert fake_upstash.sets[PROJECT_SET_KEY] == {"svc-a"}
        assert len(fake_upstash.lists[DEPLOY_LIST_KEY]) == 1

    async def test_record_key_expires_with_retention_window(self, redis_store, fake_upstash) -> None:
        await redis_store.put(make_record())
        set_command = next(c for c in fake_upstash.commands if c[0] == "SET")
        assert set_command[3:] == ["EX", 30 * 24 * 60 * 60]

    async def test_prunes_aged_index_entries(self, redis_store, fake_upstash) -> None:
        fake_upstash.zsets[DEPLOY_INDEX_KEY] = {
            "stale": (NOW - timedelta(days=31)).timestamp() * 1000,
            "edge": (NOW - timedelta(days=30)).timestamp() * 1000,
        }
        await redis_store.put(make_record())
        assert "stale" not in fake_upstash.zsets[DEPLOY_INDEX_KEY]
        assert "edge" in fake_upstash.zsets[DEPLOY_INDEX_KEY]

    async def test_legacy_list_is_capped(self, redis_store, fake_upstash) -> None:
        fake_upstash.lists[DEPLOY_LIST_KEY] = ["{}"] * 200
        await redis_store.put(make_record())
        assert len(fake_upstash.lists[DEPLOY_LIST_KEY]) == 200


class TestRedisRecordStoreRead:
    async def test_lists_from_time_index_newest_first(self, redis_store) -> None:
        older = make_record(deployed_at=NOW - timedelta(hours=1))
        newer = make_record(deployed_at=NOW)
        await redis_store.put(newer)
        await redis_store.put(older)

        assert [r.id for r in await redis_store.list()] == [newer.id, older.id]

    async def test_skips_missing_and_corrupt_blobs(self, redis_store, fake_upstash) -> None:
        kept = make_record()
        await redis_store.put(kept)
        fake_upstash.zsets[DEPLOY_INDEX_KEY]["expired"] = float(kept.score + 1)
        fake_upstash.zsets[DEPLOY_INDEX_KEY]["corrupt"] = float(kept.score + 2)
        fake_upstash.strings[record_key("corrupt")] = "{oops"

        assert await redis_store.list() == [kept]

    async def test_falls_back_to_legacy_list(self, redis_store, fake_upstash) -> None:
        older = make_record(deployed_at=NOW - timedelta(hours=1))
        newer = make_record(deployed_at=NOW)
        # Legacy list order is not trusted
        fake_upstash.lists[DEPLOY_LIST_KEY] = [older.to_json(), "garbage", newer.to_json(), newer.to_json()]

        assert await redis_store.list() == [newer, older]

    async def test_projects_from_set(self, redis_store) -> None:
        await redis_store.put(make_record(project_name="svc-a"))
        await redis_store.put(make_record(project_name="svc-b"))
        assert await redis_store.projects() == {"svc-a", "svc-b"}

    async def test_projects_reconstructed_when_set_missing(self, redis_store, fake_upstash) -> None:
        await redis_store.put(make_record(project_name="svc-a"))
        del fake_upstash.sets[PROJECT_SET_KEY]
        assert await redis_store.projects() == {"svc-a"}

    async def test_read_failure_raises(self, redis_store, fake_upstash) -> None:
        fake_upstash.down = True
        with pytest.raises(BackendUnavailableError):
            await redis_store.list()


class TestRedisRecordStoreClear:
    async def test_clear_removes_all_keys(self, redis_store, fake_upstash) -> None:
        await redis_store.put(make_record(project_name="svc-a"))
        await redis_store.put(make_record(project_name="svc-b"))

        removed = await redis_store.clear()

        assert removed == 5  # two blobs, index, legacy list, project set
        assert fake_upstash.keys() == set()
        assert await redis_store.list() == []
        assert await redis_store.projects() == set()

    async def test_clear_on_empty_store(self, redis_store) -> None:
        assert await redis_store.clear() == 0
