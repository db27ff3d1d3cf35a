"""
Shared Test Fixtures for the Deploy Dashboard
===============================================

Fixtures are organized by layer:

    1. Clock and retention (a frozen "now")
    2. Storage backends (memory, file, fake Upstash REST endpoint)
    3. Services
    4. HTTP application
"""

from __future__ import annotations

import fnmatch
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from deploy_dashboard.config import Settings
from deploy_dashboard.domain.entities.deployment import DeployRecord, DeployStatus
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.domain.services.deploy_service import DeployService
from deploy_dashboard.domain.services.query_service import QueryService
from deploy_dashboard.infrastructure.store.file_store import JsonFileRecordStore
from deploy_dashboard.infrastructure.store.memory_store import MemoryRecordStore
from deploy_dashboard.infrastructure.store.redis_store import RedisRecordStore
from deploy_dashboard.infrastructure.upstash.upstash_client import UpstashClient
from deploy_dashboard.main import create_app

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
UPSTASH_URL = "https://fake-upstash.test"
UPSTASH_TOKEN = "test-token"


# =============================================================================
# Helpers
# =============================================================================
def make_record(**overrides: Any) -> DeployRecord:
    """Create a standard deploy record with optional overrides."""
    defaults: Dict[str, Any] = {
        "title": "deploy",
        "project_name": "svc-a",
        "operator": "alice",
        "environment": "prod",
        "branch": "main",
        "commit": "abc123",
        "status": DeployStatus.SUCCESS,
        "deployed_at": NOW,
    }
    defaults.update(overrides)
    return DeployRecord(**defaults)


def make_payload(**overrides: Any) -> Dict[str, Any]:
    """Create a CI payload as posted to /api/deploy."""
    payload = {
        "title": "deploy",
        "projectName": "svc-a",
        "operator": "alice",
        "environment": "prod",
        "branch": "main",
        "commit": "abc123",
        "status": "success",
    }
    payload.update(overrides)
    return payload


class FakeUpstash:
    """In-process stand-in for the Upstash REST API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.strings: Dict[str, str] = {}
        self.zsets: Dict[str, Dict[str, float]] = {}
        self.lists: Dict[str, List[str]] = {}
        self.sets: Dict[str, set] = {}
        self.commands: List[List[Any]] = []
        self.down = False
        self.error: Optional[str] = None

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if request.headers.get("Authorization") != f"Bearer {UPSTASH_TOKEN}":
            return httpx.Response(401, json={"error": "Unauthorized"})
        if self.error:
            return httpx.Response(400, json={"error": self.error})

        body = json.loads(request.content)
        if request.url.path == "/pipeline":
            return httpx.Response(200, json=[{"result": self.run(command)} for command in body])
        return httpx.Response(200, json={"result": self.run(body)})

    def keys(self) -> set:
        return set(self.strings) | set(self.zsets) | set(self.lists) | set(self.sets)

    def run(self, command: List[Any]) -> Any:
        self.commands.append(command)
        name, args = str(command[0]).upper(), command[1:]

        if name == "SET":
            self.strings[args[0]] = args[1]
            return "OK"
        if name == "MGET":
            return [self.strings.get(key) for key in args]
        if name == "ZADD":
            self.zsets.setdefault(args[0], {})[str(args[2])] = float(args[1])
            return 1
        if name == "ZRANGE":
            members = sorted(self.zsets.get(args[0], {}).items(), key=lambda item: (item[1], item[0]))
            if "REV" in args[3:]:
                members.reverse()
            start, stop = int(args[1]), int(args[2])
            stop = len(members) if stop == -1 else stop + 1
            return [member for member, _ in members[start:stop]]
        if name == "ZREMRANGEBYSCORE":
            zset = self.zsets.get(args[0], {})
            upper = str(args[2])
            exclusive = upper.startswith("(")
            bound = float(upper.lstrip("("))
            doomed = [m for m, s in zset.items() if (s < bound if exclusive else s <= bound)]
            for member in doomed:
                del zset[member]
            return len(doomed)
        if name == "SADD":
            members = self.sets.setdefault(args[0], set())
            added = [m for m in args[1:] if m not in members]
            members.update(args[1:])
            return len(added)
        if name == "SMEMBERS":
            return sorted(self.sets.get(args[0], set()))
        if name == "LPUSH":
            self.lists.setdefault(args[0], [])[:0] = list(reversed(args[1:]))
            return len(self.lists[args[0]])
        if name == "LTRIM":
            items = self.lists.get(args[0], [])
            self.lists[args[0]] = items[int(args[1]) : int(args[2]) + 1]
            return "OK"
        if name == "LRANGE":
            items = self.lists.get(args[0], [])
            stop = int(args[2])
            return items[int(args[1]) : (len(items) if stop == -1 else stop + 1)]
        if name == "KEYS":
            return sorted(key for key in self.keys() if fnmatch.fnmatchcase(key, args[0]))
        if name == "DEL":
            removed = 0
            for key in args:
                for space in (self.strings, self.zsets, self.lists, self.sets):
                    if key in space:
                        del space[key]
                        removed += 1
            return removed
        raise AssertionError(f"unexpected command {command}")


# =============================================================================
# Clock and retention
# =============================================================================
@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def retention(clock):
    return RetentionPolicy(window=timedelta(days=30), clock=clock)


# =============================================================================
# Storage backends
# =============================================================================
@pytest.fixture
def memory_store(retention):
    return MemoryRecordStore(retention=retention)


@pytest.fixture
def file_store(tmp_path, retention):
    return JsonFileRecordStore(tmp_path / ".data", retention=retention)


@pytest.fixture
def fake_upstash():
    return FakeUpstash()


@pytest.fixture
def upstash_client(fake_upstash):
    return UpstashClient(UPSTASH_URL, UPSTASH_TOKEN, transport=fake_upstash.transport())


@pytest.fixture
def redis_store(upstash_client, retention):
    return RedisRecordStore(upstash_client, retention=retention)


# =============================================================================
# Services
# =============================================================================
@pytest.fixture
def deploy_service(memory_store, clock):
    return DeployService(memory_store, clock=clock)


@pytest.fixture
def query_service(memory_store, retention):
    return QueryService(memory_store, retention=retention)


# =============================================================================
# HTTP application
# =============================================================================
@pytest.fixture
def settings(tmp_path):
    return Settings(
        DEPLOY_DATA_DIR=str(tmp_path / ".data"),
        UPSTASH_REDIS_REST_URL=None,
        UPSTASH_REDIS_REST_TOKEN=None,
        DEPLOY_REMOTE_ONLY=False,
        BARK_BASE=None,
    )


@pytest.fixture
def client(settings, retention):
    """TestClient over the file + memory tiers."""
    app = create_app(settings=settings, retention=retention)
    with TestClient(app) as test_client:
        yield test_client
