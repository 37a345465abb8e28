"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
import redis
from fastapi.testclient import TestClient

from jobboard.main import create_app
from jobboard.models.job import JobFields
from jobboard.services import job_service as job_service_module
from jobboard.services.job_service import JobService
from jobboard.store import MemoryJobStore


class FakeRedis:
    """Just enough of redis.Redis for the job store: ping, get, set, close."""

    def __init__(self, fail: bool = False):
        self.data = {}
        self.fail = fail
        self.closed = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("Connection refused")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value, nx=False):
        self._check()
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    def close(self):
        self.closed = True


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self):
        self.now = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


def parse_ts(value: str) -> datetime:
    """Parse an ISO timestamp as serialized by the API."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock(monkeypatch) -> TickingClock:
    ticking = TickingClock()
    monkeypatch.setattr(job_service_module, "_utcnow", ticking)
    return ticking


@pytest.fixture
def store() -> MemoryJobStore:
    return MemoryJobStore()


@pytest.fixture
def service(store, clock) -> JobService:
    return JobService(store)


@pytest.fixture
def client(store, clock):
    """API client backed by an in-memory store."""
    with TestClient(create_app(store)) as c:
        yield c


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def make_job(service):
    """Create a job through the service with sensible defaults."""

    def _make(company="Acme", position="Engineer", **kwargs):
        return service.create_job(JobFields(company=company, position=position, **kwargs))

    return _make
