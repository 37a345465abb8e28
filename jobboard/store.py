"""Storage backends for the job collection and its id counter.

Three backends share one interface: Redis (managed key-value store), a local
JSON file, and process memory. ``create_store`` picks one at startup.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import redis
from pydantic import ValidationError

from jobboard.config import Settings
from jobboard.errors import StorageError
from jobboard.models import VALID_STATUSES, Job, JobStatus

logger = logging.getLogger(__name__)

# Optional text fields as they appear in stored records.
OPTIONAL_TEXT_FIELDS = ("source", "resumeUsed", "notes", "url", "salary", "location", "contactPerson")


def normalize_record(record: dict) -> dict:
    """Repair what older clients wrote: off-list or empty status, null text fields.

    Records missing company or position cannot be repaired and are left as
    they are for validation to reject.
    """
    fixed = dict(record)
    if fixed.get("status") not in VALID_STATUSES:
        logger.warning(
            "Job %s has status %r, treating it as %r",
            fixed.get("id"), fixed.get("status"), JobStatus.APPLIED.value,
        )
        fixed["status"] = JobStatus.APPLIED.value
    for name in OPTIONAL_TEXT_FIELDS:
        if fixed.get(name) is None:
            fixed[name] = ""
    return fixed


def describe_validation_error(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
    )


def _parse_jobs(records: object) -> list[Job]:
    if not isinstance(records, list):
        raise StorageError(f"Expected a list of jobs, got {type(records).__name__}")
    jobs = []
    for record in records:
        if not isinstance(record, dict):
            raise StorageError(f"Stored job record is not an object: {record!r}")
        try:
            jobs.append(Job.model_validate(normalize_record(record)))
        except ValidationError as e:
            raise StorageError(
                f"Stored job {record.get('id')!r} is invalid ({describe_validation_error(e)}); "
                "run `python -m jobboard.migrate --to-file` to clean the store"
            ) from e
    return jobs


class JobStore(ABC):
    """The four operations the job service relies on."""

    name: str = "abstract"

    @abstractmethod
    def load_jobs(self) -> list[Job]: ...

    @abstractmethod
    def save_jobs(self, jobs: list[Job]) -> None: ...

    @abstractmethod
    def get_next_id(self) -> int: ...

    @abstractmethod
    def save_next_id(self, next_id: int) -> None: ...

    def close(self) -> None:
        pass


class MemoryJobStore(JobStore):
    """Holds records for the lifetime of the instance. Never durable."""

    name = "memory"

    def __init__(self) -> None:
        self._records: list[dict] = []
        self._next_id = 1

    def load_jobs(self) -> list[Job]:
        return _parse_jobs(self._records)

    def save_jobs(self, jobs: list[Job]) -> None:
        self._records = [job.to_record() for job in jobs]

    def get_next_id(self) -> int:
        return self._next_id

    def save_next_id(self, next_id: int) -> None:
        self._next_id = next_id


class JsonFileJobStore(JobStore):
    """Single JSON document: ``{"jobs": [...], "nextId": n}``."""

    name = "file"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._initialized = False

    def _ensure_file(self) -> None:
        if self._initialized:
            return
        if not self.path.exists():
            self._write({"jobs": [], "nextId": 1})
            logger.info("Created job store file at %s", self.path)
        self._initialized = True

    def _read(self) -> dict:
        self._ensure_file()
        try:
            with open(self.path, encoding="utf-8") as f:
                content = f.read().strip()
        except OSError as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not content:
            return {"jobs": [], "nextId": 1}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON in {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Expected a JSON object in {self.path}")
        return data

    def _write(self, data: dict) -> None:
        # Write to a sibling temp file and rename so readers never see a partial file.
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def _update(self, key: str, value: object) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def load_jobs(self) -> list[Job]:
        return _parse_jobs(self._read().get("jobs") or [])

    def save_jobs(self, jobs: list[Job]) -> None:
        self._update("jobs", [job.to_record() for job in jobs])

    def get_next_id(self) -> int:
        return int(self._read().get("nextId") or 1)

    def save_next_id(self, next_id: int) -> None:
        self._update("nextId", next_id)


class RedisJobStore(JobStore):
    """Job collection and counter kept as two JSON values in Redis."""

    name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        jobs_key: str = "jobs",
        next_id_key: str = "nextId",
    ) -> None:
        self._client = client
        self.jobs_key = jobs_key
        self.next_id_key = next_id_key
        self._initialized = False

    @classmethod
    def from_url(
        cls,
        url: str,
        jobs_key: str = "jobs",
        next_id_key: str = "nextId",
        socket_timeout: float | None = None,
    ) -> RedisJobStore:
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )
        return cls(client, jobs_key=jobs_key, next_id_key=next_id_key)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.debug("Redis ping failed: %s", e)
            return False

    def _ensure_keys(self) -> None:
        if self._initialized:
            return
        try:
            self._client.set(self.jobs_key, "[]", nx=True)
            self._client.set(self.next_id_key, "1", nx=True)
        except redis.RedisError as e:
            raise StorageError(f"Redis initialization failed: {e}") from e
        self._initialized = True

    def _get(self, key: str) -> object:
        self._ensure_keys()
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            raise StorageError(f"Redis GET {key} failed: {e}") from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON under Redis key {key}: {e}") from e

    def _set(self, key: str, value: object) -> None:
        self._ensure_keys()
        try:
            self._client.set(key, json.dumps(value))
        except redis.RedisError as e:
            raise StorageError(f"Redis SET {key} failed: {e}") from e

    def load_jobs(self) -> list[Job]:
        return _parse_jobs(self._get(self.jobs_key) or [])

    def save_jobs(self, jobs: list[Job]) -> None:
        self._set(self.jobs_key, [job.to_record() for job in jobs])

    def get_next_id(self) -> int:
        return int(self._get(self.next_id_key) or 1)

    def save_next_id(self, next_id: int) -> None:
        self._set(self.next_id_key, next_id)

    def close(self) -> None:
        self._client.close()


def create_store(settings: Settings) -> JobStore:
    """Pick the storage backend once, at startup."""
    backend = settings.storage_backend

    if backend == "memory":
        logger.warning("Using in-memory job store; data is lost on restart")
        return MemoryJobStore()

    if backend in ("auto", "redis") and settings.redis_url:
        store = RedisJobStore.from_url(
            settings.redis_url,
            jobs_key=settings.redis_jobs_key,
            next_id_key=settings.redis_next_id_key,
            socket_timeout=settings.redis_socket_timeout,
        )
        if store.ping():
            logger.info("Using Redis job store (keys %r, %r)", store.jobs_key, store.next_id_key)
            return store
        store.close()
        if backend == "redis":
            raise StorageError("Redis is not reachable and storage_backend is 'redis'")
        logger.warning("Redis not reachable, falling back to %s", settings.data_file)
    elif backend == "redis":
        raise StorageError("storage_backend is 'redis' but redis_url is not set")

    logger.info("Using JSON file job store at %s", settings.data_file)
    return JsonFileJobStore(settings.data_file)
