"""
Copy a JSON job store (including legacy ``db.json`` files) into Redis or a
clean JSON file.

Records are repaired one by one: an unknown or empty status becomes
``applied`` and null text fields become empty strings. Records that cannot be
repaired (no company or position, duplicate id, bad timestamps) are reported
with their id and skipped.

Usage:
    python -m jobboard.migrate --file server/db.json --redis-url redis://localhost:6379/0
    python -m jobboard.migrate --file server/db.json --to-file data/jobs.json
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from jobboard.config import settings
from jobboard.errors import JobBoardError, StorageError
from jobboard.models import Job
from jobboard.store import (
    JobStore,
    JsonFileJobStore,
    RedisJobStore,
    describe_validation_error,
    normalize_record,
)


@dataclass
class MigrationResult:
    migrated: int
    next_id: int
    skipped: list[tuple[object, str]] = field(default_factory=list)


def read_legacy_store(source: Path) -> tuple[list[Job], int, list[tuple[object, str]]]:
    """
    Read and clean a JSON store file.

    Returns:
        (valid jobs, next id, skipped records as (id, reason))
    """
    try:
        data = json.loads(source.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read {source}: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"Expected a JSON object in {source}")

    jobs: list[Job] = []
    skipped: list[tuple[object, str]] = []
    seen_ids: set[int] = set()
    records = data.get("jobs") or []
    # Ids of skipped records stay burned too.
    known_ids = [r["id"] for r in records if isinstance(r, dict) and isinstance(r.get("id"), int)]
    for record in records:
        if not isinstance(record, dict):
            skipped.append((None, "not a JSON object"))
            continue
        try:
            job = Job.model_validate(normalize_record(record))
        except ValidationError as e:
            skipped.append((record.get("id"), describe_validation_error(e)))
            continue
        if not job.company or not job.position:
            skipped.append((job.id, "company and position are required"))
        elif job.id in seen_ids:
            skipped.append((job.id, "duplicate id"))
        else:
            seen_ids.add(job.id)
            jobs.append(job)

    next_id = max([int(data.get("nextId") or 1), *(i + 1 for i in known_ids)])
    return jobs, next_id, skipped


def migrate(source: Path, target: JobStore, dry_run: bool = False) -> MigrationResult:
    """
    Copy cleaned jobs and the id counter from a JSON file into ``target``.

    A missing file migrates as an empty collection with counter 1. Unless
    ``dry_run`` is set, the counts in the result are read back from the target.
    """
    if source.exists():
        jobs, next_id, skipped = read_legacy_store(source)
        print(f"Found {len(jobs) + len(skipped)} jobs in {source}")
    else:
        print(f"No store file at {source}. Starting with an empty database.")
        jobs, next_id, skipped = [], 1, []

    for job_id, reason in skipped:
        print(f"[skipped] job {job_id}: {reason}")

    if dry_run:
        print("[DRY RUN] Nothing written")
        return MigrationResult(len(jobs), next_id, skipped)

    target.save_jobs(jobs)
    target.save_next_id(next_id)

    # Verify
    return MigrationResult(len(target.load_jobs()), target.get_next_id(), skipped)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Migrate a JSON job store into Redis or a clean file")
    parser.add_argument("--file", type=Path, default=settings.data_file, help="JSON store file")
    parser.add_argument("--redis-url", default=settings.redis_url, help="Target Redis URL")
    parser.add_argument("--to-file", type=Path, help="Write to this JSON file instead of Redis")
    parser.add_argument("--dry-run", action="store_true", help="Read only, write nothing")
    args = parser.parse_args(argv)

    if args.to_file:
        if args.to_file.resolve() == args.file.resolve():
            print("Migration failed: --to-file must differ from --file.", file=sys.stderr)
            return 1
        target: JobStore = JsonFileJobStore(args.to_file)
    elif args.redis_url or args.dry_run:
        target = RedisJobStore.from_url(
            args.redis_url or "redis://localhost:6379/0",
            jobs_key=settings.redis_jobs_key,
            next_id_key=settings.redis_next_id_key,
            socket_timeout=settings.redis_socket_timeout,
        )
    else:
        print("Migration failed: no Redis URL. Set JOBBOARD_REDIS_URL or pass --redis-url.",
              file=sys.stderr)
        return 1

    try:
        result = migrate(args.file, target, dry_run=args.dry_run)
    except JobBoardError as e:
        print(f"Migration failed: {e}", file=sys.stderr)
        return 1
    finally:
        target.close()

    print("\nDry run complete." if args.dry_run else "\nMigration successful!")
    print(f"   Jobs migrated: {result.migrated}")
    print(f"   Skipped: {len(result.skipped)}")
    print(f"   Next ID: {result.next_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
