from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Paths
    base_dir: Path = Path(__file__).resolve().parent.parent
    data_dir: Path = base_dir / "data"
    data_file: Path = data_dir / "jobs.json"

    # Server
    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Storage
    storage_backend: Literal["auto", "redis", "file", "memory"] = "auto"
    redis_url: str = ""  # e.g. redis://localhost:6379/0; empty disables the probe
    redis_jobs_key: str = "jobs"
    redis_next_id_key: str = "nextId"
    redis_socket_timeout: float = 2.0  # seconds

    model_config = {"env_prefix": "JOBBOARD_"}


settings = Settings()
