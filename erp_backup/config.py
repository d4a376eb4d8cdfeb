"""Configuration management for the backup engine."""

import os
import re
from dataclasses import dataclass, field
from typing import Optional

from .base import DEFAULT_MAX_BATCH_SIZE


@dataclass(frozen=True)
class StorageConfig:
    """Document store configuration."""
    backend: str = "json"  # json, redis
    working_dir: str = "./erp_backup_data"
    namespace: str = "erp"
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE

    # Redis specific settings
    redis_url: str = "redis://localhost:6379"
    redis_password: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create config from environment variables."""
        return cls(
            backend=os.getenv("STORAGE_BACKEND", "json"),
            working_dir=os.getenv("STORAGE_WORKING_DIR", "./erp_backup_data"),
            namespace=os.getenv("STORAGE_NAMESPACE", "erp"),
            max_batch_size=int(os.getenv("STORE_MAX_BATCH_SIZE", str(DEFAULT_MAX_BATCH_SIZE))),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_password=os.getenv("REDIS_PASSWORD")
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.backend not in {"json", "redis"}:
            raise ValueError(f"Unknown storage backend: {self.backend}")
        if self.max_batch_size <= 0:
            raise ValueError(f"max_batch_size must be positive, got {self.max_batch_size}")
        if not re.fullmatch(r"[A-Za-z0-9_\-]+", self.namespace):
            raise ValueError(f"namespace must be alphanumeric, got {self.namespace!r}")

    def to_global_config(self) -> dict:
        """Flatten into the dict handed to store backends."""
        return {
            "working_dir": self.working_dir,
            "max_batch_size": self.max_batch_size,
            "redis_url": self.redis_url,
            "redis_password": self.redis_password,
        }


@dataclass(frozen=True)
class BackupConfig:
    """Backup file and history configuration."""
    backup_dir: str = "./backups"
    history_limit: int = 20

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls(
            backup_dir=os.getenv("BACKUP_DIR", "./backups"),
            history_limit=int(os.getenv("BACKUP_HISTORY_LIMIT", "20"))
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.history_limit <= 0:
            raise ValueError(f"history_limit must be positive, got {self.history_limit}")


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Create complete config from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            backup=BackupConfig.from_env()
        )

    def create_store(self):
        """Build the configured document store."""
        from ._storage import StorageFactory

        return StorageFactory.create_store(
            self.storage.backend,
            namespace=self.storage.namespace,
            global_config=self.storage.to_global_config(),
        )
