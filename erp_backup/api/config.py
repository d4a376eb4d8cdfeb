"""Configuration for FastAPI application."""

from pydantic_settings import BaseSettings
from pydantic import validator, Field
from typing import List, Optional, Union
import json


class Settings(BaseSettings):
    # API Configuration
    api_prefix: str = "/api/v1"
    api_title: str = "ERP Backup API"
    api_version: str = "2.0.0"
    allowed_origins: Union[str, List[str]] = ["*"]

    @validator('allowed_origins', pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            return [v]
        return v

    # Uploads
    max_upload_bytes: int = Field(default=200 * 1024 * 1024, description="Largest accepted backup upload")

    # Document store
    storage_backend: str = "json"
    storage_namespace: str = "erp"
    working_dir: str = "./api_working_dir"
    max_batch_size: int = 500

    redis_url: Optional[str] = None
    redis_password: Optional[str] = None

    # Backup files
    backup_dir: str = "./backups"
    history_limit: int = 20

    # Job streaming
    job_poll_interval: float = Field(default=1.0, gt=0, description="Seconds between job polls while streaming")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


settings = Settings()
