"""Custom exceptions for FastAPI application."""

from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_503_SERVICE_UNAVAILABLE,
)


class BackupAPIError(HTTPException):
    """Base exception for backup API errors."""
    pass


class BackupNotFoundError(BackupAPIError):
    def __init__(self, file_name: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Backup not found: {file_name}")


class InvalidBackupError(BackupAPIError):
    def __init__(self, reason: str):
        super().__init__(HTTP_400_BAD_REQUEST, reason)


class UploadTooLargeError(BackupAPIError):
    def __init__(self, limit: int):
        super().__init__(HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Upload exceeds {limit:,} bytes")


class StorageUnavailableError(BackupAPIError):
    def __init__(self, backend: str):
        super().__init__(HTTP_503_SERVICE_UNAVAILABLE, f"{backend} store temporarily unavailable")
