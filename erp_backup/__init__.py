"""Backup and restore engine for the ERP document store."""

from .backup import BackupManager
from .registry import BACKUP_VERSION, COLLECTIONS, SETTINGS_COLLECTIONS

__version__ = "2.0.0"
__author__ = "ProTech ERP"
__url__ = "https://github.com/protech-erp/erp-backup"

__all__ = [
    "BackupManager",
    "BACKUP_VERSION",
    "COLLECTIONS",
    "SETTINGS_COLLECTIONS",
]
