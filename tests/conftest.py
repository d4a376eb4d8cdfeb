"""Global pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from erp_backup.backup import BackupManager
from tests.utils import MemoryDocumentStore


@pytest.fixture
def store():
    """In-memory store with a small chunk size so chunking is cheap to exercise."""
    return MemoryDocumentStore(namespace="test", global_config={"max_batch_size": 10})


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def manager(store, backup_dir):
    return BackupManager(store, str(backup_dir))
