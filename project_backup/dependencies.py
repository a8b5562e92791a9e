"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from project_backup.config import get_settings
from project_backup.service import BackupService
from project_backup.store import BackupStore, InMemoryBackupStore, SqlBackupStore

_backup_store: BackupStore | None = None


def get_backup_store() -> BackupStore:
    """
    Return a singleton store so backups persist across requests.
    """
    global _backup_store
    if _backup_store:
        return _backup_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _backup_store = InMemoryBackupStore()
    else:
        _backup_store = SqlBackupStore(settings.database_url)
    return _backup_store


def get_backup_service() -> BackupService:
    return BackupService(get_backup_store(), get_settings())
