"""
Save/restore logic for project backups.

Saving wraps the submitted snapshot in backup metadata and stores it under a
fresh backup id. Restoring picks the newest record for a user and appends a
restore log to it; a user with no records gets an empty bootstrap project,
and a record whose phases are missing or empty is handed back untouched so
existing data is never reset.
"""

from __future__ import annotations

import logging
import random
import string
from datetime import datetime, timezone
from typing import Optional

from project_backup.config import Settings, get_settings
from project_backup.errors import MissingProjectDataError, MissingUserIdError
from project_backup.schemas import (
    BackupMetadata,
    BackupRecord,
    DataSize,
    LogEntry,
    RetrieveBackupResponse,
    SaveBackupRequest,
    SaveBackupResponse,
    VersionCheckResponse,
)
from project_backup.store import BackupStore
from project_backup.validation import DataValidity, check_project_data

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"
AUTO_BACKUP_TYPE = "AUTO"
INITIAL_SYNC_ACTION = "INITIAL_CREATE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(moment: datetime) -> str:
    # Millisecond precision with a Z suffix keeps timestamps lexically sortable.
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _is_untouched_bootstrap(record: BackupRecord, validity: DataValidity) -> bool:
    # Initial data starts with no phases; restoring it is the normal path.
    return (
        validity is DataValidity.EMPTY_PHASES
        and record.backupMetadata.syncAction == INITIAL_SYNC_ACTION
    )


def generate_version_tag(moment: Optional[datetime] = None) -> str:
    moment = moment or _utcnow()
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"v{_millis(moment)}-{suffix}"


class BackupService:
    """Backup store handler operating on an injected ``BackupStore``."""

    def __init__(self, store: BackupStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def save(self, payload: SaveBackupRequest) -> SaveBackupResponse:
        if payload.projectData is None:
            raise MissingProjectDataError()

        user_id = payload.userId or ANONYMOUS_USER
        backup_type = payload.backupType or self.settings.default_backup_type
        backup_source = payload.backupSource or self.settings.default_backup_source

        now = _utcnow()
        timestamp = _isoformat(now)
        backup_id = f"backup_{user_id}_{_millis(now)}"

        project_data = dict(payload.projectData)
        existing_logs = project_data.get("logs")
        sync_logs = list(existing_logs) if isinstance(existing_logs, list) else []
        sync_logs.append(
            LogEntry(
                timestamp=timestamp,
                message=f"☁️ 클라우드 백업 완료 ({backup_source}, {backup_type})",
                type="BACKUP",
                backupId=backup_id,
                backupType=backup_type,
                backupSource=backup_source,
            ).model_dump()
        )
        # A logs value that is not a list stays as the client sent it.
        if existing_logs is None or isinstance(existing_logs, list):
            project_data["logs"] = list(sync_logs)

        version = project_data.get("version")
        if not isinstance(version, str) or not version:
            version = generate_version_tag(now)
            project_data["version"] = version
        record = BackupRecord(
            projectData=project_data,
            backupMetadata=BackupMetadata(
                backupId=backup_id,
                timestamp=timestamp,
                userId=user_id,
                version=version,
                syncAction="BACKUP",
                backupType=backup_type,
                backupSource=backup_source,
                syncLogs=sync_logs,
            ),
        )
        self.store.put(backup_id, record)

        phases = project_data.get("projectPhases")
        workflow_count = len(phases) if isinstance(phases, list) else 0
        logger.info(
            "Saved project backup %s (%s, %d phases, %d logs)",
            backup_id,
            backup_type,
            workflow_count,
            len(sync_logs),
        )

        if backup_type == AUTO_BACKUP_TYPE:
            message = "자동 백업이 완료되었습니다."
        else:
            message = "수동 백업이 성공적으로 완료되었습니다."
        return SaveBackupResponse(
            backupId=backup_id,
            message=message,
            savedAt=timestamp,
            backupType=backup_type,
            backupSource=backup_source,
            dataSize=DataSize(workflow_count=workflow_count, log_count=len(sync_logs)),
        )

    def retrieve(self, user_id: Optional[str]) -> RetrieveBackupResponse:
        if not user_id:
            raise MissingUserIdError()

        latest = self._latest_for_user(user_id)
        if latest is None:
            return self._bootstrap(user_id)

        validity = check_project_data(latest.projectData)
        if validity is not DataValidity.VALID and not _is_untouched_bootstrap(
            latest, validity
        ):
            logger.warning(
                "Backup %s for %s has %s project data; returning it unchanged",
                latest.backupMetadata.backupId,
                user_id,
                validity.value,
            )
            return RetrieveBackupResponse(
                success=True,
                message="기존 데이터를 보호하기 위해 저장된 데이터를 그대로 반환합니다.",
                projectId=latest.backupMetadata.backupId,
                projectData=latest.projectData,
                retrievedAt=_isoformat(_utcnow()),
                dataProtected=True,
            )

        return self._restore(latest)

    def check_version(self) -> VersionCheckResponse:
        now = _utcnow()
        latest_version = generate_version_tag(now)
        logger.info("Version check: %s", latest_version)
        return VersionCheckResponse(
            latestVersion=latest_version,
            hasUpdates=random.random() > 0.7,
            checkTime=_isoformat(now),
        )

    def _latest_for_user(self, user_id: str) -> Optional[BackupRecord]:
        records = self.store.query_by_user(user_id)
        if not records:
            return None
        # Newest timestamp first; a later insertion wins a tie.
        _, latest = max(
            enumerate(records),
            key=lambda item: (item[1].backupMetadata.timestamp, item[0]),
        )
        return latest

    def _bootstrap(self, user_id: str) -> RetrieveBackupResponse:
        # Re-scan the whole store before creating anything for this user.
        existing = [
            record
            for record in self.store.list_all()
            if record.backupMetadata.userId == user_id
        ]
        if existing:
            logger.warning(
                "Found %d records for %s on re-check; skipping initial data",
                len(existing),
                user_id,
            )
            return RetrieveBackupResponse(
                success=False,
                message="기존 데이터 보호를 위해 초기 데이터를 생성하지 않았습니다.",
                isEmpty=True,
                protectedData=True,
            )

        now = _utcnow()
        timestamp = _isoformat(now)
        backup_id = f"initial_backup_{user_id}_{_millis(now)}"
        version = generate_version_tag(now)
        init_log = LogEntry(
            timestamp=timestamp,
            message="🚀 새 프로젝트가 초기화되었습니다.",
            type="SYSTEM_INIT",
            userId=user_id,
        ).model_dump()
        record = BackupRecord(
            projectData={"projectPhases": [], "logs": [init_log], "version": version},
            backupMetadata=BackupMetadata(
                backupId=backup_id,
                timestamp=timestamp,
                userId=user_id,
                version=version,
                syncAction=INITIAL_SYNC_ACTION,
                backupType="SYSTEM",
                backupSource="시스템 초기화",
                syncLogs=[dict(init_log)],
            ),
        )
        self.store.put(backup_id, record)
        logger.info("Created initial data %s for new user %s", backup_id, user_id)

        return RetrieveBackupResponse(
            success=True,
            message="새 사용자를 위한 초기 데이터가 생성되었습니다.",
            projectId=backup_id,
            projectData=record.projectData,
            retrievedAt=timestamp,
            isInitialData=True,
        )

    def _restore(self, record: BackupRecord) -> RetrieveBackupResponse:
        metadata = record.backupMetadata
        now = _isoformat(_utcnow())
        restore_log = LogEntry(
            timestamp=now,
            message=f"🔄 클라우드 백업에서 복원: {metadata.backupId}",
            type="RESTORE",
            backupId=metadata.backupId,
            backupTimestamp=metadata.timestamp,
            syncAction=metadata.syncAction,
            backupType=metadata.backupType,
            backupSource=metadata.backupSource,
        ).model_dump()

        logs = record.projectData.get("logs")
        if logs is None:
            record.projectData["logs"] = [restore_log]
        elif isinstance(logs, list):
            record.projectData["logs"] = [*logs, restore_log]
        metadata.syncLogs = [*metadata.syncLogs, dict(restore_log)]
        metadata.restoreCount = (metadata.restoreCount or 0) + 1
        metadata.lastRestoreTimestamp = now
        self.store.put(metadata.backupId, record)

        logger.info(
            "Restored %s for %s (restore #%d)",
            metadata.backupId,
            metadata.userId,
            metadata.restoreCount,
        )
        return RetrieveBackupResponse(
            success=True,
            projectId=metadata.backupId,
            projectData=record.projectData,
            retrievedAt=now,
            restoreCount=metadata.restoreCount,
        )
