"""
Pydantic schemas for the project backup API.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LogEntry(BaseModel):
    """A single sync/restore log line. Extra fields are kept as-is."""

    model_config = ConfigDict(extra="allow")

    timestamp: str
    message: str
    type: Optional[str] = None


class BackupMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    backupId: str
    timestamp: str
    userId: str
    version: str
    syncAction: str
    backupType: str
    backupSource: str
    # Client log entries are copied in as-is, whatever their shape.
    syncLogs: list[Any] = Field(default_factory=list)
    restoreCount: Optional[int] = None
    lastRestoreTimestamp: Optional[str] = None


class BackupRecord(BaseModel):
    # projectData is passed through untouched apart from its "logs" list.
    projectData: dict[str, Any]
    backupMetadata: BackupMetadata


class SaveBackupRequest(BaseModel):
    projectData: Optional[dict[str, Any]] = None
    userId: Optional[str] = None
    backupType: Optional[str] = None
    backupSource: Optional[str] = None


class DataSize(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow_count: int = Field(..., alias="워크플로우")
    log_count: int = Field(..., alias="로그")


class SaveBackupResponse(BaseModel):
    success: bool = True
    backupId: str
    message: str
    savedAt: str
    backupType: str
    backupSource: str
    dataSize: DataSize


class RetrieveBackupResponse(BaseModel):
    """
    Every retrieve outcome shares this shape; unset flags are dropped from
    the response body.
    """

    success: bool
    message: Optional[str] = None
    projectId: Optional[str] = None
    projectData: Optional[dict[str, Any]] = None
    retrievedAt: Optional[str] = None
    restoreCount: Optional[int] = None
    isInitialData: Optional[bool] = None
    dataProtected: Optional[bool] = None
    isEmpty: Optional[bool] = None
    protectedData: Optional[bool] = None


class VersionCheckResponse(BaseModel):
    success: bool = True
    latestVersion: str
    hasUpdates: bool
    checkTime: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
