"""
Client-facing errors raised by the backup service.
"""

from __future__ import annotations


class BackupRequestError(Exception):
    """A request the service refuses; surfaced to the caller as HTTP 400."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingProjectDataError(BackupRequestError):
    def __init__(self):
        super().__init__("저장할 프로젝트 데이터가 없습니다.")


class MissingUserIdError(BackupRequestError):
    def __init__(self):
        super().__init__("사용자 ID가 필요합니다.")
