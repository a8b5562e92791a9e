"""
Local development mock for the backup endpoints.

Answers ``/api/project`` and ``/api/backup`` with canned fixtures so the
frontend can run without a backend. Nothing is stored.
"""

from __future__ import annotations

import argparse
import copy
import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI, Response

from project_backup.app import install_cors_and_error_handling
from project_backup.config import get_settings

logger = logging.getLogger(__name__)

MOCK_PROJECT_DATA = {
    "projectPhases": [
        {
            "id": "phase-1",
            "title": "기획",
            "tasks": [
                {
                    "id": "task-1",
                    "mainTask": ["요구사항 정리"],
                    "personInCharge": "담당자",
                    "schedule": "",
                    "checkpoints": [],
                    "performance": {"date": "", "docLink": "", "comment": ""},
                    "issues": "",
                }
            ],
        }
    ],
    "logs": [
        {
            "timestamp": "2024-01-01T00:00:00.000Z",
            "message": "[MOCK] 개발용 프로젝트 데이터",
            "type": "SYSTEM_INIT",
        }
    ],
    "version": "v0-mock",
}

MOCK_BACKUP_DATA = {
    "equipmentData": [],
    "logData": [],
    "logArchive": [],
    "formFields": [],
    "categoryCodes": [],
    "backupTime": "2024-01-01T00:00:00.000Z",
    "backupVersion": "3.1.0",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


mock_router = APIRouter()


@mock_router.options("/project")
@mock_router.options("/backup")
def mock_preflight():
    return Response(status_code=200)


@mock_router.post("/project")
def mock_save_project():
    return {
        "success": True,
        "backupId": "mock_backup",
        "message": "[MOCK] 자동 백업이 완료되었습니다.",
        "savedAt": _now(),
        "backupType": "AUTO",
        "backupSource": "자동 백업",
        "dataSize": {"워크플로우": len(MOCK_PROJECT_DATA["projectPhases"]), "로그": 1},
    }


@mock_router.get("/project")
def mock_retrieve_project():
    return {
        "success": True,
        "projectId": "mock_backup",
        "projectData": copy.deepcopy(MOCK_PROJECT_DATA),
        "retrievedAt": _now(),
    }


@mock_router.post("/backup")
def mock_save_backup():
    return {
        "success": True,
        "backupId": "mock_backup",
        "message": "[MOCK] 클라우드 백업이 성공적으로 완료되었습니다.",
        "dataSize": {"장비목록": 0, "로그": 0, "양식항목": 0, "분류코드": 0},
    }


@mock_router.get("/backup")
def mock_restore_backup():
    return {
        "success": True,
        "backupId": "mock_backup",
        "backupData": copy.deepcopy(MOCK_BACKUP_DATA),
        "restoredAt": _now(),
    }


def create_mock_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Project Backup API (mock)", version="0.1.0")
    app.include_router(mock_router, prefix=settings.api_prefix)
    install_cors_and_error_handling(app)
    return app


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Project backup mock server")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.mock_host,
        help="Interface to bind",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.mock_port,
        help="Port to listen on",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )
    logger.info("Serving mock backup endpoints on %s:%d", args.host, args.port)
    uvicorn.run(create_mock_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
