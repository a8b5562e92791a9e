"""
HTTP routes for the project backup API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from project_backup.dependencies import get_backup_service
from project_backup.errors import MissingProjectDataError
from project_backup.schemas import (
    ErrorResponse,
    RetrieveBackupResponse,
    SaveBackupRequest,
    SaveBackupResponse,
    VersionCheckResponse,
)
from project_backup.service import BackupService

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_METHODS = "POST, GET"


@router.options("/project")
def project_preflight():
    return Response(status_code=200)


@router.post(
    "/project",
    response_model=SaveBackupResponse,
    responses={400: {"model": ErrorResponse}},
)
def save_project(
    payload: Optional[SaveBackupRequest] = Body(None),
    service: BackupService = Depends(get_backup_service),
):
    if payload is None:
        raise MissingProjectDataError()
    return service.save(payload)


@router.get(
    "/project",
    response_model=RetrieveBackupResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}},
)
def retrieve_project(
    userId: Optional[str] = Query(None),
    service: BackupService = Depends(get_backup_service),
):
    """
    Return the user's newest backup and record the restore on it.
    """
    return service.retrieve(userId)


@router.get("/project/version", response_model=VersionCheckResponse)
def check_project_version(service: BackupService = Depends(get_backup_service)):
    return service.check_version()


def project_method_not_allowed(request: Request) -> JSONResponse:
    """
    405 body for any method on /project other than OPTIONS, POST and GET.

    Installed by the app as the handler for the router's method mismatches.
    """
    logger.warning("Rejected %s /project", request.method)
    return JSONResponse(
        status_code=405,
        content=ErrorResponse(error=f"Method {request.method} Not Allowed").model_dump(),
        headers={"Allow": ALLOWED_METHODS},
    )
