"""
Upload API router.

This module exposes the transfer control surface over HTTP: start an
upload, pause, resume and terminate it, and poll its status.
"""

import logging
import shutil
import tempfile
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ....core.domain.exceptions import TransferError
from ....core.domain.transfer import TransferStatus
from ....core.interfaces.transfer import ITransferManager
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_transfer_manager

logger = logging.getLogger(__name__)


class StartResponse(BaseModel):
    """Upload start response model."""
    sessionID: str = Field(..., description="Session token")


class MessageResponse(BaseModel):
    """Acknowledgment response model."""
    message: str = Field(..., description="Acknowledgment message")


class StatusResponse(BaseModel):
    """Upload status response model."""
    sessionID: str = Field(..., description="Session token")
    fileName: str = Field(..., description="Uploaded file name")
    totalSize: int = Field(..., description="Source size in bytes")
    uploadedChunks: int = Field(..., description="Chunks written so far")
    totalChunks: int = Field(..., description="Chunks expected")
    paused: bool = Field(..., description="Pause requested")
    completed: bool = Field(..., description="Transfer finished")
    terminated: bool = Field(..., description="Transfer aborted")
    state: str = Field(..., description="Derived transfer state")
    error: Optional[str] = Field(None, description="Failure that stopped the last run")


router = APIRouter(
    prefix="/upload",
    tags=["upload"],
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Session not found"},
        status.HTTP_409_CONFLICT: {"description": "Operation not allowed in current state"}
    }
)


def _http_error(e: TransferError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _status_response(snapshot: TransferStatus) -> StatusResponse:
    return StatusResponse(**snapshot.to_dict())


async def _take_ownership(file: UploadFile, config: ApplicationConfig) -> UploadFile:
    """
    Copy a request file into a spool owned by the transfer.

    The framework closes request files once the handler returns, while the
    background run keeps reading long after that.
    """
    spool = tempfile.SpooledTemporaryFile(max_size=config.upload.spool_max_size)
    try:
        await file.seek(0)
        await run_in_threadpool(shutil.copyfileobj, file.file, spool)
        size = spool.tell()
        spool.seek(0)
    except Exception as e:
        spool.close()
        logger.error(f"Failed to buffer upload {file.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File upload error"
        )

    return UploadFile(file=spool, size=size, filename=file.filename)


@router.post("", response_model=StartResponse)
async def start_upload(
    file: UploadFile = File(...),
    config: ApplicationConfig = Depends(get_config),
    manager: ITransferManager = Depends(get_transfer_manager)
) -> StartResponse:
    """Start a background upload of the posted file."""
    stream = await _take_ownership(file, config)
    try:
        token = await manager.start_transfer(stream, file.filename or "", stream.size)
    except TransferError as e:
        raise _http_error(e)

    return StartResponse(sessionID=token)


@router.post("/pause", response_model=MessageResponse)
async def pause_upload(
    session_id: str = Query(..., alias="sessionID"),
    manager: ITransferManager = Depends(get_transfer_manager)
) -> MessageResponse:
    """Request a pause; the upload stops after the chunk in flight."""
    try:
        await manager.pause_transfer(session_id)
    except TransferError as e:
        raise _http_error(e)

    return MessageResponse(message="Upload paused")


@router.post("/resume", response_model=MessageResponse)
async def resume_upload(
    session_id: str = Query(..., alias="sessionID"),
    file: UploadFile = File(...),
    config: ApplicationConfig = Depends(get_config),
    manager: ITransferManager = Depends(get_transfer_manager)
) -> MessageResponse:
    """
    Resume a paused upload from the posted file.

    The session is checked before the body is copied, so an unknown or
    unpausable session is rejected without spooling. The manager validates
    again under the session lock.
    """
    try:
        snapshot = await manager.get_status(session_id)
    except TransferError as e:
        raise _http_error(e)
    if not snapshot.resumable:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Upload cannot be resumed"
        )

    stream = await _take_ownership(file, config)
    try:
        await manager.resume_transfer(session_id, stream)
    except TransferError as e:
        raise _http_error(e)

    return MessageResponse(message="Upload resumed")


@router.post("/terminate", response_model=MessageResponse)
async def terminate_upload(
    session_id: str = Query(..., alias="sessionID"),
    manager: ITransferManager = Depends(get_transfer_manager)
) -> MessageResponse:
    """Abort an upload; it cannot be resumed afterwards."""
    try:
        await manager.terminate_transfer(session_id)
    except TransferError as e:
        raise _http_error(e)

    return MessageResponse(message="Upload terminated")


@router.get("/status", response_model=StatusResponse)
async def upload_status(
    session_id: str = Query(..., alias="sessionID"),
    manager: ITransferManager = Depends(get_transfer_manager)
) -> StatusResponse:
    """Return a snapshot of an upload's progress."""
    try:
        snapshot = await manager.get_status(session_id)
    except TransferError as e:
        raise _http_error(e)

    return _status_response(snapshot)


@router.get("/sessions", response_model=List[StatusResponse])
async def list_uploads(
    manager: ITransferManager = Depends(get_transfer_manager)
) -> List[StatusResponse]:
    """List all known uploads."""
    return [_status_response(snapshot) for snapshot in await manager.list_transfers()]
