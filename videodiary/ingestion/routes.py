from uuid import UUID
from typing import Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Security
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from videodiary.auth.service import get_current_user_id
from videodiary.core.database import get_db
from videodiary.core.dependency import get_mux_client, get_webhook_secret
from videodiary.ingestion.service import (
    UploadInitiationError,
    initiate_upload,
    reconcile_entry,
    status_payload,
)
from videodiary.ingestion.signature import SIGNATURE_HEADER, WebhookSignatureError, verify_signature
from videodiary.ingestion.webhook import handle_event
from videodiary.journals.db import get_entry
from videodiary.journals.schemas import VideoStatusOut, VideoUploadCreate, VideoUploadOut
from videodiary.mux.client import MuxClient

router = APIRouter(prefix="/videos", tags=["Videos"])
webhook_router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
logger = logging.getLogger(__name__)


@router.post(
    "/uploads",
    response_model=VideoUploadOut,
    summary="Start a video upload",
    description="Create a pending journal entry and a single-use direct upload URL for its video.",
    responses={
        200: {"description": "Upload target created."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to create entry."},
        502: {"description": "Video platform refused the upload."},
    },
)
def create_upload_route(
    body: VideoUploadCreate,
    db: Session = Depends(get_db),
    mux: MuxClient = Depends(get_mux_client),
    user_id: UUID = Security(get_current_user_id),
) -> VideoUploadOut:
    try:
        return initiate_upload(db, mux, user_id, body.mood.value, body.date)
    except UploadInitiationError as e:
        logger.error(f"Upload initiation failed for user {user_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to initiate video upload")
    except Exception as e:
        logger.error(f"Error creating entry for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create diary entry")


@router.post(
    "/{entry_id}/status",
    response_model=VideoStatusOut,
    summary="Reconcile video status",
    description="Sync the entry with the video platform and return its current video status.",
    responses={
        200: {"description": "Current status returned."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
        500: {"description": "Failed to check video status."},
    },
)
def check_status_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    mux: MuxClient = Depends(get_mux_client),
    user_id: UUID = Security(get_current_user_id),
) -> VideoStatusOut:
    try:
        entry = get_entry(db, entry_id, user_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Entry not found")
        return status_payload(reconcile_entry(db, mux, entry, user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error checking status of entry {entry_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to check video status")


@webhook_router.post(
    "/mux",
    response_model=Dict[str, bool],
    summary="Mux webhook",
    description="Receive signed video lifecycle events from Mux.",
    responses={
        200: {"description": "Event received."},
        401: {"description": "Missing or invalid signature."},
    },
)
async def mux_webhook_route(
    request: Request,
    db: Session = Depends(get_db),
    mux: MuxClient = Depends(get_mux_client),
    secret: Optional[str] = Depends(get_webhook_secret),
) -> Dict[str, bool]:
    raw_body = await request.body()

    if secret:
        try:
            verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER), secret)
        except WebhookSignatureError as e:
            logger.error(f"Rejected webhook: {e}")
            raise HTTPException(status_code=401, detail="Invalid signature")
    else:
        logger.warning("MUX_WEBHOOK_SECRET not configured - skipping signature verification")

    await run_in_threadpool(handle_event, db, mux, raw_body)
    return {"received": True}
