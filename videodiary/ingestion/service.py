import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from videodiary.ingestion import transitions
from videodiary.journals.db import apply_entry_changes, create_entry
from videodiary.journals.models import JournalEntry
from videodiary.journals.schemas import VideoStatusOut, VideoUploadOut
from videodiary.mux.client import MuxClient, MuxError
from videodiary.mux.schemas import MuxAsset, MuxTrack

logger = logging.getLogger(__name__)


class UploadInitiationError(Exception):
    """The video platform refused or failed to issue an upload target."""


def initiate_upload(
    db: Session,
    mux: MuxClient,
    user_id: UUID,
    mood: str,
    date: Optional[str] = None,
) -> VideoUploadOut:
    """
    Obtains a direct upload URL and creates the pending entry for it.

    Args:
        db (Session): DB session.
        mux (MuxClient): Video platform client.
        user_id (UUID): Owner of the new entry.
        mood (str): Mood tag chosen by the user.
        date (str, optional): User-local YYYY-MM-DD, defaults to today.

    Returns:
        VideoUploadOut: Upload URL, upload id and the new entry id.

    Raises:
        UploadInitiationError: If the platform call fails. No entry is created.
    """
    try:
        upload = mux.create_upload()
    except MuxError as e:
        raise UploadInitiationError(str(e)) from e

    if not upload.url:
        raise UploadInitiationError(f"Mux upload {upload.id} returned no upload URL")

    try:
        entry = create_entry(db, user_id, mood, upload.id, date)
    except Exception:
        # Known gap: the upload target stays allocated on the platform
        logger.error("Entry creation failed, leaking Mux upload %s for user %s", upload.id, user_id)
        raise

    logger.info("Entry %s created for user %s (upload %s, mood %s)", entry.id, user_id, upload.id, mood)
    return VideoUploadOut(upload_url=upload.url, upload_id=upload.id, entry_id=entry.id)


def store_generated_transcript(
    db: Session,
    mux: MuxClient,
    entry: JournalEntry,
    track: MuxTrack,
    playback_id: Optional[str] = None,
    user_id: Optional[UUID] = None,
) -> bool:
    """
    Downloads the plain-text transcript of an auto-generated caption track
    and saves it on the entry. Returns True when the entry was updated.
    """
    if not track.is_generated_text:
        logger.info("Skipping track %s (type=%s, source=%s)", track.id, track.type, track.text_source)
        return False

    playback_id = playback_id or entry.mux_playback_id
    if not playback_id:
        logger.warning("No playback id for entry %s, cannot fetch transcript %s", entry.id, track.id)
        return False

    try:
        text = mux.fetch_transcript(playback_id, track.id)
    except MuxError as e:
        logger.error("Transcript fetch for entry %s failed: %s", entry.id, e)
        return False

    changes = transitions.apply_transcript(entry, track.id, text)
    if not changes:
        return False
    updated = apply_entry_changes(db, entry, changes, user_id)
    if updated:
        logger.info("Transcript saved for entry %s (%s chars)", entry.id, len(entry.transcript or ""))
    return updated > 0


def store_asset_transcript(
    db: Session,
    mux: MuxClient,
    entry: JournalEntry,
    asset: MuxAsset,
    user_id: Optional[UUID] = None,
) -> bool:
    """
    Stores the first ready auto-generated caption track listed on a ready
    asset, unless the entry already has a transcript.
    """
    if asset.status != transitions.ASSET_READY or entry.transcript:
        return False
    track = next((t for t in asset.tracks if t.is_generated_text and t.status == "ready"), None)
    if track is None:
        return False
    return store_generated_transcript(
        db, mux, entry, track, playback_id=asset.first_playback_id, user_id=user_id,
    )


def _refresh_asset_link(db: Session, mux: MuxClient, entry: JournalEntry, user_id: Optional[UUID]) -> None:
    try:
        upload = mux.get_upload(entry.mux_upload_id)
    except MuxError as e:
        logger.warning("Upload lookup for entry %s made no progress: %s", entry.id, e)
        return

    logger.debug("Upload %s status: %s", upload.id, upload.status)
    apply_entry_changes(db, entry, transitions.link_asset(entry, upload.asset_id), user_id)


def _refresh_asset_state(db: Session, mux: MuxClient, entry: JournalEntry, user_id: Optional[UUID]) -> Optional[MuxAsset]:
    try:
        asset = mux.get_asset(entry.mux_asset_id)
    except MuxError as e:
        logger.warning("Asset lookup for entry %s made no progress: %s", entry.id, e)
        return None

    logger.debug("Asset %s status: %s", asset.id, asset.status)
    apply_entry_changes(db, entry, transitions.apply_asset_state(entry, asset), user_id)
    return asset


def reconcile_entry(
    db: Session,
    mux: MuxClient,
    entry: JournalEntry,
    user_id: Optional[UUID] = None,
) -> JournalEntry:
    """
    Pulls the platform's view of the entry's upload and asset and merges it in.

    Steps run in a fixed order and each is skipped once satisfied, so the
    call is safe to repeat and to race with webhook delivery:

    1. upload known, asset unknown -> look up the upload, link its asset.
    2. asset known, not terminal -> look up the asset, move to ready/error.
    3. asset ready, no transcript yet -> store a ready generated caption track.

    Platform failures are logged and leave the entry where it was.
    """
    if entry.mux_upload_id and not entry.mux_asset_id:
        _refresh_asset_link(db, mux, entry, user_id)

    asset = None
    if entry.mux_asset_id and not transitions.is_terminal(entry.video_status):
        asset = _refresh_asset_state(db, mux, entry, user_id)

    if asset is not None and entry.video_status == transitions.READY:
        store_asset_transcript(db, mux, entry, asset, user_id)

    return entry


def status_payload(entry: JournalEntry) -> VideoStatusOut:
    return VideoStatusOut(
        status=entry.video_status,
        playback_id=entry.mux_playback_id,
        thumbnail_url=entry.thumbnail_url,
        duration=entry.duration,
    )
